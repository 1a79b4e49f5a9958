"""
Data operations package: backing tables and their incremental updates.

Provides the table/subscription protocols, an in-memory DataFrame-backed
streaming table, cell decoding, the per-table change accumulator and the
per-table subscription lifecycle.
"""

from .table import (
    EVENT_DISCONNECT,
    EVENT_RECONNECT,
    EVENT_UPDATED,
    Column,
    DataFrameTable,
    Table,
    TableSubscription,
    TableUpdateEvent,
)
from .unwrap import unwrap_value
from .accumulator import ChangeAccumulator
from .subscription import TableSubscriber

__all__ = [
    "EVENT_DISCONNECT",
    "EVENT_RECONNECT",
    "EVENT_UPDATED",
    "Column",
    "DataFrameTable",
    "Table",
    "TableSubscription",
    "TableUpdateEvent",
    "unwrap_value",
    "ChangeAccumulator",
    "TableSubscriber",
]
