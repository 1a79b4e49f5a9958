"""
Per-table subscription management.

A TableSubscriber owns at most one open subscription and one
ChangeAccumulator for a single backing table. Opening registers exactly
one updated-listener on the subscription; closing removes it, closes the
subscription and drops the accumulator, so every open starts fresh.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from errors import DecodeError, SourceError

from .accumulator import ChangeAccumulator
from .table import (
    EVENT_DISCONNECT,
    EVENT_RECONNECT,
    EVENT_UPDATED,
    Column,
    Table,
    TableSubscription,
    TableUpdateEvent,
)
from .unwrap import unwrap_value


class TableSubscriber:
    """Subscription lifecycle for one table: Unsubscribed -> Subscribed -> Unsubscribed."""

    def __init__(self, table: Table, logger: Optional[logging.Logger] = None):
        self.table = table
        self.logger = logger or logging.getLogger(__name__)
        self.columns: tuple[str, ...] = ()
        self.subscription: Optional[TableSubscription] = None
        self.accumulator: Optional[ChangeAccumulator] = None
        self._cleanups: list[Callable[[], None]] = []

    @property
    def is_open(self) -> bool:
        return self.subscription is not None

    def _resolve_columns(self, names: Sequence[str]) -> list[Column]:
        by_name = {column.name: column for column in self.table.columns}
        resolved = []
        for name in names:
            if name in by_name:
                resolved.append(by_name[name])
            else:
                self.logger.warning(
                    f"Column '{name}' is not in table {self.table!r}; it will not be updated"
                )
        return resolved

    def open(
        self,
        columns_of_interest: Sequence[str],
        on_update: Callable[[TableUpdateEvent], None],
        on_disconnect: Optional[Callable[[Any], None]] = None,
        on_reconnect: Optional[Callable[[Any], None]] = None,
    ) -> TableSubscription:
        """Subscribe to the table and start delivering events to *on_update*.

        Raises:
            SourceError: If already open, or if the table refuses the subscription.
        """
        if self.is_open:
            raise SourceError(f"Table {self.table!r} is already subscribed", table=self.table)

        try:
            columns = self._resolve_columns(columns_of_interest)
            subscription = self.table.subscribe(columns)
        except SourceError:
            raise
        except Exception as exc:
            raise SourceError(f"Failed to subscribe to table {self.table!r}: {exc}", table=self.table) from exc

        self.subscription = subscription
        self.columns = tuple(column.name for column in columns)
        self.accumulator = ChangeAccumulator(self.columns)
        try:
            if on_disconnect is not None:
                self._cleanups.append(subscription.add_event_listener(EVENT_DISCONNECT, on_disconnect))
            if on_reconnect is not None:
                self._cleanups.append(subscription.add_event_listener(EVENT_RECONNECT, on_reconnect))
            cleanup = subscription.add_event_listener(EVENT_UPDATED, on_update)
            if self.subscription is not subscription:
                # Closed from inside the initial snapshot delivery
                cleanup()
                return subscription
            self._cleanups.append(cleanup)
        except Exception as exc:
            self.close()
            if isinstance(exc, SourceError):
                raise
            raise SourceError(f"Failed to listen to table {self.table!r}: {exc}", table=self.table) from exc

        self.logger.debug(f"Subscribed to {self.table!r} columns {list(self.columns)}")
        return subscription

    def on_update(self, event: TableUpdateEvent) -> dict[str, list]:
        """Fold *event* into the accumulator and decode every column of interest.

        A column whose values fail to decode is logged and left out; the
        other columns are still returned.
        """
        if self.accumulator is None:
            return {}

        unknown = self.accumulator.update(event)
        if unknown:
            self.logger.warning(f"Update for {self.table!r} names unknown rows {unknown}; skipped them")

        decoded: dict[str, list] = {}
        for column in self.columns:
            try:
                decoded[column] = self.accumulator.get_column(column, unwrap_value)
            except DecodeError as exc:
                exc.column = column
                self.logger.warning(f"Skipping column '{column}' of {self.table!r}: {exc}")
        return decoded

    def close(self) -> None:
        """Remove listeners, close the subscription and drop the accumulator.

        Safe to call when never opened, and safe to call twice.
        """
        cleanups, self._cleanups = self._cleanups, []
        for cleanup in cleanups:
            cleanup()
        subscription, self.subscription = self.subscription, None
        if subscription is not None:
            subscription.close()
            self.logger.debug(f"Closed subscription to {self.table!r}")
        if self.accumulator is not None:
            self.accumulator.clear()
        self.accumulator = None
        self.columns = ()
