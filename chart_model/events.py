"""Broadcast payloads delivered to chart model listeners."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ChartEventType(str, Enum):
    UPDATED = "updated"
    ERROR = "error"
    DISCONNECT = "disconnect"
    RECONNECT = "reconnect"


@dataclass(frozen=True)
class ChartEvent:
    """One broadcast from a ChartDataModel.

    Attributes:
        type: What happened.
        data: The model's current trace list (UPDATED and ERROR from an update).
        errors: Errors being reported, in the order they occurred.
        table: The backing table the event originated from, if any.
    """

    type: ChartEventType
    data: Optional[list] = None
    errors: tuple[Exception, ...] = ()
    table: Any = None

    @property
    def is_error(self) -> bool:
        return self.type in (ChartEventType.ERROR, ChartEventType.DISCONNECT)
