"""
Backing tables: the streaming data sources a chart model subscribes to.

Table and TableSubscription describe what the chart model needs from a
host data layer. DataFrameTable is an in-process implementation backed by a
pandas DataFrame whose index holds the row keys; it streams appends, cell
updates and removals to its subscriptions as TableUpdateEvents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Protocol, Sequence

import pandas as pd

from errors import SourceError

EVENT_UPDATED = "updated"
EVENT_DISCONNECT = "disconnect"
EVENT_RECONNECT = "reconnect"


@dataclass(frozen=True)
class Column:
    """A column of a backing table."""

    name: str
    type: str = "object"


@dataclass
class TableUpdateEvent:
    """Delta delivered by a table subscription.

    Attributes:
        added: Row key -> values of every subscribed column for new rows.
        modified: Row key -> only the cells that changed.
        removed: Keys of rows that were deleted.
    """

    added: dict[Hashable, dict[str, Any]] = field(default_factory=dict)
    modified: dict[Hashable, dict[str, Any]] = field(default_factory=dict)
    removed: list[Hashable] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.added or self.modified or self.removed)


Listener = Callable[[Any], None]


class TableSubscription(Protocol):
    def add_event_listener(self, event_type: str, listener: Listener) -> Callable[[], None]:
        """Register *listener* for *event_type*; returns a cleanup callable."""
        ...

    def close(self) -> None: ...


class Table(Protocol):
    @property
    def columns(self) -> Sequence[Column]: ...

    def find_column(self, name: str) -> Column:
        """Return the named column. Raises KeyError if absent."""
        ...

    def subscribe(self, columns: Sequence[Column]) -> TableSubscription: ...

    def close(self) -> None: ...


def _same_value(a: Any, b: Any) -> bool:
    try:
        if pd.isna(a) and pd.isna(b):
            return True
    except (TypeError, ValueError):
        pass
    return bool(a == b)


def _restrict(event: TableUpdateEvent, columns: tuple[str, ...]) -> TableUpdateEvent:
    """Keep only *columns* in *event*, dropping modifications that become empty."""
    wanted = set(columns)
    added = {
        key: {col: val for col, val in row.items() if col in wanted}
        for key, row in event.added.items()
    }
    modified = {}
    for key, row in event.modified.items():
        cells = {col: val for col, val in row.items() if col in wanted}
        if cells:
            modified[key] = cells
    return TableUpdateEvent(added=added, modified=modified, removed=list(event.removed))


class DataFrameSubscription:
    """Subscription to a subset of a DataFrameTable's columns.

    A newly registered updated-listener first receives a snapshot of the
    current rows as ``added``; after that it only receives deltas.
    """

    def __init__(self, table: DataFrameTable, columns: Sequence[str]):
        self.table = table
        self.columns: tuple[str, ...] = tuple(columns)
        self.closed = False
        self._listeners: dict[str, list[Listener]] = {}

    def add_event_listener(self, event_type: str, listener: Listener) -> Callable[[], None]:
        if self.closed:
            raise SourceError("Subscription is closed", table=self.table)
        self._listeners.setdefault(event_type, []).append(listener)

        def cleanup() -> None:
            listeners = self._listeners.get(event_type, [])
            if listener in listeners:
                listeners.remove(listener)

        if event_type == EVENT_UPDATED:
            listener(self.table.snapshot(self.columns))
        return cleanup

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._listeners.clear()
        self.table._detach(self)

    def _dispatch(self, event_type: str, payload: Any) -> None:
        if self.closed:
            return
        if isinstance(payload, TableUpdateEvent):
            payload = _restrict(payload, self.columns)
            if payload.is_empty():
                return
        for listener in list(self._listeners.get(event_type, [])):
            listener(payload)


class DataFrameTable:
    """In-process streaming table backed by a pandas DataFrame.

    The frame index provides the row keys. ``append``, ``update`` and
    ``remove`` mutate the frame and notify every open subscription.
    """

    def __init__(self, frame: pd.DataFrame, name: str = ""):
        self.name = name
        self._frame = frame.copy()
        self._subscriptions: list[DataFrameSubscription] = []
        self.closed = False

    def __repr__(self) -> str:
        return f"DataFrameTable({self.name or id(self)}, rows={len(self._frame)})"

    @property
    def columns(self) -> list[Column]:
        return [Column(str(name), str(dtype)) for name, dtype in self._frame.dtypes.items()]

    @property
    def frame(self) -> pd.DataFrame:
        """A copy of the current rows."""
        return self._frame.copy()

    @property
    def subscriptions(self) -> list[DataFrameSubscription]:
        return list(self._subscriptions)

    def find_column(self, name: str) -> Column:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(f"Column '{name}' not found in table {self.name!r}")

    def subscribe(self, columns: Sequence[Column]) -> DataFrameSubscription:
        if self.closed:
            raise SourceError(f"Table {self.name!r} is closed", table=self)
        names = [column.name for column in columns]
        for name in names:
            self.find_column(name)
        subscription = DataFrameSubscription(self, names)
        self._subscriptions.append(subscription)
        return subscription

    def snapshot(self, columns: Iterable[str]) -> TableUpdateEvent:
        """All current rows of *columns*, expressed as additions."""
        cols = list(columns)
        added = self._frame[cols].to_dict(orient="index") if cols else {
            key: {} for key in self._frame.index
        }
        return TableUpdateEvent(added=added)

    def append(self, rows: pd.DataFrame) -> None:
        """Add new rows; their index keys must not exist yet."""
        duplicates = rows.index.intersection(self._frame.index)
        if len(duplicates) > 0:
            raise ValueError(f"Rows already exist: {list(duplicates)}")
        if self._frame.empty:
            self._frame = rows.reindex(columns=self._frame.columns).copy()
        else:
            self._frame = pd.concat([self._frame, rows.reindex(columns=self._frame.columns)])
        added = self._frame.loc[rows.index].to_dict(orient="index")
        self._emit(EVENT_UPDATED, TableUpdateEvent(added=added))

    def update(self, rows: pd.DataFrame) -> None:
        """Overwrite cells of existing rows; only cells that changed are sent."""
        modified: dict[Hashable, dict[str, Any]] = {}
        for key in rows.index:
            if key not in self._frame.index:
                raise KeyError(f"Row {key!r} not found in table {self.name!r}")
            for col in rows.columns:
                if col not in self._frame.columns:
                    raise KeyError(f"Column '{col}' not found in table {self.name!r}")
                new = rows.at[key, col]
                if not _same_value(self._frame.at[key, col], new):
                    self._frame.at[key, col] = new
                    modified.setdefault(key, {})[col] = new
        if modified:
            self._emit(EVENT_UPDATED, TableUpdateEvent(modified=modified))

    def remove(self, keys: Iterable[Hashable]) -> None:
        present = [key for key in keys if key in self._frame.index]
        if not present:
            return
        self._frame = self._frame.drop(index=present)
        self._emit(EVENT_UPDATED, TableUpdateEvent(removed=present))

    def disconnect(self) -> None:
        """Simulate the source dropping its connection."""
        self._emit(EVENT_DISCONNECT, SourceError(f"Table {self.name!r} disconnected", table=self))

    def reconnect(self) -> None:
        self._emit(EVENT_RECONNECT, None)

    def close(self) -> None:
        for subscription in list(self._subscriptions):
            subscription.close()
        self.closed = True

    def _detach(self, subscription: DataFrameSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _emit(self, event_type: str, payload: Any) -> None:
        for subscription in list(self._subscriptions):
            subscription._dispatch(event_type, payload)
