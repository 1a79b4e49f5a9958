"""
Change accumulator: the current rows of one table, rebuilt from deltas.

Update events only carry the cells that changed, so the full column a
chart field needs has to be reconstructed here. Rows are kept in a pandas
DataFrame (object dtype, indexed by row key) in arrival order, restricted
to the columns the chart actually maps.
"""

from __future__ import annotations

from typing import Any, Callable, Hashable, Iterable, Optional

import pandas as pd

from .table import TableUpdateEvent
from .unwrap import unwrap_value


class ChangeAccumulator:
    """Per-table row state for the columns of interest."""

    def __init__(self, columns: Iterable[str]):
        self.columns: tuple[str, ...] = tuple(dict.fromkeys(columns))
        self._frame = pd.DataFrame(columns=list(self.columns), dtype=object)

    def __len__(self) -> int:
        return len(self._frame)

    def update(self, event: TableUpdateEvent) -> list[Hashable]:
        """Apply *event* to the stored rows.

        Removals are applied first, then additions, then modifications.
        Cells of untracked columns are ignored.

        Returns:
            Row keys named by ``removed`` or ``modified`` that were not
            present (the event was applied without them).
        """
        unknown: list[Hashable] = []

        if event.removed:
            present = [key for key in event.removed if key in self._frame.index]
            unknown.extend(key for key in event.removed if key not in self._frame.index)
            if present:
                self._frame = self._frame.drop(index=present)

        if event.added:
            added = pd.DataFrame.from_dict(event.added, orient="index", dtype=object)
            added = added.reindex(columns=list(self.columns)).astype(object)
            existing = [key for key in added.index if key in self._frame.index]
            if existing:
                # Re-added keys replace the stored row
                self._frame = self._frame.drop(index=existing)
            if self._frame.empty:
                self._frame = added
            else:
                self._frame = pd.concat([self._frame, added])

        for key, cells in event.modified.items():
            if key not in self._frame.index:
                unknown.append(key)
                continue
            for column, value in cells.items():
                if column in self.columns:
                    self._frame.at[key, column] = value

        return unknown

    def get_column(
        self,
        name: str,
        unwrap: Optional[Callable[[Any], Any]] = unwrap_value,
    ) -> list:
        """Return every current value of column *name*, in row order.

        Raises:
            KeyError: If *name* is not a tracked column.
            DecodeError: If *unwrap* rejects one of the values.
        """
        if name not in self.columns:
            raise KeyError(f"Column '{name}' is not tracked")
        values = self._frame[name].tolist()
        if unwrap is None:
            return values
        return [unwrap(value) for value in values]

    def clear(self) -> None:
        self._frame = self._frame.iloc[0:0]
