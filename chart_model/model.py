"""
Live chart data model.

ChartDataModel holds a plotly chart description (trace dicts + layout) whose
column-derived fields are fed by streaming backing tables. It:

- applies the theme colorway once at construction
- opens one TableSubscriber per mapped table when the first listener
  subscribes, and closes them all when the last listener leaves
- routes every decoded column of an update event to its destination paths
  and then broadcasts exactly one ChartEvent for that event

Errors from a malformed map, a failed table, or a bad cell value are
reported to listeners as events; they never propagate into the table's
event delivery.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Mapping, Optional, Sequence

import plotly.graph_objects as go

import config
from data_ops.subscription import TableSubscriber
from data_ops.table import Table, TableUpdateEvent
from errors import ConfigurationError, RoutingError, SourceError
from rendering.colorway import assign_colorway
from rendering.routing import parse_destination, route
from rendering.theme import ChartTheme, build_figure, make_default_layout, template_colorway

from .events import ChartEvent, ChartEventType
from .logging import get_logger, log_error

ChartListener = Callable[[ChartEvent], None]
ColumnReplacementMap = Mapping[Table, Mapping[str, Sequence[str]]]


@dataclass
class ChartDescription:
    """Everything the upstream chart generator supplies to build a model."""

    tables: Sequence[Table]
    column_replacement_map: ColumnReplacementMap
    data: list
    layout: dict
    is_default_template: bool = True
    theme: Optional[ChartTheme] = None


class _TableState:
    """Replacement map and subscriber for one backing table."""

    def __init__(self, table: Table, replacements: Mapping[str, Sequence[str]], logger: logging.Logger):
        self.table = table
        self.replacements: dict[str, tuple[str, ...]] = {
            column: tuple(destinations) for column, destinations in replacements.items()
        }
        self.subscriber = TableSubscriber(table, logger)


class ChartDataModel:
    """Plotly chart description kept in sync with streaming tables."""

    def __init__(
        self,
        tables: Sequence[Table],
        column_replacement_map: ColumnReplacementMap,
        data: Sequence[dict],
        plotly_layout: Optional[dict] = None,
        is_default_template: bool = True,
        theme: Optional[ChartTheme] = None,
        logger: Optional[logging.Logger] = None,
        path_marker: Optional[str] = None,
    ):
        self.logger = logger or get_logger().getChild("chart")
        self.tables = list(tables)
        self.path_marker = path_marker or config.get_path_marker()

        self._tables: list[_TableState] = []
        for table, replacements in column_replacement_map.items():
            if not any(table is known for known in self.tables):
                raise ConfigurationError(
                    f"Column replacement map references table {table!r} that is not in the chart's tables"
                )
            self._tables.append(_TableState(table, replacements, self.logger))

        self.theme = theme or ChartTheme.from_config()
        self.data: list[dict] = copy.deepcopy(list(data))
        self.plotly_layout: dict = copy.deepcopy(dict(plotly_layout or {}))

        template = {"layout": make_default_layout(self.theme)}
        # The plotly template colorway is only honored when the user picked the template
        if not is_default_template:
            template["layout"]["colorway"] = (
                template_colorway(self.plotly_layout) or template["layout"]["colorway"]
            )
        self.layout: dict = {**self.plotly_layout, "template": template}

        assign_colorway(
            self.data,
            template["layout"]["colorway"],
            template_colorway(self.plotly_layout),
        )

        self._root = {"data": self.data, "layout": self.layout}
        self._listeners: list[ChartListener] = []
        self._width: Optional[float] = None
        self._height: Optional[float] = None

    @classmethod
    def from_description(
        cls, description: ChartDescription, logger: Optional[logging.Logger] = None
    ) -> ChartDataModel:
        return cls(
            description.tables,
            description.column_replacement_map,
            description.data,
            description.layout,
            is_default_template=description.is_default_template,
            theme=description.theme,
            logger=logger,
        )

    # ---- Accessors ---------------------------------------------------------

    def get_data(self) -> list[dict]:
        """Current traces. Treat as read-only; it changes between broadcasts."""
        return self.data

    def get_layout(self) -> dict:
        """Current layout. Treat as read-only; it changes between broadcasts."""
        return self.layout

    def to_figure(self) -> go.Figure:
        """A detached plotly Figure of the current data and layout."""
        return build_figure(self.data, self.layout)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def is_subscribed(self) -> bool:
        return bool(self._listeners)

    @property
    def open_table_count(self) -> int:
        return sum(1 for state in self._tables if state.subscriber.is_open)

    # ---- Viewport ----------------------------------------------------------

    def set_dimensions(self, width: Optional[float], height: Optional[float]) -> None:
        self._width = width
        self._height = height

    def _margin(self, side: str) -> float:
        margin = self.layout.get("margin") or {}
        return margin.get(side) or 0

    def get_plot_width(self) -> float:
        """Viewport width minus the left and right layout margins."""
        if not self._width:
            return 0
        return max(self._width - self._margin("l") - self._margin("r"), 0)

    def get_plot_height(self) -> float:
        """Viewport height minus the top and bottom layout margins."""
        if not self._height:
            return 0
        return max(self._height - self._margin("t") - self._margin("b"), 0)

    # ---- Listeners ---------------------------------------------------------

    def subscribe(self, listener: ChartListener) -> None:
        """Register *listener*; the first listener opens every table subscription."""
        if listener in self._listeners:
            return
        self._listeners.append(listener)
        if len(self._listeners) == 1:
            self._start_listening()

    def unsubscribe(self, listener: ChartListener) -> None:
        """Remove *listener*; the last one out closes every table subscription."""
        if listener not in self._listeners:
            return
        self._listeners.remove(listener)
        if not self._listeners:
            self._stop_listening()

    def close(self) -> None:
        """Drop all listeners and close every table subscription."""
        self._listeners.clear()
        self._stop_listening()

    def _broadcast(self, event: ChartEvent) -> None:
        for listener in list(self._listeners):
            if listener not in self._listeners:
                # Unsubscribed by an earlier listener in this broadcast
                continue
            try:
                listener(event)
            except Exception as exc:
                log_error("Chart listener raised while handling an event", exc,
                          {"event": event.type.value}, logger=self.logger)

    # ---- Table lifecycle ---------------------------------------------------

    def _invalid_destinations(self, state: _TableState) -> list[RoutingError]:
        errors = []
        for column, destinations in state.replacements.items():
            for destination in destinations:
                try:
                    parse_destination(destination, self.path_marker)
                except RoutingError as exc:
                    errors.append(exc)
        return errors

    def _start_listening(self) -> None:
        for state in self._tables:
            if not self._listeners:
                # Unsubscribed from inside a broadcast
                return
            invalid = self._invalid_destinations(state)
            if invalid:
                for exc in invalid:
                    self.logger.warning(f"Invalid destination for {state.table!r}: {exc}")
                self._broadcast(ChartEvent(ChartEventType.ERROR, errors=tuple(invalid), table=state.table))
            try:
                state.subscriber.open(
                    list(state.replacements),
                    on_update=partial(self._handle_table_updated, state),
                    on_disconnect=partial(self._handle_disconnect, state),
                    on_reconnect=partial(self._handle_reconnect, state),
                )
            except SourceError as exc:
                log_error(f"Could not subscribe to table {state.table!r}", exc, logger=self.logger)
                self._broadcast(ChartEvent(ChartEventType.ERROR, errors=(exc,), table=state.table))

    def _stop_listening(self) -> None:
        for state in self._tables:
            state.subscriber.close()

    # ---- Event handlers ----------------------------------------------------

    def _handle_table_updated(self, state: _TableState, event: TableUpdateEvent) -> None:
        if not self._listeners:
            return

        try:
            values = state.subscriber.on_update(event)
        except Exception as exc:
            log_error(f"Failed to apply update from {state.table!r}", exc, logger=self.logger)
            self._broadcast(ChartEvent(ChartEventType.ERROR, data=self.data, errors=(exc,), table=state.table))
            return

        errors: list[Exception] = []
        for column, value in values.items():
            for destination in state.replacements.get(column, ()):
                try:
                    route(destination, value, self._root, self.path_marker)
                except RoutingError as exc:
                    log_error(
                        "Could not route column update",
                        exc,
                        {"table": state.table, "column": column, "destination": destination},
                        logger=self.logger,
                    )
                    errors.append(exc)

        event_type = ChartEventType.ERROR if errors else ChartEventType.UPDATED
        self._broadcast(ChartEvent(event_type, data=self.data, errors=tuple(errors), table=state.table))

    def _handle_disconnect(self, state: _TableState, payload: Any = None) -> None:
        if not self._listeners:
            return
        error = payload if isinstance(payload, Exception) else SourceError(
            f"Table {state.table!r} disconnected", table=state.table
        )
        self.logger.warning(f"Table {state.table!r} disconnected")
        self._broadcast(ChartEvent(ChartEventType.DISCONNECT, errors=(error,), table=state.table))

    def _handle_reconnect(self, state: _TableState, payload: Any = None) -> None:
        if not self._listeners:
            return
        self.logger.info(f"Table {state.table!r} reconnected")
        self._broadcast(ChartEvent(ChartEventType.RECONNECT, table=state.table))
