"""
Trace kinds for plotly trace dicts.

Plotly traces are plain dicts discriminated by their ``type`` string. The
chart model only cares about a handful of shapes: which traces carry a
subplot ``domain`` and which style sub-objects may hold a plain ``color``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# Plotly's implicit trace type when "type" is omitted
DEFAULT_TRACE_TYPE = "scatter"


def trace_type(trace: dict[str, Any]) -> str:
    """Return the trace's plotly type string, defaulting like plotly does."""
    return trace.get("type") or DEFAULT_TRACE_TYPE


class TraceKind(Enum):
    """Tagged variant over the trace shapes the colorway logic distinguishes.

    Every plotly type that is not one of the special kinds below is
    STANDARD (scatter, bar, histogram, ...).
    """

    STANDARD = "standard"
    BOX = "box"
    VIOLIN = "violin"
    OHLC = "ohlc"
    CANDLESTICK = "candlestick"
    PIE = "pie"

    @classmethod
    def of(cls, trace: dict[str, Any]) -> TraceKind:
        return _KIND_BY_TYPE.get(trace_type(trace), cls.STANDARD)

    @property
    def carries_domain(self) -> bool:
        """True for the kinds whose ``domain`` separates subplots."""
        return self in (TraceKind.STANDARD, TraceKind.BOX)

    @property
    def color_fields(self) -> tuple[str, ...]:
        """Style sub-objects that may hold a plain ``color`` string."""
        return _COLOR_FIELDS[self]


_KIND_BY_TYPE = {
    "box": TraceKind.BOX,
    "violin": TraceKind.VIOLIN,
    "ohlc": TraceKind.OHLC,
    "candlestick": TraceKind.CANDLESTICK,
    "pie": TraceKind.PIE,
}

_COLOR_FIELDS = {
    TraceKind.STANDARD: ("marker", "line"),
    TraceKind.BOX: ("marker", "line"),
    TraceKind.VIOLIN: ("marker", "line"),
    TraceKind.PIE: ("marker",),
    TraceKind.OHLC: ("line",),
    TraceKind.CANDLESTICK: ("line",),
}
