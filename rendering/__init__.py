"""Trace coloring, column routing and figure helpers."""

from .traces import TraceKind, trace_type
from .colorway import assign_colorway, subplot_slots
from .routing import parse_destination, route
from .theme import ChartTheme, make_default_layout, template_colorway, build_figure

__all__ = [
    "TraceKind",
    "trace_type",
    "assign_colorway",
    "subplot_slots",
    "parse_destination",
    "route",
    "ChartTheme",
    "make_default_layout",
    "template_colorway",
    "build_figure",
]
