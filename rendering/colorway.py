"""
Colorway assignment for plotly traces.

Plotly restarts its colorway for every subplot. The chart description does
not say which traces share a subplot, so it is inferred from adjacency:

1. Traces in the same subplot are contiguous in the data list
2. A change of trace type starts a new subplot
3. A change of ``domain`` (for kinds that carry one) starts a new subplot
4. Each subplot starts from the beginning of the colorway

A trace color is only replaced when it still equals plotly's default for
its slot; colors set by the user or computed by the plot type are kept.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from .traces import TraceKind, trace_type


def _starts_subplot(trace: dict[str, Any], prev: dict[str, Any]) -> bool:
    if trace_type(trace) != trace_type(prev):
        return True
    kind, prev_kind = TraceKind.of(trace), TraceKind.of(prev)
    if kind.carries_domain and prev_kind.carries_domain:
        return trace.get("domain") != prev.get("domain")
    return False


def subplot_slots(traces: Sequence[dict[str, Any]]) -> list[int]:
    """Return the colorway slot of every trace within its inferred subplot."""
    slots: list[int] = []
    subplot_start = 0
    for i, trace in enumerate(traces):
        if i > 0 and _starts_subplot(trace, traces[i - 1]):
            subplot_start = i
        slots.append(i - subplot_start)
    return slots


def _cycle(colorway: Sequence[str], slot: int) -> Optional[str]:
    # Plotly wraps back to the start of the colorway if there are more traces than colors
    if not colorway:
        return None
    return colorway[slot % len(colorway)]


def assign_colorway(
    traces: Sequence[dict[str, Any]],
    theme_colorway: Sequence[str],
    original_colorway: Sequence[str],
) -> None:
    """Apply *theme_colorway* to every trace color still at its plotly default.

    Args:
        traces: Plotly trace dicts, mutated in place.
        theme_colorway: Colors to apply, cycled per subplot.
        original_colorway: The colorway plotly used when it picked the
            trace defaults. Empty means no trace color counts as a default.
    """
    if not theme_colorway:
        return

    for trace, slot in zip(traces, subplot_slots(traces)):
        theme_color = _cycle(theme_colorway, slot)
        default_color = _cycle(original_colorway, slot)
        if default_color is None:
            continue

        for field in TraceKind.of(trace).color_fields:
            style = trace.get(field)
            if not isinstance(style, dict):
                continue
            color = style.get("color")
            # Arrays and colorscales are data-driven, never a default
            if isinstance(color, str) and color.upper() == default_color.upper():
                style["color"] = theme_color
