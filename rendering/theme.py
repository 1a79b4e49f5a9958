"""
Chart theme and default layout template.

The theme only contributes a colorway; everything else in the layout comes
from the upstream chart description.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Optional, Sequence

import plotly.graph_objects as go
import plotly.io as pio

import config


@dataclass(frozen=True)
class ChartTheme:
    """Colors the model applies on top of the plotly description."""

    colorway: tuple[str, ...] = ()

    @classmethod
    def from_template(cls, name: str) -> ChartTheme:
        """Build a theme from the colorway of a registered plotly template."""
        template = pio.templates[name]
        return cls(colorway=tuple(template.layout.colorway or ()))

    @classmethod
    def from_config(cls) -> ChartTheme:
        """Theme from config: explicit ``theme.colorway`` wins over ``theme.template``."""
        theme_cfg = config.get_theme_config()
        if theme_cfg["colorway"]:
            return cls(colorway=tuple(theme_cfg["colorway"]))
        return cls.from_template(theme_cfg["template"])


def make_default_layout(theme: ChartTheme) -> dict[str, Any]:
    """Return the template layout dict the model installs for *theme*."""
    return {"colorway": list(theme.colorway)}


def template_colorway(layout: Optional[dict[str, Any]]) -> list[str]:
    """Read ``layout.template.layout.colorway``, or [] when any level is missing."""
    colorway = (
        ((layout or {}).get("template") or {}).get("layout") or {}
    ).get("colorway")
    return list(colorway or [])


def build_figure(data: Sequence[dict[str, Any]], layout: dict[str, Any]) -> go.Figure:
    """Create a fresh go.Figure from trace dicts and a layout dict.

    The inputs are deep-copied; mutating the figure never reaches the model.
    """
    return go.Figure({
        "data": copy.deepcopy(list(data)),
        "layout": copy.deepcopy(layout),
    })
