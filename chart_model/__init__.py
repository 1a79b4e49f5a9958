"""Chart data model: a plotly description kept live against streaming tables."""

from .events import ChartEvent, ChartEventType
from .model import ChartDataModel, ChartDescription

__all__ = [
    "ChartEvent",
    "ChartEventType",
    "ChartDataModel",
    "ChartDescription",
]
