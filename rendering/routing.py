"""
Column routing: apply decoded column values to destination paths.

A destination path is a slash-delimited pointer such as
``/plotly/data/0/marker/color``. The leading marker segment is dropped and
the remaining segments index into the chart structure
``{"data": [...traces], "layout": {...}}`` — dict keys for dicts, decimal
indices for lists. The final segment receives the value.

Paths are resolved completely before anything is assigned, so a malformed
path raises RoutingError and leaves the structure untouched.
"""

from __future__ import annotations

import copy
from typing import Any

from errors import RoutingError

DEFAULT_MARKER = "plotly"


def parse_destination(destination: str, marker: str = DEFAULT_MARKER) -> tuple[str, ...]:
    """Split *destination* into path segments, dropping the marker segment.

    Raises:
        RoutingError: If the path does not start with *marker* or has no
            segments after it.
    """
    parts = [part for part in destination.split("/") if part != ""]
    if not parts or parts[0] != marker:
        raise RoutingError(
            f"Destination '{destination}' does not start with '/{marker}'",
            destination=destination,
        )
    segments = tuple(parts[1:])
    if not segments:
        raise RoutingError(
            f"Destination '{destination}' has no segments after '/{marker}'",
            destination=destination,
        )
    return segments


def _list_index(container: list, segment: str, destination: str) -> int:
    if not (segment.isascii() and segment.isdigit()):
        raise RoutingError(
            f"Segment '{segment}' of '{destination}' is not a list index",
            destination=destination, segment=segment,
        )
    index = int(segment)
    if index >= len(container):
        raise RoutingError(
            f"Index {index} of '{destination}' is out of range (length {len(container)})",
            destination=destination, segment=segment,
        )
    return index


def _step(container: Any, segment: str, destination: str) -> Any:
    """Resolve one intermediate segment against *container*."""
    if isinstance(container, dict):
        if segment not in container:
            raise RoutingError(
                f"Key '{segment}' of '{destination}' does not exist",
                destination=destination, segment=segment,
            )
        child = container[segment]
    elif isinstance(container, list):
        child = container[_list_index(container, segment, destination)]
    else:
        raise RoutingError(
            f"Segment '{segment}' of '{destination}' is inside a "
            f"{type(container).__name__}, not a dict or list",
            destination=destination, segment=segment,
        )
    return child


def resolve_parent(root: Any, segments: tuple[str, ...], destination: str = "") -> Any:
    """Walk all but the last segment and return the container to assign into."""
    target = root
    for segment in segments[:-1]:
        target = _step(target, segment, destination)
    if not isinstance(target, (dict, list)):
        raise RoutingError(
            f"Parent of '{segments[-1]}' in '{destination}' is a "
            f"{type(target).__name__}, not a dict or list",
            destination=destination, segment=segments[-1],
        )
    return target


def route(destination: str, value: Any, root: Any, marker: str = DEFAULT_MARKER) -> None:
    """Assign *value* at *destination* inside *root*.

    Lists are copied so that separate destinations never share one list.

    Raises:
        RoutingError: If the path is malformed or does not resolve.
    """
    segments = parse_destination(destination, marker)
    parent = resolve_parent(root, segments, destination)
    leaf = segments[-1]
    if isinstance(value, list):
        value = copy.copy(value)
    if isinstance(parent, list):
        parent[_list_index(parent, leaf, destination)] = value
    else:
        parent[leaf] = value
