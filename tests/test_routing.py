"""
Tests for rendering.routing — destination parsing and in-place assignment.

Run with: python -m pytest tests/test_routing.py
"""

import copy

import pytest

from errors import ConfigurationError, RoutingError
from rendering.routing import parse_destination, route


@pytest.fixture
def root():
    return {
        "data": [
            {"type": "scatter", "x": [1, 2], "marker": {"color": "#636efa"}},
            {"type": "bar", "y": [3]},
        ],
        "layout": {"title": {"text": "t"}, "xaxis": {}},
    }


class TestParseDestination:
    def test_strips_marker(self):
        """Leading marker segment is dropped from the parsed path."""
        assert parse_destination("/plotly/data/0/marker/color") == ("data", "0", "marker", "color")

    def test_ignores_empty_segments(self):
        """Doubled and trailing slashes produce no empty segments."""
        assert parse_destination("//plotly/layout//title/") == ("layout", "title")

    def test_missing_marker(self):
        """A path not starting with the marker is rejected."""
        with pytest.raises(RoutingError):
            parse_destination("/data/0/x")

    def test_marker_only(self):
        with pytest.raises(RoutingError):
            parse_destination("/plotly/")

    def test_custom_marker(self):
        assert parse_destination("/fig/data/1/y", marker="fig") == ("data", "1", "y")

    def test_routing_error_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_destination("")


class TestRoute:
    def test_sets_trace_field(self, root):
        route("/plotly/data/0/marker/color", ["#abc"], root)
        assert root["data"][0]["marker"]["color"] == ["#abc"]

    def test_sets_new_key(self, root):
        route("/plotly/data/1/x", [1, 2, 3], root)
        assert root["data"][1]["x"] == [1, 2, 3]

    def test_sets_layout_field(self, root):
        route("/plotly/layout/title/text", "Live", root)
        assert root["layout"]["title"]["text"] == "Live"

    def test_replaces_list_slot(self, root):
        """A numeric leaf replaces one element of a list."""
        route("/plotly/data/0/x/1", 9, root)
        assert root["data"][0]["x"] == [1, 9]

    def test_idempotent(self, root):
        route("/plotly/data/0/y", [4, 5], root)
        once = copy.deepcopy(root)
        route("/plotly/data/0/y", [4, 5], root)
        assert root == once

    def test_lists_are_copied_per_destination(self, root):
        """Each destination gets its own list object."""
        values = [1, 2]
        route("/plotly/data/0/x", values, root)
        route("/plotly/data/1/x", values, root)
        assert root["data"][0]["x"] is not root["data"][1]["x"]
        assert root["data"][0]["x"] is not values

    def test_out_of_range_index_leaves_root_unchanged(self, root):
        """A failed route never half-applies."""
        before = copy.deepcopy(root)
        with pytest.raises(RoutingError) as info:
            route("/plotly/data/99/marker/color", ["#abc"], root)
        assert info.value.segment == "99"
        assert info.value.destination == "/plotly/data/99/marker/color"
        assert root == before

    def test_missing_intermediate_key(self, root):
        with pytest.raises(RoutingError):
            route("/plotly/data/1/marker/color", "red", root)

    def test_non_numeric_list_segment(self, root):
        with pytest.raises(RoutingError):
            route("/plotly/data/first/x", [1], root)

    @pytest.mark.parametrize("segment", ["\u00b2", "\u0663", "\uff11"])
    def test_non_ascii_digits_rejected(self, root, segment):
        """Unicode digits are not list indices, as a parent or as the leaf."""
        before = copy.deepcopy(root)
        with pytest.raises(RoutingError):
            route(f"/plotly/data/{segment}/x", [1], root)
        with pytest.raises(RoutingError):
            route(f"/plotly/data/0/x/{segment}", 1, root)
        assert root == before

    def test_negative_index_rejected(self, root):
        with pytest.raises(RoutingError):
            route("/plotly/data/-1/x", [1], root)

    def test_scalar_intermediate(self, root):
        """Walking through a string value is a routing error."""
        with pytest.raises(RoutingError):
            route("/plotly/data/0/type/name", "x", root)

    def test_leaf_index_out_of_range(self, root):
        with pytest.raises(RoutingError):
            route("/plotly/data/0/x/5", 1, root)
