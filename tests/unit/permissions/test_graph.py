"""Unit tests for cycle detection."""

import pytest

from inkwell.core.permissions.graph import find_cycle


pytestmark = pytest.mark.unit


class TestFindCycle:
    """Tests for find_cycle."""

    def test_acyclic_graph(self) -> None:
        graph = {"a": ["b", "c"], "b": ["d"], "c": ["d"]}

        assert find_cycle(graph, "a") is None

    def test_self_loop(self) -> None:
        assert find_cycle({"a": ["a"]}, "a") == ["a", "a"]

    def test_cycle_path_starts_where_it_closes(self) -> None:
        graph = {"start": ["a"], "a": ["b"], "b": ["c"], "c": ["a"]}

        assert find_cycle(graph, "start") == ["a", "b", "c", "a"]

    def test_unreachable_cycle_is_ignored(self) -> None:
        graph = {"a": ["b"], "x": ["y"], "y": ["x"]}

        assert find_cycle(graph, "a") is None

    def test_missing_nodes_have_no_edges(self) -> None:
        assert find_cycle({"a": ["ghost"]}, "a") is None
