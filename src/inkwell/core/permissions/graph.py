"""Directed graph helpers shared by the registry, role store and resolver."""

from collections.abc import Hashable, Iterable, Mapping
from typing import TypeVar


K = TypeVar("K", bound=Hashable)


def find_cycle(graph: Mapping[K, Iterable[K]], start: K) -> list[K] | None:
    """Find a cycle reachable from ``start`` with a depth-first search.

    Args:
        graph: Adjacency mapping; nodes missing from it have no edges
        start: Node to search from

    Returns:
        The cycle as a path that begins and ends on the same node,
        or None if no cycle is reachable.
    """
    path: list[K] = []
    on_path: set[K] = set()
    done: set[K] = set()

    def visit(node: K) -> list[K] | None:
        if node in on_path:
            return [*path[path.index(node) :], node]
        if node in done:
            return None

        on_path.add(node)
        path.append(node)
        for neighbour in graph.get(node, ()):
            cycle = visit(neighbour)
            if cycle is not None:
                return cycle
        path.pop()
        on_path.discard(node)
        done.add(node)
        return None

    return visit(start)
