# Overview: Pure graph helpers for rule matrices; no database access.

from __future__ import annotations

from typing import Iterable, Mapping


def build_adjacency(matrix: Mapping[str, Mapping[str, bool]]) -> dict[str, list[str]]:
    """
    Directed graph with an edge P -> C for every matrix[P][C] that is true.
    Self cells are skipped. Insertion order of the matrix is preserved.
    """
    graph: dict[str, list[str]] = {}
    for parent, row in matrix.items():
        children = graph.setdefault(parent, [])
        for child, allowed in row.items():
            if allowed and child != parent:
                children.append(child)
    return graph


def adjacency_from_rules(rules: Iterable) -> dict[str, list[str]]:
    """Same graph built from rule rows (anything with parent_type/child_type/is_allowed)."""
    graph: dict[str, list[str]] = {}
    for rule in rules:
        if not rule.is_allowed or rule.parent_type == rule.child_type:
            continue
        graph.setdefault(rule.parent_type, []).append(rule.child_type)
    return graph


def find_cycle(graph: Mapping[str, Iterable[str]]) -> list[str] | None:
    """
    Depth-first search with a recursion stack.

    Returns the first cycle found as a closed node sequence, e.g.
    ["SHELF", "BOX", "SHELF"], or None when the graph is acyclic.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []

    def visit(node: str) -> list[str] | None:
        if node in on_stack:
            start = path.index(node)
            return path[start:] + [node]
        if node in visited:
            return None

        visited.add(node)
        on_stack.add(node)
        path.append(node)

        for neighbor in graph.get(node, ()):
            cycle = visit(neighbor)
            if cycle:
                return cycle

        path.pop()
        on_stack.discard(node)
        return None

    for node in list(graph):
        cycle = visit(node)
        if cycle:
            return cycle
    return None


def format_cycle(cycle: Iterable[str]) -> str:
    """["SHELF", "BOX", "SHELF"] -> "SHELF → BOX → SHELF"."""
    return " → ".join(cycle)
