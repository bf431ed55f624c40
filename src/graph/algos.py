"""Graph algorithms for the module dependency graph."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Mapping, Sequence


def build_module_graph(edges: Mapping[str, Iterable[str]]) -> dict[str, set[str]]:
    """Build an adjacency map of module names to the modules they depend on."""
    return {module: set(targets) for module, targets in edges.items()}


def breadth_first(
    roots: Sequence[Hashable],
    neighbors: Mapping[Hashable, Sequence[Hashable]],
) -> list[Hashable]:
    """Return nodes reachable from roots, each once, in deterministic order.

    Roots come first in the given order; the remaining nodes follow in
    breadth-first order with neighbors visited in sequence order.
    """
    seen: set[Hashable] = set()
    order: list[Hashable] = []
    queue: deque[Hashable] = deque()

    for root in roots:
        if root not in seen:
            seen.add(root)
            order.append(root)
            queue.append(root)

    while queue:
        node = queue.popleft()
        for neighbor in neighbors.get(node, ()):
            if neighbor not in seen:
                seen.add(neighbor)
                order.append(neighbor)
                queue.append(neighbor)

    return order


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _strongconnect(node: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Process a node in Tarjan's algorithm."""
    state.indices[node] = state.index
    state.low_link[node] = state.index
    state.index += 1
    state.stack.append(node)
    state.on_stack.add(node)

    for neighbor in sorted(graph.get(node, set())):
        if neighbor not in state.indices:
            _strongconnect(neighbor, graph, state)
            state.low_link[node] = min(state.low_link[node], state.low_link[neighbor])
        elif neighbor in state.on_stack:
            state.low_link[node] = min(state.low_link[node], state.indices[neighbor])

    if state.low_link[node] == state.indices[node]:
        scc = _extract_scc(state, node)
        if len(scc) > 1 or node in graph.get(node, set()):
            state.sccs.append(sorted(scc))


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Dictionary representing the graph

    Returns:
        List of cycles, where each cycle is a sorted list of nodes
    """
    state = _TarjanState()

    for node in sorted(graph):
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return sorted(state.sccs)


__all__ = [
    "breadth_first",
    "build_module_graph",
    "find_cycles",
]
