"""Post-extraction graph analysis: shortest paths and minimal cycles."""

from __future__ import annotations

from collections import deque
from collections.abc import Hashable, Iterable, Iterator, Mapping
from typing import NamedTuple, TypeVar

N = TypeVar("N", bound=Hashable)

NodePath = tuple[N, ...]


class _Link(NamedTuple):
    node: Hashable
    parent: _Link | None


class PathTable(Mapping):
    """Shortest known path per ``(source, target)`` pair.

    Entries are stored as a length plus the last link of a chain shared
    with other paths; tuples are only built when an entry is read.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[N, N], tuple[int, _Link]] = {}

    def offer(self, source: N, target: N, link: _Link, length: int) -> None:
        """Record the path ending at *link* unless a path as short is known."""
        existing = self._entries.get((source, target))
        if existing is None or existing[0] > length:
            self._entries[(source, target)] = (length, link)

    def __getitem__(self, key: tuple[N, N]) -> NodePath:
        length, link = self._entries[key]
        nodes = []
        while len(nodes) < length:
            nodes.append(link.node)
            link = link.parent
        return tuple(reversed(nodes))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[tuple[N, N]]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def enumerate_paths(
    graph: Mapping[N, Iterable[N]],
) -> tuple[PathTable, dict[NodePath, None]]:
    """Walk *graph* depth-first from every node, collecting paths and cycles.

    Returns ``(shortest, cycles)``. ``shortest[(a, b)]`` is the shortest
    path from ``a`` to ``b`` seen by the walk (both ends included), and
    ``cycles`` is an ordered set of closed paths ``(a, ..., a)``.

    A node is fully explored once all of its dependencies have been
    walked; later walks stop as soon as they reach it, so each node is
    expanded once across all roots. Pairs only connected through an
    explored node are filled in afterwards by :func:`complete_paths`.
    """
    shortest: PathTable = PathTable()
    cycles: dict[NodePath, None] = {}
    explored: set[N] = set()
    for root in graph:
        explored = _walk(root, graph, explored, shortest, cycles)
    complete_paths(graph, shortest)
    return shortest, cycles


def _walk(
    root: N,
    graph: Mapping[N, Iterable[N]],
    explored: set[N],
    shortest: PathTable,
    cycles: dict[NodePath, None],
) -> set[N]:
    path: list[N] = []
    links: list[_Link] = []
    on_path: set[N] = set()
    frames: list[Iterator[N]] = []

    node: N | None = root
    while True:
        if node is not None and node not in explored:
            link = _Link(node, links[-1] if links else None)
            for i, start in enumerate(path):
                shortest.offer(start, node, link, len(path) - i + 1)

            if node in on_path:
                cycles[tuple(path[path.index(node):]) + (node,)] = None
            else:
                path.append(node)
                on_path.add(node)
                links.append(link)
                frames.append(iter(graph.get(node, ())))

        if not frames:
            return explored

        node = None
        for dependency in frames[-1]:
            if dependency != path[-1]:
                node = dependency
                break
        else:
            frames.pop()
            links.pop()
            finished = path.pop()
            on_path.discard(finished)
            explored.add(finished)


def complete_paths(
    graph: Mapping[N, Iterable[N]],
    shortest: PathTable,
) -> None:
    """Record a breadth-first shortest path for every reachable pair.

    Existing entries are only replaced by strictly shorter paths, so the
    closed paths recorded for ``(a, a)`` are left alone.
    """
    for start in graph:
        reached: dict[N, tuple[int, _Link]] = {start: (1, _Link(start, None))}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            length, link = reached[node]
            for dependency in graph.get(node, ()):
                if dependency not in reached:
                    reached[dependency] = (length + 1, _Link(dependency, link))
                    queue.append(dependency)

        for target, (length, link) in reached.items():
            if target != start:
                shortest.offer(start, target, link, length)


def shorten_cycles(
    cycles: Iterable[NodePath],
    shortest: Mapping[tuple[N, N], NodePath],
) -> tuple[NodePath, ...]:
    """Reduce every cycle to the shortest closed walk found through it.

    For each intermediate node, taken alternately from both ends, the
    cycle is rebuilt from the shortest start→node and node→start paths.
    Whenever that yields a shorter cycle the scan restarts on it, so a
    returned cycle has no intermediate node that would shorten it again.
    A three-element cycle (``a, b, a``) cannot get shorter.
    """
    shortened: dict[NodePath, None] = {}
    for cycle in cycles:
        shortened[_shorten(tuple(cycle), shortest)] = None
    return tuple(shortened)


def _shorten(best: NodePath, shortest: Mapping[tuple[N, N], NodePath]) -> NodePath:
    start, end = best[0], best[-1]
    improved = True
    while improved and len(best) > 3:
        improved = False
        i, j = 1, len(best) - 2
        while i <= j and not improved:
            for k in (i, j) if i != j else (i,):
                first = shortest.get((start, best[k]))
                second = shortest.get((best[k], end))
                if first and second and len(first) + len(second) - 1 < len(best):
                    best = first + second[1:]
                    improved = True
                    break
            i += 1
            j -= 1
    return best


def find_cycles(graph: Mapping[N, Iterable[N]]) -> tuple[NodePath, ...]:
    """Return the minimal dependency cycles of *graph*."""
    shortest, cycles = enumerate_paths(graph)
    return shorten_cycles(cycles, shortest)
