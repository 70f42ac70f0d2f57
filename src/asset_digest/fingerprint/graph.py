"""
asset-digest: reference-file dependency graph and processing order.

File: src/asset_digest/fingerprint/graph.py

Purpose
- Discover which reference files point at which targets (one shallow scan per file).
- Order reference files so every dependency is rewritten before its dependents.

Functional requirements
- Duplicate edges are tolerated; edges may name nodes outside the candidate set.
- A cycle raises ``CyclicDependencyError`` naming the cycle members.
- Ordering is deterministic for identical inputs.

Non-functional requirements
- Scanning is read-only; nothing on disk changes before ordering succeeds.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from heapq import heapify, heappop, heappush
from pathlib import Path

from asset_digest.fingerprint.errors import DigestIOError
from asset_digest.fingerprint.paths import PathResolver
from asset_digest.fingerprint.placeholders import iter_placeholders
from asset_digest.utils.fs import read_text_exact

__all__ = [
    "CyclicDependencyError",
    "DependencyEdge",
    "DependencyGraph",
    "build_dependency_edges",
    "schedule_reference_files",
]


class CyclicDependencyError(ValueError):
    """Raised when reference files depend on each other in a cycle."""

    cycles: tuple[tuple[str, ...], ...]

    def __init__(self, cycles: Iterable[Sequence[str]]) -> None:
        normalized: tuple[tuple[str, ...], ...] = tuple(tuple(path) for path in cycles)
        self.cycles = normalized

        if not normalized:
            message = "Reference files contain at least one dependency cycle."
        else:
            preview = ", ".join(" -> ".join(path) for path in normalized[:3])
            suffix = "..." if len(normalized) > 3 else ""
            message = f"Reference files contain dependency cycle(s): {preview}{suffix}"
        super().__init__(message)

    @property
    def members(self) -> tuple[str, ...]:
        """Every node that participates in at least one detected cycle."""

        return tuple(sorted({node for path in self.cycles for node in path}))


@dataclass(frozen=True, slots=True)
class DependencyEdge:
    """``dependent`` contains a placeholder resolving to ``dependency``."""

    dependency: Path
    dependent: Path


class DependencyGraph:
    """Directed graph with deterministic traversal; edges point dependency -> dependent."""

    __slots__ = ("_nodes", "_children", "_parents")

    def __init__(
        self,
        nodes: Iterable[str] | None = None,
        edges: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._nodes: set[str] = set()
        self._children: dict[str, set[str]] = {}
        self._parents: dict[str, set[str]] = {}

        if nodes is not None:
            for node_id in nodes:
                self.add_node(node_id)

        if edges is not None:
            for parent, child in edges:
                self.add_edge(parent, child)

    def add_node(self, node_id: str) -> None:
        """Add a node if it does not already exist."""
        if not node_id:
            raise ValueError("node_id must be a non-empty string")
        if node_id in self._nodes:
            return

        self._nodes.add(node_id)
        self._children[node_id] = set()
        self._parents[node_id] = set()

    def add_edge(self, parent: str, child: str) -> None:
        """Add a directed edge ``parent -> child``; repeated edges are ignored."""
        self.add_node(parent)
        self.add_node(child)
        self._children[parent].add(child)
        self._parents[child].add(parent)

    def topological_sort(self) -> tuple[str, ...]:
        """Return a deterministic topological ordering or raise ``CyclicDependencyError``."""
        indegree: dict[str, int] = {node: len(self._parents[node]) for node in self._nodes}
        ready: list[str] = [node for node, degree in indegree.items() if degree == 0]
        heapify(ready)

        order: list[str] = []
        while ready:
            node = heappop(ready)
            order.append(node)

            for child in sorted(self._children[node]):
                indegree[child] -= 1
                if indegree[child] == 0:
                    heappush(ready, child)

        if len(order) != len(self._nodes):
            raise CyclicDependencyError(self.detect_cycles())

        return tuple(order)

    def detect_cycles(self) -> tuple[tuple[str, ...], ...]:
        """
        Detect directed cycles.

        Returns cycle paths as closed paths, e.g. ``("a", "b", "a")``.
        """
        state: dict[str, int] = {}
        stack: list[str] = []
        stack_index: dict[str, int] = {}
        cycles: dict[tuple[str, ...], None] = {}

        for start in sorted(self._nodes):
            if state.get(start, 0) != 0:
                continue

            state[start] = 1
            stack.append(start)
            stack_index[start] = len(stack) - 1
            frames: list[tuple[str, Iterator[str]]] = [(start, iter(sorted(self._children[start])))]

            while frames:
                node, child_iter = frames[-1]

                try:
                    child = next(child_iter)
                except StopIteration:
                    frames.pop()
                    state[node] = 2
                    stack.pop()
                    del stack_index[node]
                    continue

                child_state = state.get(child, 0)
                if child_state == 0:
                    state[child] = 1
                    stack_index[child] = len(stack)
                    stack.append(child)
                    frames.append((child, iter(sorted(self._children[child]))))
                    continue

                if child_state == 1:
                    start_index = stack_index[child]
                    cycle = tuple(stack[start_index:] + [child])
                    cycles[_canonicalize_cycle(cycle)] = None

        return tuple(sorted(cycles))


def build_dependency_edges(
    reference_files: Iterable[Path],
    pattern: re.Pattern[str],
    resolver: PathResolver,
) -> list[DependencyEdge]:
    """
    Scan each reference file once and emit one edge per placeholder occurrence.

    The scan is shallow: targets are resolved but never opened, and transitive
    ordering is left to ``schedule_reference_files``.
    """

    edges: list[DependencyEdge] = []
    for reference in reference_files:
        try:
            content = read_text_exact(reference)
        except OSError as exc:
            raise DigestIOError("read", reference, exc) from exc
        for placeholder in iter_placeholders(pattern, content):
            target = resolver.resolve(placeholder.path, reference)
            edges.append(DependencyEdge(dependency=target, dependent=Path(reference)))
    return edges


def schedule_reference_files(
    edges: Iterable[DependencyEdge],
    candidates: Sequence[Path],
) -> list[Path]:
    """
    Order ``candidates`` so that for every edge between two candidates the
    dependency comes first.

    The graph spans every node mentioned by an edge; the full topological
    order is then projected onto the candidate set.
    """

    by_key: dict[str, Path] = {}
    for candidate in candidates:
        by_key.setdefault(os.fspath(candidate), Path(candidate))

    graph = DependencyGraph(nodes=by_key)
    for edge in edges:
        graph.add_edge(os.fspath(edge.dependency), os.fspath(edge.dependent))

    return [by_key[node] for node in graph.topological_sort() if node in by_key]


def _canonicalize_cycle(cycle: tuple[str, ...]) -> tuple[str, ...]:
    body = cycle[:-1]
    if not body:
        return cycle
    rotations = [body[index:] + body[:index] for index in range(len(body))]
    smallest = min(rotations)
    return (*smallest, smallest[0])
