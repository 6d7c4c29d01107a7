"""
Random directed graph used as a synapse topology.

The graph draws a vertex count, adds every ordered non-self edge with a fixed
probability and then runs a best-effort repair pass that stitches together
the islands found by an outgoing-edge depth-first walk. The walk only
approximates reachability (a vertex claimed by an earlier island is never
revisited), so the repair is a heuristic; :meth:`RandomGraph.weak_components`
gives the exact weakly-connected components for verification.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ftwt.matrix import Triplet, TripletMatrix

__all__ = ["RandomGraph"]

logger = logging.getLogger(__name__)

Edge = Tuple[int, float]
RandomSource = Union[None, int, np.random.Generator]


class RandomGraph:
    """Erdős–Rényi style directed graph with weighted edges."""

    def __init__(
        self,
        min_verts: int,
        max_verts: int,
        edge_probability: float,
        edge_min: float,
        edge_max: float,
        *,
        rng: RandomSource = None,
    ) -> None:
        if min_verts < 1:
            raise ValueError("min_verts must be a positive integer")
        if max_verts < min_verts:
            raise ValueError("max_verts must be >= min_verts")
        if not 0.0 <= edge_probability <= 1.0:
            raise ValueError("edge_probability must lie in [0, 1]")
        if edge_max < edge_min:
            raise ValueError("edge_max must be >= edge_min")

        self.min_verts = int(min_verts)
        self.max_verts = int(max_verts)
        self.edge_probability = float(edge_probability)
        self.edge_min = float(edge_min)
        self.edge_max = float(edge_max)
        self.rng = rng if isinstance(rng, np.random.Generator) else np.random.default_rng(rng)

        self.num_verts = 0
        self.adjacencies: List[List[Edge]] = []
        self.islands: List[List[int]] = []

        self._generate()

    def _random_weight(self) -> float:
        return float(self.rng.uniform(self.edge_min, self.edge_max))

    def _generate(self) -> None:
        if self.max_verts == self.min_verts:
            self.num_verts = self.min_verts
        else:
            self.num_verts = int(self.rng.integers(self.min_verts, self.max_verts))

        n = self.num_verts
        draws = self.rng.random((n, n))
        weights = self.rng.uniform(self.edge_min, self.edge_max, size=(n, n))

        mask = draws < self.edge_probability
        np.fill_diagonal(mask, False)

        self.adjacencies = [[] for _ in range(n)]
        sources, targets = np.nonzero(mask)
        for i, j, w in zip(sources.tolist(), targets.tolist(), weights[sources, targets].tolist()):
            self.adjacencies[i].append((j, w))

        self.islands = self._find_islands()
        logger.debug(
            "generated graph with %d verts, %d edges, %d islands",
            n, self.num_edges, len(self.islands),
        )

        if len(self.islands) > 1:
            self._connect_islands(self.islands)

    def _find_islands(self) -> List[List[int]]:
        """Group vertices by a depth-first walk that follows outgoing edges only."""
        visited = np.zeros(self.num_verts, dtype=bool)
        islands: List[List[int]] = []

        for seed in range(self.num_verts):
            if visited[seed]:
                continue

            visited[seed] = True
            island = [seed]
            # each stack frame is (vertex, position of the next edge to try)
            stack = [(seed, 0)]

            while stack:
                vert, pos = stack[-1]
                edges = self.adjacencies[vert]

                while pos < len(edges) and visited[edges[pos][0]]:
                    pos += 1

                if pos == len(edges):
                    stack.pop()
                    continue

                target = edges[pos][0]
                stack[-1] = (vert, pos + 1)
                visited[target] = True
                island.append(target)
                stack.append((target, 0))

            islands.append(island)

        return islands

    def _connect_islands(self, islands: Sequence[Sequence[int]]) -> None:
        """Add one edge each way between every pair of islands."""
        if not islands:
            raise ValueError("cannot connect an empty island list")

        added = 0
        for i in range(len(islands)):
            for j in range(i + 1, len(islands)):
                v1 = int(self.rng.choice(islands[i]))
                v2 = int(self.rng.choice(islands[j]))
                self.adjacencies[v1].append((v2, self._random_weight()))

                v1 = int(self.rng.choice(islands[i]))
                v2 = int(self.rng.choice(islands[j]))
                self.adjacencies[v2].append((v1, self._random_weight()))
                added += 2

        logger.debug("connected %d islands with %d extra edges", len(islands), added)

    @property
    def num_edges(self) -> int:
        return sum(len(edges) for edges in self.adjacencies)

    def neighbors(self, vertex: int) -> List[Edge]:
        if not 0 <= vertex < self.num_verts:
            raise IndexError(f"vertex {vertex} out of range for {self.num_verts} verts")
        return list(self.adjacencies[vertex])

    def edges(self) -> List[Triplet]:
        """Flatten the adjacency lists into ``(source, target, weight)`` triplets."""
        return [
            Triplet(source, target, weight)
            for source, edges in enumerate(self.adjacencies)
            for target, weight in edges
        ]

    def to_triplet_matrix(self, name: str = "") -> TripletMatrix:
        return TripletMatrix(self.num_verts, self.num_verts, name, entries=self.edges())

    def weak_components(self) -> List[List[int]]:
        """Exact weakly-connected components, found with union-find."""
        parent = list(range(self.num_verts))

        def find(v: int) -> int:
            while parent[v] != v:
                parent[v] = parent[parent[v]]
                v = parent[v]
            return v

        for source, edges in enumerate(self.adjacencies):
            for target, _ in edges:
                a, b = find(source), find(target)
                if a != b:
                    parent[b] = a

        components: dict[int, List[int]] = {}
        for v in range(self.num_verts):
            components.setdefault(find(v), []).append(v)
        return list(components.values())

    def is_weakly_connected(self) -> bool:
        return len(self.weak_components()) <= 1
