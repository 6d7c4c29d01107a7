from __future__ import annotations

import itertools
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Mapping, Sequence

# older settings files use camelCase keys
_ALIASES = {
    "numIterations": "num_iterations",
    "batchSize": "batch_size",
    "pulseLength": "pulse_length",
    "learnRate": "learn_rate",
    "cullThresh": "cull_thresh",
    "minVerts": "min_verts",
    "maxVerts": "max_verts",
    "minEdgeWeight": "min_edge_weight",
    "maxEdgeWeight": "max_edge_weight",
    "minEdge": "min_edge_weight",
    "maxEdge": "max_edge_weight",
    "edgeProbability": "edge_probability",
    "edgeProb": "edge_probability",
}


@dataclass(frozen=True)
class TrainParams:
    """Hyperparameters for one random-graph training run."""

    # Training loop
    num_iterations: int = 5
    batch_size: int = 100
    pulse_length: int = 1

    # Learning rule
    learn_rate: float = 0.01
    cull_thresh: float = 1e-8

    # Random graph
    min_verts: int = 794
    max_verts: int = 1294
    min_edge_weight: float = 1e-6
    max_edge_weight: float = 100.0
    edge_probability: float = 0.7

    def __post_init__(self) -> None:
        if self.num_iterations < 0:
            raise ValueError("num_iterations must be non-negative")
        if self.batch_size <= 0:
            raise ValueError("batch_size must be a positive integer")
        if self.pulse_length <= 0:
            raise ValueError("pulse_length must be a positive integer")
        if self.cull_thresh < 0.0:
            raise ValueError("cull_thresh must be non-negative")
        if self.min_verts < 1:
            raise ValueError("min_verts must be a positive integer")
        if self.max_verts < self.min_verts:
            raise ValueError("max_verts must be >= min_verts")
        if self.max_edge_weight < self.min_edge_weight:
            raise ValueError("max_edge_weight must be >= min_edge_weight")
        if not 0.0 <= self.edge_probability <= 1.0:
            raise ValueError("edge_probability must lie in [0, 1]")

    @classmethod
    def from_mapping(cls, settings: Mapping[str, Any]) -> "TrainParams":
        """Build from a settings mapping; accepts snake_case or camelCase keys."""
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in settings.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unrecognised setting: {key}")
            values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SweepGrid:
    """Cartesian product of hyperparameter values, expanded into a job list."""

    base: TrainParams = field(default_factory=TrainParams)
    num_iterations: Sequence[int] = (1, 3, 5)
    batch_size: Sequence[int] = (10, 100, 500)
    edge_probability: Sequence[float] = (0.1, 0.3, 0.5, 0.7)
    learn_rate: Sequence[float] = (0.001, 0.01, 0.1, 1.0)

    def expand(self) -> List[TrainParams]:
        combos = itertools.product(
            self.num_iterations,
            self.batch_size,
            self.edge_probability,
            self.learn_rate,
        )
        base = self.base.to_dict()
        jobs = []
        for n, b, e, lr in combos:
            params = dict(base, num_iterations=n, batch_size=b, edge_probability=e, learn_rate=lr)
            jobs.append(TrainParams(**params))
        return jobs

    def __len__(self) -> int:
        return len(self.num_iterations) * len(self.batch_size) * len(self.edge_probability) * len(self.learn_rate)
