"""
Hebbian associative network over a sparse synapse matrix.

Synapse ``(r, c)`` carries signal from presynaptic neuron ``c`` to
postsynaptic neuron ``r``, so ``apply_input`` is a plain sparse
matrix-vector product. Training is driven externally, one step at a time:

    apply_associations -> compute_pairings -> update_synapses  (-> cull)

Pairings share the synapse sparsity pattern, so learning never creates new
connections; it only strengthens, weakens and (through ``cull``) removes them.
"""

from __future__ import annotations

import enum
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ftwt.matrix import (
    DTYPE,
    MAX_PRINT,
    CompressedMatrix,
    DimensionMismatchError,
    Triplet,
    TripletMatrix,
)

__all__ = ["AssociativeNetwork", "TrainingPhase", "Activation", "AssociationBatch"]

logger = logging.getLogger(__name__)

Activation = Tuple[int, float]
AssociationBatch = Sequence[Sequence[Activation]]

LEARN_RATE = 0.01
CULL_THRESHOLD = 1e-8


class TrainingPhase(enum.Enum):
    IDLE = enum.auto()
    ASSOCIATED = enum.auto()
    PAIRED = enum.auto()


class AssociativeNetwork:
    """Sparse "fire together, wire together" network."""

    def __init__(
        self,
        num_neurons: int,
        batch_size: int,
        synapses: Iterable[Sequence[float]],
        *,
        learn_rate: float = LEARN_RATE,
        cull_threshold: float = CULL_THRESHOLD,
        name: str = "",
        dtype: np.dtype = DTYPE,
    ) -> None:
        if num_neurons <= 0:
            raise ValueError("num_neurons must be a positive integer")
        if batch_size <= 0:
            raise ValueError("batch_size must be a positive integer")
        if cull_threshold < 0.0:
            raise ValueError("cull_threshold must be non-negative")
        if not np.issubdtype(dtype, np.floating):
            raise ValueError(f"network values must be floating point, got {np.dtype(dtype)}")

        self.num_neurons = int(num_neurons)
        self.batch_size = int(batch_size)
        self.learn_rate = float(learn_rate)
        self.cull_threshold = float(cull_threshold)
        self.name = name

        synapse_triplets = TripletMatrix(self.num_neurons, self.num_neurons, name, dtype=dtype, entries=synapses)
        self.synapses = synapse_triplets.to_compressed()
        self.pairings = self.synapses.zeros_like(name=f"{name} pairings")

        self.activations_pre = np.zeros((self.batch_size, self.num_neurons), dtype=dtype)
        self.activations_post = np.zeros((self.batch_size, self.num_neurons), dtype=dtype)

        self.phase = TrainingPhase.IDLE

    def __repr__(self) -> str:
        return (
            f"AssociativeNetwork(name={self.name!r}, neurons={self.num_neurons}, "
            f"synapses={self.num_synapses}, batch_size={self.batch_size})"
        )

    @property
    def num_synapses(self) -> int:
        return self.synapses.nnz

    def _require_phase(self, expected: TrainingPhase, operation: str) -> None:
        if self.phase is not expected:
            raise RuntimeError(f"{operation} requires phase {expected.name}, network is {self.phase.name}")

    def _set_activations(self, buffer: np.ndarray, activations: Sequence[Activation], kind: str) -> None:
        for neuron, value in activations:
            neuron = int(neuron)
            if not 0 <= neuron < self.num_neurons:
                raise IndexError(f"{kind} neuron {neuron} out of range for {self.num_neurons} neurons")
            buffer[neuron] = value

    def apply_associations(self, presynaptic: AssociationBatch, postsynaptic: AssociationBatch) -> None:
        """Load one batch of desired (pre, post) activation pairs.

        Each argument holds one sequence of ``(neuron, value)`` pairs per batch
        slot. Both activation buffers are cleared for every slot before the
        pairs are written.
        """
        if len(presynaptic) != self.batch_size or len(postsynaptic) != self.batch_size:
            raise DimensionMismatchError(
                f"expected {self.batch_size} batch slots, got {len(presynaptic)} presynaptic "
                f"and {len(postsynaptic)} postsynaptic"
            )

        self.activations_pre.fill(0.0)
        self.activations_post.fill(0.0)

        for b in range(self.batch_size):
            self._set_activations(self.activations_pre[b], presynaptic[b], "presynaptic")
            self._set_activations(self.activations_post[b], postsynaptic[b], "postsynaptic")

        self.phase = TrainingPhase.ASSOCIATED

    def compute_pairings(self) -> None:
        """Batch-averaged post * pre co-activation for every existing synapse."""
        self._require_phase(TrainingPhase.ASSOCIATED, "compute_pairings")

        rows = self.synapses.row_indices()
        cols = self.synapses.column_indices

        pairings = self.synapses.zeros_like(name=f"{self.name} pairings")
        for b in range(self.batch_size):
            pairings.values += self.activations_post[b, rows] * self.activations_pre[b, cols]
        pairings.values /= self.batch_size

        self.pairings = pairings
        self.phase = TrainingPhase.PAIRED

    def update_synapses(self) -> None:
        """Apply the Hebbian update, then L2-normalise each neuron's incoming weights.

        Every weight is updated from the old pairings before any row is
        normalised. Rows whose updated norm is zero are left at zero.
        """
        self._require_phase(TrainingPhase.PAIRED, "update_synapses")

        weights = self.synapses.values + self.learn_rate * self.pairings.values
        rows = self.synapses.row_indices()

        totals = np.zeros(self.num_neurons, dtype=weights.dtype)
        np.add.at(totals, rows, weights * weights)
        norms = np.sqrt(totals)

        scale = norms[rows]
        np.divide(weights, scale, out=weights, where=scale != 0)

        self.synapses.values = weights
        self.phase = TrainingPhase.IDLE

    def train_step(self, presynaptic: AssociationBatch, postsynaptic: AssociationBatch) -> None:
        self.apply_associations(presynaptic, postsynaptic)
        self.compute_pairings()
        self.update_synapses()

    def cull(self) -> int:
        """Drop synapses weaker than the culling threshold. Returns the number removed."""
        self._require_phase(TrainingPhase.IDLE, "cull")

        before = self.synapses.nnz
        keep = np.abs(self.synapses.values) >= self.cull_threshold

        triplets = TripletMatrix.from_arrays(
            self.num_neurons,
            self.num_neurons,
            self.synapses.row_indices()[keep],
            self.synapses.column_indices[keep],
            self.synapses.values[keep],
            self.name,
            dtype=self.synapses.dtype,
        )
        self.synapses = triplets.to_compressed()
        self.pairings = self.synapses.zeros_like(name=f"{self.name} pairings")

        removed = before - self.synapses.nnz
        logger.debug("culled %d of %d synapses below %g", removed, before, self.cull_threshold)
        return removed

    def apply_input(self, vector: Sequence[float]) -> np.ndarray:
        """Network response to ``vector``; independent of the training phase."""
        return self.synapses.multiply(vector)

    def incoming_norms(self) -> np.ndarray:
        totals = np.zeros(self.num_neurons, dtype=self.synapses.dtype)
        np.add.at(totals, self.synapses.row_indices(), self.synapses.values ** 2)
        return np.sqrt(totals)

    def dump(self) -> List[Triplet]:
        return list(self.synapses.iter_entries())

    def format(self, max_entries: Optional[int] = MAX_PRINT) -> str:
        return self.synapses.format(max_entries)

    def __str__(self) -> str:
        return self.format()
