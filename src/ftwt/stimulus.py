from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np

from ftwt.datasets import LabeledDataset
from ftwt.network import Activation

__all__ = ["Stimulus"]


class Stimulus:
    """Maps dataset vectors and labels onto network neurons.

    ``inputs[k]`` is the neuron driven by component ``k`` of a data vector and
    ``outputs[label]`` the neuron expected to respond to ``label``.
    """

    def __init__(self, num_neurons: int, inputs: Sequence[int], outputs: Sequence[int]) -> None:
        self.num_neurons = int(num_neurons)
        self.inputs = np.asarray(inputs, dtype=np.int64)
        self.outputs = np.asarray(outputs, dtype=np.int64)

        assigned = np.concatenate([self.inputs, self.outputs])
        if assigned.size and (assigned.min() < 0 or assigned.max() >= self.num_neurons):
            raise IndexError(f"stimulus neurons must lie in [0, {self.num_neurons})")
        if np.unique(assigned).size != assigned.size:
            raise ValueError("input and output neurons must be distinct")

        self.query_vector = np.zeros(self.num_neurons)

    @classmethod
    def random(
        cls,
        num_neurons: int,
        input_size: int,
        output_size: int,
        rng: Optional[np.random.Generator] = None,
    ) -> "Stimulus":
        """Assign inputs and outputs to distinct neurons picked at random."""
        if num_neurons < input_size + output_size:
            raise ValueError(
                f"{num_neurons} neurons cannot host {input_size} inputs and {output_size} outputs"
            )
        rng = np.random.default_rng() if rng is None else rng
        verts = rng.permutation(num_neurons)
        return cls(num_neurons, verts[:input_size], verts[input_size:input_size + output_size])

    @property
    def input_size(self) -> int:
        return int(self.inputs.shape[0])

    @property
    def output_size(self) -> int:
        return int(self.outputs.shape[0])

    def association_batch(
        self,
        dataset: LabeledDataset,
        indices: Sequence[int],
    ) -> Tuple[List[List[Activation]], List[List[Activation]]]:
        """Presynaptic and postsynaptic activation pairs for the samples at ``indices``."""
        presynaptic: List[List[Activation]] = []
        postsynaptic: List[List[Activation]] = []

        for index in indices:
            image, label = dataset[int(index)]
            image = np.asarray(image)
            if image.shape != (self.input_size,):
                raise ValueError(f"sample {index} has shape {image.shape}, expected ({self.input_size},)")
            if not 0 <= label < self.output_size:
                raise IndexError(f"label {label} out of range for {self.output_size} outputs")

            presynaptic.append(list(zip(self.inputs.tolist(), image.tolist())))
            postsynaptic.append([(int(self.outputs[label]), 1.0)])

        return presynaptic, postsynaptic

    def query(self, image: Sequence[float]) -> np.ndarray:
        """Full-length network input with ``image`` written onto the input neurons."""
        self.reset()
        self.query_vector[self.inputs] = image
        return self.query_vector.copy()

    def decode(self, response: Sequence[float]) -> int:
        """Label whose output neuron responded most strongly."""
        return int(np.argmax(np.asarray(response)[self.outputs]))

    def reset(self) -> None:
        self.query_vector.fill(0.0)
