"""
Named training problems runnable from the command line.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from ftwt.config import SweepGrid, TrainParams
from ftwt.datasets import make_prototype_dataset
from ftwt.matrix import Triplet
from ftwt.network import AssociativeNetwork
from ftwt.stimulus import Stimulus
from ftwt.sweep import ParameterSweep, SweepResult, evaluate, train_network

__all__ = [
    "SIMPLE_CROSS_SYNAPSES",
    "SimpleCrossResult",
    "simple_cross",
    "FeedForwardResult",
    "feedforward_synapses",
    "feedforward",
    "random_graph_sweep",
    "default_sweep_grid",
    "PROBLEMS",
]

SIMPLE_CROSS_SYNAPSES = [
    (0, 2, 52.0),
    (2, 0, 45.0),
    (0, 3, 57.0),
    (3, 0, 47.0),
    (1, 2, 45.0),
    (2, 1, 58.0),
    (1, 3, 49.0),
    (3, 1, 56.0),
]


@dataclass
class SimpleCrossResult:
    network: AssociativeNetwork
    response_0: np.ndarray
    response_1: np.ndarray

    @property
    def crossed(self) -> bool:
        return bool(self.response_0[3] > self.response_0[2] and self.response_1[2] > self.response_1[3])


def simple_cross(num_iters: int = 10, learn_rate: float = 0.01, cull_threshold: float = 1e-8) -> SimpleCrossResult:
    """Train a 4-neuron net to cross two inputs to two outputs: 0 -> 3 and 1 -> 2."""
    network = AssociativeNetwork(
        4,
        1,
        SIMPLE_CROSS_SYNAPSES,
        learn_rate=learn_rate,
        cull_threshold=cull_threshold,
        name="Simple 2x2 Net",
    )

    assoc_pre_1, assoc_post_1 = [[(0, 1.0)]], [[(3, 1.0)]]
    assoc_pre_2, assoc_post_2 = [[(1, 1.0)]], [[(2, 1.0)]]

    for _ in range(num_iters):
        network.train_step(assoc_pre_1, assoc_post_1)
        network.train_step(assoc_pre_2, assoc_post_2)

    return SimpleCrossResult(
        network=network,
        response_0=network.apply_input([1.0, 0.0, 0.0, 0.0]),
        response_1=network.apply_input([0.0, 1.0, 0.0, 0.0]),
    )


@dataclass
class FeedForwardResult:
    network: AssociativeNetwork
    stimulus: Stimulus
    train_time: float
    accuracy: float


def feedforward_synapses(
    input_size: int,
    output_size: int,
    rng: Optional[np.random.Generator] = None,
    scale: float = 1.0,
) -> List[Triplet]:
    """Connect every input ``i`` to every output neuron ``input_size + j``.

    Weights are uniform in ``[-scale / 2, scale / 2)``.
    """
    rng = np.random.default_rng() if rng is None else rng
    weights = scale * rng.random((input_size, output_size)) - 0.5 * scale
    return [
        Triplet(input_size + j, i, float(weights[i, j]))
        for i in range(input_size)
        for j in range(output_size)
    ]


def feedforward(
    *,
    num_classes: int = 10,
    input_size: int = 64,
    train_per_class: int = 50,
    test_per_class: int = 10,
    num_iterations: int = 10,
    batch_size: int = 25,
    learn_rate: float = 0.1,
    cull_threshold: float = 1e-8,
    seed: Optional[int] = None,
) -> FeedForwardResult:
    """
    Train a single-layer net on a synthetic prototype problem.

    Neurons ``0 .. input_size - 1`` are the inputs and the next ``num_classes``
    neurons the outputs, one per label.
    """
    rng = np.random.default_rng(seed)
    per_class = train_per_class + test_per_class
    dataset = make_prototype_dataset(num_classes, input_size, per_class, rng=rng)
    train_set, test_set = dataset.split(train_per_class / per_class)

    num_neurons = input_size + num_classes
    network = AssociativeNetwork(
        num_neurons,
        batch_size,
        feedforward_synapses(input_size, num_classes, rng),
        learn_rate=learn_rate,
        cull_threshold=cull_threshold,
        name="Feed-forward Net",
    )
    stimulus = Stimulus(num_neurons, range(input_size), range(input_size, num_neurons))

    t1 = time.perf_counter()
    train_network(network, stimulus, train_set, num_iterations, rng)
    t2 = time.perf_counter()

    return FeedForwardResult(
        network=network,
        stimulus=stimulus,
        train_time=t2 - t1,
        accuracy=evaluate(network, stimulus, test_set),
    )


def random_graph_sweep(
    grid: SweepGrid,
    *,
    num_classes: int = 10,
    input_size: int = 64,
    train_per_class: int = 50,
    test_per_class: int = 10,
    num_workers: int = 4,
    seed: Optional[int] = None,
) -> List[SweepResult]:
    """Sweep random-graph networks over a synthetic prototype classification problem."""
    rng = np.random.default_rng(seed)
    dataset = make_prototype_dataset(num_classes, input_size, train_per_class + test_per_class, rng=rng)
    train_set, test_set = dataset.split(train_per_class / (train_per_class + test_per_class))

    sweep = ParameterSweep(
        train_set,
        test_set,
        input_size,
        num_classes,
        num_workers=num_workers,
        seed=seed,
    )
    return sweep.run(grid.expand())


def default_sweep_grid(input_size: int, output_size: int) -> SweepGrid:
    base = TrainParams(
        min_verts=input_size + output_size,
        max_verts=input_size + output_size + 50,
    )
    return SweepGrid(base=base)


# problem name -> description, listed by the CLI
PROBLEMS: Dict[str, str] = {
    "simple_cross": "Train a network to cross two inputs to two outputs {0, 1} -> {1, 0}.",
    "feedforward": "Train a fixed single-layer input -> output net on a synthetic prototype problem.",
    "sweep": "Sweep randomly generated networks over a synthetic prototype problem.",
}
