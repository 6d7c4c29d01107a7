"""
Training harness for random-graph associative networks.

``run_configuration`` trains and scores one network for one set of
hyperparameters. ``ParameterSweep`` runs many configurations on a fixed pool
of worker threads fed from a bounded queue. Every configuration gets its own
random generator spawned from a root seed, so a sweep gives the same results
whichever worker happens to pick up a job.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ftwt.config import TrainParams
from ftwt.datasets import LabeledDataset
from ftwt.network import AssociativeNetwork
from ftwt.recorder import TrainingRecorder
from ftwt.stimulus import Stimulus
from ftwt.topology import RandomGraph

__all__ = [
    "SweepResult",
    "ParameterSweep",
    "build_network",
    "train_network",
    "evaluate",
    "run_configuration",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SweepResult:
    index: int
    params: TrainParams
    train_time: float
    accuracy: float
    num_verts: int
    num_synapses: int


def build_network(
    params: TrainParams,
    input_size: int,
    output_size: int,
    rng: np.random.Generator,
    name: str = "random graph net",
) -> Tuple[AssociativeNetwork, Stimulus]:
    """Random graph topology wrapped in a network, plus a random input/output assignment."""
    graph = RandomGraph(
        params.min_verts,
        params.max_verts,
        params.edge_probability,
        params.min_edge_weight,
        params.max_edge_weight,
        rng=rng,
    )
    network = AssociativeNetwork(
        graph.num_verts,
        params.batch_size,
        graph.edges(),
        learn_rate=params.learn_rate,
        cull_threshold=params.cull_thresh,
        name=name,
    )
    stimulus = Stimulus.random(graph.num_verts, input_size, output_size, rng)
    return network, stimulus


def train_network(
    network: AssociativeNetwork,
    stimulus: Stimulus,
    dataset: LabeledDataset,
    num_iterations: int,
    rng: np.random.Generator,
    recorder: Optional[TrainingRecorder] = None,
) -> int:
    """
    Run ``num_iterations`` shuffled passes over ``dataset``, culling after each.

    The final batch of a pass wraps around to the start of the shuffled order
    so every batch fills all slots. Returns the number of training steps.
    """
    num_samples = len(dataset)
    if num_samples == 0:
        raise ValueError("cannot train on an empty dataset")

    step = 0
    for iteration in range(num_iterations):
        order = rng.permutation(num_samples)
        for start in range(0, num_samples, network.batch_size):
            batch = np.take(order, np.arange(start, start + network.batch_size), mode="wrap")
            presynaptic, postsynaptic = stimulus.association_batch(dataset, batch)
            network.train_step(presynaptic, postsynaptic)
            step += 1
            if recorder is not None:
                recorder.record(step, network)

        removed = network.cull()
        logger.debug("iteration %d done, culled %d synapses", iteration + 1, removed)

    return step


def evaluate(network: AssociativeNetwork, stimulus: Stimulus, dataset: LabeledDataset) -> float:
    """Percentage of samples whose strongest output neuron matches the label."""
    if len(dataset) == 0:
        raise ValueError("cannot evaluate on an empty dataset")

    correct = 0
    for i in range(len(dataset)):
        image, label = dataset[i]
        response = network.apply_input(stimulus.query(image))
        if stimulus.decode(response) == label:
            correct += 1
    return 100.0 * correct / len(dataset)


def run_configuration(
    params: TrainParams,
    train_set: LabeledDataset,
    test_set: LabeledDataset,
    input_size: int,
    output_size: int,
    rng: np.random.Generator,
    *,
    index: int = 0,
    recorder: Optional[TrainingRecorder] = None,
) -> SweepResult:
    network, stimulus = build_network(params, input_size, output_size, rng, name=f"random graph net {index}")

    t1 = time.perf_counter()
    train_network(network, stimulus, train_set, params.num_iterations, rng, recorder)
    t2 = time.perf_counter()

    accuracy = evaluate(network, stimulus, test_set)
    return SweepResult(
        index=index,
        params=params,
        train_time=t2 - t1,
        accuracy=accuracy,
        num_verts=network.num_neurons,
        num_synapses=network.num_synapses,
    )


class ParameterSweep:
    """Fixed pool of worker threads training one network per configuration."""

    def __init__(
        self,
        train_set: LabeledDataset,
        test_set: LabeledDataset,
        input_size: int,
        output_size: int,
        *,
        num_workers: int = 4,
        seed: Optional[int] = None,
        queue_size: Optional[int] = None,
    ) -> None:
        if num_workers <= 0:
            raise ValueError("num_workers must be a positive integer")

        self.train_set = train_set
        self.test_set = test_set
        self.input_size = int(input_size)
        self.output_size = int(output_size)
        self.num_workers = int(num_workers)
        self.seed = seed
        self.queue_size = queue_size if queue_size is not None else 2 * self.num_workers

        self._results: List[SweepResult] = []
        self._errors: List[BaseException] = []
        self._lock = threading.Lock()

    def _worker(self, jobs: "queue.Queue", total: int) -> None:
        while True:
            job = jobs.get()
            if job is None:
                break

            index, params, seed_seq = job
            logger.info("%s training config %d of %d", threading.current_thread().name, index + 1, total)
            try:
                result = run_configuration(
                    params,
                    self.train_set,
                    self.test_set,
                    self.input_size,
                    self.output_size,
                    np.random.default_rng(seed_seq),
                    index=index,
                )
            except Exception as exc:
                logger.error("config %d failed: %s", index, exc)
                with self._lock:
                    self._errors.append(exc)
                continue

            with self._lock:
                self._results.append(result)
            logger.info(
                "config %d done: accuracy=%.2f%% train_time=%.3fs",
                index, result.accuracy, result.train_time,
            )

    def run(self, configs: Sequence[TrainParams]) -> List[SweepResult]:
        """Train every configuration and return results ordered like ``configs``."""
        self._results = []
        self._errors = []

        seeds = np.random.SeedSequence(self.seed).spawn(len(configs))
        jobs: "queue.Queue" = queue.Queue(maxsize=self.queue_size)

        workers = [
            threading.Thread(target=self._worker, args=(jobs, len(configs)), name=f"sweep-worker-{i}")
            for i in range(self.num_workers)
        ]
        for worker in workers:
            worker.start()

        logger.info("beginning parameter sweep: %d jobs on %d workers", len(configs), self.num_workers)
        for index, (params, seed_seq) in enumerate(zip(configs, seeds)):
            jobs.put((index, params, seed_seq))
        for _ in workers:
            jobs.put(None)

        for worker in workers:
            worker.join()

        if self._errors:
            raise self._errors[0]

        return sorted(self._results, key=lambda r: r.index)
