from __future__ import annotations

import argparse
import pathlib

import numpy as np

from ftwt.config import SweepGrid, TrainParams
from ftwt.datasets import make_prototype_dataset
from ftwt.log import setup_logging
from ftwt.problems import PROBLEMS, default_sweep_grid, feedforward, random_graph_sweep, simple_cross
from ftwt.recorder import TrainingRecorder
from ftwt.sweep import run_configuration


def run_list(args: argparse.Namespace) -> None:
    print("Available problems:\n")
    for name, desc in PROBLEMS.items():
        print(f"{name}: {desc}")


def run_simple_cross(args: argparse.Namespace) -> bool:
    result = simple_cross(num_iters=args.iterations, learn_rate=args.learn_rate)
    print(result.network.format(max_entries=None))
    print(f"[simple_cross] input [1,0,0,0] -> {np.round(result.response_0, 4).tolist()}")
    print(f"[simple_cross] input [0,1,0,0] -> {np.round(result.response_1, 4).tolist()}")
    print(f"[simple_cross] crossed: {result.crossed}")
    return result.crossed


def _dataset_split(args: argparse.Namespace, rng: np.random.Generator):
    per_class = args.train_per_class + args.test_per_class
    dataset = make_prototype_dataset(args.classes, args.input_size, per_class, rng=rng)
    return dataset.split(args.train_per_class / per_class)


def run_train(args: argparse.Namespace) -> float:
    neurons = args.input_size + args.classes
    params = TrainParams(
        num_iterations=args.iterations,
        batch_size=args.batch_size,
        learn_rate=args.learn_rate,
        cull_thresh=args.cull_thresh,
        min_verts=neurons,
        max_verts=neurons + args.extra_verts,
        edge_probability=args.edge_probability,
    )
    rng = np.random.default_rng(args.seed)
    train_set, test_set = _dataset_split(args, rng)

    recorder = TrainingRecorder()
    result = run_configuration(params, train_set, test_set, args.input_size, args.classes, rng, recorder=recorder)
    print(f"[train] verts={result.num_verts} synapses={result.num_synapses}")
    print(f"[train] train time={result.train_time:.3f}s accuracy={result.accuracy:.2f}%")

    if args.record is not None:
        recorder.save(str(args.record))
        print(f"[train] statistics saved to {args.record}")
    if args.plot:
        from ftwt.visualization import Visualization

        Visualization().plot_training_history(recorder)
    return result.accuracy


def run_feedforward(args: argparse.Namespace) -> float:
    result = feedforward(
        num_classes=args.classes,
        input_size=args.input_size,
        train_per_class=args.train_per_class,
        test_per_class=args.test_per_class,
        num_iterations=args.iterations,
        batch_size=args.batch_size,
        learn_rate=args.learn_rate,
        cull_threshold=args.cull_thresh,
        seed=args.seed,
    )
    print(f"[feedforward] synapses={result.network.num_synapses}")
    print(f"[feedforward] train time={result.train_time:.3f}s accuracy={result.accuracy:.2f}%")
    return result.accuracy


def run_sweep(args: argparse.Namespace) -> None:
    grid = default_sweep_grid(args.input_size, args.classes)
    grid = SweepGrid(
        base=grid.base,
        num_iterations=args.sweep_iterations or grid.num_iterations,
        batch_size=args.sweep_batch_sizes or grid.batch_size,
        edge_probability=args.sweep_edge_probs or grid.edge_probability,
        learn_rate=args.sweep_learn_rates or grid.learn_rate,
    )
    print(f"[sweep] beginning parameter sweep. Number of jobs = {len(grid)}")

    results = random_graph_sweep(
        grid,
        num_classes=args.classes,
        input_size=args.input_size,
        train_per_class=args.train_per_class,
        test_per_class=args.test_per_class,
        num_workers=args.workers,
        seed=args.seed,
    )
    for result in results:
        for key, value in result.params.to_dict().items():
            print(f"{key:<17}= {value:g}")
        print(f"{'train time':<17}= {result.train_time:g}")
        print(f"{'accuracy':<17}= {result.accuracy:g}\n")


MODES = {
    "list": run_list,
    "simple_cross": run_simple_cross,
    "feedforward": run_feedforward,
    "train": run_train,
    "sweep": run_sweep,
}


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(description="Fire-together-wire-together associative network runner")
    parser.add_argument("--mode", choices=list(MODES), default="list", help="Select run mode.")
    parser.add_argument("--seed", type=int, default=None, help="Root random seed.")
    parser.add_argument("--log-level", default="INFO", help="Logging level, e.g. DEBUG or INFO.")
    parser.add_argument("--log-file", type=pathlib.Path, default=None, help="Also append log records to this file.")

    parser.add_argument("--iterations", type=int, default=10, help="Training iterations (passes over the data).")
    parser.add_argument("--learn-rate", type=float, default=0.01)
    parser.add_argument("--batch-size", type=int, default=25)
    parser.add_argument("--cull-thresh", type=float, default=1e-8)
    parser.add_argument("--edge-probability", type=float, default=0.3)
    parser.add_argument("--extra-verts", type=int, default=50, help="Random graph may add up to this many hidden verts.")

    parser.add_argument("--classes", type=int, default=10)
    parser.add_argument("--input-size", type=int, default=64)
    parser.add_argument("--train-per-class", type=int, default=50)
    parser.add_argument("--test-per-class", type=int, default=10)

    parser.add_argument("--workers", type=int, default=4, help="Sweep worker threads.")
    parser.add_argument("--sweep-iterations", type=int, nargs="+", default=None)
    parser.add_argument("--sweep-batch-sizes", type=int, nargs="+", default=None)
    parser.add_argument("--sweep-edge-probs", type=float, nargs="+", default=None)
    parser.add_argument("--sweep-learn-rates", type=float, nargs="+", default=None)

    parser.add_argument("--record", type=pathlib.Path, default=None, help="Save per-step training statistics (.npz).")
    parser.add_argument("--plot", action="store_true", help="Plot the training history after a train run.")
    args = parser.parse_args(argv)

    setup_logging(args.log_level.upper(), None if args.log_file is None else str(args.log_file))

    MODES[args.mode](args)


if __name__ == "__main__":
    main()
