import numpy as np

from ftwt.config import SweepGrid, TrainParams
from ftwt.problems import (
    PROBLEMS,
    default_sweep_grid,
    feedforward,
    feedforward_synapses,
    random_graph_sweep,
    simple_cross,
)


def test_simple_cross_routes_inputs_to_crossed_outputs() -> None:
    result = simple_cross()

    assert result.crossed
    assert result.response_0[3] > result.response_0[2]
    assert result.response_1[2] > result.response_1[3]
    # inputs have no incoming synapses from themselves
    assert result.response_0[0] == 0.0 and result.response_0[1] == 0.0


def test_simple_cross_keeps_every_synapse() -> None:
    result = simple_cross(num_iters=5)

    assert result.network.num_synapses == 8
    norms = result.network.incoming_norms()
    np.testing.assert_allclose(norms, 1.0)


def test_simple_cross_margin_grows_with_training() -> None:
    short = simple_cross(num_iters=2)
    long = simple_cross(num_iters=20)

    assert long.response_0[3] - long.response_0[2] > short.response_0[3] - short.response_0[2]


def test_default_sweep_grid_sizes_graph_for_stimulus() -> None:
    grid = default_sweep_grid(64, 10)

    assert grid.base.min_verts == 74
    assert grid.base.max_verts == 124
    assert len(grid) == 144


def test_random_graph_sweep_runs_small_grid() -> None:
    base = TrainParams(min_verts=20, max_verts=24, num_iterations=1)
    grid = SweepGrid(base=base, num_iterations=(1,), batch_size=(5,), edge_probability=(0.3, 0.8), learn_rate=(0.1,))

    results = random_graph_sweep(
        grid,
        num_classes=3,
        input_size=12,
        train_per_class=5,
        test_per_class=2,
        num_workers=2,
        seed=1,
    )

    assert [r.index for r in results] == [0, 1]
    assert all(0.0 <= r.accuracy <= 100.0 for r in results)
    assert all(20 <= r.num_verts < 24 for r in results)


def test_feedforward_synapses_connect_inputs_to_outputs() -> None:
    synapses = feedforward_synapses(5, 3, np.random.default_rng(0))

    assert len(synapses) == 15
    assert {(s.row, s.col) for s in synapses} == {(5 + j, i) for i in range(5) for j in range(3)}
    assert all(-0.5 <= s.value < 0.5 for s in synapses)


def test_feedforward_classifies_prototypes_above_chance() -> None:
    result = feedforward(
        num_classes=3,
        input_size=30,
        train_per_class=12,
        test_per_class=6,
        num_iterations=3,
        batch_size=4,
        learn_rate=1.0,
        seed=0,
    )

    assert result.network.num_neurons == 33
    assert result.stimulus.inputs.tolist() == list(range(30))
    assert result.stimulus.outputs.tolist() == [30, 31, 32]
    assert result.accuracy > 60.0


def test_problem_registry() -> None:
    assert set(PROBLEMS) == {"simple_cross", "feedforward", "sweep"}
    assert all(isinstance(desc, str) and desc for desc in PROBLEMS.values())
