import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from ftwt.problems import simple_cross
from ftwt.recorder import TrainingRecorder
from ftwt.visualization import Visualization


def make_recorder() -> TrainingRecorder:
    network = simple_cross(num_iters=3).network
    recorder = TrainingRecorder()
    for step in range(1, 4):
        network.train_step([[(0, 1.0)]], [[(3, 1.0)]])
        recorder.record(step, network)
    return recorder


def test_recorder_collects_statistics() -> None:
    recorder = make_recorder()

    assert len(recorder) == 3
    assert recorder.synapse_counts == [8, 8, 8]
    assert all(0.0 < m <= x for m, x in zip(recorder.mean_weights, recorder.max_weights))


def test_recorder_save_round_trip(tmp_path) -> None:
    recorder = make_recorder()
    path = tmp_path / "history.npz"

    recorder.save(str(path))

    with np.load(path) as data:
        assert data["steps"].tolist() == [1, 2, 3]
        np.testing.assert_allclose(data["mean_weights"], recorder.mean_weights)


def test_plots_return_figures() -> None:
    viz = Visualization()
    result = simple_cross(num_iters=2)

    figures = [
        viz.plot_synapse_matrix(result.network.synapses, show=False),
        viz.plot_weight_histogram(result.network.synapses, bins=5, show=False),
        viz.plot_training_history(make_recorder(), show=False),
        viz.plot_response(result.response_0, show=False),
        viz.plot_response(result.response_0, outputs=[2, 3], show=False),
    ]

    assert all(fig is not None for fig in figures)
    assert len(figures[2].axes) == 2
    for fig in figures:
        plt.close(fig)
