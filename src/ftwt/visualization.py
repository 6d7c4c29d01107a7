import matplotlib.pyplot as plt
import numpy as np

from ftwt.matrix import CompressedMatrix
from ftwt.recorder import TrainingRecorder


class Visualization:
    def plot_synapse_matrix(self, matrix: CompressedMatrix, show: bool = True):
        """Scatter of stored entries, coloured by weight."""
        fig, ax = plt.subplots()
        points = ax.scatter(matrix.column_indices, matrix.row_indices(), c=matrix.values, s=4, cmap="viridis")
        fig.colorbar(points, ax=ax, label="Weight")
        ax.set_title(f"Synapses - {matrix.name}")
        ax.set_xlabel("Presynaptic neuron")
        ax.set_ylabel("Postsynaptic neuron")
        ax.set_xlim(-0.5, matrix.m - 0.5)
        ax.set_ylim(matrix.n - 0.5, -0.5)
        if show:
            plt.show()
        return fig

    def plot_weight_histogram(self, matrix: CompressedMatrix, bins: int = 50, show: bool = True):
        fig, ax = plt.subplots()
        ax.hist(matrix.values, bins=bins, color="steelblue")
        ax.set_title(f"Weight distribution - {matrix.name}")
        ax.set_xlabel("Weight")
        ax.set_ylabel("Synapses")
        if show:
            plt.show()
        return fig

    def plot_training_history(self, recorder: TrainingRecorder, show: bool = True):
        data = recorder.as_arrays()
        fig, (ax1, ax2) = plt.subplots(2, 1, sharex=True)

        ax1.plot(data["steps"], data["mean_weights"], label="mean |w|")
        ax1.plot(data["steps"], data["max_weights"], label="max |w|")
        ax1.set_ylabel("Weight")
        ax1.legend()

        ax2.plot(data["steps"], data["synapse_counts"], color="black")
        ax2.set_xlabel("Training step")
        ax2.set_ylabel("Synapses")

        fig.suptitle("Training history")
        if show:
            plt.show()
        return fig

    def plot_response(self, response, outputs=None, show: bool = True):
        """Bar chart of a network response, optionally restricted to the output neurons."""
        response = np.asarray(response)
        labels = np.arange(response.shape[0]) if outputs is None else np.arange(len(outputs))
        values = response if outputs is None else response[np.asarray(outputs)]

        fig, ax = plt.subplots()
        ax.bar(labels, values)
        ax.set_title("Network response")
        ax.set_xlabel("Neuron" if outputs is None else "Label")
        ax.set_ylabel("Activation")
        if show:
            plt.show()
        return fig
