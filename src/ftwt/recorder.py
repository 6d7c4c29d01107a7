import numpy as np

from ftwt.network import AssociativeNetwork


class TrainingRecorder:
    """Per-step synapse statistics and an ``.npz`` dump for later plotting."""

    def __init__(self):
        self.steps = []
        self.synapse_counts = []
        self.mean_weights = []
        self.max_weights = []
        self.mean_pairings = []

    def __len__(self):
        return len(self.steps)

    def record(self, step: int, network: AssociativeNetwork) -> None:
        weights = np.abs(network.synapses.values)
        pairings = network.pairings.values

        self.steps.append(int(step))
        self.synapse_counts.append(network.num_synapses)
        self.mean_weights.append(float(weights.mean()) if weights.size else 0.0)
        self.max_weights.append(float(weights.max()) if weights.size else 0.0)
        self.mean_pairings.append(float(pairings.mean()) if pairings.size else 0.0)

    def as_arrays(self) -> dict:
        return {
            "steps": np.asarray(self.steps, dtype=np.int64),
            "synapse_counts": np.asarray(self.synapse_counts, dtype=np.int64),
            "mean_weights": np.asarray(self.mean_weights),
            "max_weights": np.asarray(self.max_weights),
            "mean_pairings": np.asarray(self.mean_pairings),
        }

    def save(self, filename: str) -> None:
        np.savez(filename, **self.as_arrays())
