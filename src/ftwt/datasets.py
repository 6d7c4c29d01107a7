"""
Labelled vector datasets consumed by the training harness.

The harness only needs ``len(dataset)`` and ``dataset[i] -> (vector, label)``.
Parsing of image/label files is left to callers; ``ArrayDataset`` adapts
arrays they already hold and ``make_prototype_dataset`` generates a small
synthetic classification problem for demos and tests.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

import numpy as np

__all__ = ["LabeledDataset", "ArrayDataset", "make_prototype_dataset"]


class LabeledDataset(Protocol):
    def __len__(self) -> int: ...

    def __getitem__(self, index: int) -> Tuple[np.ndarray, int]: ...


class ArrayDataset:
    """``(num_samples, input_size)`` images plus integer labels."""

    def __init__(self, images: Sequence[Sequence[float]], labels: Sequence[int]) -> None:
        self.images = np.asarray(images, dtype=np.float64)
        self.labels = np.asarray(labels, dtype=np.int64)

        if self.images.ndim != 2:
            raise ValueError("images must be a 2-d array of shape (num_samples, input_size)")
        if self.labels.shape != (self.images.shape[0],):
            raise ValueError("labels must hold exactly one entry per image")

    def __len__(self) -> int:
        return int(self.images.shape[0])

    def __getitem__(self, index: int) -> Tuple[np.ndarray, int]:
        return self.images[index], int(self.labels[index])

    @property
    def input_size(self) -> int:
        return int(self.images.shape[1])

    @property
    def num_classes(self) -> int:
        return int(self.labels.max()) + 1 if len(self) else 0

    def split(self, fraction: float) -> Tuple["ArrayDataset", "ArrayDataset"]:
        """Split into ``(head, tail)`` at ``fraction`` of the samples."""
        if not 0.0 < fraction < 1.0:
            raise ValueError("fraction must lie in (0, 1)")
        cut = int(round(len(self) * fraction))
        return (
            ArrayDataset(self.images[:cut], self.labels[:cut]),
            ArrayDataset(self.images[cut:], self.labels[cut:]),
        )


def make_prototype_dataset(
    num_classes: int,
    input_size: int,
    samples_per_class: int,
    *,
    active_fraction: float = 0.2,
    noise: float = 0.05,
    rng: Optional[np.random.Generator] = None,
) -> ArrayDataset:
    """
    Noisy copies of one random multi-hot prototype per class, shuffled.

    Each prototype switches on ``active_fraction`` of the inputs. Samples add
    uniform noise of amplitude ``noise`` and are clipped to [0, 1].
    """
    if num_classes <= 0 or input_size <= 0 or samples_per_class <= 0:
        raise ValueError("num_classes, input_size and samples_per_class must be positive")
    if not 0.0 < active_fraction <= 1.0:
        raise ValueError("active_fraction must lie in (0, 1]")

    rng = np.random.default_rng() if rng is None else rng
    active = max(1, int(round(active_fraction * input_size)))

    prototypes = np.zeros((num_classes, input_size))
    for c in range(num_classes):
        prototypes[c, rng.choice(input_size, size=active, replace=False)] = 1.0

    labels = np.repeat(np.arange(num_classes), samples_per_class)
    images = prototypes[labels] + rng.uniform(-noise, noise, size=(labels.shape[0], input_size))
    np.clip(images, 0.0, 1.0, out=images)

    order = rng.permutation(labels.shape[0])
    return ArrayDataset(images[order], labels[order])
