import numpy as np
import pytest

from ftwt.datasets import ArrayDataset, make_prototype_dataset
from ftwt.stimulus import Stimulus


def make_dataset() -> ArrayDataset:
    images = [
        [1.0, 0.0, 0.5],
        [0.0, 1.0, 0.25],
        [0.2, 0.2, 0.0],
    ]
    return ArrayDataset(images, [0, 1, 1])


def test_array_dataset_validations() -> None:
    with pytest.raises(ValueError):
        ArrayDataset([1.0, 2.0], [0, 1])
    with pytest.raises(ValueError):
        ArrayDataset([[1.0], [2.0]], [0])

    dataset = make_dataset()
    image, label = dataset[1]
    assert len(dataset) == 3
    assert dataset.input_size == 3
    assert dataset.num_classes == 2
    assert image.tolist() == [0.0, 1.0, 0.25]
    assert label == 1


def test_array_dataset_split() -> None:
    head, tail = make_dataset().split(2 / 3)
    assert len(head) == 2
    assert len(tail) == 1
    with pytest.raises(ValueError):
        make_dataset().split(1.0)


def test_prototype_dataset_shape_and_range() -> None:
    dataset = make_prototype_dataset(4, 20, 5, rng=np.random.default_rng(0))

    assert len(dataset) == 20
    assert dataset.input_size == 20
    assert np.bincount(dataset.labels).tolist() == [5, 5, 5, 5]
    assert dataset.images.min() >= 0.0
    assert dataset.images.max() <= 1.0


def test_prototype_dataset_validations() -> None:
    with pytest.raises(ValueError):
        make_prototype_dataset(0, 10, 2)
    with pytest.raises(ValueError):
        make_prototype_dataset(2, 10, 2, active_fraction=0.0)


def test_random_assignment_uses_distinct_neurons() -> None:
    stimulus = Stimulus.random(20, 8, 4, np.random.default_rng(2))

    assert stimulus.input_size == 8
    assert stimulus.output_size == 4
    neurons = np.concatenate([stimulus.inputs, stimulus.outputs])
    assert np.unique(neurons).size == 12
    assert neurons.min() >= 0 and neurons.max() < 20


def test_random_assignment_needs_enough_neurons() -> None:
    with pytest.raises(ValueError):
        Stimulus.random(5, 4, 2)


def test_constructor_validations() -> None:
    with pytest.raises(IndexError):
        Stimulus(4, [0, 1], [4])
    with pytest.raises(ValueError):
        Stimulus(4, [0, 1], [1])


def test_association_batch() -> None:
    stimulus = Stimulus(6, inputs=[5, 0, 2], outputs=[1, 4])
    pre, post = stimulus.association_batch(make_dataset(), [0, 2])

    assert pre == [
        [(5, 1.0), (0, 0.0), (2, 0.5)],
        [(5, 0.2), (0, 0.2), (2, 0.0)],
    ]
    assert post == [[(1, 1.0)], [(4, 1.0)]]


def test_association_batch_rejects_mismatched_samples() -> None:
    stimulus = Stimulus(6, inputs=[5, 0], outputs=[1, 4])
    with pytest.raises(ValueError):
        stimulus.association_batch(make_dataset(), [0])

    stimulus = Stimulus(6, inputs=[5, 0, 2], outputs=[1])
    with pytest.raises(IndexError):
        stimulus.association_batch(make_dataset(), [1])


def test_query_and_decode() -> None:
    stimulus = Stimulus(6, inputs=[5, 0, 2], outputs=[1, 4])

    vector = stimulus.query([1.0, 2.0, 3.0])
    assert vector.tolist() == [2.0, 0.0, 3.0, 0.0, 0.0, 1.0]

    # a second query must not keep values from the first
    assert stimulus.query([0.0, 0.0, 0.0]).tolist() == [0.0] * 6

    assert stimulus.decode([0.0, 0.1, 9.0, 0.0, 0.7, 0.0]) == 1
    assert stimulus.decode([0.0, 0.8, 0.0, 0.0, 0.7, 0.0]) == 0
