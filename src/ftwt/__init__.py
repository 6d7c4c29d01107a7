"""Sparse Hebbian associative-memory engine."""

from ftwt.config import SweepGrid, TrainParams
from ftwt.matrix import CompressedMatrix, DimensionMismatchError, Triplet, TripletMatrix
from ftwt.network import AssociativeNetwork, TrainingPhase
from ftwt.topology import RandomGraph

__all__ = [
    "AssociativeNetwork",
    "CompressedMatrix",
    "DimensionMismatchError",
    "RandomGraph",
    "SweepGrid",
    "TrainParams",
    "TrainingPhase",
    "Triplet",
    "TripletMatrix",
]

__version__ = "0.1.0"
