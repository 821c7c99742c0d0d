"""Distances and similarity weights."""

from .distance import DISTANCE_KINDS, distance
from .kernels import KERNELS
from .weights import SimilarityWeighter, similarity_weights, weights_from_distance

__all__ = [
    "DISTANCE_KINDS",
    "KERNELS",
    "SimilarityWeighter",
    "distance",
    "similarity_weights",
    "weights_from_distance",
]
