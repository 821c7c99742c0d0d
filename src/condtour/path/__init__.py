"""Tour path construction."""

from .builder import TourPath, build_path, interpolate
from .cluster import Clustering, cluster
from .sequence import SEQUENCERS, sequence

__all__ = ["TourPath", "build_path", "interpolate", "Clustering", "cluster", "SEQUENCERS", "sequence"]
