"""condtour: conditional tours through the predictor space of fitted models.

Most users only need ``from condtour import condtour``; the engine pieces
(weights, path construction, the tour controller) are importable on their own
and do not touch matplotlib.
"""

from .api import TourSession, condtour, make_path, similarity_weight
from .arrange import arrange_conditions
from .compute.weights import SimilarityWeighter, similarity_weights
from .data.table import Partition, PreparedTable
from .errors import (
    CondtourError,
    EmptyTableError,
    InvalidArgument,
    PartitionError,
    SetupError,
    TourEndedError,
)
from .models import EstimatorPredictor, FunctionPredictor, Predictor
from .path.builder import TourPath, build_path
from .tour.controller import TourController

__all__ = [
    "TourSession",
    "condtour",
    "make_path",
    "similarity_weight",
    "arrange_conditions",
    "SimilarityWeighter",
    "similarity_weights",
    "Partition",
    "PreparedTable",
    "CondtourError",
    "EmptyTableError",
    "InvalidArgument",
    "PartitionError",
    "SetupError",
    "TourEndedError",
    "EstimatorPredictor",
    "FunctionPredictor",
    "Predictor",
    "TourPath",
    "build_path",
    "TourController",
]
