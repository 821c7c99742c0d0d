"""Configuration loading utilities."""
from .loader import dump_effective_config, load_tour_config
from .schema import TourConfig

__all__ = ["TourConfig", "load_tour_config", "dump_effective_config"]
