from .state import Camera, TourEvent, TourSnapshot, TourState
from .controller import TourController
from .events import (
    AdjustBandwidth,
    Advance,
    End,
    JumpTo,
    KeyBindings,
    Retreat,
    Rotate,
    Snapshot,
    dispatch,
    run_event_loop,
)

__all__ = [
    "Camera",
    "TourEvent",
    "TourSnapshot",
    "TourState",
    "TourController",
    "AdjustBandwidth",
    "Advance",
    "End",
    "JumpTo",
    "KeyBindings",
    "Retreat",
    "Rotate",
    "Snapshot",
    "dispatch",
    "run_event_loop",
]
