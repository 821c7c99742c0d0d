"""Input events and their mapping onto tour transitions.

Views translate raw key presses into the small event vocabulary below and
hand them to :func:`dispatch`.  :func:`run_event_loop` drives a controller from
any iterable of events, which is how scripted sessions and tests replay input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Union

from .controller import TourController
from .state import TourSnapshot
from ..utils.logging import get_logger

log = get_logger("condtour.tour.events")


@dataclass(frozen=True)
class Advance:
    pass


@dataclass(frozen=True)
class Retreat:
    pass


@dataclass(frozen=True)
class JumpTo:
    index: int


@dataclass(frozen=True)
class AdjustBandwidth:
    delta: float


@dataclass(frozen=True)
class Rotate:
    d_theta: float = 0.0
    d_phi: float = 0.0


@dataclass(frozen=True)
class Snapshot:
    pass


@dataclass(frozen=True)
class End:
    pass


Event = Union[Advance, Retreat, JumpTo, AdjustBandwidth, Rotate, Snapshot, End]


def dispatch(controller: TourController, event: Event):
    """Apply ``event`` to ``controller`` and return the transition's result."""
    if isinstance(event, Advance):
        return controller.advance()
    if isinstance(event, Retreat):
        return controller.retreat()
    if isinstance(event, JumpTo):
        return controller.jump_to(event.index)
    if isinstance(event, AdjustBandwidth):
        return controller.adjust_bandwidth(event.delta)
    if isinstance(event, Rotate):
        return controller.rotate(event.d_theta, event.d_phi)
    if isinstance(event, Snapshot):
        return controller.snapshot()
    if isinstance(event, End):
        return controller.end()
    raise TypeError(f"unsupported tour event: {event!r}")


@dataclass
class KeyBindings:
    """Key names (as matplotlib reports them) mapped to events."""

    bandwidth_step: float = 0.01
    rotate_step: float = 2.0
    extra: Dict[str, Event] = field(default_factory=dict)

    def table(self) -> Dict[str, Event]:
        keys: Dict[str, Event] = {
            "]": Advance(),
            "[": Retreat(),
            ".": AdjustBandwidth(self.bandwidth_step),
            ",": AdjustBandwidth(-self.bandwidth_step),
            "left": Rotate(self.rotate_step, 0.0),
            "right": Rotate(-self.rotate_step, 0.0),
            "up": Rotate(0.0, -self.rotate_step),
            "down": Rotate(0.0, self.rotate_step),
            "s": Snapshot(),
            "q": End(),
        }
        keys.update(self.extra)
        return keys

    def lookup(self, key: Optional[str]) -> Optional[Event]:
        if key is None:
            return None
        return self.table().get(key)

    @classmethod
    def from_config(cls, tour_cfg) -> "KeyBindings":
        return cls(bandwidth_step=tour_cfg.bandwidth_step, rotate_step=tour_cfg.rotate_step)


def run_event_loop(
    controller: TourController,
    events: Iterable[Event],
    on_snapshot: Optional[Callable[[TourSnapshot], None]] = None,
) -> int:
    """Feed ``events`` to ``controller`` one at a time.

    Stops after an :class:`End` event or when ``events`` is exhausted; the
    controller is ended in both cases.  Returns the number of events handled.
    """
    handled = 0
    for event in events:
        result = dispatch(controller, event)
        handled += 1
        if isinstance(event, Snapshot) and on_snapshot is not None:
            on_snapshot(result)
        if isinstance(event, End):
            break
    controller.end()
    log.debug("[tour] event loop finished after %d events", handled)
    return handled


__all__ = [
    "Advance",
    "Retreat",
    "JumpTo",
    "AdjustBandwidth",
    "Rotate",
    "Snapshot",
    "End",
    "Event",
    "KeyBindings",
    "dispatch",
    "run_event_loop",
]
