"""Interactive matplotlib viewer for a conditional tour.

The viewer owns three figures (section, condition selectors, diagnostics) and
no tour state.  Key presses and clicks are turned into tour events and
dispatched to the controller; the viewer redraws when the controller notifies
it.  Keys: ``]``/``[`` step along the path, ``.``/``,`` widen or narrow the
bandwidth, arrow keys or a mouse drag on the 3-D section turn the view, ``s``
writes a snapshot and ``q`` ends the tour.  Clicking the "visible
observations" diagnostic jumps to that path position; clicking elsewhere on
the diagnostics figure advances.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np

from ..errors import InvalidArgument
from ..tour.controller import TourController
from ..tour.events import KeyBindings, Snapshot, dispatch
from ..tour.state import TourEvent
from ..utils.logging import get_logger
from .scene import TourFigures, TourScene
from .snapshot import write_snapshot

log = get_logger("condtour.viz")


class TourViewer:
    def __init__(
        self,
        controller: TourController,
        scene: TourScene,
        *,
        bindings: Optional[KeyBindings] = None,
        drag_step: float = 1.0,
        snapshot_dir: str | Path = ".",
        snapshot_prefix: str = "snapshot",
    ) -> None:
        self.controller = controller
        self.scene = scene
        self.bindings = bindings or KeyBindings()
        self.drag_step = float(drag_step)
        self.snapshot_dir = snapshot_dir
        self.snapshot_prefix = snapshot_prefix
        self.snapshots: List[List[Path]] = []
        self._drag_from = None
        self._closed = False

        self.figures: TourFigures = scene.new_figures()
        if scene.use3d:
            # camera angles live in the controller
            self.figures.section_ax.disable_mouse_rotation()
        self._cids = []
        for fig in self.figures.all():
            self._cids.append((fig, fig.canvas.mpl_connect("key_press_event", self._on_key)))
        sfig = self.figures.section_fig
        self._cids.append((sfig, sfig.canvas.mpl_connect("button_press_event", self._on_press)))
        self._cids.append((sfig, sfig.canvas.mpl_connect("motion_notify_event", self._on_drag)))
        self._cids.append((sfig, sfig.canvas.mpl_connect("button_release_event", self._on_release)))
        dfig = self.figures.diagnostics_fig
        self._cids.append((dfig, dfig.canvas.mpl_connect("button_press_event", self._on_click)))

        self._unsubscribe = controller.subscribe(self._on_event)
        self.redraw()
        log.info("[viz] tour viewer ready (plot type %s)", scene.plot_type)

    # ------------------------------------------------------------------
    def redraw(self, section: bool = True, conditions: bool = True, diagnostics: bool = True) -> None:
        c = self.controller
        point = c.conditioning_point
        if section:
            self.scene.draw_section(self.figures, point, c.weights, c.camera)
        if conditions:
            self.scene.draw_conditions(self.figures, point)
        if diagnostics:
            self.scene.draw_diagnostics(
                self.figures, c.max_weights(), c.visible_counts(), c.state.path_index
            )
        for fig in self.figures.all():
            fig.canvas.draw_idle()

    def _on_event(self, controller: TourController, event: TourEvent) -> None:
        if event.kind == "end":
            self.close()
        elif event.kind in ("camera", "bandwidth"):
            self.redraw(conditions=False, diagnostics=False)
        elif event.kind == "matrix":
            self.redraw(conditions=False)
        else:
            self.redraw()

    # ------------------------------------------------------------------
    def save_snapshot(self) -> List[Path]:
        paths = write_snapshot(
            self.scene, self.controller.snapshot(), self.snapshot_dir, self.snapshot_prefix
        )
        self.snapshots.append(paths)
        return paths

    def _on_key(self, event) -> None:
        action = self.bindings.lookup(event.key)
        if action is None or self._closed:
            return
        if isinstance(action, Snapshot):
            self.save_snapshot()
            return
        try:
            dispatch(self.controller, action)
        except InvalidArgument as exc:
            log.warning("[viz] %s ignored: %s", type(action).__name__, exc)

    def _on_click(self, event) -> None:
        if self._closed or event.inaxes is None:
            return
        if event.inaxes is self.figures.counts_ax and event.xdata is not None:
            target = int(round(event.xdata))
            target = max(1, min(target, self.controller.path_length))
            self.controller.jump_to(target)
        else:
            self.controller.advance()

    def _on_press(self, event) -> None:
        if self.scene.use3d and event.inaxes is self.figures.section_ax:
            self._drag_from = (event.x, event.y)

    def _on_drag(self, event) -> None:
        if self._drag_from is None or self._closed:
            return
        x0, y0 = self._drag_from
        dx, dy = event.x - x0, event.y - y0
        if abs(dx) < 1 and abs(dy) < 1:
            return
        self._drag_from = (event.x, event.y)
        self.controller.rotate(-np.sign(dx) * self.drag_step, -np.sign(dy) * self.drag_step)

    def _on_release(self, event) -> None:
        self._drag_from = None

    # ------------------------------------------------------------------
    def show(self, block: bool = True) -> None:
        plt.show(block=block)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._unsubscribe()
        for fig, cid in self._cids:
            fig.canvas.mpl_disconnect(cid)
        self.figures.close()
        log.debug("[viz] tour viewer closed")


__all__ = ["TourViewer"]
