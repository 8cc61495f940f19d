"""View state and the updates applied to it between frames."""

from __future__ import annotations

from dataclasses import dataclass

from .evaluator import ComplexPoint

DEFAULT_CONSTANT = ComplexPoint(-0.8, 0.156)
DEFAULT_HEIGHT = 540
DEFAULT_MAX_ITERATION = 500

ZOOM_IN_KEYS = frozenset({"up", "plus", "equals"})
ZOOM_OUT_KEYS = frozenset({"down", "minus"})
REDRAW_KEYS = frozenset({"space"})


@dataclass
class ViewState:
    """Mutable parameters of the rendering session.

    ``scale`` is the size of one output pixel in plane units. The plane origin
    sits at the centre of the pixel grid.
    """

    constant: ComplexPoint = DEFAULT_CONSTANT
    scale: float = 1.0 / (DEFAULT_HEIGHT / 2.0)
    max_iteration: int = DEFAULT_MAX_ITERATION
    needs_redraw: bool = True


@dataclass(frozen=True)
class ZoomController:
    """Apply zoom nudges and the optional continuous zoom to a view."""

    zoom_factor: float = 0.8
    decay_factor: float = 0.9
    auto_zoom: bool = False

    def request_redraw(self, view: ViewState) -> None:
        view.needs_redraw = True

    def zoom_in(self, view: ViewState) -> None:
        view.scale = float(view.scale * self.zoom_factor)
        view.needs_redraw = True

    def zoom_out(self, view: ViewState) -> None:
        view.scale = float(view.scale / self.zoom_factor)
        view.needs_redraw = True

    def tick(self, view: ViewState) -> None:
        """Autonomous per-frame update; only does something with ``auto_zoom``."""

        if not self.auto_zoom:
            return
        view.scale = float(view.scale * self.decay_factor)
        view.needs_redraw = True

    def handle_key(self, view: ViewState, key: str) -> bool:
        """Apply the action bound to ``key``. Returns False for unbound keys."""

        key = key.lower()
        if key in ZOOM_IN_KEYS:
            self.zoom_in(view)
        elif key in ZOOM_OUT_KEYS:
            self.zoom_out(view)
        elif key in REDRAW_KEYS:
            self.request_redraw(view)
        else:
            return False
        return True
