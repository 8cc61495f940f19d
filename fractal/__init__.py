"""Public API for escape-time fractal rendering."""

from .evaluator import ComplexPoint, Mode, bind, compute_iterations, compute_iterations_batch
from .renderer import FrameParameters, draw, partition, plane_coordinates, to_grayscale
from .session import (
    CloseRequested,
    KeyPressed,
    RedrawRequested,
    RenderSession,
    SessionConfig,
)
from .view import ViewState, ZoomController

__all__ = [
    "CloseRequested",
    "ComplexPoint",
    "FrameParameters",
    "KeyPressed",
    "Mode",
    "RedrawRequested",
    "RenderSession",
    "SessionConfig",
    "ViewState",
    "ZoomController",
    "bind",
    "compute_iterations",
    "compute_iterations_batch",
    "draw",
    "partition",
    "plane_coordinates",
    "to_grayscale",
]
