"""Explicit ownership of the view state and frame buffer for one viewer run."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from .evaluator import ComplexPoint, Mode
from .renderer import CHANNELS, draw
from .view import DEFAULT_CONSTANT, DEFAULT_MAX_ITERATION, ViewState, ZoomController


@dataclass(frozen=True)
class SessionConfig:
    """Startup configuration of a rendering session."""

    width: int = 960
    height: int = 540
    max_iteration: int = DEFAULT_MAX_ITERATION
    samples: int = 16
    constant: ComplexPoint = DEFAULT_CONSTANT
    scale: Optional[float] = None
    zoom_factor: float = 0.8
    decay_factor: float = 0.9
    auto_zoom: bool = False
    mode: Mode = Mode.JULIA
    workers: Optional[int] = None
    seed: Optional[int] = None
    fullscreen: bool = False

    @property
    def initial_scale(self) -> float:
        if self.scale is not None:
            return float(self.scale)
        return 1.0 / (self.height / 2.0)

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Window size must be positive, got {self.width}x{self.height}.")
        if self.max_iteration <= 0:
            raise ValueError("max_iteration must be positive.")
        if self.samples <= 0:
            raise ValueError("samples must be positive.")
        if self.scale is not None and not self.scale > 0:
            raise ValueError("scale must be positive.")
        if not self.zoom_factor > 0 or not self.decay_factor > 0:
            raise ValueError("zoom and decay factors must be positive.")
        if self.workers is not None and self.workers <= 0:
            raise ValueError("workers must be positive.")


@dataclass(frozen=True)
class RedrawRequested:
    pass


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class CloseRequested:
    pass


Event = Union[RedrawRequested, KeyPressed, CloseRequested]

EXIT_KEYS = frozenset({"escape"})


class RenderSession:
    """Owns the view, the RGBA buffer and the worker pool of one session.

    Updates and draws are applied strictly one after the other from the thread
    that drives the session, so a draw never observes a half-applied update.
    """

    def __init__(self, config: SessionConfig) -> None:
        config.validate()
        self.config = config
        self.view = ViewState(
            constant=ComplexPoint(*config.constant),
            scale=config.initial_scale,
            max_iteration=config.max_iteration,
        )
        self.zoom = ZoomController(
            zoom_factor=config.zoom_factor,
            decay_factor=config.decay_factor,
            auto_zoom=config.auto_zoom,
        )
        self.buffer = bytearray(config.width * config.height * CHANNELS)
        # Jitter only makes sense when several samples are averaged, unless a
        # seed asks for it explicitly.
        jitter = config.samples > 1 or config.seed is not None
        self.rng = np.random.default_rng(config.seed) if jitter else None
        self.frames_drawn = 0
        self.workers = config.workers or os.cpu_count() or 1
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(max_workers=self.workers)

    @property
    def size(self) -> tuple[int, int]:
        return self.config.width, self.config.height

    @property
    def closed(self) -> bool:
        return self._executor is None

    def update(self) -> None:
        """Per-tick autonomous update, applied before the next draw."""

        self.zoom.tick(self.view)

    def draw(self) -> bool:
        if self._executor is None:
            raise RuntimeError("Session is closed.")
        drawn = draw(
            self.view,
            self.buffer,
            self.config.width,
            self.config.height,
            samples=self.config.samples,
            rng=self.rng,
            mode=self.config.mode,
            workers=self.workers,
            executor=self._executor,
        )
        if drawn:
            self.frames_drawn += 1
        return drawn

    def handle(self, event: Event) -> bool:
        """React to a presentation event. Returns False when the session should end."""

        if isinstance(event, CloseRequested):
            return False
        if isinstance(event, KeyPressed):
            if event.key.lower() in EXIT_KEYS:
                return False
            self.zoom.handle_key(self.view, event.key)
        elif isinstance(event, RedrawRequested):
            self.draw()
        return True

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "RenderSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
