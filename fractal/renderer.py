"""Rendering primitives for escape-time frames."""

from __future__ import annotations

import os
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .evaluator import ComplexPoint, Mode, bind, compute_iterations_batch
from .view import ViewState

CHANNELS = 4
OPAQUE = 255


@dataclass(frozen=True)
class FrameParameters:
    """Read-only snapshot of everything a worker needs to fill its range."""

    width: int
    height: int
    scale: float
    constant: ComplexPoint
    max_iteration: int
    samples: int
    mode: Mode
    device: Optional[str] = None


def partition(total: int, parts: int) -> list[range]:
    """Split ``[0, total)`` into at most ``parts`` contiguous disjoint ranges."""

    if total <= 0:
        return []
    parts = max(1, min(int(parts), total))
    base, extra = divmod(total, parts)
    ranges = []
    start = 0
    for k in range(parts):
        stop = start + base + (1 if k < extra else 0)
        ranges.append(range(start, stop))
        start = stop
    return ranges


def plane_coordinates(
    indices: np.ndarray,
    width: int,
    height: int,
    scale: float,
    jitter_x=0.0,
    jitter_y=0.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Map flat pixel indices to plane coordinates.

    Jitter is added in pixel space before scaling, so a jitter of one moves the
    sample a whole pixel.
    """

    indices = np.asarray(indices, dtype=np.int64)
    x = (indices % width).astype(np.float64)
    y = (indices // width).astype(np.float64)
    px = ((x - width / 2.0) + jitter_x) * np.float64(scale)
    py = ((y - height / 2.0) + jitter_y) * np.float64(scale)
    return px, py


def to_grayscale(values: np.ndarray, max_iteration: int) -> np.ndarray:
    """Normalise smoothed counts by ``max_iteration`` into ``uint8`` levels."""

    levels = (np.asarray(values, dtype=np.float64) / max_iteration) * 255.0
    levels = np.nan_to_num(levels, nan=0.0)
    return np.clip(levels, 0.0, 255.0).astype(np.uint8)


def as_pixel_array(buffer, width: int, height: int) -> np.ndarray:
    """Return a writable ``(width*height, 4)`` view onto ``buffer``."""

    array = buffer if isinstance(buffer, np.ndarray) else np.frombuffer(buffer, dtype=np.uint8)
    if array.dtype != np.uint8:
        raise ValueError(f"Pixel buffer must hold uint8 values, got {array.dtype}.")
    if not array.flags.c_contiguous or not array.flags.writeable:
        raise ValueError("Pixel buffer must be contiguous and writable.")
    expected = width * height * CHANNELS
    if array.size != expected:
        raise ValueError(f"Pixel buffer holds {array.size} bytes, expected {expected} for {width}x{height}.")
    return array.reshape(-1, CHANNELS)


def spawn_generators(rng: np.random.Generator, count: int) -> list[np.random.Generator]:
    """Derive ``count`` independent child generators from ``rng``.

    Generators whose bit generator carries no ``SeedSequence`` cannot spawn;
    their children are seeded from draws of the parent instead.
    """

    try:
        return rng.spawn(count)
    except TypeError:
        seeds = rng.integers(0, 2**63 - 1, size=count, dtype=np.int64)
        return [np.random.default_rng(int(seed)) for seed in seeds]


def _validate(view: ViewState, width: int, height: int, samples: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Frame size must be positive, got {width}x{height}.")
    if samples <= 0:
        raise ValueError(f"Samples per pixel must be positive, got {samples}.")
    if not view.scale > 0:
        raise ValueError(f"View scale must be positive, got {view.scale}.")
    if view.max_iteration <= 0:
        raise ValueError(f"max_iteration must be positive, got {view.max_iteration}.")


def render_range(
    params: FrameParameters,
    pixels: np.ndarray,
    indices: range,
    rng: Optional[np.random.Generator] = None,
) -> None:
    """Fill ``pixels``, the slice of the frame holding the pixels in ``indices``.

    Without a generator every sample would land on the pixel corner, so one
    evaluation stands in for all of them and the output is deterministic.
    """

    flat = np.arange(indices.start, indices.stop, dtype=np.int64)
    count = flat.size
    accumulated = np.zeros(count, dtype=np.float64)
    samples = params.samples if rng is not None else 1

    for _ in range(samples):
        if rng is not None:
            jitter_x = rng.random(count)
            jitter_y = rng.random(count)
        else:
            jitter_x = jitter_y = 0.0
        px, py = plane_coordinates(flat, params.width, params.height, params.scale, jitter_x, jitter_y)
        (z_re, z_im), (c_re, c_im) = bind(params.mode, px, py, params.constant)
        accumulated += compute_iterations_batch(z_re, z_im, c_re, c_im, params.max_iteration, device=params.device)

    gray = to_grayscale(accumulated / samples, params.max_iteration)
    pixels[:, 0] = gray
    pixels[:, 1] = gray
    pixels[:, 2] = gray
    pixels[:, 3] = OPAQUE


def draw(
    view: ViewState,
    buffer,
    width: int,
    height: int,
    *,
    samples: int = 1,
    rng: Optional[np.random.Generator] = None,
    mode: Mode = Mode.JULIA,
    workers: Optional[int] = None,
    executor: Optional[Executor] = None,
    device: Optional[str] = None,
) -> bool:
    """Render the view into ``buffer`` if a redraw was requested.

    The frame is split into disjoint index ranges that are filled concurrently;
    every range is joined before returning. Returns True when the buffer was
    rewritten and False when ``view.needs_redraw`` was already cleared.

    ``rng`` jitters each of the ``samples`` evaluations inside its pixel; one
    child generator per range is derived from it with :func:`spawn_generators`.
    Without ``rng`` there is nothing to average and each pixel is evaluated once.
    """

    if not view.needs_redraw:
        return False

    _validate(view, width, height, samples)
    pixels = as_pixel_array(buffer, width, height)

    params = FrameParameters(
        width=int(width),
        height=int(height),
        scale=float(view.scale),
        constant=ComplexPoint(float(view.constant[0]), float(view.constant[1])),
        max_iteration=int(view.max_iteration),
        samples=int(samples),
        mode=mode,
        device=device,
    )

    ranges = partition(width * height, workers or os.cpu_count() or 1)
    generators = spawn_generators(rng, len(ranges)) if rng is not None else [None] * len(ranges)

    def dispatch(pool: Executor) -> None:
        futures = [
            pool.submit(render_range, params, pixels[r.start:r.stop], r, generator)
            for r, generator in zip(ranges, generators)
        ]
        for future in futures:
            future.result()

    if executor is None:
        with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
            dispatch(pool)
    else:
        dispatch(executor)

    view.needs_redraw = False
    return True
