"""Escape-time evaluation with smooth coloring."""

from __future__ import annotations

import enum
import math
from typing import NamedTuple, Optional

import numpy as np
import tensorflow as tf

HORIZON = 4.0


class ComplexPoint(NamedTuple):
    """A point of the complex plane as a pair of doubles."""

    re: float
    im: float


class Mode(enum.Enum):
    """How a pixel's plane coordinate is bound to the iteration."""

    JULIA = "julia"
    MANDELBROT = "mandelbrot"


def bind(mode: Mode, px, py, constant: ComplexPoint):
    """Return ``(z0, c)`` for the plane coordinate ``(px, py)``.

    Works for scalars and NumPy arrays alike. In Julia mode the pixel is the
    starting point and ``constant`` is added at every step; in Mandelbrot mode
    the orbit starts at the origin and the pixel is the added parameter.
    """

    if mode is Mode.JULIA:
        c_re = np.full_like(px, constant.re) if isinstance(px, np.ndarray) else constant.re
        c_im = np.full_like(py, constant.im) if isinstance(py, np.ndarray) else constant.im
        return (px, py), (c_re, c_im)
    zero_re = np.zeros_like(px) if isinstance(px, np.ndarray) else 0.0
    zero_im = np.zeros_like(py) if isinstance(py, np.ndarray) else 0.0
    return (zero_re, zero_im), (px, py)


def _smooth(iteration: int, modulus: float) -> float:
    # log2(0) is -inf, which the max() below maps to a zero correction
    log_modulus = math.log2(modulus) if modulus > 0 else -math.inf
    return iteration - math.log2(max(1.0, log_modulus))


def compute_iterations(z0: ComplexPoint, constant: ComplexPoint, max_iteration: int) -> float:
    """Iterate ``z**2 + constant`` from ``z0`` and return a smoothed count.

    The loop stops once ``|z|**2`` reaches the horizon or after
    ``max_iteration`` steps. The same smoothing term is applied in both cases,
    so points that never escape come back as exactly ``max_iteration``.
    """

    zr, zi = float(z0[0]), float(z0[1])
    cr, ci = float(constant[0]), float(constant[1])
    iteration = 0
    while zr * zr + zi * zi < HORIZON and iteration < max_iteration:
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        iteration += 1

    modulus = math.sqrt(zr * zr + zi * zi)
    return _smooth(iteration, modulus)


_VECTOR = tf.TensorSpec(shape=[None], dtype=tf.float64)


@tf.function
def _escape_step(zr, zi, cr, ci, ns, active):
    """Advance the points that have not escaped yet by one iteration."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int32)
    horizon = tf.constant(HORIZON, dtype=zr.dtype)
    new_active = tf.logical_and(active, zr * zr + zi * zi < horizon)
    return zr, zi, ns, new_active


@tf.function(input_signature=[_VECTOR, _VECTOR, _VECTOR, _VECTOR, tf.TensorSpec(shape=[], dtype=tf.int32)])
def _escape_run(zr, zi, cr, ci, max_iteration):
    """Iterate every point with a TensorFlow while loop and smooth the result."""

    i = tf.constant(0, dtype=tf.int32)
    ns = tf.zeros_like(zr, dtype=tf.int32)
    horizon = tf.constant(HORIZON, dtype=zr.dtype)
    active = zr * zr + zi * zi < horizon

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iteration), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active)
        return i + 1, zr, zi, ns, active

    _, zr, zi, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))

    one = tf.constant(1.0, dtype=zr.dtype)
    log2 = tf.math.log(tf.constant(2.0, dtype=zr.dtype))
    modulus = tf.sqrt(zr * zr + zi * zi)
    log_modulus = tf.math.log(modulus) / log2
    correction = tf.math.log(tf.maximum(one, log_modulus)) / log2
    return tf.cast(ns, tf.float64) - correction


def compute_iterations_batch(
    z0_re: np.ndarray,
    z0_im: np.ndarray,
    c_re: np.ndarray,
    c_im: np.ndarray,
    max_iteration: int,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Vectorised :func:`compute_iterations` over one-dimensional arrays."""

    z0_re = np.ascontiguousarray(z0_re, dtype=np.float64).reshape(-1)
    if z0_re.size == 0:
        return np.zeros(0, dtype=np.float64)

    with tf.device(device if device is not None else "/CPU:0"):
        smooth = _escape_run(
            tf.convert_to_tensor(z0_re),
            tf.convert_to_tensor(np.ascontiguousarray(z0_im, dtype=np.float64).reshape(-1)),
            tf.convert_to_tensor(np.ascontiguousarray(c_re, dtype=np.float64).reshape(-1)),
            tf.convert_to_tensor(np.ascontiguousarray(c_im, dtype=np.float64).reshape(-1)),
            tf.constant(max_iteration, dtype=tf.int32),
        )
    return smooth.numpy()
