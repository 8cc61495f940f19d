from __future__ import annotations

import os
import time
from argparse import ArgumentParser
from dataclasses import dataclass

os.environ.setdefault("TF_CPP_MIN_LOG_LEVEL", "3")

import numpy as np

from fractal import Mode, ViewState, draw

RESOLUTIONS = [(320, 180), (640, 360), (960, 540)]
SAMPLE_COUNTS = [1, 4, 16]


@dataclass
class Measurement:
    width: int
    height: int
    samples: int
    seconds: float

    @property
    def megapixels_per_second(self) -> float:
        megapixels = self.width * self.height * self.samples / 1e6
        return megapixels / self.seconds if self.seconds > 0 else 0.0


def measure(width: int, height: int, samples: int, *, mode: Mode, max_iteration: int, workers: int | None) -> Measurement:
    view = ViewState(scale=1.0 / (height / 2.0), max_iteration=max_iteration)
    buffer = bytearray(width * height * 4)
    rng = np.random.default_rng(0) if samples > 1 else None

    start = time.perf_counter()
    draw(view, buffer, width, height, samples=samples, rng=rng, mode=mode, workers=workers)
    return Measurement(width, height, samples, time.perf_counter() - start)


def main() -> None:
    parser = ArgumentParser(description="Time full-frame draws across resolutions and sample counts.")
    parser.add_argument("--max-iteration", type=int, default=500)
    parser.add_argument("--mode", choices=[mode.value for mode in Mode], default=Mode.JULIA.value)
    parser.add_argument("--workers", type=int, default=None)
    opt = parser.parse_args()

    mode = Mode(opt.mode)
    # Untimed warm-up so graph tracing does not count against the first entry.
    measure(16, 16, 1, mode=mode, max_iteration=opt.max_iteration, workers=opt.workers)

    print("Fractal draw benchmark")
    print("=" * 50)
    for width, height in RESOLUTIONS:
        for samples in SAMPLE_COUNTS:
            result = measure(width, height, samples, mode=mode, max_iteration=opt.max_iteration, workers=opt.workers)
            print(f"{width}x{height}, {samples} samples: {result.seconds:.2f}s ({result.megapixels_per_second:.2f} MP/s)")
    print("=" * 50)


if __name__ == "__main__":
    main()
