import os
import sys
import time
from argparse import ArgumentParser

_VERBOSE_FLAGS = {"--verbose", "-v"}
_cli_verbose = any(arg in _VERBOSE_FLAGS for arg in sys.argv[1:])
_env_log_level = os.environ.get("TF_CPP_MIN_LOG_LEVEL")
_suppress_messages = (not _cli_verbose) and _env_log_level != "0"

if _suppress_messages and _env_log_level is None:
    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "3"
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

VERBOSE = _cli_verbose


def log(message, *args, **kwargs):
    if VERBOSE:
        print(message, *args, **kwargs)


import tensorflow as tf
import pygame

if _suppress_messages:
    tf.get_logger().setLevel("ERROR")
    for handler in tf.get_logger().handlers:
        handler.setLevel("ERROR")

from fractal import (
    CloseRequested,
    ComplexPoint,
    KeyPressed,
    Mode,
    RedrawRequested,
    RenderSession,
    SessionConfig,
)

log("TensorFlow version: %s" % tf.__version__)

KEY_NAMES = {
    pygame.K_UP: "up",
    pygame.K_DOWN: "down",
    pygame.K_SPACE: "space",
    pygame.K_ESCAPE: "escape",
    pygame.K_EQUALS: "equals",
    pygame.K_PLUS: "plus",
    pygame.K_KP_PLUS: "plus",
    pygame.K_MINUS: "minus",
    pygame.K_KP_MINUS: "minus",
}

FPS_LIMIT = 60


def build_parser():
    parser = ArgumentParser(description="Interactive escape-time fractal viewer.")

    parser.add_argument('--width', type=int,
                        dest='width', help='width of the output buffer in pixels',
                        metavar='WIDTH', default=960)

    parser.add_argument('--height', type=int,
                        dest='height', help='height of the output buffer in pixels',
                        metavar='HEIGHT', default=540)

    parser.add_argument('--max-iteration', type=int,
                        dest='max_iteration', help='maximum number of iterations per sample',
                        metavar='MAX_ITERATION', default=500)

    parser.add_argument('--samples', type=int,
                        dest='samples', help='jittered samples averaged per pixel',
                        metavar='SAMPLES', default=16)

    parser.add_argument('--constant-re', type=float,
                        dest='constant_re', help='real part of the Julia constant',
                        metavar='RE', default=-0.8)

    parser.add_argument('--constant-im', type=float,
                        dest='constant_im', help='imaginary part of the Julia constant',
                        metavar='IM', default=0.156)

    parser.add_argument('--scale', type=float,
                        dest='scale', help='initial plane units per pixel (default: 2 / height)',
                        metavar='SCALE', default=None)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='factor applied to the scale by the zoom keys',
                        metavar='ZOOM_FACTOR', default=0.8)

    parser.add_argument('--decay-factor', type=float,
                        dest='decay_factor', help='factor applied to the scale every tick with --auto-zoom',
                        metavar='DECAY_FACTOR', default=0.9)

    parser.add_argument('--auto-zoom', action='store_true',
                        help='Zoom in continuously, redrawing every tick.')

    parser.add_argument('--mode', choices=[mode.value for mode in Mode], default=Mode.JULIA.value,
                        help='Bind pixels as Julia starting points or as Mandelbrot parameters.')

    parser.add_argument('--workers', type=int, default=None,
                        help='Number of worker threads per frame (default: CPU count).')

    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the jitter generator, for reproducible frames.')

    parser.add_argument('--fullscreen', action='store_true',
                        help='Open the viewer fullscreen.')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable verbose logging, including TensorFlow diagnostics.')

    return parser


def config_from_options(opt, parser: ArgumentParser) -> SessionConfig:
    config = SessionConfig(
        width=opt.width,
        height=opt.height,
        max_iteration=opt.max_iteration,
        samples=opt.samples,
        constant=ComplexPoint(opt.constant_re, opt.constant_im),
        scale=opt.scale,
        zoom_factor=opt.zoom_factor,
        decay_factor=opt.decay_factor,
        auto_zoom=bool(opt.auto_zoom),
        mode=Mode(opt.mode),
        workers=opt.workers,
        seed=opt.seed,
        fullscreen=bool(opt.fullscreen),
    )
    try:
        config.validate()
    except ValueError as exc:
        parser.error(str(exc))
    return config


def translate_event(event):
    """Map a pygame event onto a session event, or None when it is irrelevant."""

    if event.type == pygame.QUIT:
        return CloseRequested()
    if event.type == pygame.KEYDOWN:
        return KeyPressed(KEY_NAMES.get(event.key) or pygame.key.name(event.key))
    if event.type in (pygame.VIDEOEXPOSE, pygame.WINDOWEXPOSED):
        return RedrawRequested()
    return None


def open_window(config: SessionConfig):
    flags = pygame.FULLSCREEN | pygame.SCALED if config.fullscreen else 0
    screen = pygame.display.set_mode((config.width, config.height), flags)
    pygame.display.set_caption("Fractal")
    return screen


def present(screen, session: RenderSession) -> None:
    surface = pygame.image.frombuffer(session.buffer, session.size, "RGBA")
    screen.blit(surface, (0, 0))
    pygame.display.flip()


def run(session: RenderSession) -> None:
    screen = open_window(session.config)
    clock = pygame.time.Clock()
    running = True

    while running:
        for event in pygame.event.get():
            translated = translate_event(event)
            if translated is not None and not session.handle(translated):
                running = False
                break
        if not running:
            break

        session.update()

        start_time = time.perf_counter()
        frames_before = session.frames_drawn
        session.handle(RedrawRequested())
        if session.frames_drawn != frames_before:
            log("frame {0}: scale {1:.6g}, {2:.3f}s".format(
                session.frames_drawn, session.view.scale, time.perf_counter() - start_time))

        present(screen, session)
        clock.tick(FPS_LIMIT)


def main():
    parser = build_parser()
    opt = parser.parse_args()

    global VERBOSE
    VERBOSE = bool(opt.verbose)

    config = config_from_options(opt, parser)
    log("Session: {0}".format(config))

    pygame.init()
    try:
        with RenderSession(config) as session:
            run(session)
    except pygame.error as exc:
        print("Presentation failed: {0}".format(exc), file=sys.stderr)
        return 1
    finally:
        pygame.quit()
    return 0


if __name__ == '__main__':
    sys.exit(main())
