import pygame
import pytest

import viewer
from fractal import CloseRequested, KeyPressed, Mode, RedrawRequested


def test_defaults_build_session_config():
    parser = viewer.build_parser()
    config = viewer.config_from_options(parser.parse_args([]), parser)

    assert (config.width, config.height) == (960, 540)
    assert config.max_iteration == 500
    assert config.samples == 16
    assert config.constant == (-0.8, 0.156)
    assert config.initial_scale == pytest.approx(1.0 / 270.0)
    assert config.mode is Mode.JULIA
    assert config.fullscreen is False


def test_options_override_config():
    parser = viewer.build_parser()
    opt = parser.parse_args([
        "--width", "320", "--height", "200", "--samples", "1", "--mode", "mandelbrot",
        "--constant-re", "-0.7269", "--constant-im", "0.1889", "--auto-zoom", "--seed", "5",
    ])
    config = viewer.config_from_options(opt, parser)

    assert config.mode is Mode.MANDELBROT
    assert config.constant == (-0.7269, 0.1889)
    assert config.auto_zoom is True
    assert config.seed == 5
    assert config.initial_scale == pytest.approx(0.01)


def test_invalid_options_exit():
    parser = viewer.build_parser()
    with pytest.raises(SystemExit):
        viewer.config_from_options(parser.parse_args(["--samples", "0"]), parser)


def test_translate_event():
    assert viewer.translate_event(pygame.event.Event(pygame.QUIT)) == CloseRequested()
    assert viewer.translate_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_UP)) == KeyPressed("up")
    assert viewer.translate_event(pygame.event.Event(pygame.KEYDOWN, key=pygame.K_KP_MINUS)) == KeyPressed("minus")
    assert viewer.translate_event(pygame.event.Event(pygame.WINDOWEXPOSED)) == RedrawRequested()
    assert viewer.translate_event(pygame.event.Event(pygame.MOUSEMOTION, pos=(0, 0))) is None
