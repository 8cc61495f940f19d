import pytest

from fractal import ViewState, ZoomController


def test_defaults():
    view = ViewState()
    assert view.constant == (-0.8, 0.156)
    assert view.scale == pytest.approx(1.0 / 270.0)
    assert view.max_iteration == 500
    assert view.needs_redraw is True


def test_zoom_in_and_out_are_inverse():
    zoom = ZoomController(zoom_factor=0.5)
    view = ViewState(scale=1.0, needs_redraw=False)

    zoom.zoom_in(view)
    assert view.scale == pytest.approx(0.5)
    assert view.needs_redraw is True

    view.needs_redraw = False
    zoom.zoom_out(view)
    assert view.scale == pytest.approx(1.0)
    assert view.needs_redraw is True


def test_tick_without_auto_zoom_leaves_view_alone():
    view = ViewState(scale=1.0, needs_redraw=False)
    ZoomController(auto_zoom=False).tick(view)
    assert view.scale == 1.0
    assert view.needs_redraw is False


def test_tick_with_auto_zoom_decays_and_forces_redraw():
    zoom = ZoomController(decay_factor=0.9, auto_zoom=True)
    view = ViewState(scale=1.0, needs_redraw=False)

    zoom.tick(view)
    zoom.tick(view)
    assert view.scale == pytest.approx(0.81)
    assert view.needs_redraw is True


@pytest.mark.parametrize(
    "key, expected_scale",
    [("up", 0.8), ("Plus", 0.8), ("equals", 0.8), ("down", 1.25), ("minus", 1.25), ("space", 1.0)],
)
def test_bound_keys(key, expected_scale):
    view = ViewState(scale=1.0, needs_redraw=False)

    assert ZoomController(zoom_factor=0.8).handle_key(view, key) is True
    assert view.scale == pytest.approx(expected_scale)
    assert view.needs_redraw is True


def test_unbound_keys_are_ignored():
    view = ViewState(scale=1.0, needs_redraw=False)

    assert ZoomController().handle_key(view, "q") is False
    assert view == ViewState(scale=1.0, needs_redraw=False)
