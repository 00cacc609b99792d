"""Tests for powermap/viz/app.py and powermap/config.py"""

import dash
import pytest

from powermap.config import Settings
from powermap.models import ViewMode
from powermap.state import DashboardState
from powermap.viz.app import (
    apply_trigger,
    build_detail_panel,
    create_app,
    live_outputs,
    render_outputs,
)
from powermap.viz.map_view import MapView


def _state():
    return DashboardState.generate(seed=31)


def _ids(component):
    """All string/dict ids in a Dash component tree."""
    found = []
    cid = getattr(component, "id", None)
    if cid is not None:
        found.append(cid)
    children = getattr(component, "children", None)
    if children is None:
        return found
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        if hasattr(child, "to_plotly_json"):
            found.extend(_ids(child))
    return found


def _page(app):
    """The layout a browser receives on page load."""
    layout = app.layout
    return layout() if callable(layout) else layout


def _by_id(root, cid):
    return [c for c in _walk(root) if getattr(c, "id", None) == cid][0]


class TestLayout:
    def test_create_app(self):
        with MapView() as view:
            app = create_app(_state(), view)
            assert isinstance(app, dash.Dash)
            ids = _ids(_page(app))
            for expected in ("map", "view-mode", "search-input", "search-results",
                             "layer-btn", "live-btn", "live-interval",
                             "timer-generation", "detail-panel", "legend", "summary"):
                assert expected in ids, f"missing {expected}"

    def test_interval_starts_disabled(self):
        with MapView() as view:
            app = create_app(_state(), view)
            page = _page(app)
            assert view.renders >= 1
            interval = _by_id(page, "live-interval")
            assert interval.disabled is True
            assert interval.interval == 4000

    def test_reload_reflects_current_state(self):
        state = _state()
        with MapView() as view:
            app = create_app(state, view)
            state.set_view_mode(ViewMode.HOUSES)
            state.toggle_live()
            try:
                page = _page(app)
                assert _by_id(page, "view-mode").value == "houses"
                assert _by_id(page, "live-interval").disabled is False
                assert _by_id(page, "live-btn").children == "Live"
                assert _by_id(page, "timer-generation").data == state.mutator.generation
                figure = _by_id(page, "map").figure
                assert "Houses" in [t.name for t in figure.data]
            finally:
                state.mutator.stop()

    def test_each_load_renders_afresh(self):
        with MapView() as view:
            app = create_app(_state(), view)
            _page(app)
            before = view.renders
            _page(app)
            assert view.renders == before + 1

    def test_live_toggle_keeps_interval_count(self):
        with MapView() as view:
            app = create_app(_state(), view)
            outputs = " ".join(app.callback_map)
            assert "live-interval.disabled" in outputs
            assert "live-interval.n_intervals" not in outputs


def _walk(component):
    yield component
    children = getattr(component, "children", None)
    if children is None:
        return
    if not isinstance(children, (list, tuple)):
        children = [children]
    for child in children:
        if hasattr(child, "to_plotly_json"):
            yield from _walk(child)


class TestApplyTrigger:
    def test_view_mode(self):
        state = _state()
        assert apply_trigger(state, "view-mode", view_mode="houses")
        assert state.view_mode is ViewMode.HOUSES

    def test_search(self):
        state = _state()
        assert apply_trigger(state, "search-input", search="Bacongo")
        assert state.search_term == "Bacongo"
        apply_trigger(state, "search-input", search=None)
        assert state.search_term == ""

    def test_layer(self):
        state = _state()
        apply_trigger(state, "layer-btn")
        assert state.show_layer is False

    def test_map_click_selects(self):
        state = _state()
        apply_trigger(state, "map", click_data={"points": [{"customdata": "zone-3"}]})
        assert state.selected is state.zones[3]

    def test_map_click_absent_id_clears(self):
        state = _state()
        state.select(state.zones[0])
        apply_trigger(state, "map", click_data={"points": [{"customdata": "zone-42"}]})
        assert state.selected is None

    def test_search_result_click(self):
        state = _state()
        state.set_search_term("mfilou")
        trigger = {"type": "search-result", "index": "zone-9"}
        assert apply_trigger(state, trigger, clicked=1)
        assert state.selected is state.zones[9]
        assert state.search_term == ""

    def test_search_result_not_clicked(self):
        state = _state()
        trigger = {"type": "search-result", "index": "zone-9"}
        assert apply_trigger(state, trigger, clicked=0) is False
        assert state.selected is None

    def test_tick_requires_live(self):
        state = _state()
        before = [z.usage for z in state.zones]
        assert apply_trigger(state, "live-interval", generation=None) is False
        assert [z.usage for z in state.zones] == before

    def test_tick_current_generation(self):
        state = _state()
        state.toggle_live()
        assert apply_trigger(state, "live-interval", generation=state.mutator.generation)

    def test_stale_tick_dropped(self):
        state = _state()
        state.toggle_live()
        old = state.mutator.generation
        state.toggle_live()
        state.toggle_live()
        assert apply_trigger(state, "live-interval", generation=old) is False
        assert state.mutator.active_timers == 1

    def test_unknown_trigger(self):
        assert apply_trigger(_state(), "nothing") is False


class TestOutputs:
    def test_render_outputs_shape(self):
        state = _state()
        state.set_search_term("zone")
        with MapView() as view:
            figure, details, results, legend, summary, search, layer = render_outputs(state, view)
        assert len(figure.data) == 11
        assert len(results) == 8
        assert search == "zone"
        assert layer == "Hide layer"

    def test_layer_label_flips(self):
        state = _state()
        state.toggle_layer()
        with MapView() as view:
            assert render_outputs(state, view)[-1] == "Show layer"

    def test_live_outputs(self):
        state = _state()
        assert live_outputs(state) == (True, None, "Static", "secondary")
        state.toggle_live()
        disabled, generation, label, _ = live_outputs(state)
        assert disabled is False
        assert generation == state.mutator.generation
        assert label == "Live"

    def test_detail_panel_placeholder(self):
        panel = build_detail_panel(None)
        assert "Click a marker" in panel.children

    def test_detail_panel_house(self):
        state = _state()
        house = state.houses[0]
        panel = build_detail_panel(house)
        assert panel.children[0].children == house.address


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("POWERMAP_HOST", "POWERMAP_PORT", "POWERMAP_DEBUG",
                     "POWERMAP_SEED", "POWERMAP_TICK_MS", "POWERMAP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        s = Settings.from_env()
        assert (s.host, s.port, s.debug, s.seed, s.tick_ms) == ("127.0.0.1", 8050, False, None, 4000)

    def test_env(self, monkeypatch):
        monkeypatch.setenv("POWERMAP_PORT", "9000")
        monkeypatch.setenv("POWERMAP_DEBUG", "true")
        monkeypatch.setenv("POWERMAP_SEED", "12")
        monkeypatch.setenv("POWERMAP_LOG_LEVEL", "debug")
        s = Settings.from_env()
        assert (s.port, s.debug, s.seed, s.log_level) == (9000, True, 12, "DEBUG")

    def test_bad_int(self, monkeypatch):
        monkeypatch.setenv("POWERMAP_PORT", "eighty")
        with pytest.raises(ValueError):
            Settings.from_env()

    def test_override_skips_none(self):
        s = Settings().override(port=9100, seed=None)
        assert s.port == 9100 and s.seed is None

    def test_invalid_tick(self):
        with pytest.raises(ValueError):
            Settings(tick_ms=0)
