"""Tests for powermap/state.py"""

import numpy as np
import pytest

from powermap.data.generate import generate_houses, generate_zones
from powermap.models import ViewMode
from powermap.state import SEARCH_RESULT_LIMIT, DashboardState, filter_entities, matches


def _state(seed=5):
    rng = np.random.default_rng(seed)
    return DashboardState(generate_houses(rng), generate_zones(rng))


class TestFilter:
    def test_bacongo_zones(self):
        state = _state()
        result = state.filter("bacongo")
        assert [z.id for z in result] == ["zone-5"]
        for z in result:
            assert any("bacongo" in f.lower() for f in (z.name, z.district, z.description))

    def test_case_insensitive(self):
        state = _state()
        assert state.filter("BACONGO") == state.filter("bacongo")

    def test_order_preserved(self):
        state = _state()
        state.set_view_mode(ViewMode.HOUSES)
        result = state.filter("poto")
        ids = [int(h.id.split("-")[1]) for h in result]
        assert ids == sorted(ids)
        assert all(h.quartier == "Poto-Poto" for h in result)

    def test_empty_term_is_unfiltered(self):
        state = _state()
        assert state.filter("") == state.zones
        state.set_view_mode("houses")
        assert state.filter("") == state.houses

    def test_house_fields(self):
        state = _state()
        state.set_view_mode(ViewMode.HOUSES)
        house = state.houses[0]
        assert house in state.filter(house.address.upper())
        assert house in state.filter(house.district.lower())

    def test_description_searched_for_zones(self):
        state = _state()
        hits = state.filter("usines")
        assert [z.name for z in hits] == ["Zone Industrielle Sud"]

    def test_no_match(self):
        assert _state().filter("atlantis") == []

    def test_filter_entities_helper(self):
        state = _state()
        assert filter_entities(state.zones, "") == state.zones
        assert matches(state.zones[0], "moungali")


class TestSearchState:
    def test_mode_switch_keeps_term(self):
        state = _state()
        state.set_search_term("bacongo")
        state.set_view_mode(ViewMode.HOUSES)
        assert state.search_term == "bacongo"
        assert all(h.quartier == "Bacongo" for h in state.filtered())

    def test_results_empty_without_term(self):
        assert _state().search_results() == []

    def test_results_limited(self):
        state = _state()
        state.set_view_mode(ViewMode.HOUSES)
        state.set_search_term("a")
        assert len(state.search_results()) == SEARCH_RESULT_LIMIT

    def test_pick_result_selects_and_clears(self):
        state = _state()
        state.set_search_term("talanga")
        hit = state.search_results()[0]
        picked = state.pick_search_result(hit.id)
        assert picked is hit
        assert state.selected is hit
        assert state.search_term == ""

    def test_invalid_view_mode(self):
        with pytest.raises(ValueError):
            _state().set_view_mode("substations")


class TestSelection:
    def test_select_house_clears_zone(self):
        state = _state()
        state.select(state.zones[0])
        state.select(state.houses[0])
        assert state.selected_house is state.houses[0]
        assert state.selected_zone is None

    def test_select_zone_clears_house(self):
        state = _state()
        state.select(state.houses[0])
        state.select(state.zones[3])
        assert state.selected_zone is state.zones[3]
        assert state.selected_house is None

    def test_select_none_clears_both(self):
        state = _state()
        state.select(state.zones[0])
        state.select(None)
        assert state.selected_house is None and state.selected_zone is None

    def test_stale_selection_ignored(self):
        state = _state()
        state.select(state.zones[1])
        state.set_view_mode(ViewMode.HOUSES)
        assert state.selected is None
        state.set_view_mode(ViewMode.ZONES)
        assert state.selected is state.zones[1]

    def test_select_by_absent_id(self):
        state = _state()
        state.select(state.zones[1])
        assert state.select_by_id("zone-99") is None
        assert state.selected is None
        assert state.select_by_id(None) is None

    def test_select_by_id_uses_active_collection(self):
        state = _state()
        assert state.select_by_id("house-3") is None
        state.set_view_mode(ViewMode.HOUSES)
        assert state.select_by_id("house-3") is state.houses[3]

    def test_rejects_non_entity(self):
        with pytest.raises(TypeError):
            _state().select("zone-1")


class TestLayerAndSummary:
    def test_toggle_layer(self):
        state = _state()
        assert state.show_layer is True
        assert state.toggle_layer() is False
        assert state.toggle_layer() is True

    def test_summary(self):
        state = _state()
        summary = state.summary()
        assert summary["count"] == 10
        assert sum(summary["buckets"].values()) == 10
        assert summary["total"] == pytest.approx(sum(z.usage for z in state.zones), abs=0.1)
        assert summary["mean"] == pytest.approx(summary["total"] / 10, abs=0.1)

    def test_summary_follows_view_mode(self):
        state = _state()
        state.set_view_mode(ViewMode.HOUSES)
        assert state.summary()["count"] == 200


class TestGenerate:
    def test_generate_is_seeded(self):
        a = DashboardState.generate(seed=9)
        b = DashboardState.generate(seed=9)
        assert a.houses == b.houses and a.zones == b.zones

    def test_defaults(self):
        state = DashboardState.generate(seed=1, tick_ms=1000)
        assert state.view_mode is ViewMode.ZONES
        assert state.mutator.interval_ms == 1000
        assert len(state.houses) == 200 and len(state.zones) == 10
