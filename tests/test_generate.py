"""Tests for powermap/data/generate.py"""

import json

import numpy as np
import pytest

from powermap.data.generate import (
    HOUSE_PROFILES,
    QUARTIERS,
    ZONE_CATALOG,
    ZONE_USAGE_RANGES,
    generate_dataset,
    generate_houses,
    generate_zones,
    to_records,
)
from powermap.models import HOUSE_TYPES, ZONE_TYPES, House, Zone

RNG = np.random.default_rng(seed=3)

HOUSES = generate_houses(RNG)
ZONES  = generate_zones(RNG)


def _one_decimal(value):
    return round(value, 1) == value


class TestHouses:
    def test_count(self):
        assert len(HOUSES) == 200
        assert all(isinstance(h, House) for h in HOUSES)

    def test_custom_count(self):
        assert len(generate_houses(np.random.default_rng(0), count=12)) == 12

    def test_invalid_count(self):
        with pytest.raises(ValueError):
            generate_houses(np.random.default_rng(0), count=0)

    def test_ids_unique_and_ordered(self):
        assert [h.id for h in HOUSES] == [f"house-{i}" for i in range(200)]

    def test_usage_within_type_range(self):
        for h in HOUSES:
            lo, hi, _, _ = HOUSE_PROFILES[h.type]
            assert lo <= h.usage <= hi, f"{h.id}: {h.usage} outside [{lo}, {hi})"

    def test_residents_within_type_range(self):
        for h in HOUSES:
            _, _, lo, hi = HOUSE_PROFILES[h.type]
            assert lo <= h.residents <= hi

    def test_usage_one_decimal(self):
        assert all(_one_decimal(h.usage) for h in HOUSES)

    def test_types_known(self):
        assert {h.type for h in HOUSES} <= set(HOUSE_TYPES)

    def test_coordinates_inside_quartier(self):
        bounds = {name: b for name, _, b in QUARTIERS}
        for h in HOUSES:
            assert bounds[h.quartier].contains(*h.coordinates)

    def test_district_matches_quartier(self):
        districts = {name: district for name, district, _ in QUARTIERS}
        for h in HOUSES:
            assert h.district == districts[h.quartier]

    def test_address_format(self):
        for h in HOUSES:
            number, street, *rest = h.address.split(" ")
            assert 1 <= int(number) <= 200
            assert street in ("Rue", "Avenue", "Boulevard", "Impasse", "Place")
            assert " ".join(rest) == h.quartier

    def test_per_resident_usage(self):
        h = HOUSES[0]
        assert h.usage_per_resident == pytest.approx(h.usage / h.residents)


class TestZones:
    def test_catalog_order(self):
        assert [z.name for z in ZONES] == [entry[0] for entry in ZONE_CATALOG]
        assert [z.id for z in ZONES] == [f"zone-{i}" for i in range(10)]
        assert all(isinstance(z, Zone) for z in ZONES)

    def test_usage_within_type_range(self):
        for z in ZONES:
            lo, hi = ZONE_USAGE_RANGES[z.type]
            assert lo <= z.usage <= hi

    def test_usage_one_decimal(self):
        assert all(_one_decimal(z.usage) for z in ZONES)

    def test_types_and_areas(self):
        for z in ZONES:
            assert z.type in ZONE_TYPES
            assert z.area > 0

    def test_density(self):
        z = ZONES[2]
        assert z.density == pytest.approx(z.usage / z.area)


class TestDeterminism:
    def test_same_seed_same_dataset(self):
        a_houses, a_zones = generate_dataset(seed=11)
        b_houses, b_zones = generate_dataset(seed=11)
        assert a_houses == b_houses
        assert a_zones == b_zones

    def test_different_seeds_differ(self):
        a_houses, _ = generate_dataset(seed=1)
        b_houses, _ = generate_dataset(seed=2)
        assert a_houses != b_houses


class TestRecords:
    def test_records_are_json_ready(self):
        records = to_records(HOUSES[:3]) + to_records(ZONES[:3])
        decoded = json.loads(json.dumps(records))
        assert [r["id"] for r in decoded] == [e.id for e in HOUSES[:3] + ZONES[:3]]

    def test_zone_record_bounds(self):
        record = ZONES[0].to_record()
        assert record["kind"] == "zone"
        assert set(record["bounds"]) == {"south", "north", "west", "east"}


class TestExportScript:
    def test_writes_both_files(self, tmp_path):
        import importlib.util
        from pathlib import Path

        script = Path(__file__).resolve().parent.parent / "scripts" / "generate_mock_data.py"
        spec = importlib.util.spec_from_file_location("generate_mock_data", script)
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)

        houses_path, zones_path = module.write_dataset(tmp_path, seed=4)
        houses = json.loads(houses_path.read_text(encoding="utf-8"))
        zones  = json.loads(zones_path.read_text(encoding="utf-8"))
        assert len(houses) == 200 and len(zones) == 10
        assert houses[0]["kind"] == "house"
