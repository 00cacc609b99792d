"""
generate.py
───────────
Synthetic houses and zones for Brazzaville.

All randomness flows through a ``numpy.random.Generator`` passed by the
caller. ``rng=None`` draws from a fresh unseeded generator, so two calls give
two different cities; pass ``np.random.default_rng(seed)`` to reproduce one.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from ..config import HOUSE_COUNT
from ..models import HOUSE_TYPES, Bounds, Entity, House, Zone

logger = logging.getLogger(__name__)

# ── Neighborhoods (quartiers) ─────────────────────────────────────────────────
# (name, district, bounds)
QUARTIERS: list[tuple[str, str, Bounds]] = [
    ("Centre-ville", "Makélékélé", Bounds(-4.2734, 15.2329, -4.2534, 15.2529)),
    ("Poto-Poto",    "Poto-Poto",  Bounds(-4.2634, 15.2529, -4.2434, 15.2729)),
    ("Bacongo",      "Bacongo",    Bounds(-4.2934, 15.2229, -4.2734, 15.2429)),
    ("Moungali",     "Moungali",   Bounds(-4.2534, 15.2629, -4.2334, 15.2829)),
    ("Ouenzé",       "Ouenzé",     Bounds(-4.2334, 15.2729, -4.2134, 15.2929)),
    ("Talangaï",     "Talangaï",   Bounds(-4.2134, 15.2829, -4.1934, 15.3029)),
    ("Mfilou",       "Mfilou",     Bounds(-4.3134, 15.2029, -4.2934, 15.2229)),
    ("Madibou",      "Madibou",    Bounds(-4.2834, 15.2729, -4.2634, 15.2929)),
]

STREET_TYPES = ("Rue", "Avenue", "Boulevard", "Impasse", "Place")

# type → (usage low, usage high, residents low, residents high); usage is
# drawn from [low, high), residents from [low, high] inclusive
HOUSE_PROFILES: dict[str, tuple[float, float, int, int]] = {
    "apartment": (15.0,  50.0, 2, 5),
    "house":     (25.0,  70.0, 3, 7),
    "villa":     (50.0, 130.0, 4, 9),
}

# ── Zones ─────────────────────────────────────────────────────────────────────
# (name, center, bounds, type, district, description, area km²)
ZONE_CATALOG: list[tuple[str, tuple[float, float], Bounds, str, str, str, float]] = [
    ("Zone Résidentielle Nord", (-4.24, 15.27),
     Bounds(-4.26, 15.25, -4.22, 15.29),
     "residential", "Moungali",
     "Zone résidentielle dense avec habitations familiales", 2.5),
    ("District Commercial Central", (-4.2634, 15.2429),
     Bounds(-4.2734, 15.2329, -4.2534, 15.2529),
     "commercial", "Makélékélé",
     "Centre d'affaires principal avec bureaux et commerces", 1.8),
    ("Zone Industrielle Sud", (-4.2934, 15.2329),
     Bounds(-4.3134, 15.2129, -4.2734, 15.2529),
     "industrial", "Makélékélé",
     "Zone industrielle avec usines et entrepôts", 4.2),
    ("Quartier Mixte Poto-Poto", (-4.2534, 15.2629),
     Bounds(-4.2634, 15.2529, -4.2434, 15.2729),
     "mixed", "Poto-Poto",
     "Zone mixte résidentielle et commerciale", 1.9),
    ("Zone Administrative", (-4.2734, 15.2529),
     Bounds(-4.2834, 15.2429, -4.2634, 15.2629),
     "administrative", "Centre",
     "Bâtiments gouvernementaux et services publics", 1.2),
    ("Résidentiel Bacongo", (-4.2834, 15.2329),
     Bounds(-4.2934, 15.2229, -4.2734, 15.2429),
     "residential", "Bacongo",
     "Quartier résidentiel traditionnel", 2.1),
    ("Zone Commerciale Ouenzé", (-4.2234, 15.2829),
     Bounds(-4.2334, 15.2729, -4.2134, 15.2929),
     "commercial", "Ouenzé",
     "Centre commercial et marché principal", 1.6),
    ("Résidentiel Talangaï", (-4.2034, 15.2929),
     Bounds(-4.2134, 15.2829, -4.1934, 15.3029),
     "residential", "Talangaï",
     "Zone résidentielle moderne", 2.8),
    ("Zone Mixte Madibou", (-4.2734, 15.2829),
     Bounds(-4.2834, 15.2729, -4.2634, 15.2929),
     "mixed", "Madibou",
     "Zone résidentielle et commerciale", 1.7),
    ("Zone Industrielle Mfilou", (-4.3034, 15.2129),
     Bounds(-4.3234, 15.1929, -4.2834, 15.2329),
     "industrial", "Mfilou",
     "Zone industrielle secondaire", 3.5),
]

# type → [low, high) daily usage in kWh
ZONE_USAGE_RANGES: dict[str, tuple[float, float]] = {
    "residential":    (800.0,  2000.0),
    "commercial":     (1500.0, 4000.0),
    "industrial":     (3000.0, 7000.0),
    "mixed":          (1000.0, 2800.0),
    "administrative": (600.0,  1500.0),
}


# ── Internal helpers ──────────────────────────────────────────────────────────

def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def _pick(rng: np.random.Generator, options):
    return options[int(rng.integers(len(options)))]


def _uniform(rng: np.random.Generator, low: float, high: float) -> float:
    """Draw from [low, high) the way a unit random scaled onto the span does."""
    return low + float(rng.random()) * (high - low)


def round_usage(value: float) -> float:
    return round(float(value), 1)


# ── Public generators ─────────────────────────────────────────────────────────

def generate_houses(
    rng: Optional[np.random.Generator] = None,
    count: int = HOUSE_COUNT,
) -> list[House]:
    """
    Scatter *count* houses over the eight quartiers.

    Each house picks a quartier, a point inside its bounds, and a type; usage
    and resident count come from the type's profile.
    """
    if count <= 0:
        raise ValueError(f"count must be positive, got {count}")
    rng = _rng(rng)

    houses: list[House] = []
    for i in range(count):
        quartier, district, bounds = _pick(rng, QUARTIERS)
        lat = _uniform(rng, bounds.south, bounds.north)
        lng = _uniform(rng, bounds.west, bounds.east)

        house_type = _pick(rng, HOUSE_TYPES)
        street     = _pick(rng, STREET_TYPES)
        number     = int(rng.integers(1, 201))

        usage_lo, usage_hi, res_lo, res_hi = HOUSE_PROFILES[house_type]
        usage     = _uniform(rng, usage_lo, usage_hi)
        residents = int(rng.integers(res_lo, res_hi + 1))

        houses.append(House(
            id=f"house-{i}",
            address=f"{number} {street} {quartier}",
            coordinates=(lat, lng),
            usage=round_usage(usage),
            residents=residents,
            type=house_type,
            quartier=quartier,
            district=district,
        ))

    logger.info("Generated %d houses across %d quartiers", len(houses), len(QUARTIERS))
    return houses


def generate_zones(rng: Optional[np.random.Generator] = None) -> list[Zone]:
    """Instantiate the curated zone catalog with a fresh usage draw per zone."""
    rng = _rng(rng)

    zones: list[Zone] = []
    for index, (name, center, bounds, zone_type, district, description, area) in enumerate(ZONE_CATALOG):
        low, high = ZONE_USAGE_RANGES[zone_type]
        zones.append(Zone(
            id=f"zone-{index}",
            name=name,
            coordinates=center,
            bounds=bounds,
            usage=round_usage(_uniform(rng, low, high)),
            area=area,
            type=zone_type,
            district=district,
            description=description,
        ))

    logger.info("Generated %d zones", len(zones))
    return zones


def generate_dataset(
    seed: Optional[int] = None,
    house_count: int = HOUSE_COUNT,
) -> tuple[list[House], list[Zone]]:
    """Houses and zones drawn from one generator seeded with *seed*."""
    rng = np.random.default_rng(seed)
    return generate_houses(rng, count=house_count), generate_zones(rng)


def to_records(entities: Iterable[Entity]) -> list[dict]:
    """JSON-ready dicts, one per entity, in collection order."""
    return [entity.to_record() for entity in entities]
