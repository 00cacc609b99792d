"""
classify.py
───────────
Usage → severity bucket → map styling. Pure functions, no state.

Thresholds are upper-exclusive: a value sitting exactly on a threshold
belongs to the higher bucket.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import EntityKind


class Bucket(str, Enum):
    LOW       = "low"
    MODERATE  = "moderate"
    HIGH      = "high"
    VERY_HIGH = "veryHigh"


# ── Palette ───────────────────────────────────────────────────────────────────
BUCKET_COLORS: dict[Bucket, str] = {
    Bucket.LOW:       "#3B82F6",  # blue
    Bucket.MODERATE:  "#10B981",  # green
    Bucket.HIGH:      "#F59E0B",  # yellow
    Bucket.VERY_HIGH: "#EF4444",  # red
}

BUCKET_LABELS: dict[Bucket, str] = {
    Bucket.LOW:       "Low",
    Bucket.MODERATE:  "Moderate",
    Bucket.HIGH:      "High",
    Bucket.VERY_HIGH: "Very High",
}

# kWh/day upper bounds for low, moderate, high; anything above is very high
THRESHOLDS: dict[EntityKind, tuple[float, float, float]] = {
    EntityKind.HOUSE: (30.0, 60.0, 90.0),
    EntityKind.ZONE:  (1500.0, 3000.0, 5000.0),
}

HOUSE_BASE_SIZE    = 18.0
HOUSE_SIZE_RANGE   = 12.0
HOUSE_SIZE_USAGE   = 130.0

ZONE_BASE_OPACITY  = 0.3
ZONE_OPACITY_RANGE = 0.5
ZONE_OPACITY_USAGE = 8000.0
ZONE_MAX_OPACITY   = 0.8


@dataclass(frozen=True)
class UsageStyle:
    bucket:  Bucket
    color:   str
    opacity: Optional[float] = None   # zones only
    size:    Optional[float] = None   # houses only


def _thresholds(kind) -> tuple[float, float, float]:
    try:
        return THRESHOLDS[EntityKind(kind)]
    except ValueError:
        raise ValueError(f"unknown entity kind {kind!r}") from None


def bucket_for(usage: float, kind: EntityKind) -> Bucket:
    low, moderate, high = _thresholds(kind)
    if usage < low:
        return Bucket.LOW
    if usage < moderate:
        return Bucket.MODERATE
    if usage < high:
        return Bucket.HIGH
    return Bucket.VERY_HIGH


def house_marker_size(usage: float) -> float:
    """Linear in usage; grows past the nominal 30px above 130 kWh/day."""
    return HOUSE_BASE_SIZE + (usage / HOUSE_SIZE_USAGE) * HOUSE_SIZE_RANGE


def zone_fill_opacity(usage: float) -> float:
    return min(ZONE_BASE_OPACITY + (usage / ZONE_OPACITY_USAGE) * ZONE_OPACITY_RANGE,
               ZONE_MAX_OPACITY)


def classify(usage: float, kind: EntityKind) -> UsageStyle:
    bucket = bucket_for(usage, kind)
    color  = BUCKET_COLORS[bucket]
    if EntityKind(kind) is EntityKind.HOUSE:
        return UsageStyle(bucket=bucket, color=color, size=house_marker_size(usage))
    return UsageStyle(bucket=bucket, color=color, opacity=zone_fill_opacity(usage))


def legend_entries(kind: EntityKind) -> list[tuple[Bucket, str, str]]:
    """
    Legend rows as (bucket, color, label), e.g.
    (Bucket.LOW, "#3B82F6", "Low (0-30 kWh)").
    """
    low, moderate, high = _thresholds(kind)
    ranges = {
        Bucket.LOW:       f"0-{low:g}",
        Bucket.MODERATE:  f"{low:g}-{moderate:g}",
        Bucket.HIGH:      f"{moderate:g}-{high:g}",
        Bucket.VERY_HIGH: f"{high:g}+",
    }
    return [
        (bucket, BUCKET_COLORS[bucket], f"{BUCKET_LABELS[bucket]} ({ranges[bucket]} kWh)")
        for bucket in Bucket
    ]
