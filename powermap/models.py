"""
models.py
─────────
Entity records shown on the map. ``Entity`` is a tagged variant over
``House`` and ``Zone``; ``kind`` is the tag every dispatch site matches on.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import ClassVar, Union


class EntityKind(str, Enum):
    HOUSE = "house"
    ZONE  = "zone"


class ViewMode(str, Enum):
    HOUSES = "houses"
    ZONES  = "zones"

    @property
    def kind(self) -> EntityKind:
        return EntityKind.HOUSE if self is ViewMode.HOUSES else EntityKind.ZONE

    @classmethod
    def parse(cls, value) -> "ViewMode":
        """Accept a ViewMode or its string value; raise ValueError otherwise."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"unknown view mode {value!r}; expected one of "
                f"{[m.value for m in cls]}"
            ) from None


HOUSE_TYPES = ("apartment", "house", "villa")
ZONE_TYPES  = ("residential", "commercial", "industrial", "mixed", "administrative")


@dataclass(frozen=True)
class Bounds:
    """Rectangular lat/lng extent."""

    south: float
    west:  float
    north: float
    east:  float

    @property
    def center(self) -> tuple[float, float]:
        return (self.south + self.north) / 2, (self.west + self.east) / 2

    def contains(self, lat: float, lng: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lng <= self.east

    def corners(self) -> list[tuple[float, float]]:
        """Closed ring SW → NW → NE → SE → SW, as (lat, lng) pairs."""
        return [
            (self.south, self.west),
            (self.north, self.west),
            (self.north, self.east),
            (self.south, self.east),
            (self.south, self.west),
        ]

    def as_dict(self) -> dict:
        return {"south": self.south, "north": self.north,
                "west": self.west, "east": self.east}


@dataclass
class House:
    id:          str
    address:     str
    coordinates: tuple[float, float]
    usage:       float          # kWh/day
    residents:   int
    type:        str
    quartier:    str
    district:    str

    kind: ClassVar[EntityKind] = EntityKind.HOUSE

    @property
    def usage_per_resident(self) -> float:
        return self.usage / self.residents

    @property
    def label(self) -> str:
        return self.address

    def search_fields(self) -> tuple[str, ...]:
        return (self.address, self.quartier, self.district)

    def to_record(self) -> dict:
        return {"kind": self.kind.value, **asdict(self)}


@dataclass
class Zone:
    id:          str
    name:        str
    coordinates: tuple[float, float]
    bounds:      Bounds
    usage:       float          # kWh/day
    area:        float          # km²
    type:        str
    district:    str
    description: str

    kind: ClassVar[EntityKind] = EntityKind.ZONE

    @property
    def density(self) -> float:
        return self.usage / self.area

    @property
    def label(self) -> str:
        return self.name

    def search_fields(self) -> tuple[str, ...]:
        return (self.name, self.district, self.description)

    def to_record(self) -> dict:
        record = asdict(self)
        record["bounds"] = self.bounds.as_dict()
        return {"kind": self.kind.value, **record}


Entity = Union[House, Zone]


def entity_kind(entity: Entity) -> EntityKind:
    """Return the tag of *entity*, rejecting anything outside the variant."""
    if isinstance(entity, House):
        return EntityKind.HOUSE
    if isinstance(entity, Zone):
        return EntityKind.ZONE
    raise TypeError(f"not a House or Zone: {type(entity).__name__}")
