"""
map_layers.py
─────────────
Pure builder functions: entity → surface element specs.
No I/O, no global state, fully testable in isolation.
"""

from __future__ import annotations

from typing import Optional, Union

from ..models import Entity, EntityKind, House, Zone, entity_kind
from ..scoring.classify import classify
from .surface import HIGHLIGHT_COLOR, MarkerSpec, RegionSpec

HIDDEN_MARKER_OPACITY = 0.3

SELECTED_GROWTH   = 4       # px added to a selected house marker
SELECTED_OUTLINE  = 4.0
REGION_OUTLINE    = 2.0

ZONE_LABEL_SIZE   = 24

HOUSE_GROUP       = "Houses"
ZONE_LABEL_GROUP  = "Zones"


# ── Popups ────────────────────────────────────────────────────────────────────

def house_popup(house: House) -> str:
    return (
        f"<b>{house.address}</b><br>"
        f"Type: {house.type}<br>"
        f"Quartier: {house.quartier}<br>"
        f"<b>Usage: {house.usage:.1f} kWh/day</b><br>"
        f"Residents: {house.residents}<br>"
        f"Per person: {house.usage_per_resident:.1f} kWh/day"
    )


def zone_popup(zone: Zone) -> str:
    return (
        f"<b>{zone.name}</b><br>"
        f"District: {zone.district}<br>"
        f"Type: {zone.type}<br>"
        f"<b>Usage: {zone.usage:,.1f} kWh/day</b><br>"
        f"Area: {zone.area} km²<br>"
        f"Density: {zone.density:.1f} kWh/km²<br>"
        f"<i>{zone.description}</i>"
    )


def zone_label_text(usage: float) -> str:
    """Compact centroid label, e.g. 3240.5 → '3.2k'."""
    return f"{usage / 1000:.1f}k"


# ── Element builders ──────────────────────────────────────────────────────────

def build_house_marker(house: House, show_layer: bool = True,
                       selected: bool = False) -> MarkerSpec:
    """
    Circular marker sized and colored by usage.

    Hidden layer → dimmed to 0.3 opacity rather than removed, so the houses
    stay clickable. Selected → grown by 4px and ringed in gold.
    """
    style = classify(house.usage, EntityKind.HOUSE)
    size  = style.size + (SELECTED_GROWTH if selected else 0)
    return MarkerSpec(
        element_id=f"{house.id}:marker",
        lat=house.coordinates[0],
        lon=house.coordinates[1],
        color=style.color,
        size=size,
        opacity=1.0 if show_layer or selected else HIDDEN_MARKER_OPACITY,
        text=f"{house.usage:.1f}",
        popup=house_popup(house),
        group=HOUSE_GROUP,
        outline=HIGHLIGHT_COLOR if selected else None,
        entity_id=house.id,
    )


def build_zone_region(zone: Zone, show_layer: bool = True,
                      selected: bool = False) -> RegionSpec:
    style = classify(zone.usage, EntityKind.ZONE)
    return RegionSpec(
        element_id=f"{zone.id}:region",
        bounds=zone.bounds,
        line_color=HIGHLIGHT_COLOR if selected else style.color,
        line_width=SELECTED_OUTLINE if selected else REGION_OUTLINE,
        line_opacity=1.0 if selected else 0.8,
        fill_color=style.color,
        fill_opacity=style.opacity if show_layer else 0.0,
        popup=zone_popup(zone),
        name=zone.name,
        entity_id=zone.id,
    )


def build_zone_label(zone: Zone) -> MarkerSpec:
    style = classify(zone.usage, EntityKind.ZONE)
    return MarkerSpec(
        element_id=f"{zone.id}:label",
        lat=zone.coordinates[0],
        lon=zone.coordinates[1],
        color=style.color,
        size=ZONE_LABEL_SIZE,
        text=zone_label_text(zone.usage),
        popup=zone_popup(zone),
        group=ZONE_LABEL_GROUP,
        entity_id=zone.id,
    )


def build_entity_elements(
    entity: Entity,
    show_layer: bool = True,
    selected: bool = False,
) -> list[Union[MarkerSpec, RegionSpec]]:
    kind = entity_kind(entity)
    if kind is EntityKind.HOUSE:
        return [build_house_marker(entity, show_layer, selected)]
    if kind is EntityKind.ZONE:
        return [build_zone_region(entity, show_layer, selected), build_zone_label(entity)]
    raise TypeError(f"unhandled entity kind {kind!r}")


def popup_element_id(entity: Optional[Entity]) -> Optional[str]:
    """Element whose popup opens when *entity* is selected."""
    if entity is None:
        return None
    kind = entity_kind(entity)
    return f"{entity.id}:marker" if kind is EntityKind.HOUSE else f"{entity.id}:region"
