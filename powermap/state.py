"""
state.py
────────
Dashboard state shared by every callback: the two collections, view mode,
search term, selection, layer visibility and the live-mode mutator.

Callbacks can run on the web server's worker threads, so every public method
takes ``self.lock``; a tick's rewrite therefore always lands before the
render that reads it.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Optional, Sequence

import numpy as np

from .data.generate import generate_houses, generate_zones
from .models import Entity, EntityKind, House, ViewMode, Zone, entity_kind
from .realtime import RealTimeMutator
from .scoring.classify import Bucket, bucket_for

SEARCH_RESULT_LIMIT = 8


def matches(entity: Entity, term: str) -> bool:
    """Case-insensitive substring match on the entity's search fields."""
    needle = term.lower()
    return any(needle in field.lower() for field in entity.search_fields())


def filter_entities(entities: Sequence[Entity], term: str) -> list[Entity]:
    if not term:
        return list(entities)
    return [e for e in entities if matches(e, term)]


class DashboardState:
    def __init__(
        self,
        houses: list[House],
        zones: list[Zone],
        view_mode: ViewMode = ViewMode.ZONES,
        mutator: Optional[RealTimeMutator] = None,
    ):
        self.houses         = houses
        self.zones          = zones
        self.view_mode      = ViewMode.parse(view_mode)
        self.search_term    = ""
        self.selected_house: Optional[House] = None
        self.selected_zone:  Optional[Zone]  = None
        self.show_layer     = True
        self.mutator        = mutator if mutator is not None else RealTimeMutator()
        self.lock           = threading.RLock()

    @classmethod
    def generate(cls, seed: Optional[int] = None, tick_ms: Optional[int] = None) -> "DashboardState":
        """Fresh synthetic city; one seed drives generation and live ticks."""
        rng = np.random.default_rng(seed)
        houses = generate_houses(rng)
        zones  = generate_zones(rng)
        mutator = RealTimeMutator(rng) if tick_ms is None else RealTimeMutator(rng, tick_ms)
        return cls(houses, zones, mutator=mutator)

    # ── Collections ───────────────────────────────────────────────────────────

    def collection(self, mode: Optional[ViewMode] = None) -> list[Entity]:
        mode = self.view_mode if mode is None else ViewMode.parse(mode)
        return self.houses if mode is ViewMode.HOUSES else self.zones

    def find(self, entity_id: Optional[str]) -> Optional[Entity]:
        if not entity_id:
            return None
        with self.lock:
            for entity in self.collection():
                if entity.id == entity_id:
                    return entity
        return None

    # ── View mode / search / layer ────────────────────────────────────────────

    def set_view_mode(self, mode) -> None:
        with self.lock:
            self.view_mode = ViewMode.parse(mode)

    def set_search_term(self, term: Optional[str]) -> None:
        with self.lock:
            self.search_term = term or ""

    def filter(self, term: Optional[str] = None) -> list[Entity]:
        """Active collection narrowed by *term* (default: the current term)."""
        with self.lock:
            term = self.search_term if term is None else term
            return filter_entities(self.collection(), term)

    def filtered(self) -> list[Entity]:
        return self.filter()

    def search_results(self, limit: int = SEARCH_RESULT_LIMIT) -> list[Entity]:
        """Matches listed under the search box; nothing while the box is empty."""
        with self.lock:
            if not self.search_term:
                return []
            return self.filter()[:limit]

    def toggle_layer(self) -> bool:
        with self.lock:
            self.show_layer = not self.show_layer
            return self.show_layer

    # ── Selection ─────────────────────────────────────────────────────────────

    def select(self, entity: Optional[Entity]) -> None:
        """Select *entity* and drop the other kind's selection; None clears both."""
        with self.lock:
            if entity is None:
                self.selected_house = None
                self.selected_zone  = None
                return
            kind = entity_kind(entity)
            if kind is EntityKind.HOUSE:
                self.selected_house = entity
                self.selected_zone  = None
            else:
                self.selected_zone  = entity
                self.selected_house = None

    def select_by_id(self, entity_id: Optional[str]) -> Optional[Entity]:
        entity = self.find(entity_id)
        self.select(entity)
        return entity

    def pick_search_result(self, entity_id: str) -> Optional[Entity]:
        """Select a search hit and clear the search box."""
        with self.lock:
            entity = self.select_by_id(entity_id)
            self.search_term = ""
            return entity

    @property
    def selected(self) -> Optional[Entity]:
        """Selection of the active kind; a stale other-kind selection is ignored."""
        with self.lock:
            if self.view_mode is ViewMode.HOUSES:
                return self.selected_house
            return self.selected_zone

    # ── Live mode ─────────────────────────────────────────────────────────────

    def toggle_live(self) -> bool:
        with self.lock:
            self.mutator.toggle()
            return self.mutator.is_live

    def tick(self, generation: Optional[int] = None) -> bool:
        """Perturb whichever collection is displayed right now."""
        with self.lock:
            return self.mutator.tick(self.collection(), generation)

    # ── Summary ───────────────────────────────────────────────────────────────

    def summary(self) -> dict:
        """Count, total, mean and per-bucket counts for the active collection."""
        with self.lock:
            entities = self.collection()
            kind     = self.view_mode.kind
            usages   = np.array([e.usage for e in entities], dtype=np.float64)
            buckets  = Counter(bucket_for(u, kind) for u in usages)
            return {
                "count":   len(entities),
                "total":   round(float(usages.sum()), 1) if len(usages) else 0.0,
                "mean":    round(float(usages.mean()), 1) if len(usages) else 0.0,
                "buckets": {b.value: buckets.get(b, 0) for b in Bucket},
            }
