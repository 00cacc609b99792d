"""
realtime.py
───────────
Simulated live telemetry.

The mutator is a two-state machine (Static → Live → Static). The periodic
timer itself lives in the UI (a ``dcc.Interval``); every ``start()`` hands
out a new timer generation and ``tick()`` only acts for the current one, so a
tick that was already in flight when the timer was replaced or canceled is
dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import MutableSequence, Optional

import numpy as np

from .config import DEFAULT_TICK_MS
from .data.generate import round_usage
from .models import Entity, EntityKind, entity_kind

logger = logging.getLogger(__name__)


class LiveState(str, Enum):
    STATIC = "static"
    LIVE   = "live"


@dataclass(frozen=True)
class Perturbation:
    floor:  float
    spread: float


PERTURBATIONS: dict[EntityKind, Perturbation] = {
    EntityKind.HOUSE: Perturbation(floor=5.0,   spread=10.0),
    EntityKind.ZONE:  Perturbation(floor=200.0, spread=300.0),
}


def perturb(usage: float, kind: EntityKind, draw: float) -> float:
    """One fluctuation step; *draw* is a unit random in [0, 1)."""
    p = PERTURBATIONS[kind]
    return round_usage(max(p.floor, usage + (draw - 0.5) * p.spread))


def perturb_collection(entities: MutableSequence[Entity], rng: np.random.Generator) -> int:
    """Rewrite every entity's usage in place. Returns how many were touched."""
    for entity in entities:
        entity.usage = perturb(entity.usage, entity_kind(entity), float(rng.random()))
    return len(entities)


class RealTimeMutator:
    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        interval_ms: int = DEFAULT_TICK_MS,
    ):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self._rng        = rng if rng is not None else np.random.default_rng()
        self.interval_ms = interval_ms
        self.state       = LiveState.STATIC
        self._generation = 0
        self._active: Optional[int] = None
        self.ticks       = 0

    # ── Timer lifecycle ───────────────────────────────────────────────────────

    @property
    def is_live(self) -> bool:
        return self.state is LiveState.LIVE

    @property
    def generation(self) -> Optional[int]:
        """Generation of the running timer, or None while Static."""
        return self._active

    @property
    def active_timers(self) -> int:
        return 0 if self._active is None else 1

    def start(self) -> int:
        """Go Live with a fresh timer generation, replacing any running one."""
        if self._active is not None:
            logger.debug("Replacing timer generation %d", self._active)
        self._generation += 1
        self._active = self._generation
        self.state   = LiveState.LIVE
        logger.info("Live mode on (timer %d, every %d ms)", self._active, self.interval_ms)
        return self._active

    def stop(self) -> None:
        if self._active is None:
            return
        logger.info("Live mode off (timer %d canceled)", self._active)
        self._active = None
        self.state   = LiveState.STATIC

    def toggle(self) -> LiveState:
        if self.is_live:
            self.stop()
        else:
            self.start()
        return self.state

    # ── Ticks ─────────────────────────────────────────────────────────────────

    def tick(self, collection: MutableSequence[Entity], generation: Optional[int] = None) -> bool:
        """
        Perturb *collection* if this tick belongs to the running timer.

        *generation* identifies the timer that fired; None means "the current
        one". Returns False, and mutates nothing, for ticks of a canceled or
        replaced timer.
        """
        if self._active is None:
            return False
        if generation is not None and generation != self._active:
            logger.debug("Dropping stale tick from timer %s", generation)
            return False
        touched = perturb_collection(collection, self._rng)
        self.ticks += 1
        logger.debug("Tick %d rewrote %d entities", self.ticks, touched)
        return True
