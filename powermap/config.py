"""
config.py
─────────
Runtime settings (environment driven, CLI overridable) and the fixed map
defaults for Brazzaville.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

from .models import Bounds

# ── Map defaults ──────────────────────────────────────────────────────────────
BRAZZAVILLE_CENTER = {"lat": -4.2634, "lon": 15.2429}
DEFAULT_ZOOM       = 11
MIN_ZOOM           = 9
MAX_ZOOM           = 18

# Republic of the Congo; the viewport never leaves it
MAX_BOUNDS = Bounds(south=-5.0, west=11.0, north=-3.0, east=19.0)

MAP_STYLE = "open-street-map"

# ── Real-time defaults ────────────────────────────────────────────────────────
DEFAULT_TICK_MS = 4_000

HOUSE_COUNT = 200


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name}: expected an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    host:      str           = "127.0.0.1"
    port:      int           = 8050
    debug:     bool          = False
    seed:      Optional[int] = None
    tick_ms:   int           = DEFAULT_TICK_MS
    log_level: str           = "INFO"

    def __post_init__(self):
        if self.tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {self.tick_ms}")
        if not 0 < self.port < 65536:
            raise ValueError(f"port out of range: {self.port}")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.environ.get("POWERMAP_HOST", cls.host),
            port=_env_int("POWERMAP_PORT", cls.port),
            debug=_env_bool("POWERMAP_DEBUG", cls.debug),
            seed=_env_int("POWERMAP_SEED", None),
            tick_ms=_env_int("POWERMAP_TICK_MS", DEFAULT_TICK_MS),
            log_level=os.environ.get("POWERMAP_LOG_LEVEL", cls.log_level).upper(),
        )

    def override(self, **changes) -> "Settings":
        """Return a copy with every non-None value in *changes* applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
