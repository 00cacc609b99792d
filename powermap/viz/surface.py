"""
surface.py
──────────
The map surface handle: a registry of point markers and rectangular regions
that compiles to a Plotly ``Scattermap`` figure.

A ``MapSurface`` is owned by exactly one view. Elements are added and removed
by id; ``release()`` drops everything and closes the handle for good.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np
import plotly.graph_objects as go

from ..config import (
    BRAZZAVILLE_CENTER,
    DEFAULT_ZOOM,
    MAP_STYLE,
    MAX_BOUNDS,
    MAX_ZOOM,
    MIN_ZOOM,
)
from ..models import Bounds

logger = logging.getLogger(__name__)

HIGHLIGHT_COLOR = "#FFD700"
_OUTLINE_WIDTH  = 4          # px of halo drawn around a highlighted marker

# Nominal map viewport in pixels, used to turn bounds into a zoom level
_VIEWPORT_PX = (900, 700)
_TILE_PX     = 256


@dataclass
class MarkerSpec:
    element_id: str
    lat:        float
    lon:        float
    color:      str
    size:       float
    opacity:    float = 1.0
    text:       str = ""
    popup:      str = ""
    group:      str = "Markers"
    outline:    Optional[str] = None      # halo color when highlighted
    entity_id:  Optional[str] = None      # reported back on click


@dataclass
class RegionSpec:
    element_id:   str
    bounds:       Bounds
    line_color:   str
    fill_color:   str
    fill_opacity: float
    line_width:   float = 2.0
    line_opacity: float = 0.8
    popup:        str = ""
    name:         str = ""
    entity_id:    Optional[str] = None


Element = Union[MarkerSpec, RegionSpec]


@dataclass
class Viewport:
    lat:  float = BRAZZAVILLE_CENTER["lat"]
    lon:  float = BRAZZAVILLE_CENTER["lon"]
    zoom: float = DEFAULT_ZOOM
    revision: int = 0


def hex_to_rgba(color: str, alpha: float) -> str:
    """'#3B82F6', 0.5 → 'rgba(59,130,246,0.5)'."""
    c = color.lstrip("#")
    if len(c) != 6:
        raise ValueError(f"expected #RRGGBB color, got {color!r}")
    r, g, b = (int(c[i:i + 2], 16) for i in (0, 2, 4))
    return f"rgba({r},{g},{b},{alpha:.3f})"


def zoom_for_bounds(bounds: Bounds, padding_px: int = 20) -> float:
    """Largest zoom at which *bounds* fits the nominal viewport, clamped."""
    width  = max(_VIEWPORT_PX[0] - 2 * padding_px, 1)
    height = max(_VIEWPORT_PX[1] - 2 * padding_px, 1)
    lon_span = max(bounds.east - bounds.west, 1e-9)
    lat_span = max(bounds.north - bounds.south, 1e-9)
    zoom_lon = np.log2(width  * 360.0 / (lon_span * _TILE_PX))
    zoom_lat = np.log2(height * 180.0 / (lat_span * _TILE_PX))
    return float(np.clip(min(zoom_lon, zoom_lat), MIN_ZOOM, MAX_ZOOM))


class MapSurface:
    def __init__(self):
        self._elements: dict[str, Element] = {}
        self._popup: Optional[str] = None
        self.viewport = Viewport()
        self.released = False

    # ── Element bookkeeping ───────────────────────────────────────────────────

    def _check_open(self) -> None:
        if self.released:
            raise RuntimeError("map surface has been released")

    def _add(self, element: Element) -> str:
        self._check_open()
        if element.element_id in self._elements:
            raise ValueError(f"duplicate element id {element.element_id!r}")
        self._elements[element.element_id] = element
        return element.element_id

    def add_marker(self, spec: MarkerSpec) -> str:
        return self._add(spec)

    def add_region(self, spec: RegionSpec) -> str:
        return self._add(spec)

    def remove(self, element_id: str) -> None:
        self._check_open()
        del self._elements[element_id]
        if self._popup == element_id:
            self._popup = None

    def clear(self) -> int:
        """Remove every element; returns how many were removed."""
        self._check_open()
        removed = len(self._elements)
        for element_id in list(self._elements):
            self.remove(element_id)
        return removed

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: str) -> bool:
        return element_id in self._elements

    @property
    def elements(self) -> list[Element]:
        return list(self._elements.values())

    # ── Interaction ───────────────────────────────────────────────────────────

    def on_click(self, element_id: str, entity_id: str) -> None:
        """Report *entity_id* when *element_id* is clicked."""
        self._check_open()
        self._elements[element_id].entity_id = entity_id

    @staticmethod
    def resolve_click(click_data: Optional[dict]) -> Optional[str]:
        """Entity id carried by a ``dcc.Graph`` clickData payload, if any."""
        if not click_data:
            return None
        points = click_data.get("points") or []
        if not points:
            return None
        custom = points[0].get("customdata")
        if isinstance(custom, (list, tuple)):
            custom = custom[0] if custom else None
        return custom or None

    def open_popup(self, element_id: str) -> None:
        self._check_open()
        if element_id not in self._elements:
            raise KeyError(element_id)
        self._popup = element_id

    @property
    def open_popup_id(self) -> Optional[str]:
        return self._popup

    # ── Viewport ──────────────────────────────────────────────────────────────

    def set_view(self, lat: float, lon: float, zoom: float) -> None:
        self._check_open()
        self.viewport = Viewport(lat, lon, float(np.clip(zoom, MIN_ZOOM, MAX_ZOOM)),
                                 self.viewport.revision + 1)

    def fit_bounds(self, bounds: Bounds, padding_px: int = 20) -> None:
        lat, lon = bounds.center
        self.set_view(lat, lon, zoom_for_bounds(bounds, padding_px))

    # ── Release ───────────────────────────────────────────────────────────────

    def release(self) -> None:
        if self.released:
            return
        removed = self.clear()
        self.released = True
        logger.debug("Map surface released (%d elements removed)", removed)

    # ── Figure compilation ────────────────────────────────────────────────────

    def _region_trace(self, r: RegionSpec) -> go.Scattermap:
        ring = r.bounds.corners()
        return go.Scattermap(
            lat=[p[0] for p in ring],
            lon=[p[1] for p in ring],
            mode="lines",
            fill="toself",
            fillcolor=hex_to_rgba(r.fill_color, r.fill_opacity),
            line=dict(color=hex_to_rgba(r.line_color, r.line_opacity), width=r.line_width),
            customdata=[r.entity_id] * len(ring),
            text=[r.popup] * len(ring),
            hovertemplate="%{text}<extra></extra>",
            showlegend=False,
            name=r.name or r.element_id,
        )

    @staticmethod
    def _halo_trace(markers: list[MarkerSpec]) -> go.Scattermap:
        return go.Scattermap(
            lat=[m.lat for m in markers],
            lon=[m.lon for m in markers],
            mode="markers",
            marker=dict(
                size=[m.size + 2 * _OUTLINE_WIDTH for m in markers],
                color=[m.outline for m in markers],
                opacity=1.0,
            ),
            customdata=[m.entity_id for m in markers],
            hoverinfo="skip",
            showlegend=False,
            name="Selection",
        )

    @staticmethod
    def _marker_trace(group: str, markers: list[MarkerSpec]) -> go.Scattermap:
        has_text = any(m.text for m in markers)
        return go.Scattermap(
            lat=[m.lat for m in markers],
            lon=[m.lon for m in markers],
            mode="markers+text" if has_text else "markers",
            marker=dict(
                size=[m.size for m in markers],
                color=[m.color for m in markers],
                opacity=[m.opacity for m in markers],
                allowoverlap=True,
            ),
            text=[m.text for m in markers],
            textfont=dict(color="#ffffff", size=9),
            customdata=[m.entity_id for m in markers],
            hovertext=[m.popup for m in markers],
            hovertemplate="%{hovertext}<extra></extra>",
            showlegend=True,
            name=group,
        )

    def _popup_annotation(self) -> list[dict]:
        element = self._elements.get(self._popup) if self._popup else None
        if element is None or not element.popup:
            return []
        return [dict(
            text=element.popup,
            xref="paper", yref="paper", x=0.99, y=0.99,
            xanchor="right", yanchor="top",
            align="left", showarrow=False,
            bgcolor="rgba(255,255,255,0.95)", bordercolor=HIGHLIGHT_COLOR,
            borderwidth=2, borderpad=8,
            font=dict(color="#1f2937", size=12),
        )]

    def to_figure(self) -> go.Figure:
        self._check_open()
        fig = go.Figure()

        regions = [e for e in self._elements.values() if isinstance(e, RegionSpec)]
        markers = [e for e in self._elements.values() if isinstance(e, MarkerSpec)]

        for region in regions:
            fig.add_trace(self._region_trace(region))

        halos = [m for m in markers if m.outline]
        if halos:
            fig.add_trace(self._halo_trace(halos))

        groups: dict[str, list[MarkerSpec]] = {}
        for m in markers:
            groups.setdefault(m.group, []).append(m)
        for group, members in groups.items():
            fig.add_trace(self._marker_trace(group, members))

        vp = self.viewport
        fig.update_layout(
            map=dict(style=MAP_STYLE,
                     center={"lat": vp.lat, "lon": vp.lon},
                     zoom=vp.zoom,
                     bounds=dict(west=MAX_BOUNDS.west, east=MAX_BOUNDS.east,
                                 south=MAX_BOUNDS.south, north=MAX_BOUNDS.north)),
            margin={"r": 0, "t": 0, "l": 0, "b": 0},
            paper_bgcolor="#0d0d1a",
            legend=dict(bgcolor="rgba(13,13,26,0.88)", font=dict(color="#ccd6f6", size=11),
                        bordercolor="#2a2a4a", borderwidth=1,
                        x=0.01, y=0.01, xanchor="left", yanchor="bottom"),
            uirevision=f"view-{vp.revision}",
            clickmode="event",
            annotations=self._popup_annotation(),
            hoverlabel=dict(bgcolor="#ffffff", bordercolor="#2a2a4a",
                            font=dict(color="#1f2937", size=12)),
        )
        return fig
