"""
map_view.py
───────────
The map view: renders one element set per entity onto the surface it owns.

Every render removes all previous elements before adding new ones, so nothing
from an earlier collection, mode, selection or visibility survives an update.
Use as a context manager to guarantee the surface is released.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import plotly.graph_objects as go

from ..models import Entity, EntityKind, ViewMode, entity_kind
from .map_layers import build_entity_elements, popup_element_id
from .surface import MapSurface, MarkerSpec

logger = logging.getLogger(__name__)


class MapView:
    def __init__(self, surface: Optional[MapSurface] = None):
        self.surface = surface if surface is not None else MapSurface()
        self.renders = 0

    def __enter__(self) -> "MapView":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self.surface.released

    def render(
        self,
        view_mode: ViewMode,
        collection: Sequence[Entity],
        selected: Optional[Entity] = None,
        show_layer: bool = True,
    ) -> go.Figure:
        """
        Redraw *collection* for *view_mode* and return the compiled figure.

        *selected* is ignored unless it is of the kind *view_mode* displays.
        A selected zone pulls the viewport onto its bounds.
        """
        if self.closed:
            raise RuntimeError("cannot render: map view is closed")

        mode = ViewMode.parse(view_mode)
        if selected is not None and entity_kind(selected) is not mode.kind:
            selected = None

        for entity in collection:
            if entity_kind(entity) is not mode.kind:
                raise TypeError(
                    f"{entity.id} is a {entity_kind(entity).value}, "
                    f"but the view shows {mode.value}"
                )

        removed = self.surface.clear()

        for entity in collection:
            is_selected = selected is not None and entity.id == selected.id
            for element in build_entity_elements(entity, show_layer, is_selected):
                if isinstance(element, MarkerSpec):
                    self.surface.add_marker(element)
                else:
                    self.surface.add_region(element)

        if selected is not None:
            popup_id = popup_element_id(selected)
            if popup_id in self.surface:
                self.surface.open_popup(popup_id)
            if mode.kind is EntityKind.ZONE:
                self.surface.fit_bounds(selected.bounds)

        self.renders += 1
        logger.debug("Render %d: %s, %d removed, %d added",
                     self.renders, mode.value, removed, len(self.surface))
        return self.surface.to_figure()

    def close(self) -> None:
        if not self.closed:
            self.surface.release()
            logger.debug("Map view closed after %d renders", self.renders)
