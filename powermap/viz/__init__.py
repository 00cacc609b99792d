from .map_view import MapView
from .surface import MapSurface, MarkerSpec, RegionSpec

__all__ = ["MapView", "MapSurface", "MarkerSpec", "RegionSpec"]
