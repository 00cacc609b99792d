from .models import Bounds, Entity, EntityKind, House, ViewMode, Zone
from .scoring import Bucket, UsageStyle, classify, legend_entries
from .data import generate_dataset, generate_houses, generate_zones
from .realtime import LiveState, RealTimeMutator
from .state import DashboardState

__version__ = "0.1.0"

__all__ = [
    # Entities
    "Bounds",
    "Entity",
    "EntityKind",
    "House",
    "ViewMode",
    "Zone",
    # Classification
    "Bucket",
    "UsageStyle",
    "classify",
    "legend_entries",
    # Generation
    "generate_dataset",
    "generate_houses",
    "generate_zones",
    # Live mode & state
    "LiveState",
    "RealTimeMutator",
    "DashboardState",
]
