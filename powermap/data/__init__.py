from .generate import (
    HOUSE_PROFILES,
    QUARTIERS,
    ZONE_CATALOG,
    ZONE_USAGE_RANGES,
    generate_dataset,
    generate_houses,
    generate_zones,
    round_usage,
    to_records,
)

__all__ = [
    "HOUSE_PROFILES",
    "QUARTIERS",
    "ZONE_CATALOG",
    "ZONE_USAGE_RANGES",
    "generate_dataset",
    "generate_houses",
    "generate_zones",
    "round_usage",
    "to_records",
]
