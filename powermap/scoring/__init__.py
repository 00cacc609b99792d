from .classify import (
    BUCKET_COLORS,
    Bucket,
    UsageStyle,
    bucket_for,
    classify,
    house_marker_size,
    legend_entries,
    zone_fill_opacity,
)

__all__ = [
    "BUCKET_COLORS",
    "Bucket",
    "UsageStyle",
    "bucket_for",
    "classify",
    "house_marker_size",
    "legend_entries",
    "zone_fill_opacity",
]
