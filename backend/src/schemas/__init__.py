"""API schemas package"""

from .photo import (
    Priority,
    PhotoRecord,
    BoundingBox,
    SelectedRegion,
    FilterState,
    FilterUpdate,
    Jurisdiction,
    MapCenter,
)

__all__ = [
    "Priority",
    "PhotoRecord",
    "BoundingBox",
    "SelectedRegion",
    "FilterState",
    "FilterUpdate",
    "Jurisdiction",
    "MapCenter",
]
