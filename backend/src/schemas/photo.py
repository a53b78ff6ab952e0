"""Photo map schemas"""

from typing import Optional, List
from datetime import datetime, timezone
from enum import Enum
from pydantic import BaseModel, Field, model_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so mixed bounds compare"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Priority(str, Enum):
    """Damage triage priority"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class PhotoRecord(BaseModel):
    """Canonical, normalized damage-assessment photo"""

    id: str = Field(..., description="Stable photo identity within one snapshot")
    image_url: str = Field("", description="Preview or full image URL")
    latitude: float = Field(0.0, description="Latitude in degrees")
    longitude: float = Field(0.0, description="Longitude in degrees")
    altitude: Optional[float] = Field(None, description="Altitude in meters")
    direction: Optional[float] = Field(None, description="Compass bearing in degrees (0-360)")
    timestamp: str = Field(..., description="ISO-8601 capture time")
    description: str = Field("", description="Caption or description")
    submitter: str = Field("", description="Name of the submitting user")
    priority: Optional[Priority] = Field(None, description="Triage priority, absent when unset")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")


class BoundingBox(BaseModel):
    """Axis-aligned bounding box in degrees"""

    north: float = Field(..., ge=-90, le=90)
    south: float = Field(..., ge=-90, le=90)
    east: float = Field(..., ge=-180, le=180)
    west: float = Field(..., ge=-180, le=180)

    def contains(self, latitude: float, longitude: float) -> bool:
        """Closed rectangle membership test (edges are inside)"""
        return (
            self.south <= latitude <= self.north
            and self.west <= longitude <= self.east
        )


class SelectedRegion(BaseModel):
    """User-drawn selection on the map"""

    type: Optional[str] = Field(None, description="Drawing shape, rectangle or polygon")
    coordinates: Optional[List[List[float]]] = Field(None, description="Drawn vertices")
    bounds: BoundingBox


class FilterState(BaseModel):
    """Transient filter settings for the visible set"""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    submitter: Optional[str] = None
    priority: Optional[Priority] = None
    search_text: Optional[str] = None

    def active_count(self) -> int:
        """Number of filter fields currently set"""
        return sum(1 for value in self.model_dump().values() if value is not None)


class FilterUpdate(BaseModel):
    """Partial filter update; explicit nulls clear the field"""

    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    submitter: Optional[str] = None
    priority: Optional[Priority] = None
    search_text: Optional[str] = None

    @model_validator(mode="after")
    def validate_date_range(self) -> "FilterUpdate":
        if self.start_date and self.end_date and as_utc(self.start_date) > as_utc(self.end_date):
            raise ValueError("start_date must not be after end_date")
        return self


class Jurisdiction(BaseModel):
    """Geographic scope the caller may view"""

    name: str
    bounds: Optional[BoundingBox] = Field(None, description="None for the unrestricted jurisdiction")

    @property
    def is_unrestricted(self) -> bool:
        return self.bounds is None


class MapCenter(BaseModel):
    """Initial map position for a jurisdiction"""

    lat: float
    lng: float
    zoom: int


class PriorityUpdate(BaseModel):
    """Request schema for setting a photo priority"""

    priority: Priority


class PhotoListResponse(BaseModel):
    """Response schema for the visible photo set"""

    photos: List[PhotoRecord] = Field(..., description="Photos passing all active filters")
    total: int = Field(..., description="Number of photos in the loaded snapshot")
    visible: int = Field(..., description="Number of photos in the visible set")
    is_loading: bool = Field(..., description="True while a load is in progress")
    filter_state: FilterState
    active_filters: int = Field(..., description="Number of filter fields set")
    selected_region: Optional[SelectedRegion] = None
    viewport: Optional[BoundingBox] = None


class ReloadResponse(BaseModel):
    """Outcome of an explicit reload"""

    succeeded: bool
    total: int
    error: Optional[str] = Field(None, description="Diagnostic when the previous snapshot was kept")


class JurisdictionResponse(BaseModel):
    """Caller jurisdiction with its map position"""

    name: str
    unrestricted: bool
    bounds: Optional[BoundingBox] = None
    center: MapCenter
