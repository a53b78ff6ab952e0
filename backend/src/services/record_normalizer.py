"""Normalization of heterogeneous upstream photo documents into PhotoRecords"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from src.schemas.photo import PhotoRecord, Priority
from src.services.errors import FormatError

logger = logging.getLogger(__name__)


# Ordered upstream aliases per canonical field; first non-empty value wins
ID_FIELDS = ("id", "ID", "uuid", "signature")
IMAGE_URL_FIELDS = ("preview", "thumbnail", "imageUrl", "image_url", "url")
TIMESTAMP_FIELDS = ("instant", "timestamp", "created_at", "date", "created")
DESCRIPTION_FIELDS = ("caption", "description", "title", "name")
SUBMITTER_FIELDS = ("name", "username", "user", "author")
DIRECTION_FIELDS = ("direction", "heading")
LATITUDE_FIELDS = ("latitude", "lat")
LONGITUDE_FIELDS = ("longitude", "lng")

PRIORITY_SYNONYMS = {
    "high": Priority.HIGH,
    "critical": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "moderate": Priority.MEDIUM,
    "low": Priority.LOW,
    "minor": Priority.LOW,
}


def extract_elements(document: Any) -> List[Any]:
    """
    Detect the document shape and return its elements.

    Args:
        document: Either a GeoJSON FeatureCollection or a list of flat documents

    Returns:
        List of feature / flat document elements

    Raises:
        FormatError: If the document is neither of the recognized shapes
    """
    if isinstance(document, dict):
        if document.get("type") == "FeatureCollection" and isinstance(document.get("features"), list):
            return document["features"]
        raise FormatError("Unexpected data format: object is not a FeatureCollection")
    if isinstance(document, (list, tuple)):
        return list(document)
    raise FormatError(f"Unexpected data format: {type(document).__name__}")


def first_present(properties: Dict[str, Any], aliases: Sequence[str]) -> Any:
    """Return the first alias value that is neither missing nor blank"""
    for alias in aliases:
        value = properties.get(alias)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def to_float(value: Any) -> Optional[float]:
    """Parse a number, returning None when the value is not numeric"""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if result != result or result in (float("inf"), float("-inf")):
        return None
    return result


def resolve_priority(value: Any) -> Optional[Priority]:
    """Case-fold and map priority synonyms; unrecognized values yield no priority"""
    if not isinstance(value, str):
        return None
    return PRIORITY_SYNONYMS.get(value.strip().lower())


def resolve_id(element: Dict[str, Any], properties: Dict[str, Any], index: int) -> str:
    value = first_present(properties, ID_FIELDS)
    if value is None and properties is not element:
        # GeoJSON features may carry their identity next to "properties"
        value = first_present(element, ID_FIELDS)
    if value is None:
        return f"photo-{index}"
    return str(value).strip()


def resolve_timestamp(properties: Dict[str, Any], ingested_at: str) -> str:
    value = first_present(properties, TIMESTAMP_FIELDS)
    if value is None:
        return ingested_at
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Epoch values; milliseconds when too large to be seconds
        seconds = value / 1000 if value > 1e11 else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
        except (OverflowError, OSError, ValueError):
            return ingested_at
    return str(value)


def resolve_direction(properties: Dict[str, Any]) -> Optional[float]:
    direction = to_float(first_present(properties, DIRECTION_FIELDS))
    if direction is None:
        return None
    return direction % 360


def resolve_tags(properties: Dict[str, Any]) -> List[str]:
    tags = properties.get("tags")
    if not isinstance(tags, (list, tuple)):
        return []
    return [str(tag) for tag in tags if tag is not None and tag != ""]


def resolve_coordinates(
    element: Dict[str, Any], properties: Dict[str, Any]
) -> Tuple[float, float, Optional[float]]:
    """
    Extract (latitude, longitude, altitude).

    GeoJSON geometry stores [longitude, latitude, altitude?]; flat documents
    carry latitude/longitude as named fields.
    """
    geometry = element.get("geometry")
    coordinates = geometry.get("coordinates") if isinstance(geometry, dict) else None

    if isinstance(coordinates, (list, tuple)) and len(coordinates) >= 2:
        longitude = to_float(coordinates[0])
        latitude = to_float(coordinates[1])
        altitude = to_float(coordinates[2]) if len(coordinates) > 2 else None
    else:
        latitude = to_float(first_present(properties, LATITUDE_FIELDS))
        longitude = to_float(first_present(properties, LONGITUDE_FIELDS))
        altitude = to_float(properties.get("altitude"))

    return latitude or 0.0, longitude or 0.0, altitude


class RecordNormalizer:
    """
    Pure transform from raw upstream documents to canonical PhotoRecords.

    Per-element defects degrade to defaults; only an unrecognized document
    shape aborts the batch.
    """

    def normalize(self, document: Any) -> List[PhotoRecord]:
        """
        Normalize a bulk export.

        Args:
            document: FeatureCollection dict or list of flat documents

        Returns:
            One PhotoRecord per element, duplicates of an earlier id dropped

        Raises:
            FormatError: If the document shape is not recognized
        """
        elements = extract_elements(document)
        ingested_at = datetime.now(timezone.utc).isoformat()

        records: List[PhotoRecord] = []
        seen_ids = set()
        duplicates = 0

        for index, element in enumerate(elements):
            record = self.normalize_element(element, index, ingested_at)
            if record.id in seen_ids:
                duplicates += 1
                continue
            seen_ids.add(record.id)
            records.append(record)

        if duplicates:
            logger.warning(f"Dropped {duplicates} documents with duplicate photo ids")

        logger.info(f"Normalized {len(records)} photo records from {len(elements)} documents")
        return records

    def normalize_element(self, element: Any, index: int, ingested_at: str) -> PhotoRecord:
        """Normalize a single feature or flat document"""
        if not isinstance(element, dict):
            element = {}

        properties = element.get("properties")
        if not isinstance(properties, dict):
            properties = element

        latitude, longitude, altitude = resolve_coordinates(element, properties)
        description = first_present(properties, DESCRIPTION_FIELDS)
        submitter = first_present(properties, SUBMITTER_FIELDS)
        image_url = first_present(properties, IMAGE_URL_FIELDS)

        return PhotoRecord(
            id=resolve_id(element, properties, index),
            image_url=str(image_url) if image_url is not None else "",
            latitude=latitude,
            longitude=longitude,
            altitude=altitude,
            direction=resolve_direction(properties),
            timestamp=resolve_timestamp(properties, ingested_at),
            description=str(description) if description is not None else "",
            submitter=str(submitter) if submitter is not None else "",
            priority=resolve_priority(properties.get("priority")),
            tags=resolve_tags(properties),
        )
