"""Derivation of the visible photo set from the canonical set and filter inputs"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from src.schemas.photo import (
    BoundingBox,
    FilterState,
    Jurisdiction,
    PhotoRecord,
    SelectedRegion,
    as_utc,
)
from src.services.jurisdiction import is_within_jurisdiction

logger = logging.getLogger(__name__)

Predicate = Callable[[PhotoRecord], bool]


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as an aware datetime (naive values are UTC)"""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None
    return as_utc(parsed)


def jurisdiction_stage(jurisdiction: Optional[Jurisdiction]) -> Optional[Predicate]:
    if jurisdiction is None or jurisdiction.is_unrestricted:
        return None
    return lambda photo: is_within_jurisdiction(photo.latitude, photo.longitude, jurisdiction)


def spatial_stage(
    selected_region: Optional[SelectedRegion], viewport: Optional[BoundingBox]
) -> Optional[Predicate]:
    # The viewport wins over a drawn selection
    bounds = viewport or (selected_region.bounds if selected_region else None)
    if bounds is None:
        return None
    return lambda photo: bounds.contains(photo.latitude, photo.longitude)


def date_stage(filter_state: FilterState) -> Optional[Predicate]:
    if filter_state.start_date is None and filter_state.end_date is None:
        return None
    start = as_utc(filter_state.start_date) if filter_state.start_date else None
    end = as_utc(filter_state.end_date) if filter_state.end_date else None

    def predicate(photo: PhotoRecord) -> bool:
        taken_at = parse_timestamp(photo.timestamp)
        if taken_at is None:
            return False
        if start and taken_at < start:
            return False
        if end and taken_at > end:
            return False
        return True

    return predicate


def submitter_stage(filter_state: FilterState) -> Optional[Predicate]:
    if not filter_state.submitter:
        return None
    submitter = filter_state.submitter
    return lambda photo: photo.submitter == submitter


def priority_stage(filter_state: FilterState) -> Optional[Predicate]:
    if filter_state.priority is None:
        return None
    priority = filter_state.priority
    return lambda photo: photo.priority == priority


def search_stage(filter_state: FilterState) -> Optional[Predicate]:
    if not filter_state.search_text:
        return None
    term = filter_state.search_text.lower()

    def predicate(photo: PhotoRecord) -> bool:
        # Fields are scanned separately so a match never spans two fields
        if term in photo.description.lower() or term in photo.submitter.lower():
            return True
        return any(term in tag.lower() for tag in photo.tags)

    return predicate


def build_stages(
    filter_state: FilterState,
    selected_region: Optional[SelectedRegion] = None,
    viewport: Optional[BoundingBox] = None,
    jurisdiction: Optional[Jurisdiction] = None,
) -> List[Predicate]:
    """Active predicates in pipeline order; inactive stages are omitted"""
    stages = [
        jurisdiction_stage(jurisdiction),
        spatial_stage(selected_region, viewport),
        date_stage(filter_state),
        submitter_stage(filter_state),
        priority_stage(filter_state),
        search_stage(filter_state),
    ]
    return [stage for stage in stages if stage is not None]


def derive_visible_set(
    records: Sequence[PhotoRecord],
    filter_state: Optional[FilterState] = None,
    selected_region: Optional[SelectedRegion] = None,
    viewport: Optional[BoundingBox] = None,
    jurisdiction: Optional[Jurisdiction] = None,
) -> List[PhotoRecord]:
    """
    Apply every active filter stage to the canonical records.

    Each stage filters the output of the previous one. Stages are independent
    per-record predicates, so the result equals the AND of all of them and
    preserves input order.

    Args:
        records: Canonical photo records
        filter_state: Date, submitter, priority and free-text filters
        selected_region: User-drawn selection
        viewport: Current map viewport, takes precedence over selected_region
        jurisdiction: Caller jurisdiction

    Returns:
        Visible records
    """
    stages = build_stages(filter_state or FilterState(), selected_region, viewport, jurisdiction)

    visible = list(records)
    for stage in stages:
        visible = [photo for photo in visible if stage(photo)]
        if not visible:
            break

    logger.debug(f"Derived {len(visible)} visible photos from {len(records)} with {len(stages)} stages")
    return visible
