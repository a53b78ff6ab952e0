"""Photo map API routes"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Body, Depends, status

from src.schemas.photo import (
    BoundingBox,
    FilterState,
    FilterUpdate,
    JurisdictionResponse,
    PhotoListResponse,
    PhotoRecord,
    PriorityUpdate,
    ReloadResponse,
    SelectedRegion,
)
from src.services.jurisdiction import get_location_coordinates
from src.services.photo_store import PhotoStore
from src.api.dependencies import get_photo_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/photos", tags=["photos"])


def build_photo_list(store: PhotoStore) -> PhotoListResponse:
    visible = store.visible_photos
    return PhotoListResponse(
        photos=visible,
        total=len(store.all_photos),
        visible=len(visible),
        is_loading=store.is_loading,
        filter_state=store.filter_state,
        active_filters=store.filter_state.active_count(),
        selected_region=store.selected_region,
        viewport=store.viewport,
    )


@router.get("", response_model=PhotoListResponse)
async def list_visible_photos(store: PhotoStore = Depends(get_photo_store)) -> PhotoListResponse:
    """
    Get the visible photo set.

    The set reflects the caller's jurisdiction, viewport or selected region,
    and the current filter state.
    """
    return build_photo_list(store)


@router.get("/all", response_model=List[PhotoRecord])
async def list_all_photos(store: PhotoStore = Depends(get_photo_store)) -> List[PhotoRecord]:
    """Get every photo of the loaded snapshot, unfiltered"""
    return store.all_photos


@router.get("/submitters", response_model=List[str])
async def list_submitters(store: PhotoStore = Depends(get_photo_store)) -> List[str]:
    """Distinct submitters, for the submitter filter"""
    return store.submitters


@router.get("/jurisdiction", response_model=JurisdictionResponse)
async def get_jurisdiction(store: PhotoStore = Depends(get_photo_store)) -> JurisdictionResponse:
    """Caller jurisdiction with bounds and initial map position"""
    jurisdiction = store.jurisdiction
    return JurisdictionResponse(
        name=jurisdiction.name,
        unrestricted=jurisdiction.is_unrestricted,
        bounds=jurisdiction.bounds,
        center=get_location_coordinates(jurisdiction.name),
    )


@router.patch("/filters", response_model=PhotoListResponse)
async def update_filters(
    update: FilterUpdate,
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoListResponse:
    """
    Merge a partial filter update.

    Only fields present in the body change; an explicit null clears a field.
    """
    store.update_filters(**update.model_dump(exclude_unset=True))
    return build_photo_list(store)


@router.delete("/filters", response_model=PhotoListResponse)
async def clear_filters(store: PhotoStore = Depends(get_photo_store)) -> PhotoListResponse:
    """Reset every filter and the selected region"""
    store.clear_filters()
    return build_photo_list(store)


@router.put("/region", response_model=PhotoListResponse)
async def set_selected_region(
    region: Optional[SelectedRegion] = Body(None),
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoListResponse:
    """Set or clear (null body) the user-drawn selection"""
    store.set_selected_region(region)
    return build_photo_list(store)


@router.put("/viewport", status_code=status.HTTP_202_ACCEPTED)
async def set_viewport(
    viewport: Optional[BoundingBox] = Body(None),
    store: PhotoStore = Depends(get_photo_store),
) -> dict:
    """
    Report the current map viewport.

    Applied after the debounce window; a newer viewport replaces a pending one.
    """
    store.schedule_viewport(viewport)
    return {"status": "scheduled"}


@router.delete("/viewport", response_model=PhotoListResponse)
async def clear_viewport(store: PhotoStore = Depends(get_photo_store)) -> PhotoListResponse:
    """Drop the viewport immediately so a selected region applies again"""
    store.close()
    store.set_viewport(None)
    return build_photo_list(store)


@router.post("/reload", response_model=ReloadResponse)
async def reload_photos(store: PhotoStore = Depends(get_photo_store)) -> ReloadResponse:
    """
    Fetch a fresh snapshot.

    When the upstream export cannot be read the previous snapshot is kept and
    the diagnostic is returned in the error field.
    """
    succeeded = await store.reload()
    return ReloadResponse(
        succeeded=succeeded,
        total=len(store.all_photos),
        error=None if succeeded else store.last_error,
    )


@router.put("/{photo_id}/priority", response_model=PhotoRecord)
async def set_photo_priority(
    photo_id: str,
    update: PriorityUpdate,
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoRecord:
    """
    Set the caller's priority for a photo.

    The change is visible immediately and reverted if it cannot be saved.
    """
    return await store.set_priority(photo_id, update.priority)


@router.delete("/{photo_id}/priority", response_model=PhotoRecord)
async def clear_photo_priority(
    photo_id: str,
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoRecord:
    """Remove the caller's priority for a photo"""
    return await store.clear_priority(photo_id)
