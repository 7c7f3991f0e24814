"""Track display and selection endpoints."""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from trackwatch.api.dependencies import get_picture_service
from trackwatch.models.display import TrackDisplay, TrackId, TrackTrail
from trackwatch.services.picture import PictureService

router = APIRouter(prefix="/api/v1", tags=["tracks"])

logger = logging.getLogger("trackwatch.api.tracks")


def _resolve(service: PictureService, raw_id: str) -> TrackId:
    track_id = service.resolve_id(raw_id)
    if track_id is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Track {raw_id} not found",
        )
    return track_id


@router.get("/tracks", response_model=list[TrackDisplay], summary="Current picture")
def list_tracks(
    track_class: Optional[str] = None,
    service: PictureService = Depends(get_picture_service),
) -> list[TrackDisplay]:
    """Display records as of the last render tick, optionally filtered by class."""

    displays = service.displays
    if track_class:
        displays = [record for record in displays if record.track_class == track_class]
    return displays


@router.get("/tracks/{track_id}", response_model=TrackDisplay, summary="One track")
def get_track(
    track_id: str, service: PictureService = Depends(get_picture_service)
) -> TrackDisplay:
    """Display record computed now; detail fields are set when the track is selected."""

    record = service.display_for(_resolve(service, track_id))
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track expired")
    return record


@router.get("/tracks/{track_id}/trail", response_model=TrackTrail, summary="Snail trail")
def get_trail(
    track_id: str, service: PictureService = Depends(get_picture_service)
) -> TrackTrail:
    record = service.trail_for(_resolve(service, track_id))
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Track expired")
    return record


@router.put("/selection/{track_id}", summary="Select or toggle a track")
async def select_track(
    track_id: str, service: PictureService = Depends(get_picture_service)
) -> dict[str, Any]:
    resolved = _resolve(service, track_id)
    try:
        selected = await service.call(service.select, resolved)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Track {track_id} not found"
        )
    logger.info("Selection changed to %s", selected)
    return {"selected": selected}


@router.delete("/selection", summary="Clear the selection")
async def clear_selection(
    service: PictureService = Depends(get_picture_service),
) -> dict[str, Any]:
    await service.call(service.deselect)
    return {"selected": None}
