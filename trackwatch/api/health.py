"""Health check endpoint."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from trackwatch.api.dependencies import get_picture_service
from trackwatch.services.picture import PictureService

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check(service: PictureService = Depends(get_picture_service)) -> dict[str, Any]:
    """Report liveness and whether the feed answered its last poll."""

    return {
        "status": "ok",
        "env": service.settings.env,
        "source_online": service.source_online,
        "track_count": len(service.store),
    }
