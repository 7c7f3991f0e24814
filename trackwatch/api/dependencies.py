"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from trackwatch.services.picture import PictureService


def get_picture_service(request: Request) -> PictureService:
    """Return the picture service attached to the running application."""

    return request.app.state.picture_service
