"""Service-layer orchestration for trackwatch."""

from .picture import PictureService

__all__ = ["PictureService"]
