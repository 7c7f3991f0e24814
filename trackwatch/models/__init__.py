"""Pydantic models for the trackwatch service."""

from .display import TrackDisplay, TrackTrail
from .dump1090 import Dump1090Aircraft, Dump1090Batch, ReceiverInfo
from .metadata import AircraftMetadata
from .weather import WeatherSnapshot

__all__ = [
    "AircraftMetadata",
    "Dump1090Aircraft",
    "Dump1090Batch",
    "ReceiverInfo",
    "TrackDisplay",
    "TrackTrail",
    "WeatherSnapshot",
]
