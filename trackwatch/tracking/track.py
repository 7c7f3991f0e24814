"""Per-entity track state."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

TrackId = Union[int, str]

DEFAULT_SNAIL_TRAIL_LENGTH = 500


class TrackClass(str, Enum):
    """Object classes; the class decides which lifecycle rules apply."""

    MOVING_AIR = "moving_air"
    MOVING_SURFACE = "moving_surface"
    FIXED_AIR_FACILITY = "fixed_air_facility"
    FIXED_SURFACE_FACILITY = "fixed_surface_facility"
    FIXED_REFERENCE = "fixed_reference"

    @property
    def fixed(self) -> bool:
        return self in FIXED_CLASSES


FIXED_CLASSES = frozenset(
    {
        TrackClass.FIXED_AIR_FACILITY,
        TrackClass.FIXED_SURFACE_FACILITY,
        TrackClass.FIXED_REFERENCE,
    }
)


@dataclass
class Track:
    """State of one tracked object.

    Altitude is stored in feet, heading and lat/lon in degrees, speed in knots
    and altitude rate in feet per second. Timestamps are in the source time
    frame.
    """

    id: TrackId
    track_class: TrackClass
    max_history: int = DEFAULT_SNAIL_TRAIL_LENGTH
    position_history: deque = field(init=False, repr=False)

    heading: Optional[float] = None
    speed: Optional[float] = None
    altitude: Optional[float] = None
    altitude_rate: Optional[float] = None

    name: Optional[str] = None
    squawk: Optional[str] = None
    category: Optional[str] = None
    rssi: Optional[float] = None

    # Filled in asynchronously by the aircraft database lookup
    registration: Optional[str] = None
    type_code: Optional[str] = None
    type_description: Optional[str] = None
    wake_turbulence_category: Optional[str] = None

    # Free-text lines for fixed sites (receiver notes, weather)
    notes: list[str] = field(default_factory=list)

    last_update_time: Optional[datetime] = None
    last_position_update_time: Optional[datetime] = None
    last_altitude_rate_update_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.track_class = TrackClass(self.track_class)
        self.position_history = deque(maxlen=self.max_history)

    @classmethod
    def fixed_site(
        cls,
        track_id: int,
        track_class: TrackClass,
        lat: float,
        lon: float,
        *,
        name: str | None = None,
        notes: list[str] | None = None,
    ) -> "Track":
        """Create a fixed track with its one immutable position."""

        track_class = TrackClass(track_class)
        if not track_class.fixed:
            raise ValueError(f"{track_class.value} is not a fixed track class")
        track = cls(id=track_id, track_class=track_class, max_history=1, name=name)
        track.position_history.append((lat, lon))
        if notes:
            track.notes = list(notes)
        return track

    @property
    def is_fixed(self) -> bool:
        return self.track_class.fixed

    @property
    def position(self) -> tuple[float, float] | None:
        """Latest known (lat, lon), or None before the first position report."""

        if not self.position_history:
            return None
        return self.position_history[-1]

    def add_position(self, lat: float, lon: float) -> None:
        """Append to the snail trail, dropping the oldest entries beyond the bound."""

        if self.is_fixed and self.position_history:
            raise ValueError(f"Fixed track {self.id} position cannot change")
        self.position_history.append((lat, lon))


__all__ = [
    "DEFAULT_SNAIL_TRAIL_LENGTH",
    "FIXED_CLASSES",
    "Track",
    "TrackClass",
    "TrackId",
]
