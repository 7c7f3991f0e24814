"""Display records handed to the presentation layer."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, Field

TrackId = Union[int, str]


class TrackDisplay(BaseModel):
    """Displayable state of one track at one instant."""

    id: TrackId = Field(..., description="Track identifier (negative ints are fixed sites)")
    track_class: str = Field(..., description="Track class name")
    lat: Optional[float] = Field(default=None, description="Display latitude")
    lon: Optional[float] = Field(default=None, description="Display longitude")
    altitude: Optional[int] = Field(
        default=None, description="Display altitude in feet, nearest 100 ft"
    )
    heading: Optional[float] = Field(default=None, description="Heading in degrees")
    speed: Optional[float] = Field(default=None, description="Speed in knots")
    tier: str = Field(..., description="fresh, dead_reckoning or expired")
    anticipated: bool = Field(
        default=False, description="Position should be drawn as anticipated/uncertain"
    )
    label: str = Field(..., description="Primary label")
    sub_label: str = Field(default="", description="Secondary label (type / category)")
    selected: bool = Field(default=False)

    # Only populated for the selected track.
    description_lines: list[str] = Field(default_factory=list)
    altitude_text: Optional[str] = Field(default=None, description="e.g. FL350")
    speed_text: Optional[str] = Field(default=None, description="e.g. 450KTS")
    last_position_dtg: Optional[str] = Field(
        default=None, description="Date-time group of the last position report"
    )
    location_text: Optional[str] = Field(default=None, description="e.g. 50.7513N001.9017W")
    last_position_time: Optional[datetime] = Field(default=None)


class TrackTrail(BaseModel):
    """Snail trail for a track plus the dead-reckoned extension, if any."""

    id: TrackId
    points: list[tuple[float, float]] = Field(default_factory=list)
    dead_reckoned_segment: Optional[list[tuple[float, float]]] = Field(
        default=None,
        description="[last reported position, dead-reckoned position] while dead reckoning",
    )


__all__ = ["TrackDisplay", "TrackId", "TrackTrail"]
