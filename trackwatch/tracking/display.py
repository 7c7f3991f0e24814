"""Project tracks into display records for the presentation layer."""

from __future__ import annotations

from datetime import datetime, timezone
import re
from typing import Optional

from trackwatch.config import TrackingConfig
from trackwatch.models.display import TrackDisplay, TrackTrail
from trackwatch.tracking.lifecycle import (
    dead_reckoned_position,
    display_altitude,
    display_position,
    old_enough_to_dead_reckon,
    old_enough_to_show_anticipated,
    staleness_tier,
)
from trackwatch.tracking.track import Track, TrackClass

# Mode S emitter categories
CATEGORY_DESCRIPTIONS = {
    "A0": "",
    "A1": "Light",
    "A2": "Small",
    "A3": "Large",
    "A4": "High Vortex",
    "A5": "Heavy",
    "A6": "High Perf",
    "A7": "Rotary Wing",
    "B0": "",
    "B1": "Glider",
    "B2": "Lighter-than-Air",
    "B3": "Para",
    "B4": "Ultralight",
    "B5": "",
    "B6": "UAV",
    "B7": "Space",
    "C0": "",
    "C1": "Emergency Veh.",
    "C2": "Service Veh.",
    "C3": "Obstruction",
}

_AIRLINE_CODE_RE = re.compile(r"^[a-zA-Z]*")


def display_name(track: Track) -> str:
    """Flight ID / vessel name, then registration, then the raw identifier."""

    if track.name:
        return track.name
    if track.registration:
        return track.registration
    return f"T:{track.id}"


def display_sub_type(track: Track) -> str:
    """More detailed type, in descending preference order.

    1. The long type description from the aircraft database, e.g. "BOEING 747-400".
    2. The ICAO type with the category description, e.g. "B744 (Heavy)".
    3. The ICAO type alone.
    4. The category alone, e.g. "(A5 Heavy)".
    5. Nothing.
    """

    category_text = CATEGORY_DESCRIPTIONS.get(track.category or "", "")
    if track.type_code:
        if track.type_description:
            return track.type_description
        if category_text:
            return f"{track.type_code} ({category_text})"
        return track.type_code
    if track.category:
        if category_text:
            return f"({track.category} {category_text})"
        return f"({track.category})"
    return ""


def airline_code(track: Track) -> Optional[str]:
    """Leading letters of the flight ID, upper-cased."""

    if not track.name:
        return None
    return _AIRLINE_CODE_RE.match(track.name.strip()).group(0).upper()


def description_lines(track: Track) -> list[str]:
    if track.is_fixed:
        return list(track.notes)
    lines = [display_sub_type(track)]
    if track.track_class is TrackClass.MOVING_AIR:
        lines.append(airline_code(track) or "")
    return [line for line in lines if line]


def format_dtg(value: datetime) -> str:
    """Date-time group, e.g. ``03194000ZMAY24``."""

    return value.astimezone(timezone.utc).strftime("%d%H%M%SZ%b%y").upper()


def format_location(lat: float, lon: float) -> str:
    return (
        f"{abs(lat):07.4f}{'N' if lat >= 0 else 'S'}"
        f"{abs(lon):08.4f}{'E' if lon >= 0 else 'W'}"
    )


def project(
    track: Track, now: datetime, config: TrackingConfig, *, selected: bool = False
) -> TrackDisplay:
    """Displayable state of ``track`` at ``now`` (source frame).

    Detail fields are only filled in for the selected track.
    """

    position = display_position(track, now, config)
    altitude = display_altitude(track, now, config)
    tier = staleness_tier(track, now, config)

    record = TrackDisplay(
        id=track.id,
        track_class=track.track_class.value,
        lat=position[0] if position else None,
        lon=position[1] if position else None,
        altitude=altitude,
        heading=track.heading,
        speed=track.speed,
        tier=tier.name.lower(),
        anticipated=old_enough_to_show_anticipated(track, now, config),
        label=display_name(track),
        sub_label="" if track.is_fixed else display_sub_type(track),
        selected=selected,
    )
    if not selected:
        return record

    record.description_lines = description_lines(track)
    if altitude is not None:
        record.altitude_text = f"FL{altitude // 100}"
    if track.speed is not None:
        record.speed_text = f"{track.speed:.0f}KTS"
    if not track.is_fixed and track.last_position_update_time is not None:
        record.last_position_dtg = format_dtg(track.last_position_update_time)
        record.last_position_time = track.last_position_update_time
    if position is not None:
        record.location_text = format_location(*position)
    return record


def trail(track: Track, now: datetime, config: TrackingConfig) -> TrackTrail:
    """Snail trail plus the segment from the last report to the dead-reckoned point."""

    segment = None
    if track.position is not None and old_enough_to_dead_reckon(track, now, config):
        reckoned = dead_reckoned_position(track, now)
        if reckoned is not None:
            segment = [track.position, reckoned]
    return TrackTrail(
        id=track.id,
        points=list(track.position_history),
        dead_reckoned_segment=segment,
    )


__all__ = [
    "CATEGORY_DESCRIPTIONS",
    "airline_code",
    "description_lines",
    "display_name",
    "display_sub_type",
    "format_dtg",
    "format_location",
    "project",
    "trail",
]
