"""Staleness, dead reckoning and expiry rules for tracks.

Everything here is a pure function of a track, the current time in the source
frame and the engine configuration. No state is persisted between calls; the
tier is re-derived from the stored timestamps every time.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import IntEnum
import math
from typing import Optional

from trackwatch.config import TrackingConfig
from trackwatch.tracking.geodesy import destination_point
from trackwatch.tracking.track import Track

KNOTS_TO_MPS = 0.514444


class StalenessTier(IntEnum):
    """Ordered staleness tiers. Anticipated display is a separate flag."""

    FRESH = 0
    DEAD_RECKONING = 1
    EXPIRED = 2


def _age_ms(now: datetime, then: Optional[datetime]) -> Optional[float]:
    if then is None:
        return None
    return (now - then).total_seconds() * 1000.0


def round_altitude(altitude_ft: float) -> int:
    """Round to the nearest 100 ft and clamp at zero.

    Halves round upward (35050 -> 35100) rather than down to the lower
    hundred.
    """

    return max(0, int(math.floor(altitude_ft / 100.0 + 0.5)) * 100)


def position_age_ms(track: Track, now: datetime) -> Optional[float]:
    return _age_ms(now, track.last_position_update_time)


def update_age_ms(track: Track, now: datetime) -> Optional[float]:
    return _age_ms(now, track.last_update_time)


def old_enough_to_dead_reckon(track: Track, now: datetime, config: TrackingConfig) -> bool:
    age = position_age_ms(track, now)
    return not track.is_fixed and age is not None and age > config.dead_reckon_time_ms


def old_enough_to_show_anticipated(
    track: Track, now: datetime, config: TrackingConfig
) -> bool:
    age = position_age_ms(track, now)
    return not track.is_fixed and age is not None and age > config.show_anticipated_time_ms


def dead_reckoned_position(track: Track, now: datetime) -> Optional[tuple[float, float]]:
    """Last position advanced along heading at speed for the time since it was reported.

    Returns None unless position, its timestamp, heading and speed are all known.
    """

    position = track.position
    if (
        position is None
        or track.last_position_update_time is None
        or track.speed is None
        or track.heading is None
    ):
        return None

    elapsed_s = (now - track.last_position_update_time).total_seconds()
    distance_m = track.speed * KNOTS_TO_MPS * elapsed_s
    return destination_point(position[0], position[1], track.heading, distance_m)


def dead_reckoned_altitude(track: Track, now: datetime) -> Optional[int]:
    """Last altitude advanced by the altitude rate, rounded and clamped.

    Elapsed time is measured from the last *position* report, not from the
    last altitude-rate report.
    """

    if (
        track.altitude is None
        or math.isnan(track.altitude)
        or track.altitude_rate is None
        or track.last_altitude_rate_update_time is None
        or track.last_position_update_time is None
    ):
        return None

    elapsed_s = (now - track.last_position_update_time).total_seconds()
    return round_altitude(track.altitude + track.altitude_rate * elapsed_s)


def display_position(
    track: Track, now: datetime, config: TrackingConfig
) -> Optional[tuple[float, float]]:
    """Position to draw: dead-reckoned when old enough and possible, else last known."""

    if old_enough_to_dead_reckon(track, now, config):
        reckoned = dead_reckoned_position(track, now)
        if reckoned is not None:
            return reckoned
    return track.position


def display_altitude(track: Track, now: datetime, config: TrackingConfig) -> Optional[int]:
    """Altitude to show: dead-reckoned when old enough and possible, else last known."""

    altitude = None
    if track.altitude is not None and not math.isnan(track.altitude):
        altitude = round_altitude(track.altitude)
    if old_enough_to_dead_reckon(track, now, config):
        reckoned = dead_reckoned_altitude(track, now)
        if reckoned is not None:
            altitude = reckoned
    return altitude


def _at_or_below_zero(altitude: Optional[int]) -> bool:
    # Unknown altitude counts as on the ground
    return altitude is None or altitude <= 0


def is_expired(track: Track, now: datetime, config: TrackingConfig) -> bool:
    """Whether the track is old enough to drop.

    Tracks at (displayed) zero altitude are dropped sooner since they have
    most likely landed or moored; an unknown altitude counts as zero. Fixed
    tracks never expire, and a moving track that has never reported anything
    is considered expired.
    """

    if track.is_fixed:
        return False

    age = update_age_ms(track, now)
    if age is None:
        return True
    if age > config.drop_track_time_ms:
        return True

    if age <= config.drop_track_at_zero_alt_time_ms:
        return False

    # Displayed altitude only ever moves one way, so its lowest value since
    # the short threshold was crossed is at one end of that window.
    crossed = track.last_update_time + timedelta(
        milliseconds=config.drop_track_at_zero_alt_time_ms
    )
    return _at_or_below_zero(
        display_altitude(track, crossed, config)
    ) or _at_or_below_zero(display_altitude(track, now, config))


def staleness_tier(track: Track, now: datetime, config: TrackingConfig) -> StalenessTier:
    if track.is_fixed:
        return StalenessTier.FRESH
    if is_expired(track, now, config):
        return StalenessTier.EXPIRED
    if (
        old_enough_to_dead_reckon(track, now, config)
        and dead_reckoned_position(track, now) is not None
    ):
        return StalenessTier.DEAD_RECKONING
    return StalenessTier.FRESH


__all__ = [
    "KNOTS_TO_MPS",
    "StalenessTier",
    "dead_reckoned_altitude",
    "dead_reckoned_position",
    "display_altitude",
    "display_position",
    "is_expired",
    "old_enough_to_dead_reckon",
    "old_enough_to_show_anticipated",
    "position_age_ms",
    "round_altitude",
    "staleness_tier",
    "update_age_ms",
]
