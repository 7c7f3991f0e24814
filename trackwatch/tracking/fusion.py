"""Merge a single feed report into a track using best-available-value rules.

Several dump1090 attributes carry overlapping information (three headings,
two altitudes, two vertical rates, four speeds). For each such field the
candidates are listed lowest priority first; the last candidate present in
the report wins, absent candidates are skipped and never zero-filled.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Optional, Sequence

from trackwatch.models.dump1090 import Dump1090Aircraft
from trackwatch.tracking.track import DEFAULT_SNAIL_TRAIL_LENGTH, Track, TrackClass

MACH_TO_KNOTS = 666.739

Candidate = tuple[str, Callable[[Any], float]]


def _as_float(value: Any) -> float:
    return float(value)


def _per_minute_to_per_second(value: Any) -> float:
    return float(value) / 60.0


def _mach_to_knots(value: Any) -> float:
    return float(value) * MACH_TO_KNOTS


def _altitude_ft(value: Any) -> float:
    if value == "ground":
        return 0.0
    return float(value)


HEADING_CANDIDATES: Sequence[Candidate] = (
    ("track", _as_float),
    ("mag_heading", _as_float),
    ("true_heading", _as_float),
)
ALTITUDE_CANDIDATES: Sequence[Candidate] = (
    ("alt_geom", _altitude_ft),
    ("alt_baro", _altitude_ft),
)
ALTITUDE_RATE_CANDIDATES: Sequence[Candidate] = (
    ("geom_rate", _per_minute_to_per_second),
    ("baro_rate", _per_minute_to_per_second),
)
SPEED_CANDIDATES: Sequence[Candidate] = (
    ("mach", _mach_to_knots),
    ("ias", _as_float),
    ("tas", _as_float),
    ("gs", _as_float),
)


def best_value(report: Dump1090Aircraft, candidates: Sequence[Candidate]) -> Optional[float]:
    """Return the last present candidate (converted), or None if none is present."""

    best = None
    for attribute, convert in candidates:
        value = getattr(report, attribute)
        if value is not None:
            best = convert(value)
    return best


def _age_adjusted(batch_time: datetime, age_s: Optional[float]) -> datetime:
    if age_s is None:
        return batch_time
    return batch_time - timedelta(seconds=age_s)


def fuse(
    track: Optional[Track],
    report: Dump1090Aircraft,
    batch_time: datetime,
    *,
    track_id: Any = None,
    track_class: TrackClass = TrackClass.MOVING_AIR,
    max_history: int = DEFAULT_SNAIL_TRAIL_LENGTH,
) -> Track:
    """Merge ``report`` observed in a batch stamped ``batch_time`` into ``track``.

    When ``track`` is None a new one is created from ``track_id`` (defaulting
    to the report's hex code), ``track_class`` and ``max_history``. The
    (possibly new) track is returned; existing tracks are updated in place.
    """

    if track is None:
        track = Track(
            id=track_id if track_id is not None else report.hex,
            track_class=track_class,
            max_history=max_history,
        )

    if track.is_fixed:
        raise ValueError(f"Fixed track {track.id} does not accept feed reports")

    if not report.has_data():
        return track

    seen_time = _age_adjusted(batch_time, report.seen)
    track.last_update_time = seen_time

    if report.has_position():
        position_time = _age_adjusted(batch_time, report.seen_pos)
        position = (report.lat, report.lon)
        repeated = (
            track.position == position
            and track.last_position_update_time is not None
            and position_time <= track.last_position_update_time
        )
        if not repeated:
            track.add_position(report.lat, report.lon)
        track.last_position_update_time = position_time

    heading = best_value(report, HEADING_CANDIDATES)
    if heading is not None:
        track.heading = heading

    altitude = best_value(report, ALTITUDE_CANDIDATES)
    if altitude is not None:
        track.altitude = altitude

    altitude_rate = best_value(report, ALTITUDE_RATE_CANDIDATES)
    if altitude_rate is not None:
        track.altitude_rate = altitude_rate
        track.last_altitude_rate_update_time = seen_time

    # Speed is only taken from reports that include a Mach number.
    if report.mach is not None:
        track.speed = best_value(report, SPEED_CANDIDATES)

    if report.flight is not None:
        track.name = report.flight.strip()
    if report.squawk is not None:
        track.squawk = report.squawk
    if report.category is not None:
        track.category = report.category.strip()
    if report.rssi is not None:
        track.rssi = report.rssi

    return track


__all__ = [
    "ALTITUDE_CANDIDATES",
    "ALTITUDE_RATE_CANDIDATES",
    "HEADING_CANDIDATES",
    "MACH_TO_KNOTS",
    "SPEED_CANDIDATES",
    "best_value",
    "fuse",
]
