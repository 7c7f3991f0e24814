"""Configuration settings for the trackwatch service."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache

logger = logging.getLogger("trackwatch.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_float(env_var: str, default: float) -> float:
    value = os.getenv(env_var)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", env_var, value, default)
        return default


def _get_int(env_var: str, default: int) -> int:
    value = os.getenv(env_var)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", env_var, value, default)
        return default


@dataclass(frozen=True)
class TrackingConfig:
    """Thresholds and bounds consumed by the track engine.

    All times are milliseconds measured in the source time frame.
    """

    snail_trail_length: int = 500
    dead_reckon_time_ms: int = 1000
    show_anticipated_time_ms: int = 60000
    drop_track_time_ms: int = 300000
    drop_track_at_zero_alt_time_ms: int = 30000

    def __post_init__(self) -> None:
        if self.snail_trail_length < 1:
            raise ValueError("snail_trail_length must be at least 1")
        for name in (
            "dead_reckon_time_ms",
            "show_anticipated_time_ms",
            "drop_track_time_ms",
            "drop_track_at_zero_alt_time_ms",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")


@dataclass(frozen=True)
class FixedSite:
    """A named fixed facility provisioned at startup."""

    name: str
    lat: float
    lon: float


DEFAULT_AIRPORTS: tuple[FixedSite, ...] = (
    FixedSite("Bournemouth Airport", 50.78055, -1.83938),
    FixedSite("Southampton Airport", 50.95177, -1.35625),
)
DEFAULT_SEAPORTS: tuple[FixedSite, ...] = (
    FixedSite("Port of Poole", 50.70796, -1.99495),
    FixedSite("Southampton Docks", 50.89871, -1.41198),
    FixedSite("Portland Port", 50.56768, -2.43635),
)


@dataclass
class Settings:
    """Application configuration; use :meth:`from_env` to load from the environment."""

    env: str = "local"
    log_level: str = "INFO"

    # dump1090 feed
    enable_live_feed: bool = True
    dump1090_url: str = "http://localhost/dump1090-fa/"
    dump1090_timeout: float = 9.0
    enable_history_load: bool = True
    enable_metadata_lookup: bool = True

    # Weather enrichment for fixed facilities
    enable_weather_enrichment: bool = False
    weather_base_url: str = "https://api.open-meteo.com/v1/forecast"
    weather_timeout: float = 10.0
    weather_refresh_interval_s: float = 1800.0

    # Track engine
    snail_trail_length: int = 500
    dead_reckon_time_ms: int = 1000
    show_anticipated_time_ms: int = 60000
    drop_track_time_ms: int = 300000
    drop_track_at_zero_alt_time_ms: int = 30000

    # Scheduling
    live_poll_interval_s: float = 10.0
    render_tick_interval_s: float = 1.0
    history_settle_delay_s: float = 9.0

    # Fixed sites
    base_station_lat: float = 50.75128
    base_station_lon: float = -1.90168
    base_station_notes: tuple[str, ...] = ("PiAware 3.8.1", "dump1090-fa")
    airports: tuple[FixedSite, ...] = field(default=DEFAULT_AIRPORTS)
    seaports: tuple[FixedSite, ...] = field(default=DEFAULT_SEAPORTS)

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            env=os.getenv("TRACKWATCH_ENV", defaults.env),
            log_level=os.getenv("TRACKWATCH_LOG_LEVEL", defaults.log_level),
            enable_live_feed=_get_bool("ENABLE_LIVE_FEED", defaults.enable_live_feed),
            dump1090_url=os.getenv("DUMP1090_URL", defaults.dump1090_url),
            dump1090_timeout=_get_float("DUMP1090_TIMEOUT", defaults.dump1090_timeout),
            enable_history_load=_get_bool("ENABLE_HISTORY_LOAD", defaults.enable_history_load),
            enable_metadata_lookup=_get_bool(
                "ENABLE_METADATA_LOOKUP", defaults.enable_metadata_lookup
            ),
            enable_weather_enrichment=_get_bool(
                "ENABLE_WEATHER_ENRICHMENT", defaults.enable_weather_enrichment
            ),
            weather_base_url=os.getenv("WEATHER_BASE_URL", defaults.weather_base_url),
            weather_timeout=_get_float("WEATHER_TIMEOUT", defaults.weather_timeout),
            weather_refresh_interval_s=_get_float(
                "WEATHER_REFRESH_INTERVAL_S", defaults.weather_refresh_interval_s
            ),
            snail_trail_length=_get_int("SNAIL_TRAIL_LENGTH", defaults.snail_trail_length),
            dead_reckon_time_ms=_get_int("DEAD_RECKON_TIME_MS", defaults.dead_reckon_time_ms),
            show_anticipated_time_ms=_get_int(
                "SHOW_ANTICIPATED_TIME_MS", defaults.show_anticipated_time_ms
            ),
            drop_track_time_ms=_get_int("DROP_TRACK_TIME_MS", defaults.drop_track_time_ms),
            drop_track_at_zero_alt_time_ms=_get_int(
                "DROP_TRACK_AT_ZERO_ALT_TIME_MS", defaults.drop_track_at_zero_alt_time_ms
            ),
            live_poll_interval_s=_get_float(
                "LIVE_POLL_INTERVAL_S", defaults.live_poll_interval_s
            ),
            render_tick_interval_s=_get_float(
                "RENDER_TICK_INTERVAL_S", defaults.render_tick_interval_s
            ),
            history_settle_delay_s=_get_float(
                "HISTORY_SETTLE_DELAY_S", defaults.history_settle_delay_s
            ),
            base_station_lat=_get_float("BASE_STATION_LAT", defaults.base_station_lat),
            base_station_lon=_get_float("BASE_STATION_LON", defaults.base_station_lon),
        )

    def tracking_config(self) -> TrackingConfig:
        """Build the immutable engine configuration from these settings."""

        return TrackingConfig(
            snail_trail_length=self.snail_trail_length,
            dead_reckon_time_ms=self.dead_reckon_time_ms,
            show_anticipated_time_ms=self.show_anticipated_time_ms,
            drop_track_time_ms=self.drop_track_time_ms,
            drop_track_at_zero_alt_time_ms=self.drop_track_at_zero_alt_time_ms,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment once per process."""

    return Settings.from_env()


__all__ = [
    "DEFAULT_AIRPORTS",
    "DEFAULT_SEAPORTS",
    "FixedSite",
    "Settings",
    "TrackingConfig",
    "get_settings",
]
