"""Weather data models for fixed facility enrichment."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class WeatherSnapshot(BaseModel):
    """Current conditions at a fixed facility."""

    latitude: float = Field(..., description="Latitude of the observation point")
    longitude: float = Field(..., description="Longitude of the observation point")
    as_of: datetime = Field(..., description="Timestamp of the weather data (UTC)")
    temperature_c: Optional[float] = Field(
        default=None, description="Air temperature in Celsius",
    )
    wind_speed_kmh: Optional[float] = Field(
        default=None, description="Wind speed in kilometres per hour",
    )
    wind_direction_deg: Optional[float] = Field(
        default=None, description="Wind direction in degrees",
    )
    visibility_km: Optional[float] = Field(
        default=None, description="Visibility in kilometers",
    )
    cloud_cover_pct: Optional[float] = Field(
        default=None, description="Cloud cover percentage",
    )
    weather_code: Optional[int] = Field(
        default=None, description="WMO weather interpretation code",
    )


__all__ = ["WeatherSnapshot"]
