"""Current weather for fixed facilities using Open-Meteo."""

from __future__ import annotations

from datetime import datetime, timezone
import logging

import httpx

from trackwatch.models.weather import WeatherSnapshot

logger = logging.getLogger("trackwatch.ingestors.weather")

KMH_TO_KNOTS = 0.539957

# Coarse groupings of WMO weather interpretation codes
_CONDITIONS = (
    (0, "CLEAR"),
    (3, "CLOUDY"),
    (48, "FOG"),
    (57, "DRIZZLE"),
    (67, "RAIN"),
    (77, "SNOW"),
    (82, "SHOWERS"),
    (86, "SNOW SHOWERS"),
    (99, "THUNDERSTORM"),
)


def _parse_timestamp(ts: str | None) -> datetime:
    if ts is None:
        return datetime.now(tz=timezone.utc)
    if ts.endswith("Z"):
        ts = ts.replace("Z", "+00:00")
    parsed = datetime.fromisoformat(ts)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _find_hourly_value(times: list[str] | None, target: str | None, values: list | None):
    if not times or not values:
        return None
    try:
        if target:
            idx = times.index(target)
            return values[idx]
    except ValueError:
        logger.debug("Target time %s not found in hourly data", target)
    return values[0] if values else None


def condition_text(code: int | None) -> str | None:
    if code is None:
        return None
    for upper, text in _CONDITIONS:
        if code <= upper:
            return text
    return None


def describe_weather(snapshot: WeatherSnapshot) -> list[str]:
    """Render a snapshot as short upper-case display lines."""

    lines: list[str] = []
    wind = []
    if snapshot.wind_direction_deg is not None:
        wind.append(f"{round(snapshot.wind_direction_deg) % 360:03d}")
    if snapshot.wind_speed_kmh is not None:
        wind.append(f"{round(snapshot.wind_speed_kmh * KMH_TO_KNOTS):02d}KT")
    if wind:
        lines.append("WIND " + "/".join(wind))

    details = []
    if snapshot.temperature_c is not None:
        details.append(f"{round(snapshot.temperature_c)}C")
    if snapshot.visibility_km is not None:
        details.append(f"VIS {snapshot.visibility_km:.0f}KM")
    condition = condition_text(snapshot.weather_code)
    if condition:
        details.append(condition)
    if details:
        lines.append(" ".join(details))
    return lines


class WeatherIngestor:
    """Fetch current conditions at a facility from Open-Meteo."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def get_weather(self, lat: float, lon: float) -> WeatherSnapshot:
        params = {
            "latitude": lat,
            "longitude": lon,
            "current_weather": "true",
            "hourly": "visibility,cloudcover",
            "forecast_days": 1,
            "timezone": "UTC",
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.error("Weather request timed out: %s", exc)
            raise RuntimeError("Weather service timeout") from exc
        except httpx.HTTPStatusError as exc:
            logger.error(
                "Weather service returned error: status=%s body=%s",
                exc.response.status_code,
                exc.response.text,
            )
            raise RuntimeError("Weather service error") from exc
        except httpx.RequestError as exc:
            logger.error("Weather request failed: %s", exc)
            raise RuntimeError("Weather request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error("Weather response was not JSON: %s", exc)
            raise RuntimeError("Weather response invalid") from exc

        current = payload.get("current_weather", {})
        hourly = payload.get("hourly", {})
        target_time = current.get("time")

        times = hourly.get("time")
        visibility_m = _find_hourly_value(times, target_time, hourly.get("visibility"))
        cloud_cover = _find_hourly_value(times, target_time, hourly.get("cloudcover"))

        snapshot = WeatherSnapshot(
            latitude=lat,
            longitude=lon,
            as_of=_parse_timestamp(target_time),
            temperature_c=current.get("temperature"),
            wind_speed_kmh=current.get("windspeed"),
            wind_direction_deg=current.get("winddirection"),
            visibility_km=(visibility_m / 1000) if visibility_m is not None else None,
            cloud_cover_pct=cloud_cover,
            weather_code=current.get("weathercode"),
        )
        logger.debug("Weather snapshot ingested: %s", snapshot)
        return snapshot


__all__ = ["WeatherIngestor", "condition_text", "describe_weather"]
