from datetime import datetime, timezone

import httpx
import pytest

from trackwatch.ingestors.weather import WeatherIngestor, condition_text, describe_weather
from trackwatch.models.weather import WeatherSnapshot


@pytest.mark.anyio
async def test_weather_ingestor_parses_current_weather():
    payload = {
        "latitude": 50.78,
        "longitude": -1.84,
        "current_weather": {
            "temperature": 12.5,
            "windspeed": 24.0,
            "winddirection": 270,
            "weathercode": 63,
            "time": "2024-01-01T00:00",
        },
        "hourly": {
            "time": ["2024-01-01T00:00"],
            "visibility": [10000],
            "cloudcover": [80],
        },
    }

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    ingestor = WeatherIngestor(base_url="http://test-weather", transport=transport)

    snapshot = await ingestor.get_weather(50.78, -1.84)

    assert snapshot.as_of == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert snapshot.temperature_c == 12.5
    assert snapshot.wind_speed_kmh == 24.0
    assert snapshot.wind_direction_deg == 270
    assert snapshot.visibility_km == 10.0
    assert snapshot.cloud_cover_pct == 80
    assert snapshot.weather_code == 63


@pytest.mark.anyio
async def test_weather_ingestor_handles_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    ingestor = WeatherIngestor(base_url="http://test-weather", transport=transport)

    with pytest.raises(RuntimeError):
        await ingestor.get_weather(1.0, 2.0)


@pytest.mark.anyio
async def test_weather_ingestor_handles_timeout(monkeypatch):
    class TimeoutClient:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            return self

        async def __aexit__(self, exc_type, exc, tb):
            return False

        async def get(self, *args, **kwargs):
            raise httpx.TimeoutException("timeout")

    monkeypatch.setattr(httpx, "AsyncClient", TimeoutClient)

    ingestor = WeatherIngestor(base_url="http://test-weather")
    with pytest.raises(RuntimeError):
        await ingestor.get_weather(1.0, 2.0)


def test_describe_weather_lines():
    snapshot = WeatherSnapshot(
        latitude=50.78,
        longitude=-1.84,
        as_of=datetime(2024, 1, 1, tzinfo=timezone.utc),
        temperature_c=12.5,
        wind_speed_kmh=24.0,
        wind_direction_deg=5,
        visibility_km=10.0,
        weather_code=63,
    )

    assert describe_weather(snapshot) == ["WIND 005/13KT", "12C VIS 10KM RAIN"]


def test_describe_weather_with_nothing_known():
    snapshot = WeatherSnapshot(
        latitude=0.0, longitude=0.0, as_of=datetime(2024, 1, 1, tzinfo=timezone.utc)
    )

    assert describe_weather(snapshot) == []


def test_condition_text():
    assert condition_text(0) == "CLEAR"
    assert condition_text(2) == "CLOUDY"
    assert condition_text(95) == "THUNDERSTORM"
    assert condition_text(None) is None
