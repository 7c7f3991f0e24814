"""Data ingestors for trackwatch."""

from .aircraft_db import AircraftDatabaseClient
from .dump1090 import Dump1090Client, FeedUnavailableError
from .weather import WeatherIngestor, describe_weather

__all__ = [
    "AircraftDatabaseClient",
    "Dump1090Client",
    "FeedUnavailableError",
    "WeatherIngestor",
    "describe_weather",
]
