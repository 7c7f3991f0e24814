import pytest

from trackwatch.config import DEFAULT_AIRPORTS, Settings, TrackingConfig


def test_defaults_match_tracking_config():
    settings = Settings()

    assert settings.tracking_config() == TrackingConfig()
    assert settings.airports == DEFAULT_AIRPORTS


def test_from_env_reads_overrides(monkeypatch):
    monkeypatch.setenv("TRACKWATCH_ENV", "prod")
    monkeypatch.setenv("DUMP1090_URL", "http://piaware.local/dump1090-fa/")
    monkeypatch.setenv("ENABLE_HISTORY_LOAD", "false")
    monkeypatch.setenv("ENABLE_WEATHER_ENRICHMENT", "yes")
    monkeypatch.setenv("SNAIL_TRAIL_LENGTH", "50")
    monkeypatch.setenv("DROP_TRACK_TIME_MS", "120000")
    monkeypatch.setenv("LIVE_POLL_INTERVAL_S", "2.5")

    settings = Settings.from_env()

    assert settings.env == "prod"
    assert settings.dump1090_url == "http://piaware.local/dump1090-fa/"
    assert settings.enable_history_load is False
    assert settings.enable_weather_enrichment is True
    assert settings.live_poll_interval_s == 2.5

    config = settings.tracking_config()
    assert config.snail_trail_length == 50
    assert config.drop_track_time_ms == 120000
    assert config.dead_reckon_time_ms == 1000


def test_from_env_ignores_invalid_numbers(monkeypatch):
    monkeypatch.setenv("SNAIL_TRAIL_LENGTH", "lots")
    monkeypatch.setenv("DUMP1090_TIMEOUT", "")

    settings = Settings.from_env()

    assert settings.snail_trail_length == 500
    assert settings.dump1090_timeout == 9.0


def test_tracking_config_rejects_bad_values():
    with pytest.raises(ValueError):
        Settings(snail_trail_length=0).tracking_config()
    with pytest.raises(ValueError):
        Settings(drop_track_at_zero_alt_time_ms=-5).tracking_config()
