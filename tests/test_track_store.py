from datetime import datetime, timedelta, timezone

import pytest

from trackwatch.config import FixedSite, TrackingConfig
from trackwatch.models.dump1090 import Dump1090Aircraft
from trackwatch.models.metadata import AircraftMetadata
from trackwatch.tracking.fixed import provision_fixed_sites
from trackwatch.tracking.store import TrackStore
from trackwatch.tracking.track import Track, TrackClass

T0 = datetime(2024, 5, 3, 19, 40, tzinfo=timezone.utc)


def _report(hex_code: str = "abc123", **fields) -> Dump1090Aircraft:
    return Dump1090Aircraft(hex=hex_code, **fields)


def _store_with_sites(config: TrackingConfig | None = None) -> TrackStore:
    store = TrackStore(config)
    provision_fixed_sites(
        store,
        base_station=FixedSite("Base Station", 50.75128, -1.90168),
        base_station_notes=["PiAware 3.8.1", "dump1090-fa"],
        airports=[FixedSite("Bournemouth Airport", 50.78055, -1.83938)],
        seaports=[FixedSite("Port of Poole", 50.70796, -1.99495)],
    )
    return store


@pytest.mark.parametrize("bound", [1, 3, 500])
def test_position_history_is_bounded_fifo(bound):
    track = Track(id="abc123", track_class=TrackClass.MOVING_AIR, max_history=bound)
    positions = [(50.0 + i * 0.001, -1.0) for i in range(bound + 7)]

    for lat, lon in positions:
        track.add_position(lat, lon)
        assert len(track.position_history) <= bound

    assert list(track.position_history) == positions[-bound:]
    assert track.position == positions[-1]


def test_fixed_site_position_is_immutable():
    site = Track.fixed_site(-2, TrackClass.FIXED_AIR_FACILITY, 50.78, -1.84, name="EGHH")

    with pytest.raises(ValueError):
        site.add_position(51.0, -1.0)
    assert list(site.position_history) == [(50.78, -1.84)]


def test_fixed_site_requires_fixed_class():
    with pytest.raises(ValueError):
        Track.fixed_site(-1, TrackClass.MOVING_AIR, 50.0, -1.0)


def test_provisioned_sites_use_negative_ids():
    store = _store_with_sites()

    ids = sorted(track.id for track in store.all())
    assert ids == [-3, -2, -1]
    base = store.get(-1)
    assert base.track_class is TrackClass.FIXED_REFERENCE
    assert base.name == "Base Station"
    assert base.notes == ["PiAware 3.8.1", "dump1090-fa"]
    assert store.get(-2).track_class is TrackClass.FIXED_AIR_FACILITY
    assert store.get(-3).track_class is TrackClass.FIXED_SURFACE_FACILITY


def test_upsert_creates_then_updates():
    created = []
    store = TrackStore(TrackingConfig(snail_trail_length=10), on_created=created.append)

    store.upsert("abc123", TrackClass.MOVING_AIR, _report(lat=50.0, lon=-1.0), T0)
    store.upsert("abc123", TrackClass.MOVING_AIR, _report(lat=50.1, lon=-1.0), T0 + timedelta(seconds=1))

    track = store.get("abc123")
    assert len(store) == 1
    assert "abc123" in store
    assert [t.id for t in created] == ["abc123"]
    assert track.max_history == 10
    assert len(track.position_history) == 2


def test_upsert_ignores_reports_for_fixed_ids():
    store = _store_with_sites()

    store.upsert(-1, TrackClass.MOVING_AIR, _report(lat=0.0, lon=0.0), T0)

    assert store.get(-1).position == (50.75128, -1.90168)


def test_remove_and_get():
    store = TrackStore()
    store.upsert("abc123", TrackClass.MOVING_AIR, _report(lat=50.0, lon=-1.0), T0)

    removed = store.remove("abc123")

    assert removed is not None
    assert store.get("abc123") is None
    assert store.remove("abc123") is None


def test_apply_metadata_merges_into_existing_track():
    store = TrackStore()
    store.upsert("abc123", TrackClass.MOVING_AIR, _report(lat=50.0, lon=-1.0), T0)

    applied = store.apply_metadata(
        "abc123", AircraftMetadata(r="G-EUPT", t="A319", desc="AIRBUS A-319")
    )

    track = store.get("abc123")
    assert applied is True
    assert track.registration == "G-EUPT"
    assert track.type_code == "A319"
    assert track.type_description == "AIRBUS A-319"


def test_apply_metadata_discarded_for_departed_track():
    store = TrackStore()

    applied = store.apply_metadata("abc123", AircraftMetadata(r="G-EUPT"))

    assert applied is False
    assert "abc123" not in store


def test_evict_expired_keeps_fixed_and_fresh_tracks():
    store = _store_with_sites()
    store.upsert("old001", TrackClass.MOVING_AIR, _report("old001", lat=50.0, lon=-1.0, alt_baro=30000), T0)
    store.upsert(
        "new001",
        TrackClass.MOVING_AIR,
        _report("new001", lat=50.0, lon=-1.0, alt_baro=30000),
        T0 + timedelta(minutes=5),
    )

    evicted = store.evict_expired(T0 + timedelta(minutes=5, seconds=1))

    assert evicted == ["old001"]
    assert "new001" in store
    assert {-1, -2, -3} <= {t.id for t in store.all()}

    assert store.evict_expired(T0 + timedelta(minutes=5, seconds=1)) == []


def test_evict_expired_at_zero_altitude_uses_short_threshold():
    store = TrackStore()
    store.upsert("gnd001", TrackClass.MOVING_AIR, _report("gnd001", lat=50.0, lon=-1.0, alt_baro="ground"), T0)

    assert store.evict_expired(T0 + timedelta(seconds=20)) == []
    assert store.evict_expired(T0 + timedelta(seconds=31)) == ["gnd001"]


def test_replace_non_fixed_preserves_fixed_tracks():
    store = _store_with_sites()
    store.upsert("live01", TrackClass.MOVING_AIR, _report("live01", lat=50.0, lon=-1.0), T0)

    replacement = [
        Track(id="hist01", track_class=TrackClass.MOVING_AIR),
        Track(id="hist02", track_class=TrackClass.MOVING_AIR),
    ]
    store.replace_non_fixed(replacement)

    ids = {track.id for track in store.all()}
    assert ids == {-1, -2, -3, "hist01", "hist02"}
    assert store.get("hist01") is replacement[0]


def test_replace_non_fixed_rejects_fixed_tracks():
    store = _store_with_sites()

    with pytest.raises(ValueError):
        store.replace_non_fixed([Track.fixed_site(-9, TrackClass.FIXED_REFERENCE, 0.0, 0.0)])


def test_apply_notes_only_for_fixed_tracks():
    store = _store_with_sites()
    store.upsert("abc123", TrackClass.MOVING_AIR, _report(lat=50.0, lon=-1.0), T0)

    assert store.apply_notes(-2, ["WIND 270/12KT"]) is True
    assert store.get(-2).notes == ["WIND 270/12KT"]
    assert store.apply_notes("abc123", ["nope"]) is False


def test_upsert_does_not_create_track_from_empty_report():
    created = []
    store = TrackStore(on_created=created.append)

    store.upsert("abc123", TrackClass.MOVING_AIR, _report(), T0)

    assert "abc123" not in store
    assert created == []

    store.upsert("abc123", TrackClass.MOVING_AIR, _report(squawk="7000"), T0)
    assert store.get("abc123").last_update_time == T0
    assert [t.id for t in created] == ["abc123"]
