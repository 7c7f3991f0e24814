import httpx
import pytest

from trackwatch.ingestors.dump1090 import Dump1090Client, FeedUnavailableError

LIVE_PAYLOAD = {
    "now": 1714765200.0,
    "messages": 123456,
    "aircraft": [
        {
            "hex": "4CA7B5",
            "flight": "RYR12AB ",
            "alt_baro": 35000,
            "alt_geom": 35550,
            "gs": 451.2,
            "mach": 0.78,
            "track": 271.3,
            "baro_rate": -64,
            "squawk": "2301",
            "category": "A3",
            "lat": 50.812,
            "lon": -1.532,
            "seen_pos": 1.2,
            "seen": 0.4,
            "rssi": -21.5,
            "mlat": [],
            "tisb": [],
        },
        {"hex": "~2a1b3c", "alt_baro": "ground", "seen": 12.0},
        {"hex": "406b9e", "alt_baro": "unknown"},
    ],
}


@pytest.mark.anyio
async def test_fetch_live_parses_batch():
    requested: list[httpx.Request] = []

    def handler(request: httpx.Request):
        requested.append(request)
        return httpx.Response(200, json=LIVE_PAYLOAD)

    client = Dump1090Client(
        base_url="http://receiver.test/dump1090-fa/", transport=httpx.MockTransport(handler)
    )

    batch = await client.fetch_live()

    assert requested[0].url.path == "/dump1090-fa/data/aircraft.json"
    assert "_" in requested[0].url.params
    assert batch.now == 1714765200.0
    assert len(batch.aircraft) == 3

    first = batch.aircraft[0]
    assert first.hex == "4ca7b5"
    assert first.alt_baro == 35000
    assert first.mach == 0.78
    assert first.has_position()

    assert batch.aircraft[1].alt_baro == "ground"
    assert batch.aircraft[2].alt_baro is None
    assert batch.aircraft[2].has_data() is False


@pytest.mark.anyio
async def test_fetch_receiver_and_history():
    def handler(request: httpx.Request):
        if request.url.path.endswith("receiver.json"):
            return httpx.Response(200, json={"version": "3.8.1", "refresh": 1000, "history": 2})
        if request.url.path.endswith("history_1.json"):
            return httpx.Response(200, json={"now": 1714765100.5, "aircraft": []})
        return httpx.Response(404)

    client = Dump1090Client(base_url="http://receiver.test", transport=httpx.MockTransport(handler))

    receiver = await client.fetch_receiver()
    history = await client.fetch_history(1)

    assert receiver.history == 2
    assert history.now == 1714765100.5
    with pytest.raises(FeedUnavailableError):
        await client.fetch_history(0)


@pytest.mark.anyio
async def test_fetch_live_raises_on_server_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    client = Dump1090Client(base_url="http://receiver.test", transport=transport)

    with pytest.raises(FeedUnavailableError):
        await client.fetch_live()


@pytest.mark.anyio
async def test_fetch_live_raises_on_timeout():
    def handler(request: httpx.Request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = Dump1090Client(base_url="http://receiver.test", transport=httpx.MockTransport(handler))

    with pytest.raises(FeedUnavailableError):
        await client.fetch_live()


@pytest.mark.anyio
async def test_fetch_live_raises_on_invalid_payload():
    responses = iter(
        [
            httpx.Response(200, text="<html>not json</html>"),
            httpx.Response(200, json={"aircraft": []}),
        ]
    )
    transport = httpx.MockTransport(lambda request: next(responses))
    client = Dump1090Client(base_url="http://receiver.test", transport=transport)

    with pytest.raises(FeedUnavailableError):
        await client.fetch_live()
    with pytest.raises(FeedUnavailableError):
        await client.fetch_live()
