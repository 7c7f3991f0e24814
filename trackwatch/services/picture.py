"""Single-writer service that owns the track store and drives the feed timers.

All state changes (feed batches, settled history, metadata, weather lines,
eviction, selection) are queued as commands and applied one at a time by a
single consumer task. Fetches run as independent tasks and only ever touch
the store by submitting commands, so report fusion always happens in
submission order.
"""

from __future__ import annotations

import asyncio
from functools import partial
import logging
from typing import Any, Awaitable, Callable, Optional

from trackwatch.config import FixedSite, Settings
from trackwatch.ingestors import (
    AircraftDatabaseClient,
    Dump1090Client,
    FeedUnavailableError,
    WeatherIngestor,
    describe_weather,
)
from trackwatch.models.display import TrackDisplay, TrackTrail
from trackwatch.models.dump1090 import Dump1090Batch
from trackwatch.tracking.clock import ClockReconciler, from_epoch_seconds
from trackwatch.tracking.display import project, trail
from trackwatch.tracking.fixed import provision_fixed_sites
from trackwatch.tracking.store import TrackStore
from trackwatch.tracking.track import Track, TrackClass, TrackId

logger = logging.getLogger("trackwatch.services.picture")

Command = Callable[[], Any]


class PictureService:
    """Maintains the live picture from a dump1090 feed."""

    def __init__(
        self,
        settings: Settings,
        *,
        feed: Dump1090Client | None = None,
        database: AircraftDatabaseClient | None = None,
        weather: WeatherIngestor | None = None,
        clock: ClockReconciler | None = None,
    ) -> None:
        self.settings = settings
        self.config = settings.tracking_config()
        self.clock = clock or ClockReconciler()
        self.feed = feed
        self.database = database
        self.weather = weather

        self.store = TrackStore(self.config, on_created=self._on_track_created)
        provision_fixed_sites(
            self.store,
            base_station=FixedSite(
                "Base Station", settings.base_station_lat, settings.base_station_lon
            ),
            base_station_notes=settings.base_station_notes,
            airports=settings.airports,
            seaports=settings.seaports,
        )

        self.selected_id: Optional[TrackId] = None
        self.source_online = True
        self.displays: list[TrackDisplay] = []

        self._history_buffer: list[Dump1090Batch] = []
        self._queue: asyncio.Queue[tuple[Command, Optional[asyncio.Future]]] = asyncio.Queue()
        self._background: set[asyncio.Task] = set()

    @classmethod
    def from_settings(cls, settings: Settings) -> "PictureService":
        """Build the service with HTTP clients configured from ``settings``."""

        feed = Dump1090Client(
            base_url=settings.dump1090_url, timeout=settings.dump1090_timeout
        )
        database = None
        if settings.enable_metadata_lookup:
            database = AircraftDatabaseClient(
                base_url=settings.dump1090_url, timeout=settings.dump1090_timeout
            )
        weather = None
        if settings.enable_weather_enrichment:
            weather = WeatherIngestor(
                base_url=settings.weather_base_url, timeout=settings.weather_timeout
            )
        return cls(settings, feed=feed, database=database, weather=weather)

    # ----- Commands: only ever run on the consumer -----

    def apply_batch(self, batch: Dump1090Batch, *, live: bool) -> int:
        """Merge every report in ``batch``; live batches also reset the clock offset."""

        batch_time = from_epoch_seconds(batch.now)
        if live:
            self.clock.record_live_batch_time(batch_time)
            if not self.source_online:
                logger.info("Feed back online")
            self.source_online = True
        return self._ingest(self.store, batch)

    def mark_offline(self) -> None:
        if self.source_online:
            logger.warning("Feed offline; waiting for next scheduled poll")
        self.source_online = False

    def buffer_history(self, batch: Dump1090Batch) -> None:
        self._history_buffer.append(batch)

    def settle_history(self) -> int:
        """Rebuild moving tracks from buffered history, oldest batch first.

        History files arrive in any order, so they are sorted by source time
        before fusion. The reconstruction replaces every non-fixed track.
        """

        batches = sorted(self._history_buffer, key=lambda batch: batch.now)
        self._history_buffer = []

        scratch = TrackStore(self.config, on_created=self._on_track_created)
        for batch in batches:
            self._ingest(scratch, batch)

        self.store.replace_non_fixed(scratch.all())
        self.store.evict_expired(self.clock.now_in_source_frame())
        if self.selected_id is not None and self.selected_id not in self.store:
            self.selected_id = None
        logger.info("Loaded %d history batches into %d tracks", len(batches), len(scratch))
        return len(batches)

    def tick(self) -> list[TrackDisplay]:
        """Evict expired tracks and recompute the display records."""

        now = self.clock.now_in_source_frame()
        evicted = self.store.evict_expired(now)
        if self.selected_id is not None and self.selected_id in evicted:
            self.selected_id = None

        self.displays = [
            project(track, now, self.config, selected=track.id == self.selected_id)
            for track in self.store.all()
            if track.position is not None
        ]
        return self.displays

    def select(self, track_id: TrackId) -> Optional[TrackId]:
        """Select a track; selecting the selected track again deselects it."""

        if track_id not in self.store:
            raise KeyError(track_id)
        self.selected_id = None if self.selected_id == track_id else track_id
        return self.selected_id

    def deselect(self) -> None:
        self.selected_id = None

    def _ingest(self, store: TrackStore, batch: Dump1090Batch) -> int:
        batch_time = from_epoch_seconds(batch.now)
        count = 0
        for report in batch.aircraft:
            if not report.hex:
                logger.debug("Skipping report without an ICAO address")
                continue
            store.upsert(report.hex, TrackClass.MOVING_AIR, report, batch_time)
            count += 1
        return count

    # ----- Queries -----

    def resolve_id(self, raw: str) -> Optional[TrackId]:
        """Map a path/query string to a stored track id."""

        for candidate in (raw, raw.strip().lower()):
            if candidate in self.store:
                return candidate
        try:
            numeric = int(raw)
        except ValueError:
            return None
        return numeric if numeric in self.store else None

    def display_for(self, track_id: TrackId) -> Optional[TrackDisplay]:
        track = self.store.get(track_id)
        if track is None:
            return None
        now = self.clock.now_in_source_frame()
        return project(track, now, self.config, selected=track_id == self.selected_id)

    def trail_for(self, track_id: TrackId) -> Optional[TrackTrail]:
        track = self.store.get(track_id)
        if track is None:
            return None
        return trail(track, self.clock.now_in_source_frame(), self.config)

    # ----- Queue plumbing -----

    def submit(self, command: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue a command for the consumer without waiting for it."""

        self._queue.put_nowait((partial(command, *args, **kwargs), None))

    async def call(self, command: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Queue a command and wait for its result."""

        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((partial(command, *args, **kwargs), future))
        return await future

    async def _consume(self) -> None:
        while True:
            command, future = await self._queue.get()
            try:
                result = command()
            except Exception as exc:
                if future is None:
                    logger.exception("Picture command failed")
                elif not future.cancelled():
                    future.set_exception(exc)
            else:
                if future is not None and not future.cancelled():
                    future.set_result(result)
            finally:
                self._queue.task_done()

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    # ----- Fetch jobs -----

    def _on_track_created(self, track: Track) -> None:
        if self.database is None or track.track_class is not TrackClass.MOVING_AIR:
            return
        self._spawn(self._enrich(track.id))

    async def _enrich(self, track_id: TrackId) -> None:
        metadata = await self.database.lookup(str(track_id))
        if metadata is not None:
            self.submit(self.store.apply_metadata, track_id, metadata)

    async def poll_live(self) -> None:
        try:
            batch = await self.feed.fetch_live()
        except FeedUnavailableError:
            self.submit(self.mark_offline)
        else:
            self.submit(self.apply_batch, batch, live=True)
        self.submit(self.tick)

    async def load_history(self) -> None:
        """Request every history file; results are buffered until settled."""

        try:
            receiver = await self.feed.fetch_receiver()
        except FeedUnavailableError:
            logger.warning("Could not read receiver.json; skipping history load")
            return
        logger.info("Requesting %d history files", receiver.history)
        for index in range(receiver.history):
            self._spawn(self._fetch_history(index))

    async def _fetch_history(self, index: int) -> None:
        try:
            batch = await self.feed.fetch_history(index)
        except FeedUnavailableError:
            return
        self.submit(self.buffer_history, batch)

    async def refresh_weather(self) -> None:
        airports = [
            track
            for track in self.store.all()
            if track.track_class is TrackClass.FIXED_AIR_FACILITY
        ]
        for track in airports:
            lat, lon = track.position
            try:
                snapshot = await self.weather.get_weather(lat, lon)
            except RuntimeError as exc:
                logger.debug("No weather for %s: %s", track.name, exc)
                continue
            self.submit(self.store.apply_notes, track.id, describe_weather(snapshot))

    async def _request_tick(self) -> None:
        self.submit(self.tick)

    async def _every(
        self,
        interval: float,
        job: Callable[[], Awaitable[Any]],
        *,
        immediate: bool = False,
    ) -> None:
        if immediate:
            self._spawn(job())
        while True:
            await asyncio.sleep(interval)
            self._spawn(job())

    async def _start_feed(self) -> None:
        # Show live data straight away, then swap in the fuller history
        # reconstruction once the history requests have had time to land.
        self._spawn(self.poll_live())
        if self.settings.enable_history_load:
            self._spawn(self.load_history())
            await asyncio.sleep(self.settings.history_settle_delay_s)
            await self.call(self.settle_history)
            self._spawn(self.poll_live())

    async def run(self) -> None:
        """Run the consumer and all timers until cancelled."""

        consumer = asyncio.create_task(self._consume())
        loops = [
            asyncio.create_task(
                self._every(self.settings.render_tick_interval_s, self._request_tick)
            )
        ]
        if self.weather is not None:
            loops.append(
                asyncio.create_task(
                    self._every(
                        self.settings.weather_refresh_interval_s,
                        self.refresh_weather,
                        immediate=True,
                    )
                )
            )
        try:
            if self.feed is not None and self.settings.enable_live_feed:
                await self._start_feed()
                loops.append(
                    asyncio.create_task(
                        self._every(self.settings.live_poll_interval_s, self.poll_live)
                    )
                )
            await asyncio.gather(*loops)
        finally:
            pending = [consumer, *loops, *self._background]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            logger.info("Picture service stopped")


__all__ = ["PictureService"]
