"""In-memory store of live tracks."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Callable, Iterable, Iterator, Optional

from trackwatch.config import TrackingConfig
from trackwatch.models.dump1090 import Dump1090Aircraft
from trackwatch.models.metadata import AircraftMetadata
from trackwatch.tracking.fusion import fuse
from trackwatch.tracking.lifecycle import is_expired
from trackwatch.tracking.track import Track, TrackClass, TrackId

logger = logging.getLogger("trackwatch.tracking.store")

TrackCallback = Callable[[Track], None]


class TrackStore:
    """Owns the id -> Track mapping.

    The store is not thread-safe. All mutation is expected to happen on a
    single consumer (see :class:`trackwatch.services.picture.PictureService`)
    because fusing two reports for the same id is order dependent.
    """

    def __init__(
        self,
        config: TrackingConfig | None = None,
        *,
        on_created: TrackCallback | None = None,
    ) -> None:
        self.config = config or TrackingConfig()
        self.on_created = on_created
        self._tracks: dict[TrackId, Track] = {}

    def __len__(self) -> int:
        return len(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._tracks

    def __iter__(self) -> Iterator[Track]:
        return iter(list(self._tracks.values()))

    def get(self, track_id: TrackId) -> Optional[Track]:
        return self._tracks.get(track_id)

    def all(self) -> list[Track]:
        """All tracks, in no particular order."""

        return list(self._tracks.values())

    def remove(self, track_id: TrackId) -> Optional[Track]:
        return self._tracks.pop(track_id, None)

    def add_fixed(self, track: Track) -> None:
        if not track.is_fixed:
            raise ValueError(f"Track {track.id} is not a fixed track")
        if track.id in self._tracks:
            raise ValueError(f"Track id {track.id} already in use")
        self._tracks[track.id] = track

    def upsert(
        self,
        track_id: TrackId,
        track_class: TrackClass,
        report: Dump1090Aircraft,
        batch_time: datetime,
    ) -> None:
        """Merge a report into the track with this id, creating it if needed."""

        existing = self._tracks.get(track_id)
        if existing is not None and existing.is_fixed:
            logger.warning("Ignoring feed report for fixed track %s", track_id)
            return
        if existing is None and not report.has_data():
            logger.debug("Not creating track %s from an empty report", track_id)
            return

        track = fuse(
            existing,
            report,
            batch_time,
            track_id=track_id,
            track_class=track_class,
            max_history=self.config.snail_trail_length,
        )
        if existing is None:
            self._tracks[track_id] = track
            logger.debug("Created track %s (%s)", track_id, track.track_class.value)
            if self.on_created is not None:
                self.on_created(track)

    def apply_metadata(self, track_id: TrackId, metadata: AircraftMetadata) -> bool:
        """Merge enrichment into a track if it still exists.

        Returns False (and drops the metadata) when the track has expired in
        the meantime; the track is never re-created.
        """

        track = self._tracks.get(track_id)
        if track is None:
            logger.debug("Discarding metadata for departed track %s", track_id)
            return False

        for name in ("registration", "type_code", "type_description", "wake_turbulence_category"):
            value = getattr(metadata, name)
            if value is not None:
                setattr(track, name, value)
        return True

    def apply_notes(self, track_id: TrackId, lines: Iterable[str]) -> bool:
        """Replace the descriptive lines of a fixed track."""

        track = self._tracks.get(track_id)
        if track is None or not track.is_fixed:
            return False
        track.notes = list(lines)
        return True

    def evict_expired(self, now: datetime) -> list[TrackId]:
        """Remove every non-fixed track that has expired at ``now``."""

        expired = [
            track.id
            for track in self._tracks.values()
            if not track.is_fixed and is_expired(track, now, self.config)
        ]
        for track_id in expired:
            del self._tracks[track_id]
        if expired:
            logger.debug("Dropped %d timed out tracks", len(expired))
        return expired

    def replace_non_fixed(self, tracks: Iterable[Track]) -> None:
        """Drop all non-fixed tracks and insert ``tracks`` in order.

        Fixed tracks are left untouched; any fixed track in ``tracks`` is
        rejected.
        """

        incoming = list(tracks)
        for track in incoming:
            if track.is_fixed:
                raise ValueError(f"Cannot replace fixed track {track.id}")
            if track.id in self._tracks and self._tracks[track.id].is_fixed:
                raise ValueError(f"Track id {track.id} belongs to a fixed track")

        self._tracks = {
            track_id: track for track_id, track in self._tracks.items() if track.is_fixed
        }
        for track in incoming:
            self._tracks[track.id] = track
        logger.info("Replaced non-fixed tracks with %d reconstructed tracks", len(incoming))


__all__ = ["TrackStore"]
