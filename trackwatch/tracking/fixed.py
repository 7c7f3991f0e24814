"""Provision fixed sites (receiver, airports, seaports) from static configuration.

Fixed sites get negative integer ids so they can never collide with ICAO hex
codes or MMSIs coming off the feed.
"""

from __future__ import annotations

import logging
from typing import Iterable

from trackwatch.config import FixedSite
from trackwatch.tracking.store import TrackStore
from trackwatch.tracking.track import Track, TrackClass

logger = logging.getLogger("trackwatch.tracking.fixed")


def provision_fixed_sites(
    store: TrackStore,
    *,
    base_station: FixedSite,
    base_station_notes: Iterable[str] = (),
    airports: Iterable[FixedSite] = (),
    seaports: Iterable[FixedSite] = (),
) -> list[Track]:
    """Add the base station, airports and seaports to ``store``.

    Ids are allocated downward from -1, base station first.
    """

    sites = [(TrackClass.FIXED_REFERENCE, base_station, list(base_station_notes))]
    sites.extend((TrackClass.FIXED_AIR_FACILITY, site, []) for site in airports)
    sites.extend((TrackClass.FIXED_SURFACE_FACILITY, site, []) for site in seaports)

    created: list[Track] = []
    for offset, (track_class, site, notes) in enumerate(sites, start=1):
        track = Track.fixed_site(
            -offset, track_class, site.lat, site.lon, name=site.name, notes=notes
        )
        store.add_fixed(track)
        created.append(track)

    logger.info("Provisioned %d fixed sites", len(created))
    return created


__all__ = ["provision_fixed_sites"]
