"""Lookups against dump1090's sharded aircraft database (``db/*.json``).

The database is split into files keyed by a prefix of the upper-case ICAO
address. ``db/4.json`` holds entries keyed by the remaining five characters
plus a ``children`` list naming longer-prefix files (``"40"``, ``"4C"`` ...)
that hold the rest. A lookup starts at a one-character prefix and descends
until the entry is found or no child file covers the address.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from trackwatch.models.metadata import AircraftMetadata

logger = logging.getLogger("trackwatch.ingestors.aircraft_db")


class AircraftDatabaseClient:
    """Resolve ICAO addresses to registration and type information."""

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
        self._shards: dict[str, dict[str, Any]] = {}

    async def lookup(self, icao_hex: str) -> Optional[AircraftMetadata]:
        """Return metadata for ``icao_hex``, or None if unknown or unreachable."""

        icao = icao_hex.strip().upper()
        if not icao:
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                entry = await self._find(client, icao)
        except httpx.HTTPError as exc:
            logger.debug("Aircraft database lookup for %s failed: %s", icao, exc)
            return None

        if not isinstance(entry, dict):
            return None
        try:
            return AircraftMetadata.model_validate(entry)
        except ValidationError as exc:
            logger.debug("Unusable aircraft database entry for %s: %s", icao, exc)
            return None

    async def _find(self, client: httpx.AsyncClient, icao: str) -> Any:
        level = 1
        while level < len(icao):
            shard_key = icao[:level]
            entry_key = icao[level:]
            shard = await self._load_shard(client, shard_key)
            if shard is None:
                return None
            if entry_key in shard:
                return shard[entry_key]
            children = shard.get("children") or []
            if shard_key + entry_key[0] not in children:
                return None
            level += 1
        return None

    async def _load_shard(
        self, client: httpx.AsyncClient, shard_key: str
    ) -> Optional[dict[str, Any]]:
        if shard_key in self._shards:
            return self._shards[shard_key]

        url = self.base_url.rstrip("/") + f"/db/{shard_key}.json"
        response = await client.get(url)
        if response.status_code == 404:
            self._shards[shard_key] = {}
            return None
        response.raise_for_status()
        try:
            shard = response.json()
        except ValueError:
            logger.debug("Aircraft database shard %s is not valid JSON", shard_key)
            return None
        if not isinstance(shard, dict):
            return None
        self._shards[shard_key] = shard
        return shard


__all__ = ["AircraftDatabaseClient"]
