"""dump1090-fa JSON feed client for live and historical aircraft batches."""

from __future__ import annotations

import logging
import time
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from trackwatch.models.dump1090 import Dump1090Batch, ReceiverInfo

logger = logging.getLogger("trackwatch.ingestors.dump1090")

ModelT = TypeVar("ModelT", bound=BaseModel)


class FeedUnavailableError(RuntimeError):
    """The feed could not be fetched or did not return a usable batch."""


def _join(base_url: str, path: str) -> str:
    return base_url.rstrip("/") + "/" + path.lstrip("/")


class Dump1090Client:
    """Fetch ``aircraft.json``, ``receiver.json`` and ``history_N.json`` from dump1090."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 9.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    async def fetch_live(self) -> Dump1090Batch:
        """Fetch the current aircraft snapshot."""

        # Cache buster, as dump1090's own web client does
        params = {"_": int(time.time() * 1000)}
        return await self._get_model("data/aircraft.json", Dump1090Batch, params=params)

    async def fetch_receiver(self) -> ReceiverInfo:
        return await self._get_model("data/receiver.json", ReceiverInfo)

    async def fetch_history(self, index: int) -> Dump1090Batch:
        return await self._get_model(f"data/history_{index}.json", Dump1090Batch)

    async def _get_model(
        self, path: str, model: type[ModelT], params: dict[str, Any] | None = None
    ) -> ModelT:
        url = _join(self.base_url, path)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            logger.warning("dump1090 request for %s timed out: %s", path, exc)
            raise FeedUnavailableError(f"Timed out fetching {path}") from exc
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "dump1090 returned HTTP %s for %s", exc.response.status_code, path
            )
            raise FeedUnavailableError(f"HTTP {exc.response.status_code} fetching {path}") from exc
        except httpx.RequestError as exc:
            logger.warning("dump1090 request for %s failed: %s", path, exc)
            raise FeedUnavailableError(f"Request failed fetching {path}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse dump1090 JSON from %s: %s", path, exc)
            raise FeedUnavailableError(f"Invalid JSON from {path}") from exc

        try:
            result = model.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Unexpected dump1090 payload from %s: %s", path, exc)
            raise FeedUnavailableError(f"Unexpected payload from {path}") from exc

        logger.debug("Fetched %s", path)
        return result


__all__ = ["Dump1090Client", "FeedUnavailableError"]
