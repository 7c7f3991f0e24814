from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request

from trackwatch.api import api_router
from trackwatch.config import Settings, get_settings
from trackwatch.services.picture import PictureService

logger = logging.getLogger("trackwatch")


def create_app(
    settings: Settings | None = None, service: PictureService | None = None
) -> FastAPI:
    """Build the FastAPI application around a picture service."""

    settings = settings or get_settings()
    service = service or PictureService.from_settings(settings)

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        """Run the picture service for the lifetime of the application."""

        app.state.picture_task = asyncio.create_task(service.run())
        logger.info("Picture service started (feed %s)", settings.dump1090_url)
        try:
            yield
        finally:
            task = app.state.picture_task
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    app = FastAPI(title="trackwatch", lifespan=lifespan)
    app.state.picture_service = service

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log basic request information for observability."""

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "HTTP %s %s -> %s (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    app.include_router(api_router)

    @app.get("/", summary="Root")
    def read_root() -> dict[str, str]:
        """Basic root endpoint for quick verification."""

        return {"message": "trackwatch is running"}

    return app


_settings = get_settings()
logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)

app = create_app(_settings)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""

    import uvicorn

    uvicorn.run("trackwatch.main:app", host="0.0.0.0", port=8000)
