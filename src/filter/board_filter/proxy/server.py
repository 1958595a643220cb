from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from board_filter import __version__
from board_filter.config import Settings, get_settings
from board_filter.policy import ContentPolicy, build_policy
from board_filter.proxy.router import router as proxy_router
from board_filter.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    policy: ContentPolicy | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        # A missing vocabulary raises here and aborts startup.
        app.state.settings = settings
        app.state.policy = policy or build_policy(settings)
        app.state.upstream = httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            transport=transport,
        )
        logger.info("Forwarding to %s (moderation mode: %s)", settings.target, settings.mode)
        try:
            yield
        finally:
            await app.state.upstream.aclose()

    app = FastAPI(
        title="Board Content Filter",
        version=__version__,
        summary="Moderating reverse proxy for micro-board posts.",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    @app.get("/_filter/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok", "mode": settings.mode, "version": __version__}

    app.include_router(proxy_router)
    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
