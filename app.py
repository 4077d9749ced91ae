"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request

from api.handlers import handle_forward
from core.config import Config, LimitSettings
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from services.forwarding_service import ForwardingService
from services.upstream import UpstreamClient


def create_app(
    config: Config,
    logger: RequestLogger,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        header_builder = HeaderBuilder()
        client = httpx.AsyncClient(transport=transport, **_client_options(config.limits))
        app.state.upstream_client = UpstreamClient(client, header_builder)
        app.state.forwarding_service = ForwardingService(config, header_builder)
        try:
            yield
        finally:
            await client.aclose()

    # No docs/openapi routes: every path belongs to the upstream
    app = FastAPI(
        title="Gemini Proxy",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    async def proxy(request: Request):
        return await handle_forward(request, config, logger)

    # Registered without a method list so any method token is accepted
    app.add_route("/{path:path}", proxy, include_in_schema=False)

    return app


def _client_options(limits: LimitSettings) -> dict[str, Any]:
    """httpx client options; unset limits keep httpx defaults (100 connections, 20 keep-alive)."""
    options: dict[str, Any] = {}
    if limits.timeout is not None:
        options["timeout"] = limits.timeout
    if limits.max_connections is not None or limits.max_keepalive_connections is not None:
        options["limits"] = httpx.Limits(
            max_connections=limits.max_connections or 100,
            max_keepalive_connections=limits.max_keepalive_connections or 20,
        )
    return options
