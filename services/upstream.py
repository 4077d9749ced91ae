"""HTTP proxying utilities for upstream requests."""

from collections.abc import AsyncIterator

import httpx
from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.requests import ClientDisconnect

from core.exceptions import (
    RequestTooLarge,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from core.headers import HeaderBuilder
from core.protocols import RequestLogger
from core.request_types import PreparedRequest


class UpstreamClient:
    """Proxy requests to the upstream origin with streaming support."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        header_builder: HeaderBuilder,
    ) -> None:
        self._client = client
        self._headers = header_builder

    async def forward(
        self,
        prepared: PreparedRequest,
        logger: RequestLogger,
    ) -> Response | StreamingResponse:
        """Send one request upstream and relay the response as it arrives."""
        logger.log_forward(prepared.method, prepared.target_url)
        try:
            response = await self.send(prepared)
        except UpstreamError as e:
            logger.log_error(prepared.method, prepared.target_url, str(e))
            return Response(
                content=f"Proxy request failed: {e}",
                status_code=500,
                media_type="text/plain",
            )
        except RequestTooLarge as e:
            logger.log_error(prepared.method, prepared.target_url, str(e))
            return too_large_response(e)
        except ClientDisconnect:
            logger.log_error(
                prepared.method, prepared.target_url, "Client disconnected during request body"
            )
            return Response(
                content="Client disconnected", status_code=400, media_type="text/plain"
            )

        logger.log_response(prepared.method, prepared.target_url, response.status_code)

        streaming = StreamingResponse(
            self._relay(response, prepared, logger),
            status_code=response.status_code,
            background=BackgroundTask(self._cleanup_streaming, response),
        )
        streaming.raw_headers = self._headers.build_downstream_headers(response.headers.raw)
        return streaming

    async def send(self, prepared: PreparedRequest) -> httpx.Response:
        """Make the single outbound attempt, mapping transport errors."""
        try:
            req = self._client.build_request(
                prepared.method,
                prepared.target_url,
                headers=prepared.headers,
                content=prepared.body,
            )
            return await self._client.send(req, stream=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(_describe(e), prepared.target_url) from e
        except httpx.ConnectError as e:
            raise UpstreamConnectionError(_describe(e), prepared.target_url) from e
        except httpx.RequestError as e:
            raise UpstreamError(_describe(e), prepared.target_url) from e
        except httpx.InvalidURL as e:
            raise UpstreamError(str(e) or "Invalid URL", prepared.target_url) from e

    async def _relay(
        self,
        response: httpx.Response,
        prepared: PreparedRequest,
        logger: RequestLogger,
    ) -> AsyncIterator[bytes]:
        """Yield the upstream body undecoded so Content-Encoding stays accurate."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.RequestError as e:
            # Status line is already sent; dropping the connection is all that's left
            logger.log_error(
                prepared.method,
                prepared.target_url,
                f"Upstream stream interrupted: {_describe(e)}",
            )
            raise
        finally:
            await response.aclose()

    async def _cleanup_streaming(self, response: httpx.Response) -> None:
        """Clean up streaming resources."""
        await response.aclose()


def too_large_response(error: RequestTooLarge) -> Response:
    return Response(content=str(error), status_code=413, media_type="text/plain")


def _describe(error: httpx.RequestError) -> str:
    return str(error) or type(error).__name__
