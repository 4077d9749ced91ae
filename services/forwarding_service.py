"""Translate inbound requests into upstream requests."""

from collections.abc import AsyncIterator

from fastapi import Request

from core.config import Config
from core.exceptions import RequestTooLarge
from core.headers import HeaderBuilder
from core.request_types import PreparedRequest
from core.target import build_target_url, split_raw_target


class ForwardingService:
    """Prepare requests for the configured upstream origin."""

    def __init__(
        self,
        config: Config,
        header_builder: HeaderBuilder,
    ) -> None:
        self._origin = config.upstream.base_url
        self._max_body_size = config.limits.max_body_size
        self._headers = header_builder

    def prepare(self, request: Request) -> PreparedRequest:
        """Build the upstream request; the body stays an unread stream."""
        scope = request.scope
        raw_path = scope.get("raw_path") or scope["path"].encode("utf-8")
        path, query = split_raw_target(raw_path, scope.get("query_string", b""))
        return PreparedRequest(
            method=request.method,
            target_url=build_target_url(self._origin, path, query),
            headers=self._headers.build_upstream_headers(scope["headers"]),
            body=self._body(request),
        )

    def _body(self, request: Request) -> AsyncIterator[bytes] | None:
        """Return the inbound body stream, or None when the request has no body."""
        headers = request.headers
        if "content-length" not in headers and "transfer-encoding" not in headers:
            return None

        limit = self._max_body_size
        if limit is None:
            return request.stream()

        declared = headers.get("content-length", "")
        if declared.isdigit() and int(declared) > limit:
            raise RequestTooLarge(limit)
        return _limited(request.stream(), limit)


async def _limited(stream: AsyncIterator[bytes], limit: int) -> AsyncIterator[bytes]:
    """Pass chunks through, aborting once more than ``limit`` bytes were seen."""
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > limit:
            raise RequestTooLarge(limit)
        yield chunk
