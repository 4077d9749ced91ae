"""Header passthrough between caller and upstream."""

from collections.abc import Iterable

RawHeaders = list[tuple[bytes, bytes]]

# Connection-scoped headers (RFC 9110 section 7.6.1); the transport re-frames these.
HOP_BY_HOP = frozenset(
    {
        b"connection",
        b"keep-alive",
        b"proxy-connection",
        b"te",
        b"trailer",
        b"transfer-encoding",
        b"upgrade",
    }
)


class HeaderBuilder:
    """Copy header multi-maps across the proxy, minus hop-by-hop headers."""

    def build_upstream_headers(self, raw_headers: Iterable[tuple[bytes, bytes]]) -> RawHeaders:
        """Forward inbound headers; ``Host`` is left to the HTTP client."""
        return _without(raw_headers, HOP_BY_HOP | {b"host"})

    def build_downstream_headers(self, raw_headers: Iterable[tuple[bytes, bytes]]) -> RawHeaders:
        """Relay upstream response headers, duplicates included."""
        return [(key.lower(), value) for key, value in _without(raw_headers, HOP_BY_HOP)]


def _without(raw_headers: Iterable[tuple[bytes, bytes]], names: frozenset[bytes]) -> RawHeaders:
    raw_headers = list(raw_headers)
    dropped = names | _connection_tokens(raw_headers)
    return [(key, value) for key, value in raw_headers if key.lower() not in dropped]


def _connection_tokens(raw_headers: RawHeaders) -> frozenset[bytes]:
    """Header names listed in ``Connection`` are hop-by-hop too."""
    tokens = set()
    for key, value in raw_headers:
        if key.lower() == b"connection":
            tokens.update(t.strip().lower() for t in value.split(b",") if t.strip())
    return frozenset(tokens)
