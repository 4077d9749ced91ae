"""Target URL construction - fixed origin plus the raw inbound path and query."""

from urllib.parse import quote

# Printable ASCII, '%' included, so existing escapes and reserved characters stay put
_ASCII_SAFE = "".join(chr(c) for c in range(0x21, 0x7F))


def build_target_url(origin: str, raw_path: str, query_string: str = "") -> str:
    """Join the upstream origin with the inbound path and query, unmodified.

    ``origin`` comes from configuration only; nothing from the request
    other than its path and query reaches the result.
    """
    if not raw_path.startswith("/"):
        raw_path = "/" + raw_path
    target = origin.rstrip("/") + raw_path
    if query_string:
        target += "?" + query_string
    return target


def split_raw_target(raw_path: bytes, query_string: bytes) -> tuple[str, str]:
    """Turn the raw ASGI path and query bytes into URL text without unescaping them.

    Only bytes outside printable ASCII are percent-encoded, each byte on its own.
    """
    # Some servers leave the query on raw_path
    path, _, trailing_query = raw_path.partition(b"?")
    query = query_string or trailing_query
    return quote(path, safe=_ASCII_SAFE), quote(query, safe=_ASCII_SAFE)
