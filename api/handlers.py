"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import StreamingResponse

from core.config import Config
from core.exceptions import RequestTooLarge
from core.protocols import RequestLogger
from services.upstream import too_large_response
from ui.log_utils import write_incoming_log


async def handle_forward(
    request: Request,
    config: Config,
    logger: RequestLogger,
) -> Response | StreamingResponse:
    """Forward any method on any path to the upstream origin."""
    forwarding_service = request.app.state.forwarding_service
    try:
        prepared = forwarding_service.prepare(request)
    except RequestTooLarge as e:
        logger.log_error(request.method, request.url.path, str(e))
        return too_large_response(e)

    if config.proxy.debug:
        write_incoming_log(request.method, prepared.target_url, dict(request.headers))

    upstream = request.app.state.upstream_client
    return await upstream.forward(prepared, logger)
