"""FastAPI route handlers."""

import json
from json import JSONDecodeError
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from core.exceptions import GatewayError, InvalidJSON, RequestTooLarge
from core.protocols import RequestLogger
from core.request_types import Failed, InboundRequest, Route
from core.routes import ENDPOINTS

MAX_BODY_SIZE = 1024 * 1024  # 1MB


def error_response(error: GatewayError) -> JSONResponse:
    return JSONResponse(error.to_body(), status_code=error.status_code)


async def _parse_json_body(request: Request, logger: RequestLogger) -> dict[str, Any]:
    """Parse request body as a JSON object.

    Raises:
        RequestTooLarge: body exceeds MAX_BODY_SIZE
        InvalidJSON: body is not JSON, or not a JSON object
    """
    raw_body = await request.body()
    if len(raw_body) > MAX_BODY_SIZE:
        raise RequestTooLarge()

    text_body = raw_body.decode("utf-8", errors="replace")
    headers = dict(request.headers)
    try:
        body = json.loads(text_body)
    except (JSONDecodeError, ValueError) as e:
        logger.log_incoming(request.method, request.url.path, headers, text_body)
        raise InvalidJSON(f"Invalid JSON: {e}") from e

    logger.log_incoming(request.method, request.url.path, headers, body)
    if not isinstance(body, dict):
        raise InvalidJSON("Request body must be a JSON object")
    return body


async def handle_forward(
    request: Request,
    route: Route,
    logger: RequestLogger,
) -> JSONResponse:
    """Handle one of the four forwarding routes."""
    try:
        body = await _parse_json_body(request, logger)
    except GatewayError as e:
        logger.log_error(route.value, e.status_code, e.message)
        return error_response(e)

    forwarding_service = request.app.state.forwarding_service
    try:
        result = await forwarding_service.forward(InboundRequest(route, body))
    except Exception as e:
        # Answered here, not by the app-level handler, so CORS headers still apply
        logger.log_error(route.value, 500, f"{type(e).__name__}: {e}")
        return error_response(GatewayError("Internal gateway error"))
    if isinstance(result, Failed):
        return error_response(result.error)
    return JSONResponse(result.body, status_code=200)


async def handle_health() -> dict[str, Any]:
    """Report liveness and the available routes."""
    return {
        "status": "Salon gateway running",
        "endpoints": ENDPOINTS,
    }
