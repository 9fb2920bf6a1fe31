"""HTTP forwarding to Airtable and Make webhooks."""

from json import JSONDecodeError
from typing import Any

import httpx

from core.exceptions import (
    TransportError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)
from core.request_types import UpstreamTarget


class UpstreamClient:
    """Send one prepared request upstream and decode the answer.

    No retries and no per-request timeout override: the shared client's
    defaults apply.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, target: UpstreamTarget, provider: str) -> tuple[int, Any]:
        """Return (status, decoded body) for a 2xx answer.

        Raises:
            UpstreamError: upstream answered with a non-2xx status
            TransportError: the request never got an answer
        """
        request = self._client.build_request(
            target.method,
            target.url,
            headers=target.headers,
            params=target.params or None,
            json=target.body,
        )
        try:
            response = await self._client.send(request)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(f"Upstream timeout: {e}", provider=provider) from e
        except httpx.ConnectError as e:
            raise UpstreamConnectionError(
                f"Upstream connection error: {e}", provider=provider
            ) from e
        except httpx.RequestError as e:
            raise TransportError(f"Upstream request failed: {e}", provider=provider) from e

        body = _decode(response)
        if not response.is_success:
            raise UpstreamError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                details=_error_details(body, provider),
                provider=provider,
            )
        return response.status_code, body


def _decode(response: httpx.Response) -> Any:
    """JSON body when there is one, raw text otherwise (Make often answers 'Accepted')."""
    if not response.content:
        return None
    try:
        return response.json()
    except (JSONDecodeError, UnicodeDecodeError):
        return response.text


def _error_details(body: Any, provider: str) -> Any:
    """Pull the upstream's own error message out of an error body.

    Airtable answers ``{"error": {"type": ..., "message": ...}}`` or
    ``{"error": "NOT_FOUND"}``; webhooks are relayed as-is.
    """
    if provider != "airtable":
        return body if body is not None else ""
    if not isinstance(body, dict):
        return ""
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message") or ""
    if isinstance(error, str):
        return error
    return ""
