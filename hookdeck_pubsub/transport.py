"""Outbound HTTP POST used by Channel.publish; never raises for a failed delivery."""

import json
from typing import Any, Mapping, Optional

import httpx

from hookdeck_pubsub.models import DeliveryResult

DEFAULT_TIMEOUT = 30.0


class HttpTransport:
    """Single-shot JSON POST over httpx. No retries: failures come back as DeliveryResult(ok=False)."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def post(self, url: str, headers: Mapping[str, str], body: Any) -> DeliveryResult:
        try:
            response = await self._http.post(url, headers=dict(headers), content=json.dumps(body))
        except httpx.HTTPError as e:
            return DeliveryResult(ok=False, error=f"{type(e).__name__}: {e!s}")

        response_headers = dict(response.headers)
        if not response.is_success:
            return DeliveryResult(
                ok=False,
                status_code=response.status_code,
                headers=response_headers,
                body=_parse_body(response),
                error=f"Failed to fetch: {response.reason_phrase}",
            )
        return DeliveryResult(
            ok=True,
            status_code=response.status_code,
            headers=response_headers,
            body=_parse_body(response),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()


def _parse_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
