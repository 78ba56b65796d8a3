"""Async Hookdeck REST client: sources, destinations, connections, events, attempts."""

import platform
from typing import Any, Dict, List, Mapping, Optional

import httpx

from hookdeck_pubsub._version import __version__
from hookdeck_pubsub.config import DEFAULT_API_URL
from hookdeck_pubsub.errors import NotFoundError, TransportError
from hookdeck_pubsub.models import (
    Connection,
    Destination,
    Event,
    EventAttempt,
    Source,
    VerificationConfig,
)

DEFAULT_TIMEOUT = 30.0

USER_AGENT = f"hookdeck-pubsub/{__version__}/python-{platform.python_version()}"


def _drop_none(params: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v is not None}


class _Api:
    """Shared request/response handling; maps HTTP failures onto the pub-sub error taxonomy."""

    def __init__(self, http: httpx.AsyncClient, headers: Mapping[str, str]) -> None:
        self._http = http
        self._headers = dict(headers)

    async def request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, headers=self._headers, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e!s}") from e
        if response.status_code >= 400:
            try:
                body: Any = response.json()
            except ValueError:
                body = response.text
            message = f"{method} {path} returned {response.status_code}"
            if response.status_code == 404:
                raise NotFoundError(message, status_code=404, body=body)
            raise TransportError(message, status_code=response.status_code, body=body)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
                body=response.text,
            ) from e

    async def list_models(self, path: str, params: Mapping[str, Any]) -> List[Dict[str, Any]]:
        result = await self.request("GET", path, params=_drop_none(params))
        return list((result or {}).get("models") or [])


class SourceResource:
    def __init__(self, api: _Api) -> None:
        self._api = api

    async def list(self, name: Optional[str] = None) -> List[Source]:
        return [Source.from_dict(m) for m in await self._api.list_models("/sources", {"name": name})]

    async def create(self, name: str, verification: Optional[VerificationConfig] = None) -> Source:
        payload: Dict[str, Any] = {"name": name}
        if verification is not None:
            payload["verification"] = verification.to_dict()
        return Source.from_dict(await self._api.request("POST", "/sources", json=payload))

    async def update(self, source_id: str, verification: Optional[VerificationConfig]) -> Source:
        payload = {"verification": verification.to_dict() if verification is not None else None}
        return Source.from_dict(await self._api.request("PUT", f"/sources/{source_id}", json=payload))

    async def delete(self, source_id: str) -> None:
        await self._api.request("DELETE", f"/sources/{source_id}")


class DestinationResource:
    def __init__(self, api: _Api) -> None:
        self._api = api

    async def list(self, name: Optional[str] = None) -> List[Destination]:
        return [Destination.from_dict(m) for m in await self._api.list_models("/destinations", {"name": name})]

    async def delete(self, destination_id: str) -> None:
        await self._api.request("DELETE", f"/destinations/{destination_id}")


class ConnectionResource:
    def __init__(self, api: _Api) -> None:
        self._api = api

    async def upsert(self, request: Mapping[str, Any]) -> Connection:
        """PUT /connections: create, or update in place when a connection with request['name'] exists."""
        return Connection.from_dict(await self._api.request("PUT", "/connections", json=dict(request)))

    async def list(self, id: Optional[str] = None, full_name: Optional[str] = None) -> List[Connection]:
        models = await self._api.list_models("/connections", {"id": id, "full_name": full_name})
        return [Connection.from_dict(m) for m in models]

    async def retrieve(self, connection_id: str) -> Connection:
        return Connection.from_dict(await self._api.request("GET", f"/connections/{connection_id}"))

    async def delete(self, connection_id: str) -> None:
        await self._api.request("DELETE", f"/connections/{connection_id}")


class EventResource:
    def __init__(self, api: _Api) -> None:
        self._api = api

    async def list(self, webhook_id: Optional[str] = None) -> List[Event]:
        return [Event.from_dict(m) for m in await self._api.list_models("/events", {"webhook_id": webhook_id})]

    async def retrieve(self, event_id: str) -> Event:
        return Event.from_dict(await self._api.request("GET", f"/events/{event_id}"))


class AttemptResource:
    def __init__(self, api: _Api) -> None:
        self._api = api

    async def list(self, event_id: Optional[str] = None) -> List[EventAttempt]:
        models = await self._api.list_models("/attempts", {"event_id": event_id})
        return [EventAttempt.from_dict(m) for m in models]

    async def retrieve(self, attempt_id: str) -> EventAttempt:
        return EventAttempt.from_dict(await self._api.request("GET", f"/attempts/{attempt_id}"))


class HookdeckClient:
    """
    Thin async client for the Hookdeck API.
    Pass http_client to reuse a connection pool or inject a mock transport;
    an injected client is left open by aclose().
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        headers = {"Authorization": f"Bearer {api_key}", "User-Agent": USER_AGENT}
        self._owns_client = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._http = http_client
        api = _Api(http_client, headers)
        self.source = SourceResource(api)
        self.destination = DestinationResource(api)
        self.connection = ConnectionResource(api)
        self.event = EventResource(api)
        self.attempt = AttemptResource(api)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> "HookdeckClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
