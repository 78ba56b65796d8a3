import json

import httpx
import pytest

from hookdeck_pubsub.client import USER_AGENT, HookdeckClient
from hookdeck_pubsub.errors import NotFoundError, TransportError
from hookdeck_pubsub.models import VerificationConfig

BASE_URL = "https://api.hookdeck.test/2023-07-01"

SOURCE = {
    "id": "src_1",
    "name": "orders",
    "url": "https://events.hookdeck.test/e/src_1",
    "verification": {"type": "api_key", "configs": {"header_key": "x-key", "api_key": "k"}},
}

CONNECTION = {
    "id": "web_1",
    "name": "conn_orders_abc",
    "full_name": "orders -> dst_orders_abc",
    "source": SOURCE,
    "destination": {
        "id": "des_1",
        "name": "dst_orders_abc",
        "url": "http://localhost:3000",
        "auth_method": {"type": "HOOKDECK_SIGNATURE", "config": {}},
    },
}


def make_client(handler) -> HookdeckClient:
    http = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return HookdeckClient("test-key", http_client=http)


async def test_list_sources_sends_auth_and_filter():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["request"] = request
        return httpx.Response(200, json={"models": [SOURCE], "count": 1})

    sources = await make_client(handler).source.list(name="orders")

    request = seen["request"]
    assert request.url.path == "/2023-07-01/sources"
    assert request.url.params["name"] == "orders"
    assert request.headers["authorization"] == "Bearer test-key"
    assert request.headers["user-agent"] == USER_AGENT
    assert sources[0].verification.type == "api_key"
    assert sources[0].url == SOURCE["url"]


async def test_create_source_with_verification():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=SOURCE)

    await make_client(handler).source.create("orders", VerificationConfig.basic_auth("u", "p"))
    assert seen["body"] == {
        "name": "orders",
        "verification": {"type": "basic_auth", "configs": {"username": "u", "password": "p"}},
    }


async def test_upsert_connection_uses_put():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        return httpx.Response(200, json=CONNECTION)

    connection = await make_client(handler).connection.upsert({"name": "conn_orders_abc"})
    assert (seen["method"], seen["path"]) == ("PUT", "/2023-07-01/connections")
    assert connection.destination.auth_method.type == "HOOKDECK_SIGNATURE"
    assert connection.source.name == "orders"


async def test_list_connections_drops_unset_filters():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"models": [CONNECTION], "count": 1})

    await make_client(handler).connection.list(full_name="orders")
    assert seen["params"] == {"full_name": "orders"}


async def test_404_maps_to_not_found():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not found"})

    with pytest.raises(NotFoundError) as info:
        await make_client(handler).connection.delete("web_1")
    assert info.value.status_code == 404


async def test_server_error_maps_to_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(TransportError) as info:
        await make_client(handler).event.list(webhook_id="web_1")
    assert not isinstance(info.value, NotFoundError)
    assert info.value.status_code == 500
    assert info.value.body == "boom"


async def test_network_error_maps_to_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(TransportError):
        await make_client(handler).source.list(name="orders")


async def test_retrieve_attempt_and_event():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/attempts/atm_1"):
            return httpx.Response(200, json={"id": "atm_1", "event_id": "evt_1", "body": {"ok": 1}})
        return httpx.Response(200, json={"id": "evt_1", "webhook_id": "web_1", "data": {"body": {"a": 1}}})

    async with make_client(handler) as client:
        attempt = await client.attempt.retrieve("atm_1")
        event = await client.event.retrieve("evt_1")
    assert attempt.body == {"ok": 1}
    assert event.body == {"a": 1}


async def test_non_json_success_body_maps_to_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(TransportError) as info:
        await make_client(handler).source.list(name="c")
    assert info.value.status_code == 200
    assert info.value.body == "<html>gateway</html>"


async def test_injected_http_client_is_not_modified_or_closed():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.setdefault("auth", []).append(request.headers.get("authorization"))
        return httpx.Response(200, json={"models": [], "count": 0})

    shared = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    async with HookdeckClient("test-key", http_client=shared) as client:
        await client.source.list()

    assert "authorization" not in shared.headers
    assert not shared.is_closed
    await shared.get("/sources")
    assert seen["auth"] == ["Bearer test-key", None]
    await shared.aclose()


async def test_owned_http_client_is_closed():
    client = HookdeckClient("test-key", base_url=BASE_URL)
    await client.aclose()
    assert client._http.is_closed
