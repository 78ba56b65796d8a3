import pytest
from fastapi.testclient import TestClient

from hookdeck_pubsub import HookdeckPubSub
from hookdeck_pubsub.models import DeliveryResult
from server import create_app

HEADERS = {"X-API-Key": "secret"}


@pytest.fixture
def make_client(backend, transport):
    def _make(publish_auth=None, server_api_key="secret"):
        pubsub = HookdeckPubSub(api_key="test", publish_auth=publish_auth, client=backend, transport=transport)
        return TestClient(create_app(pubsub=pubsub, server_api_key=server_api_key))
    return _make


def test_requires_api_key(make_client):
    with make_client() as client:
        assert client.get("/api/v1/health").status_code == 401
        assert client.get("/api/v1/health", headers=HEADERS).status_code == 200


def test_server_key_not_configured(make_client):
    with make_client(server_api_key=None) as client:
        assert client.get("/api/v1/health", headers=HEADERS).status_code == 503


def test_channel_without_publish_auth_is_503(make_client):
    with make_client() as client:
        response = client.post("/api/v1/channels", json={"name": "c"}, headers=HEADERS)
    assert response.status_code == 503


def test_create_channel(make_client, api_key_auth):
    with make_client(api_key_auth) as client:
        response = client.post("/api/v1/channels", json={"name": "c"}, headers=HEADERS)
    assert response.status_code == 200
    assert response.json()["auth_type"] == "api_key"


def test_channel_auth_mismatch_is_409(make_client, api_key_auth, basic_auth):
    with make_client(api_key_auth) as client:
        client.post("/api/v1/channels", json={"name": "c"}, headers=HEADERS)
    with make_client(basic_auth) as client:
        response = client.post("/api/v1/channels", json={"name": "c"}, headers=HEADERS)
    assert response.status_code == 409
    assert response.json()["found"] == "api_key"
    assert response.json()["expected"] == "basic_auth"


def test_publish_typed_and_untyped(make_client, transport, api_key_auth):
    with make_client(api_key_auth) as client:
        typed = client.post("/api/v1/channels/c/publish", json={"type": "t", "data": {"a": 1}}, headers=HEADERS)
        untyped = client.post("/api/v1/channels/c/publish", json={"body": {"a": 1}}, headers=HEADERS)
    assert typed.status_code == 200 and untyped.status_code == 200
    assert [r["body"] for r in transport.requests] == [{"type": "t", "data": {"a": 1}}, {"a": 1}]


def test_publish_failure_is_502(make_client, transport, api_key_auth):
    transport.result = DeliveryResult(ok=False, status_code=500, error="Failed to fetch: Internal Server Error")
    with make_client(api_key_auth) as client:
        response = client.post("/api/v1/channels/c/publish", json={"body": {}}, headers=HEADERS)
    assert response.status_code == 502
    assert response.json()["ok"] is False


def test_subscription_lifecycle(make_client, backend):
    with make_client() as client:
        created = client.post(
            "/api/v1/subscriptions",
            json={"channel_name": "c", "url": "http://localhost:3000"},
            headers=HEADERS,
        ).json()
        assert created["auth_method"]["type"] == "HOOKDECK_SIGNATURE"

        listed = client.get("/api/v1/subscriptions", params={"channel_name": "c"}, headers=HEADERS).json()
        assert [s["id"] for s in listed["subscriptions"]] == [created["id"]]

        event_id = backend.add_event(created["id"], {"a": 1})
        backend.add_attempt(event_id, body={"ok": True})
        events = client.get(
            f"/api/v1/subscriptions/{created['id']}/events",
            params={"include_body": "true"},
            headers=HEADERS,
        ).json()["events"]
        assert events[0]["data"]["body"] == {"a": 1}
        attempts = client.get(f"/api/v1/events/{event_id}/attempts", headers=HEADERS).json()["attempts"]
        assert attempts[0]["id"]

        assert client.delete(f"/api/v1/subscriptions/{created['id']}", headers=HEADERS).status_code == 200
        assert client.delete(f"/api/v1/subscriptions/{created['id']}", headers=HEADERS).status_code == 404


def test_subscribe_with_destination_auth(make_client):
    with make_client() as client:
        created = client.post(
            "/api/v1/subscriptions",
            json={
                "channel_name": "c",
                "url": "http://localhost:3000",
                "auth": {"type": "BASIC_AUTH", "config": {"username": "u", "password": "p"}},
            },
            headers=HEADERS,
        ).json()
    assert created["auth_method"]["type"] == "BASIC_AUTH"
