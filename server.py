"""HTTP facade: health, channels, publish, subscriptions, events, delivery attempts."""

from dotenv import load_dotenv
load_dotenv()

import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from hookdeck_pubsub import (
    AuthMismatchError,
    ConfigurationError,
    DestinationAuthMethod,
    HookdeckPubSub,
    NotFoundError,
    PublishEvent,
    PublishTypedEvent,
    TransportError,
)
from hookdeck_pubsub.config import Settings


class XAPIKeyMiddleware(BaseHTTPMiddleware):
    """Require X-API-Key header; SERVER_API_KEY must be configured."""
    async def dispatch(self, request: Request, call_next):
        expected = getattr(request.app.state, "server_api_key", None)
        if not expected:
            return JSONResponse(
                status_code=503,
                content={"error": "UNAUTHORIZED", "message": "X-API-Key required (SERVER_API_KEY not set)"},
            )
        key = (request.headers.get("X-API-Key") or "").strip()
        if key != expected:
            return JSONResponse(
                status_code=401,
                content={"error": "UNAUTHORIZED", "message": "invalid or missing X-API-Key"},
            )
        return await call_next(request)


# ---- Request bodies ----

class ChannelCreateBody(BaseModel):
    name: str


class PublishBody(BaseModel):
    type: Optional[str] = None
    data: Any = None
    body: Any = None
    headers: Dict[str, str] = {}


class DestinationAuthBody(BaseModel):
    type: str
    config: Dict[str, Any] = {}


class SubscribeBody(BaseModel):
    channel_name: str
    url: str
    auth: Optional[DestinationAuthBody] = None


def _channel_info(channel) -> Dict[str, Any]:
    verification = channel.source.verification
    return {
        "name": channel.name,
        "source_id": channel.source.id,
        "url": channel.url,
        "auth_type": verification.type if verification else None,
    }


router = APIRouter(prefix="/api/v1")


def _pubsub(request: Request) -> HookdeckPubSub:
    return request.app.state.pubsub


# ---- Health ----

@router.get("/health")
def health(request: Request) -> JSONResponse:
    """GET /health → { uptime_sec }."""
    uptime = time.time() - request.app.state.start_time
    return JSONResponse(content={"uptime_sec": int(uptime)}, status_code=200)


# ---- Channels ----

@router.post("/channels")
async def create_channel(body: ChannelCreateBody, request: Request) -> JSONResponse:
    """POST /channels { name } → channel info; 409 on auth mismatch, 503 without publish auth."""
    name = (body.name or "").strip()
    if not name:
        return JSONResponse(content={"error": "name is required"}, status_code=400)
    channel = await _pubsub(request).channel(name)
    return JSONResponse(content=_channel_info(channel), status_code=200)


@router.post("/channels/{name}/publish")
async def publish(name: str, body: PublishBody, request: Request) -> JSONResponse:
    """POST /channels/{name}/publish {type, data} | {body} → delivery result (502 when not ok)."""
    channel = await _pubsub(request).channel(name)
    if body.type is not None and "data" in body.model_fields_set:
        event = PublishTypedEvent(type=body.type, data=body.data, headers=body.headers)
    else:
        event = PublishEvent(body=body.body, headers=body.headers)
    result = await channel.publish(event)
    return JSONResponse(content=result.to_dict(), status_code=200 if result.ok else 502)


# ---- Subscriptions ----

@router.post("/subscriptions")
async def subscribe(body: SubscribeBody, request: Request) -> JSONResponse:
    """POST /subscriptions { channel_name, url, auth? } → subscription."""
    auth = DestinationAuthMethod(type=body.auth.type, config=body.auth.config) if body.auth else None
    subscription = await _pubsub(request).subscribe(body.channel_name, body.url, auth)
    return JSONResponse(content=subscription.to_dict(), status_code=200)


@router.get("/subscriptions")
async def list_subscriptions(
    request: Request,
    channel_name: Optional[str] = None,
    subscription_id: Optional[str] = None,
) -> JSONResponse:
    """GET /subscriptions → { subscriptions: [...] }."""
    subscriptions = await _pubsub(request).get_subscriptions(
        channel_name=channel_name,
        subscription_id=subscription_id,
    )
    return JSONResponse(content={"subscriptions": [s.to_dict() for s in subscriptions]}, status_code=200)


@router.delete("/subscriptions/{subscription_id}")
async def unsubscribe(subscription_id: str, request: Request) -> JSONResponse:
    """DELETE /subscriptions/{id} → 200 { status: deleted } or 404."""
    await _pubsub(request).unsubscribe(subscription_id)
    return JSONResponse(content={"status": "deleted", "id": subscription_id}, status_code=200)


# ---- Events ----

@router.get("/subscriptions/{subscription_id}/events")
async def list_events(subscription_id: str, request: Request, include_body: bool = False) -> JSONResponse:
    events = await _pubsub(request).get_events(subscription_id, include_body=include_body)
    return JSONResponse(content={"events": [e.raw for e in events]}, status_code=200)


@router.get("/events/{event_id}/attempts")
async def list_attempts(event_id: str, request: Request, include_body: bool = False) -> JSONResponse:
    attempts = await _pubsub(request).get_delivery_attempts(event_id, include_body=include_body)
    return JSONResponse(content={"attempts": [a.raw for a in attempts]}, status_code=200)


# ---- Errors ----

async def _auth_mismatch(request: Request, exc: AuthMismatchError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": "AUTH_MISMATCH",
            "message": str(exc),
            "channel": exc.channel_name,
            "found": exc.found,
            "expected": exc.expected,
        },
    )


async def _configuration(request: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"error": "CONFIGURATION", "message": str(exc)})


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "NOT_FOUND", "message": str(exc)})


async def _transport(request: Request, exc: TransportError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={"error": "BACKEND", "message": str(exc), "status_code": exc.status_code},
    )


def create_app(
    pubsub: Optional[HookdeckPubSub] = None,
    server_api_key: Optional[str] = None,
) -> FastAPI:
    """Build the app. Without an injected pubsub one is created from the environment at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.start_time = time.time()
        owned = None
        if getattr(app.state, "pubsub", None) is None:
            settings = Settings.from_env()
            owned = HookdeckPubSub.from_settings(settings)
            app.state.pubsub = owned
            if app.state.server_api_key is None:
                app.state.server_api_key = settings.server_api_key
        yield
        if owned is not None:
            await owned.aclose()

    app = FastAPI(title="Hookdeck Pub-Sub API", lifespan=lifespan)
    app.state.pubsub = pubsub
    app.state.server_api_key = server_api_key
    app.state.start_time = time.time()
    app.add_middleware(XAPIKeyMiddleware)
    app.add_exception_handler(AuthMismatchError, _auth_mismatch)
    app.add_exception_handler(ConfigurationError, _configuration)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(TransportError, _transport)
    app.include_router(router)
    return app


app = create_app()
