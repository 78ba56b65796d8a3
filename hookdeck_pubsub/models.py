"""Backend resource records and pub-sub handles (Source, Connection, Event, Subscription, ...)."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union


@dataclass
class VerificationConfig:
    """Inbound auth on a source: type is 'api_key' or 'basic_auth'."""

    type: str
    configs: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def api_key(cls, api_key: str, header_key: Optional[str] = None) -> "VerificationConfig":
        configs: Dict[str, Any] = {"api_key": api_key}
        if header_key:
            configs["header_key"] = header_key
        return cls(type="api_key", configs=configs)

    @classmethod
    def basic_auth(cls, username: str, password: str) -> "VerificationConfig":
        return cls(type="basic_auth", configs={"username": username, "password": password})

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["VerificationConfig"]:
        if not data:
            return None
        return cls(type=str(data["type"]), configs=dict(data.get("configs") or {}))

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "configs": dict(self.configs)}


@dataclass
class DestinationAuthMethod:
    """Outbound auth the backend uses when delivering to a destination (e.g. HOOKDECK_SIGNATURE)."""

    type: str
    config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> Optional["DestinationAuthMethod"]:
        if not data:
            return None
        return cls(type=str(data["type"]), config=dict(data.get("config") or {}))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.config:
            out["config"] = dict(self.config)
        return out


@dataclass
class Source:
    id: str
    name: str
    url: Optional[str] = None
    verification: Optional[VerificationConfig] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Source":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            url=data.get("url"),
            verification=VerificationConfig.from_dict(data.get("verification")),
            raw=dict(data),
        )


@dataclass
class Destination:
    id: str
    name: str
    url: Optional[str] = None
    auth_method: Optional[DestinationAuthMethod] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Destination":
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            url=data.get("url"),
            auth_method=DestinationAuthMethod.from_dict(data.get("auth_method")),
            raw=dict(data),
        )


@dataclass
class Connection:
    """Routing rule from one source to one destination; backs a Subscription."""

    id: str
    name: Optional[str]
    source: Source
    destination: Destination
    full_name: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Connection":
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            full_name=data.get("full_name"),
            source=Source.from_dict(data["source"]),
            destination=Destination.from_dict(data["destination"]),
            raw=dict(data),
        )


@dataclass
class Event:
    """Backend record of an event routed through a connection. data is only set once hydrated."""

    id: str
    webhook_id: Optional[str] = None
    status: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Event":
        return cls(
            id=str(data["id"]),
            webhook_id=data.get("webhook_id"),
            status=data.get("status"),
            data=data.get("data"),
            raw=dict(data),
        )

    @property
    def body(self) -> Any:
        return (self.data or {}).get("body")


@dataclass
class EventAttempt:
    """One delivery attempt of an event to a destination. body is only set once hydrated."""

    id: str
    event_id: Optional[str] = None
    status: Optional[str] = None
    response_status: Optional[int] = None
    body: Any = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventAttempt":
        return cls(
            id=str(data["id"]),
            event_id=data.get("event_id"),
            status=data.get("status"),
            response_status=data.get("response_status"),
            body=data.get("body"),
            raw=dict(data),
        )


# ---- Publish ----

@dataclass
class PublishEvent:
    """Untyped event: body is sent as the wire payload unchanged."""
    body: Any
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class PublishTypedEvent:
    """Typed event: wire payload is {type, data}."""
    type: str
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)


PublishInput = Union[PublishEvent, PublishTypedEvent, Mapping[str, Any]]


@dataclass
class DeliveryResult:
    """Outcome of a publish POST. ok only means the backend accepted the request."""
    ok: bool
    status_code: Optional[int] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "status_code": self.status_code,
            "headers": dict(self.headers),
            "body": self.body,
            "error": self.error,
        }


# ---- Subscription ----

@dataclass
class Subscription:
    """Channel delivers to url; id is the underlying connection id."""
    id: str
    channel_name: str
    url: str
    connection: Connection

    @classmethod
    def from_connection(cls, connection: Connection) -> "Subscription":
        return cls(
            id=connection.id,
            channel_name=connection.source.name,
            url=connection.destination.url or "",
            connection=connection,
        )

    def to_dict(self) -> Dict[str, Any]:
        auth_method = self.connection.destination.auth_method
        return {
            "id": self.id,
            "channel_name": self.channel_name,
            "url": self.url,
            "auth_method": auth_method.to_dict() if auth_method else None,
        }
