"""Publish auth policy: source verification config and outbound publish headers."""

import base64
from typing import Dict, Mapping, Optional

from hookdeck_pubsub.models import VerificationConfig

API_KEY = "api_key"
BASIC_AUTH = "basic_auth"

DEFAULT_API_KEY_HEADER = "Authorization"


def build_inbound_verification(auth: Optional[VerificationConfig]) -> Optional[VerificationConfig]:
    """Verification config to store on a source; the publish auth is used as-is."""
    return auth


def build_publish_headers(
    auth: Optional[VerificationConfig],
    base_headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Return a copy of base_headers with the credentials for auth injected."""
    headers: Dict[str, str] = dict(base_headers or {})
    if auth is None:
        return headers
    configs = auth.configs or {}
    if auth.type == API_KEY:
        header_key = configs.get("header_key") or DEFAULT_API_KEY_HEADER
        headers[header_key] = f"{configs.get('api_key')}"
    elif auth.type == BASIC_AUTH:
        raw = f"{configs.get('username')}:{configs.get('password')}".encode("utf-8")
        headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")
    return headers


def auth_kinds_match(a: Optional[VerificationConfig], b: Optional[VerificationConfig]) -> bool:
    """Compare auth type tags case-insensitively. Credentials are not compared."""
    if a is None or b is None:
        return a is None and b is None
    return (a.type or "").lower() == (b.type or "").lower()


def auth_type(auth: Optional[VerificationConfig]) -> Optional[str]:
    return auth.type if auth is not None else None
