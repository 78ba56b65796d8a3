"""Settings loaded from the environment; entry points call load_dotenv() first."""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from hookdeck_pubsub.auth import API_KEY, BASIC_AUTH
from hookdeck_pubsub.errors import ConfigurationError
from hookdeck_pubsub.models import VerificationConfig

DEFAULT_API_URL = "https://api.hookdeck.com/2023-07-01"
DEFAULT_LOG_LEVEL = "INFO"


def _env(environ: Mapping[str, str], key: str) -> Optional[str]:
    return (environ.get(key) or "").strip() or None


def publish_auth_from_env(environ: Mapping[str, str]) -> Optional[VerificationConfig]:
    """Build the publish auth from PUBSUB_PUBLISH_* variables; None when no auth type is set."""
    auth_type = _env(environ, "PUBSUB_PUBLISH_AUTH_TYPE")
    if auth_type is None:
        return None
    auth_type = auth_type.lower()
    if auth_type == API_KEY:
        api_key = _env(environ, "PUBSUB_PUBLISH_API_KEY")
        if not api_key:
            raise ConfigurationError("PUBSUB_PUBLISH_API_KEY is required for api_key publish auth")
        return VerificationConfig.api_key(api_key, _env(environ, "PUBSUB_PUBLISH_HEADER_KEY"))
    if auth_type == BASIC_AUTH:
        username = _env(environ, "PUBSUB_PUBLISH_USERNAME")
        password = _env(environ, "PUBSUB_PUBLISH_PASSWORD")
        if not username or not password:
            raise ConfigurationError(
                "PUBSUB_PUBLISH_USERNAME and PUBSUB_PUBLISH_PASSWORD are required for basic_auth publish auth"
            )
        return VerificationConfig.basic_auth(username, password)
    raise ConfigurationError(f"Unsupported PUBSUB_PUBLISH_AUTH_TYPE: {auth_type!r}")


@dataclass
class Settings:
    """Construction-time configuration for HookdeckPubSub and the HTTP facade."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    publish_auth: Optional[VerificationConfig] = None
    log_level: str = DEFAULT_LOG_LEVEL
    server_api_key: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        api_key = _env(env, "HOOKDECK_API_KEY")
        if not api_key:
            raise ConfigurationError("HOOKDECK_API_KEY environment variable is required")
        return cls(
            api_key=api_key,
            api_url=_env(env, "HOOKDECK_API_URL") or DEFAULT_API_URL,
            publish_auth=publish_auth_from_env(env),
            log_level=(_env(env, "PUBSUB_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
            server_api_key=_env(env, "SERVER_API_KEY"),
        )
