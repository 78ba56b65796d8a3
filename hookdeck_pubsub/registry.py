"""Channel registry: get-or-create a named source and reconcile its inbound auth."""

import logging
from typing import Any, Optional

from hookdeck_pubsub.auth import auth_kinds_match, auth_type, build_inbound_verification
from hookdeck_pubsub.channel import Channel
from hookdeck_pubsub.errors import AuthMismatchError, ConfigurationError
from hookdeck_pubsub.models import Source, VerificationConfig
from hookdeck_pubsub.observability import child_logger


class ChannelRegistry:
    """
    Issues Channels backed by Hookdeck sources. Holds no state between calls: every
    get_or_create_channel re-reads the backend.

    The list -> create sequence is not atomic. Two concurrent calls for the same unseen name
    may both create a source; later calls pick the first one the backend lists.
    """

    def __init__(
        self,
        client: Any,
        transport: Any,
        publish_auth: Optional[VerificationConfig] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self._transport = transport
        self._publish_auth = publish_auth
        self._logger = logger or child_logger(None, "registry")

    @property
    def publish_auth(self) -> Optional[VerificationConfig]:
        return self._publish_auth

    async def get_or_create_channel(self, name: str) -> Channel:
        """
        Return the channel for name, creating the source if it does not exist.
        An existing source with no verification is adopted and given the configured auth.
        Raises ConfigurationError when no publish auth is configured and
        AuthMismatchError when the existing source uses a different auth type.
        """
        if self._publish_auth is None:
            raise ConfigurationError("publishAuth is required when creating or getting a channel")

        sources = await self._client.source.list(name=name)
        if not sources:
            source = await self._client.source.create(
                name=name,
                verification=build_inbound_verification(self._publish_auth),
            )
            self._logger.info("channel_created", extra={"channel": name, "source_id": source.id})
        else:
            source = sources[0]
            self._logger.debug("channel_found", extra={"channel": name, "source_id": source.id})
            source = await self._reconcile(name, source)

        return Channel(
            source=source,
            publish_auth=self._publish_auth,
            transport=self._transport,
            logger=self._logger.getChild("channel"),
        )

    async def _reconcile(self, name: str, source: Source) -> Source:
        if source.verification is None:
            source = await self._client.source.update(
                source.id,
                verification=build_inbound_verification(self._publish_auth),
            )
            self._logger.info(
                "channel_auth_adopted",
                extra={"channel": name, "source_id": source.id, "auth_type": auth_type(self._publish_auth)},
            )

        if source.verification is None or not auth_kinds_match(source.verification, self._publish_auth):
            self._logger.error(
                "channel_auth_mismatch",
                extra={
                    "channel": name,
                    "found": auth_type(source.verification),
                    "expected": auth_type(self._publish_auth),
                },
            )
            raise AuthMismatchError(name, auth_type(source.verification), auth_type(self._publish_auth))
        return source
