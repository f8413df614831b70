"""Typed calls on top of a transport.

``BotClient`` glues the pieces together for one call: the transport returns
bytes, ``parse_envelope`` splits off the result span, and the caller's
``result_type`` decides how that span is decoded.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

from .envelope import ApiResponse, parse_envelope
from .transport.base import Transport
from .types import File, User, WebhookInfo
from .update import UpdateBatch, decode_updates

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_POLL_LIMIT = 100
DEFAULT_POLL_TIMEOUT = 25  # seconds the server may hold a getUpdates call


class BotClient:
    """Calls bot API methods and decodes their results.

    Usage::

        with HttpTransport(BotConfig(bot_token="123:abc")) as transport:
            client = BotClient(transport)
            me = client.get_me()
            batch = client.get_updates(offset=0)
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport

    def request(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Call ``method`` and return its parsed envelope, result undecoded."""
        body = self.transport.request(method, params, timeout=timeout)
        response = parse_envelope(body)
        if not response.ok:
            logger.error("Bot API error on %s: [%s] %s", method, response.error_code, response.description)
        return response

    def call(
        self,
        method: str,
        result_type: type[T],
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> T:
        """Call ``method`` and decode its result as ``result_type``.

        Raises:
            ApiError: If the platform reported a failure.
            MalformedEnvelope: If the body or result could not be decoded.
        """
        return self.request(method, params, timeout=timeout).unwrap(result_type)

    def get_updates(
        self,
        offset: int | None = None,
        *,
        limit: int = DEFAULT_POLL_LIMIT,
        timeout: int = DEFAULT_POLL_TIMEOUT,
        strict: bool = False,
    ) -> UpdateBatch:
        """Long-poll for updates with identifiers at or above ``offset``."""
        params: dict[str, Any] = {"limit": limit, "timeout": timeout}
        if offset is not None:
            params["offset"] = offset
        response = self.request("getUpdates", params, timeout=timeout)
        return decode_updates(response.raw_result(), strict=strict)

    def get_me(self) -> User:
        return self.call("getMe", User)

    def get_file(self, file_id: str) -> File:
        return self.call("getFile", File, {"file_id": file_id})

    def get_webhook_info(self) -> WebhookInfo:
        return self.call("getWebhookInfo", WebhookInfo)

    def set_webhook(self, url: str) -> bool:
        return self.call("setWebhook", bool, {"url": url})

    def delete_webhook(self) -> bool:
        return self.call("deleteWebhook", bool)

