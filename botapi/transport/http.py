"""HTTP transport for the bot API, built on httpx."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from botapi.errors import TransportError
from botapi.types import BotConfig

logger = logging.getLogger(__name__)


class HttpTransport:
    """Posts JSON parameters to ``{api_base}/bot{token}/{method}``.

    One ``httpx.Client`` is reused for every call; close the transport (or use
    it as a context manager) when done.
    """

    def __init__(self, config: BotConfig) -> None:
        if not config.bot_token:
            raise ValueError("bot_token is required")
        self._config = config
        self._base_url = f"{config.api_base.rstrip('/')}/bot{config.bot_token}"
        self._client = httpx.Client(timeout=config.request_timeout)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> HttpTransport:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def file_url(self, file_path: str) -> str:
        """Download URL for a ``File.file_path``."""
        return f"{self._config.api_base.rstrip('/')}/file/bot{self._config.bot_token}/{file_path}"

    def request(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> bytes:
        """Make a POST request to the bot API and return the raw body."""
        url = f"{self._base_url}/{method}"
        request_timeout = self._config.request_timeout + (timeout or 0.0)
        try:
            response = self._client.post(url, json=dict(params or {}), timeout=request_timeout)
        except httpx.HTTPError as exc:
            # The URL embeds the token; log the method only.
            logger.error("Bot API request %s failed: %s", method, type(exc).__name__)
            raise TransportError(f"Request to {method} failed: {type(exc).__name__}", method=method) from exc

        if response.is_error:
            logger.info("Bot API %s answered HTTP %s", method, response.status_code)
        return response.content
