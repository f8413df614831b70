"""Base protocol for bot API transports."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class Transport(Protocol):
    """Interface that every transport must implement.

    A transport only moves bytes: it calls one API method and returns the
    raw response body. Envelope parsing, result decoding and any retry
    decision happen above it, so error bodies (HTTP 4xx/5xx carrying an
    ``{"ok": false}`` envelope) are returned, not raised.
    """

    def request(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> bytes:
        """Call ``method`` and return the raw response body.

        ``timeout`` is extra time to allow on top of the transport's own
        request timeout (used for long polling).
        """
        ...

    def close(self) -> None:
        """Release any connection resources."""
        ...
