"""Mock transport for testing.

Records every call and answers with scripted response bodies. Useful for
unit testing code that talks to the bot API without hitting the network.
"""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import TransportError


@dataclass
class SentRequest:
    """Record of a call made through the MockTransport."""

    method: str
    params: dict[str, Any] = field(default_factory=dict)
    timeout: float | None = None


def ok_body(result: Any) -> bytes:
    """Encode a success envelope around ``result``."""
    return json.dumps({"ok": True, "result": result}).encode()


def error_body(
    error_code: int,
    description: str,
    *,
    retry_after: int | None = None,
    migrate_to_chat_id: int | None = None,
) -> bytes:
    """Encode a failure envelope, with parameters when any hint is given."""
    envelope: dict[str, Any] = {"ok": False, "error_code": error_code, "description": description}
    parameters = {
        key: value
        for key, value in (("retry_after", retry_after), ("migrate_to_chat_id", migrate_to_chat_id))
        if value is not None
    }
    if parameters:
        envelope["parameters"] = parameters
    return json.dumps(envelope).encode()


class MockTransport:
    """Test transport that records calls and replays queued bodies.

    Usage::

        transport = MockTransport([ok_body({"id": 1, "first_name": "Bot"})])
        client = BotClient(transport)
        assert client.get_me().id == 1
        assert transport.sent[0].method == "getMe"

    Queue an exception instead of a body to simulate a network failure::

        transport.queue(TransportError("timeout"))

    When the queue is empty, ``default_body`` is returned (an empty update
    list unless configured otherwise).
    """

    def __init__(
        self,
        bodies: Iterable[bytes | Exception] = (),
        *,
        default_body: bytes | None = None,
    ) -> None:
        self._bodies: deque[bytes | Exception] = deque(bodies)
        self.default_body = default_body if default_body is not None else ok_body([])
        self.sent: list[SentRequest] = []
        self.closed = False

    def queue(self, *bodies: bytes | Exception) -> None:
        self._bodies.extend(bodies)

    def request(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> bytes:
        if self.closed:
            raise TransportError("Transport is closed", method=method)
        self.sent.append(SentRequest(method=method, params=dict(params or {}), timeout=timeout))
        body = self._bodies.popleft() if self._bodies else self.default_body
        if isinstance(body, Exception):
            raise body
        return body

    def close(self) -> None:
        self.closed = True

    def reset(self) -> None:
        """Clear all recorded calls and queued bodies."""
        self.sent.clear()
        self._bodies.clear()
