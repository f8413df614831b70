"""Exception hierarchy for the bot API binding.

Decode errors (``MalformedEnvelope``, ``InvalidUpdate``) are raised to the
ingestion source that called the decoder. They never travel through an
``UpdateStream``: a bad update is dropped before it is sent.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .envelope import ResponseParameters


class BotAPIError(RuntimeError):
    """Base class for every error raised by this library."""


class MalformedEnvelope(BotAPIError):
    """The response body is not a well-formed ``{"ok": ...}`` object."""


class MalformedResult(MalformedEnvelope):
    """The raw ``result`` span could not be decoded as the requested type."""


class ApiError(BotAPIError):
    """A well-formed envelope reporting a platform-side failure.

    ``retry_after`` and ``migrate_to_chat_id`` are copied verbatim from the
    envelope's ``parameters`` so a transport can honor flood control or retry
    against the migrated chat. Nothing here retries on its own.
    """

    def __init__(
        self,
        code: int,
        description: str,
        *,
        parameters: ResponseParameters | None = None,
    ) -> None:
        super().__init__(f"[{code}] {description}")
        self.code = code
        self.description = description
        self.parameters = parameters

    @property
    def retry_after(self) -> int | None:
        return self.parameters.retry_after if self.parameters else None

    @property
    def migrate_to_chat_id(self) -> int | None:
        return self.parameters.migrate_to_chat_id if self.parameters else None


class InvalidUpdate(BotAPIError):
    """One update object failed to decode.

    ``update_id`` is set when the identifier itself could still be read, so
    the caller can log it and advance its polling offset past the record.
    """

    def __init__(self, message: str, *, update_id: int | None = None) -> None:
        super().__init__(message)
        self.update_id = update_id


class StreamClosed(BotAPIError):
    """The update stream is closed (or closed and fully drained)."""


class TransportError(BotAPIError):
    """The transport could not obtain a response body for an API call."""

    def __init__(self, message: str, *, method: str | None = None) -> None:
        super().__init__(message)
        self.method = method
