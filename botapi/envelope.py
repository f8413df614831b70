"""Response envelope decoding.

Every API method answers with the same outer shape::

    {"ok": true, "result": <anything>}
    {"ok": false, "error_code": 429, "description": "...",
     "parameters": {"retry_after": 5}}

Decoding happens in two stages. ``parse_envelope`` reads the outer fields and
keeps ``result`` as the raw JSON bytes it was sent as. The caller, who knows
which method it called, then picks the result type::

    response = parse_envelope(body)
    me = response.unwrap(User)
    ok = parse_envelope(other_body).unwrap(bool)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar, get_args, get_origin

import msgspec

from .errors import ApiError, MalformedEnvelope, MalformedResult
from .update import Update, decode_update, decode_updates

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NULL = b"null"


class _WireParameters(msgspec.Struct):
    migrate_to_chat_id: int | None = None
    retry_after: int | None = None


class _WireEnvelope(msgspec.Struct):
    ok: bool
    result: msgspec.Raw = msgspec.field(default_factory=msgspec.Raw)
    error_code: int | None = None
    description: str | None = None
    parameters: _WireParameters | None = None


_envelope_decoder = msgspec.json.Decoder(_WireEnvelope)


@dataclass(frozen=True, slots=True)
class ResponseParameters:
    """Structured hints attached to some error envelopes."""

    migrate_to_chat_id: int | None = None
    retry_after: int | None = None  # seconds


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Outer envelope of one API response with the result left undecoded."""

    ok: bool
    result: bytes | None = None
    error_code: int | None = None
    description: str | None = None
    parameters: ResponseParameters | None = None

    def __post_init__(self) -> None:
        if self.ok:
            if self.result is None:
                raise ValueError("successful response requires a result")
            if self.error_code is not None or self.description is not None:
                raise ValueError("successful response cannot carry error fields")
        else:
            if self.result is not None:
                raise ValueError("failed response cannot carry a result")
            if self.error_code is None or self.description is None:
                raise ValueError("failed response requires error_code and description")

    @classmethod
    def success(cls, result: bytes) -> ApiResponse:
        return cls(ok=True, result=result)

    @classmethod
    def failure(
        cls,
        error_code: int,
        description: str,
        *,
        parameters: ResponseParameters | None = None,
    ) -> ApiResponse:
        return cls(ok=False, error_code=error_code, description=description, parameters=parameters)

    @property
    def retry_after(self) -> int | None:
        return self.parameters.retry_after if self.parameters else None

    @property
    def migrate_to_chat_id(self) -> int | None:
        return self.parameters.migrate_to_chat_id if self.parameters else None

    def raise_for_error(self) -> None:
        """Raise ``ApiError`` if the platform reported a failure."""
        if self.ok:
            return
        raise ApiError(self.error_code or 0, self.description or "", parameters=self.parameters)

    def raw_result(self) -> bytes:
        """Raise on failure, otherwise return the undecoded result bytes."""
        self.raise_for_error()
        if self.result is None:
            raise MalformedEnvelope("Successful response carries no result")
        return self.result

    def unwrap(self, result_type: type[T]) -> T:
        """Raise on failure, otherwise decode the result as ``result_type``."""
        return decode_result(self.raw_result(), result_type)


def parse_envelope(body: bytes | str) -> ApiResponse:
    """Parse the outer envelope of a response body.

    Raises:
        MalformedEnvelope: If the body is not a JSON object with a boolean
            ``ok`` field, or a known envelope field has the wrong type.
    """
    try:
        wire = _envelope_decoder.decode(body)
    except msgspec.DecodeError as exc:
        raise MalformedEnvelope(f"Malformed response envelope: {exc}") from exc

    if wire.ok:
        raw = bytes(wire.result)
        return ApiResponse.success(raw or _NULL)

    parameters = None
    if wire.parameters is not None:
        parameters = ResponseParameters(
            migrate_to_chat_id=wire.parameters.migrate_to_chat_id,
            retry_after=wire.parameters.retry_after,
        )
    return ApiResponse.failure(
        wire.error_code if wire.error_code is not None else 0,
        wire.description or "",
        parameters=parameters,
    )


def decode_result(raw: bytes, result_type: Any) -> Any:
    """Decode a raw result span into ``result_type``.

    ``result_type`` is anything msgspec can decode into: a record type, a
    ``list[...]`` of records, ``bool``, ``int``, ``str`` and so on. ``Update``
    and ``list[Update]`` go through the update decoder so that the tagged
    variant is built and bad items in a batch are skipped instead of failing
    the whole list.

    Raises:
        MalformedResult: If the bytes do not match ``result_type``.
        InvalidUpdate: If ``result_type`` is ``Update`` and the object is
            not a valid update.
    """
    if result_type is Update:
        return decode_update(raw)
    if get_origin(result_type) is list and get_args(result_type) == (Update,):
        return decode_updates(raw).updates

    try:
        return msgspec.json.decode(raw, type=result_type)
    except msgspec.DecodeError as exc:
        name = getattr(result_type, "__name__", repr(result_type))
        logger.debug("Result decode failed for %s: %s", name, exc)
        raise MalformedResult(f"Result is not a valid {name}: {exc}") from exc
