"""Inbound updates as a tagged variant.

On the wire an update is one object with an ``update_id`` and at most one of
several optional payload keys. Here it becomes an ``Update`` holding a single
``kind`` and its ``payload``, so two payloads can never be visible at once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

import msgspec

from .errors import InvalidUpdate, MalformedResult
from .types import CallbackQuery, ChosenInlineResult, InlineQuery, Message

logger = logging.getLogger(__name__)

Payload = Union[Message, InlineQuery, ChosenInlineResult, CallbackQuery]


class UpdateKind(str, Enum):
    """Payload kinds, declared in canonical priority order.

    When an object carries several payload keys, the first kind listed here
    wins.
    """

    MESSAGE = "message"
    EDITED_MESSAGE = "edited_message"
    CHANNEL_POST = "channel_post"
    EDITED_CHANNEL_POST = "edited_channel_post"
    INLINE_QUERY = "inline_query"
    CHOSEN_INLINE_RESULT = "chosen_inline_result"
    CALLBACK_QUERY = "callback_query"

    @property
    def payload_type(self) -> type[Payload]:
        return _PAYLOAD_TYPES[self]


_PAYLOAD_TYPES: dict[UpdateKind, type[Payload]] = {
    UpdateKind.MESSAGE: Message,
    UpdateKind.EDITED_MESSAGE: Message,
    UpdateKind.CHANNEL_POST: Message,
    UpdateKind.EDITED_CHANNEL_POST: Message,
    UpdateKind.INLINE_QUERY: InlineQuery,
    UpdateKind.CHOSEN_INLINE_RESULT: ChosenInlineResult,
    UpdateKind.CALLBACK_QUERY: CallbackQuery,
}


@dataclass(frozen=True, slots=True)
class Update:
    """One inbound event.

    ``kind`` and ``payload`` are both ``None`` for an update whose payload key
    this library does not know yet; consumers should treat it as a no-op.
    """

    update_id: int
    kind: UpdateKind | None = None
    payload: Payload | None = None

    def __post_init__(self) -> None:
        if self.kind is None:
            if self.payload is not None:
                raise ValueError("payload given without a kind")
        elif not isinstance(self.payload, self.kind.payload_type):
            raise ValueError(
                f"{self.kind.value} update requires a {self.kind.payload_type.__name__} payload"
            )

    @classmethod
    def of(cls, update_id: int, kind: UpdateKind | None = None, payload: Payload | None = None) -> Update:
        return cls(update_id=update_id, kind=kind, payload=payload)

    def _payload_for(self, kind: UpdateKind) -> Any:
        return self.payload if self.kind is kind else None

    @property
    def message(self) -> Message | None:
        return self._payload_for(UpdateKind.MESSAGE)

    @property
    def edited_message(self) -> Message | None:
        return self._payload_for(UpdateKind.EDITED_MESSAGE)

    @property
    def channel_post(self) -> Message | None:
        return self._payload_for(UpdateKind.CHANNEL_POST)

    @property
    def edited_channel_post(self) -> Message | None:
        return self._payload_for(UpdateKind.EDITED_CHANNEL_POST)

    @property
    def inline_query(self) -> InlineQuery | None:
        return self._payload_for(UpdateKind.INLINE_QUERY)

    @property
    def chosen_inline_result(self) -> ChosenInlineResult | None:
        return self._payload_for(UpdateKind.CHOSEN_INLINE_RESULT)

    @property
    def callback_query(self) -> CallbackQuery | None:
        return self._payload_for(UpdateKind.CALLBACK_QUERY)

    def is_command(self) -> bool:
        message = self.message
        return message.is_command() if message is not None else False

    def command(self) -> str:
        message = self.message
        return message.command() if message is not None else ""

    def command_arguments(self) -> str:
        message = self.message
        return message.command_arguments() if message is not None else ""


@dataclass(frozen=True, slots=True)
class UpdateBatch:
    """Result of decoding one ``getUpdates`` array."""

    updates: list[Update] = field(default_factory=list)
    skipped: list[InvalidUpdate] = field(default_factory=list)

    @property
    def next_offset(self) -> int | None:
        """Offset for the next poll: one past the highest identifier seen.

        Skipped records count too, otherwise the platform would resend them
        forever.
        """
        ids = [update.update_id for update in self.updates]
        ids.extend(error.update_id for error in self.skipped if error.update_id is not None)
        return max(ids) + 1 if ids else None


_fields_decoder = msgspec.json.Decoder(dict[str, msgspec.Raw])
_items_decoder = msgspec.json.Decoder(list[msgspec.Raw])


def _decode_raw(value: Any, type_: type) -> Any:
    return msgspec.json.decode(value, type=type_)


def _convert(value: Any, type_: type) -> Any:
    return msgspec.convert(value, type=type_)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, msgspec.Raw):
        return bytes(value) != b"null"
    return True


def decode_update(data: bytes | str | msgspec.Raw | Mapping[str, Any], *, strict: bool = False) -> Update:
    """Decode one update object.

    ``data`` is either the raw JSON (a webhook body, one element of a
    ``getUpdates`` result) or a mapping a web framework already parsed.

    Keys this library does not know are ignored. When several payload keys
    are set, ``strict`` rejects the object; otherwise the first one in
    ``UpdateKind`` order is kept.

    Raises:
        InvalidUpdate: If the object is not an update or a present field has
            the wrong type. ``update_id`` is attached when it was readable.
    """
    if isinstance(data, Mapping):
        return _build_update(data, _convert, strict)
    try:
        fields = _fields_decoder.decode(data)
    except msgspec.DecodeError as exc:
        raise InvalidUpdate(f"Update is not a JSON object: {exc}") from exc
    return _build_update(fields, _decode_raw, strict)


def _build_update(
    fields: Mapping[str, Any],
    decode: Callable[[Any, type], Any],
    strict: bool,
) -> Update:
    if "update_id" not in fields:
        raise InvalidUpdate("Update has no update_id")
    try:
        update_id = decode(fields["update_id"], int)
    except msgspec.DecodeError as exc:
        raise InvalidUpdate(f"Invalid update_id: {exc}") from exc

    present = [kind for kind in UpdateKind if _is_present(fields.get(kind.value))]
    if not present:
        logger.debug("Update %s carries no known payload", update_id)
        return Update(update_id=update_id)

    if len(present) > 1:
        names = ", ".join(kind.value for kind in present)
        if strict:
            raise InvalidUpdate(f"Update {update_id} has several payloads: {names}", update_id=update_id)
        logger.debug("Update %s has several payloads (%s); keeping %s", update_id, names, present[0].value)

    kind = present[0]
    try:
        payload = decode(fields[kind.value], kind.payload_type)
    except msgspec.DecodeError as exc:
        raise InvalidUpdate(f"Update {update_id} has an invalid {kind.value}: {exc}", update_id=update_id) from exc
    return Update(update_id=update_id, kind=kind, payload=payload)


def decode_updates(raw: bytes | str, *, strict: bool = False) -> UpdateBatch:
    """Decode a ``getUpdates`` result array.

    Each element is decoded on its own. A bad element is logged and recorded
    in ``UpdateBatch.skipped``; the rest of the batch is still returned in
    order.

    Raises:
        MalformedResult: If ``raw`` is not a JSON array.
    """
    try:
        items = _items_decoder.decode(raw)
    except msgspec.DecodeError as exc:
        raise MalformedResult(f"Updates result is not a JSON array: {exc}") from exc

    updates: list[Update] = []
    skipped: list[InvalidUpdate] = []
    for item in items:
        try:
            updates.append(decode_update(item, strict=strict))
        except InvalidUpdate as exc:
            logger.warning("Skipping invalid update (update_id=%s): %s", exc.update_id, exc)
            skipped.append(exc)
    return UpdateBatch(updates=updates, skipped=skipped)
