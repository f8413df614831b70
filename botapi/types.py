"""Core types for the bot API binding.

Payload records are immutable ``msgspec.Struct`` types so that a raw result
span can be decoded (and type-checked) straight into them. Unknown keys sent
by the platform are ignored, which keeps older clients working when new
fields appear.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from urllib.parse import ParseResult, urlparse

import msgspec

TELEGRAM_API_BASE = "https://api.telegram.org"

COMMAND_MARKER = "/"
MENTION_SEPARATOR = "@"

_WHITESPACE = re.compile(r"\s+")


class ChatType(str, Enum):
    """Kind of conversation a ``Chat`` represents."""

    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class MemberStatus(str, Enum):
    """Membership status reported in a ``ChatMember``."""

    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    LEFT = "left"
    KICKED = "kicked"


class _Record(msgspec.Struct, frozen=True, kw_only=True):
    """Base for wire records: immutable, keyword-only, unknown keys ignored."""


# ── People and chats ──────────────────────────────────────────────────


class User(_Record):
    id: int
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None
    is_bot: bool | None = None

    @property
    def display_name(self) -> str:
        """Username if set, otherwise first name plus last name when present."""
        if self.username:
            return self.username
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    def __str__(self) -> str:
        return self.display_name


class Chat(_Record):
    id: int
    type: str = ""
    title: str | None = None
    username: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    all_members_are_administrators: bool = False

    def is_private(self) -> bool:
        return self.type == ChatType.PRIVATE.value

    def is_group(self) -> bool:
        return self.type == ChatType.GROUP.value

    def is_supergroup(self) -> bool:
        return self.type == ChatType.SUPERGROUP.value

    def is_channel(self) -> bool:
        return self.type == ChatType.CHANNEL.value


class ChatMember(_Record):
    user: User | None = None
    status: str = ""

    def is_creator(self) -> bool:
        return self.status == MemberStatus.CREATOR.value

    def is_administrator(self) -> bool:
        return self.status == MemberStatus.ADMINISTRATOR.value

    def is_member(self) -> bool:
        return self.status == MemberStatus.MEMBER.value

    def has_left(self) -> bool:
        return self.status == MemberStatus.LEFT.value

    def was_kicked(self) -> bool:
        return self.status == MemberStatus.KICKED.value


# ── Media and attachments ─────────────────────────────────────────────


class PhotoSize(_Record):
    file_id: str
    width: int = 0
    height: int = 0
    file_size: int | None = None


class Audio(_Record):
    file_id: str
    duration: int = 0
    performer: str | None = None
    title: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Document(_Record):
    file_id: str
    thumbnail: PhotoSize | None = msgspec.field(default=None, name="thumb")
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Sticker(_Record):
    file_id: str
    width: int = 0
    height: int = 0
    thumbnail: PhotoSize | None = msgspec.field(default=None, name="thumb")
    emoji: str | None = None
    file_size: int | None = None


class Video(_Record):
    file_id: str
    width: int = 0
    height: int = 0
    duration: int = 0
    thumbnail: PhotoSize | None = msgspec.field(default=None, name="thumb")
    mime_type: str | None = None
    file_size: int | None = None


class Voice(_Record):
    file_id: str
    duration: int = 0
    mime_type: str | None = None
    file_size: int | None = None


class Animation(_Record):
    file_id: str
    thumbnail: PhotoSize | None = msgspec.field(default=None, name="thumb")
    file_name: str | None = None
    mime_type: str | None = None
    file_size: int | None = None


class Contact(_Record):
    phone_number: str
    first_name: str = ""
    last_name: str | None = None
    user_id: int | None = None


class Location(_Record):
    longitude: float
    latitude: float


class Venue(_Record):
    location: Location
    title: str = ""
    address: str = ""
    foursquare_id: str | None = None


class File(_Record):
    """A file ready to be downloaded through the platform's file endpoint.

    The link built by ``link()`` stays valid for at least an hour; after that
    a fresh ``getFile`` call is needed.
    """

    file_id: str
    file_size: int | None = None
    file_path: str | None = None

    def link(self, token: str, *, api_base: str = TELEGRAM_API_BASE) -> str:
        if not self.file_path:
            raise ValueError("File has no file_path to build a link from")
        return f"{api_base}/file/bot{token}/{self.file_path}"


class UserProfilePhotos(_Record):
    total_count: int = 0
    photos: tuple[tuple[PhotoSize, ...], ...] = ()


class MessageEntity(_Record):
    """A special span inside message text (mention, hashtag, bot_command, url...).

    ``offset`` and ``length`` are measured in UTF-16 code units.
    """

    type: str
    offset: int = 0
    length: int = 0
    url: str | None = None
    user: User | None = None

    def parse_url(self) -> ParseResult:
        if not self.url:
            raise ValueError("MessageEntity has no url")
        return urlparse(self.url)


class Game(_Record):
    title: str = ""
    description: str = ""
    photo: tuple[PhotoSize, ...] = ()
    text: str | None = None
    text_entities: tuple[MessageEntity, ...] = ()
    animation: Animation | None = None


class GameHighScore(_Record):
    position: int
    user: User
    score: int


# ── Messages ──────────────────────────────────────────────────────────


class _MessageFields(_Record):
    message_id: int
    from_user: User | None = msgspec.field(default=None, name="from")
    date: int = 0
    chat: Chat | None = None
    forward_from: User | None = None
    forward_from_chat: Chat | None = None
    forward_from_message_id: int | None = None
    forward_date: int | None = None
    edit_date: int | None = None
    text: str | None = None
    entities: tuple[MessageEntity, ...] | None = None
    audio: Audio | None = None
    document: Document | None = None
    game: Game | None = None
    photo: tuple[PhotoSize, ...] | None = None
    sticker: Sticker | None = None
    video: Video | None = None
    voice: Voice | None = None
    caption: str | None = None
    contact: Contact | None = None
    location: Location | None = None
    venue: Venue | None = None
    new_chat_member: User | None = None
    left_chat_member: User | None = None
    new_chat_title: str | None = None
    new_chat_photo: tuple[PhotoSize, ...] | None = None
    delete_chat_photo: bool = False
    group_chat_created: bool = False
    supergroup_chat_created: bool = False
    channel_chat_created: bool = False
    migrate_to_chat_id: int | None = None
    migrate_from_chat_id: int | None = None

    @property
    def time(self) -> datetime:
        """Send time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.date, tz=timezone.utc)

    def is_command(self) -> bool:
        return bool(self.text) and self.text.startswith(COMMAND_MARKER)

    def command(self) -> str:
        """Command name without the marker or a trailing ``@botname``.

        Returns an empty string when the message is not a command.
        """
        if not self.is_command():
            return ""
        token = _WHITESPACE.split(self.text, maxsplit=1)[0][len(COMMAND_MARKER):]
        return token.split(MENTION_SEPARATOR, 1)[0]

    def command_arguments(self) -> str:
        """Everything after the command token, or an empty string."""
        if not self.is_command():
            return ""
        parts = _WHITESPACE.split(self.text, maxsplit=1)
        return parts[1] if len(parts) == 2 else ""


class ReplyMessage(_MessageFields):
    """A message embedded in another one (reply target or pinned message).

    It has no ``reply_to_message`` or ``pinned_message`` fields: the platform
    never nests them and the decoder drops them if it does.
    """


class Message(_MessageFields):
    reply_to_message: ReplyMessage | None = None
    pinned_message: ReplyMessage | None = None


# ── Inline mode and callbacks ─────────────────────────────────────────


class InlineQuery(_Record):
    id: str
    from_user: User | None = msgspec.field(default=None, name="from")
    location: Location | None = None
    query: str = ""
    offset: str = ""


class ChosenInlineResult(_Record):
    result_id: str
    from_user: User | None = msgspec.field(default=None, name="from")
    location: Location | None = None
    inline_message_id: str | None = None
    query: str = ""


class CallbackQuery(_Record):
    id: str
    from_user: User | None = msgspec.field(default=None, name="from")
    message: Message | None = None
    inline_message_id: str | None = None
    chat_instance: str | None = None
    data: str | None = None
    game_short_name: str | None = None


class WebhookInfo(_Record):
    url: str = ""
    has_custom_certificate: bool = False
    pending_update_count: int = 0
    last_error_date: int | None = None
    last_error_message: str | None = None

    def is_set(self) -> bool:
        return self.url != ""


# ── Client configuration ──────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class BotConfig:
    """Configuration for creating a bot transport."""

    bot_token: str
    api_base: str = TELEGRAM_API_BASE
    request_timeout: float = 10.0  # seconds, on top of any long-poll timeout
