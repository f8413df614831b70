"""
botapi — typed update pipeline for the Telegram Bot API.

Turns raw API bytes into typed values and streams inbound updates to
application code. Owns everything from "I have a response body" to "here is
the next update to handle." The application keeps the HTTP server (for
webhooks), retry policy, and whatever it does with each update.

Installation::

    pip install botapi

Quick start — long polling::

    from botapi import BotClient, BotConfig, HttpTransport, UpdatePoller, UpdateStream

    transport = HttpTransport(BotConfig(bot_token="123456789:ABCdef..."))
    stream = UpdateStream(maxsize=100)
    poller = UpdatePoller(BotClient(transport), stream)
    poller.start()

    for update in stream:
        if update.is_command():
            print(update.command(), update.command_arguments())
        elif update.callback_query is not None:
            print("button:", update.callback_query.data)

Quick start — webhook (inside any web framework's request handler)::

    from botapi import UpdateStream, WebhookHandler

    stream = UpdateStream()
    handler = WebhookHandler(stream)

    def telegram_webhook(request_body: bytes):
        handler.handle(request_body)  # invalid bodies are logged and dropped
        return 200

Two-stage response decoding::

    from botapi import File, parse_envelope

    response = parse_envelope(body)       # outer {"ok": ...} only
    if response.retry_after:
        schedule_retry(response.retry_after)
    file = response.unwrap(File)          # raises ApiError on failure

Dropping a stale backlog::

    dropped = stream.discard_all()

For testing::

    from botapi import BotClient, MockTransport, ok_body

    transport = MockTransport([ok_body([{"update_id": 1, "message": {...}}])])
    batch = BotClient(transport).get_updates()
    assert transport.sent[0].method == "getUpdates"

Module overview
---------------
- ``envelope``   — ApiResponse, parse_envelope, decode_result
- ``update``     — Update tagged variant, UpdateKind, decode_update(s)
- ``stream``     — UpdateStream with back-pressure and discard_all
- ``types``      — Payload records (Message, User, Chat, ...) and BotConfig
- ``errors``     — MalformedEnvelope, ApiError, InvalidUpdate, StreamClosed
- ``transport/`` — Transport protocol, HttpTransport (httpx)
- ``client``     — BotClient: typed calls over a transport
- ``polling``    — UpdatePoller (getUpdates loop feeding a stream)
- ``webhook``    — WebhookHandler (request bodies feeding a stream)
- ``mock``       — MockTransport and envelope helpers for tests

What this library does NOT own (stays in the consuming app):
- Outbound message building (keyboards, inline results, send parameters)
- Webhook HTTP server and TLS
- Rate limiting and retry policy beyond honoring retry_after while polling
- Downloading files (``File.link`` only builds the URL)
"""

from .client import BotClient
from .envelope import ApiResponse, ResponseParameters, decode_result, parse_envelope
from .errors import (
    ApiError,
    BotAPIError,
    InvalidUpdate,
    MalformedEnvelope,
    MalformedResult,
    StreamClosed,
    TransportError,
)
from .mock import MockTransport, error_body, ok_body
from .polling import UpdatePoller
from .stream import StreamState, UpdateStream
from .transport import HttpTransport, Transport
from .types import (
    Animation,
    Audio,
    BotConfig,
    CallbackQuery,
    Chat,
    ChatMember,
    ChatType,
    ChosenInlineResult,
    Contact,
    Document,
    File,
    Game,
    GameHighScore,
    InlineQuery,
    Location,
    MemberStatus,
    Message,
    MessageEntity,
    PhotoSize,
    ReplyMessage,
    Sticker,
    User,
    UserProfilePhotos,
    Venue,
    Video,
    Voice,
    WebhookInfo,
)
from .update import Update, UpdateBatch, UpdateKind, decode_update, decode_updates
from .webhook import WebhookHandler

__all__ = [
    # Envelope
    "ApiResponse",
    "ResponseParameters",
    "decode_result",
    "parse_envelope",
    # Updates
    "Update",
    "UpdateBatch",
    "UpdateKind",
    "decode_update",
    "decode_updates",
    # Stream
    "StreamState",
    "UpdateStream",
    # Ingestion
    "UpdatePoller",
    "WebhookHandler",
    # Transport and client
    "BotClient",
    "BotConfig",
    "HttpTransport",
    "Transport",
    "MockTransport",
    "error_body",
    "ok_body",
    # Errors
    "ApiError",
    "BotAPIError",
    "InvalidUpdate",
    "MalformedEnvelope",
    "MalformedResult",
    "StreamClosed",
    "TransportError",
    # Types — payloads
    "Animation",
    "Audio",
    "CallbackQuery",
    "Chat",
    "ChatMember",
    "ChatType",
    "ChosenInlineResult",
    "Contact",
    "Document",
    "File",
    "Game",
    "GameHighScore",
    "InlineQuery",
    "Location",
    "MemberStatus",
    "Message",
    "MessageEntity",
    "PhotoSize",
    "ReplyMessage",
    "Sticker",
    "User",
    "UserProfilePhotos",
    "Venue",
    "Video",
    "Voice",
    "WebhookInfo",
]
