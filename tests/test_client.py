"""Tests for the BotClient."""

import pytest

from botapi import (
    ApiError,
    BotClient,
    File,
    MalformedEnvelope,
    MockTransport,
    UpdateKind,
    User,
    WebhookInfo,
    error_body,
    ok_body,
)


class TestCall:
    def test_call_decodes_result(self, mock_transport: MockTransport):
        mock_transport.queue(ok_body({"id": 99, "first_name": "Bot", "is_bot": True}))
        client = BotClient(mock_transport)

        me = client.get_me()

        assert me == User(id=99, first_name="Bot", is_bot=True)
        assert mock_transport.sent[0].method == "getMe"

    def test_call_raises_api_error(self, mock_transport: MockTransport):
        mock_transport.queue(error_body(400, "Bad Request: chat not found"))
        client = BotClient(mock_transport)

        with pytest.raises(ApiError, match="chat not found") as excinfo:
            client.call("getChat", User, {"chat_id": 1})

        assert excinfo.value.code == 400

    def test_request_returns_envelope_without_decoding(self, mock_transport: MockTransport):
        mock_transport.queue(ok_body({"anything": [1, 2, 3]}))
        client = BotClient(mock_transport)

        response = client.request("someFutureMethod")

        assert response.ok
        assert response.result == b'{"anything": [1, 2, 3]}'

    def test_malformed_body(self, mock_transport: MockTransport):
        mock_transport.queue(b"<html>502 Bad Gateway</html>")
        client = BotClient(mock_transport)

        with pytest.raises(MalformedEnvelope):
            client.get_me()

    def test_typed_helpers(self, mock_transport: MockTransport):
        mock_transport.queue(
            ok_body({"file_id": "f1", "file_path": "voice/1.oga"}),
            ok_body({"url": "", "has_custom_certificate": False, "pending_update_count": 4}),
            ok_body(True),
            ok_body(True),
        )
        client = BotClient(mock_transport)

        assert client.get_file("f1") == File(file_id="f1", file_path="voice/1.oga")
        assert client.get_webhook_info() == WebhookInfo(pending_update_count=4)
        assert client.set_webhook("https://example.com/hook") is True
        assert client.delete_webhook() is True

        assert [call.method for call in mock_transport.sent] == [
            "getFile",
            "getWebhookInfo",
            "setWebhook",
            "deleteWebhook",
        ]
        assert mock_transport.sent[0].params == {"file_id": "f1"}


class TestGetUpdates:
    def test_params_and_decoding(self, mock_transport: MockTransport, message_payload: dict):
        mock_transport.queue(ok_body([{"update_id": 3, "message": message_payload}]))
        client = BotClient(mock_transport)

        batch = client.get_updates(3, limit=50, timeout=20)

        assert [update.kind for update in batch.updates] == [UpdateKind.MESSAGE]
        call = mock_transport.sent[0]
        assert call.method == "getUpdates"
        assert call.params == {"offset": 3, "limit": 50, "timeout": 20}
        assert call.timeout == 20

    def test_offset_omitted_when_none(self, mock_transport: MockTransport):
        BotClient(mock_transport).get_updates()
        assert "offset" not in mock_transport.sent[0].params

    def test_flood_control_error(self, mock_transport: MockTransport):
        mock_transport.queue(error_body(429, "Too Many Requests: retry after 9", retry_after=9))

        with pytest.raises(ApiError) as excinfo:
            BotClient(mock_transport).get_updates()

        assert excinfo.value.retry_after == 9
