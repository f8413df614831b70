"""Benchmark tests for the decode and stream hot paths.

Run with:
    pytest tests/test_benchmarks.py --benchmark-only -v
"""

from __future__ import annotations

import json

import pytest

from botapi import BotClient, MockTransport, Update, UpdateStream, decode_update, decode_updates, ok_body, parse_envelope

_MESSAGE = {
    "message_id": 1,
    "date": 1700000000,
    "chat": {"id": 42, "type": "supergroup", "title": "Bench"},
    "from": {"id": 7, "first_name": "Ada", "username": "ada"},
    "text": "/stats@benchbot today",
    "entities": [{"type": "bot_command", "offset": 0, "length": 15}],
    "reply_to_message": {"message_id": 0, "text": "earlier", "reply_to_message": {"message_id": -1}},
}


def _batch(size: int) -> bytes:
    return ok_body([{"update_id": i, "message": _MESSAGE} for i in range(size)])


class TestDecodeBenchmarks:
    def test_parse_envelope_large_result(self, benchmark):
        body = _batch(100)
        response = benchmark(parse_envelope, body)
        assert response.ok

    def test_decode_updates_batch(self, benchmark):
        raw = parse_envelope(_batch(100)).result
        batch = benchmark(decode_updates, raw)
        assert len(batch.updates) == 100

    def test_decode_single_webhook_update(self, benchmark):
        body = json.dumps({"update_id": 1, "message": _MESSAGE}).encode()
        update = benchmark(decode_update, body)
        assert update.command() == "stats"

    def test_client_get_updates(self, benchmark):
        transport = MockTransport(default_body=_batch(100))
        client = BotClient(transport)
        batch = benchmark(client.get_updates)
        assert batch.next_offset == 100


class TestStreamBenchmarks:
    @pytest.fixture(autouse=True)
    def _setup(self):
        self.updates = [Update(update_id=i) for i in range(1000)]
        yield

    def test_send_then_receive(self, benchmark):
        def run():
            stream = UpdateStream(maxsize=1000)
            for update in self.updates:
                stream.send(update)
            return [stream.receive() for _ in range(len(self.updates))]

        received = benchmark(run)
        assert received[-1].update_id == 999

    def test_discard_full_buffer(self, benchmark):
        def run():
            stream = UpdateStream(maxsize=1000)
            for update in self.updates:
                stream.send(update)
            return stream.discard_all()

        assert benchmark(run) == 1000
