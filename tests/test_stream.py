"""Tests for the UpdateStream."""

import asyncio
import threading
import time

import pytest

from botapi import StreamClosed, StreamState, Update, UpdateStream


def _update(update_id: int) -> Update:
    return Update(update_id=update_id)


def _run_in_thread(target) -> tuple[threading.Thread, dict]:
    """Run ``target`` on a thread, capturing its return value or exception."""
    outcome: dict = {}

    def runner():
        try:
            outcome["value"] = target()
        except Exception as exc:
            outcome["error"] = exc

    thread = threading.Thread(target=runner, daemon=True)
    thread.start()
    return thread, outcome


class TestUpdateStreamBasics:
    def test_rejects_non_positive_maxsize(self):
        with pytest.raises(ValueError, match="maxsize"):
            UpdateStream(maxsize=0)

    def test_fifo_order(self, stream: UpdateStream):
        for update_id in (5, 6, 7):
            stream.send(_update(update_id))

        assert [stream.receive().update_id for _ in range(3)] == [5, 6, 7]

    def test_len_and_state(self, stream: UpdateStream):
        assert stream.state is StreamState.OPEN
        stream.send(_update(1))
        assert len(stream) == 1
        assert stream.maxsize == 10
        assert not stream.closed

    def test_receive_timeout(self, stream: UpdateStream):
        with pytest.raises(TimeoutError):
            stream.receive(timeout=0.05)

    def test_send_blocks_when_full(self):
        stream = UpdateStream(maxsize=2)
        stream.send(_update(1))
        stream.send(_update(2))

        with pytest.raises(TimeoutError):
            stream.send(_update(3), timeout=0.05)
        assert len(stream) == 2

    def test_back_pressure_releases_when_consumed(self):
        stream = UpdateStream(maxsize=1)
        stream.send(_update(1))
        thread, outcome = _run_in_thread(lambda: stream.send(_update(2)))

        time.sleep(0.05)
        assert thread.is_alive()
        assert stream.receive(timeout=1).update_id == 1

        thread.join(timeout=1)
        assert not thread.is_alive()
        assert "error" not in outcome
        assert stream.receive(timeout=1).update_id == 2


class TestClose:
    def test_draining_then_closed(self, stream: UpdateStream):
        for update_id in (5, 6, 7):
            stream.send(_update(update_id))
        stream.close()

        assert stream.state is StreamState.DRAINING
        assert [update.update_id for update in stream] == [5, 6, 7]
        assert stream.state is StreamState.CLOSED
        with pytest.raises(StreamClosed):
            stream.receive()

    def test_close_empty_stream_is_closed(self, stream: UpdateStream):
        stream.close()
        assert stream.closed
        with pytest.raises(StreamClosed):
            stream.receive()

    def test_close_is_idempotent(self, stream: UpdateStream):
        stream.send(_update(1))
        stream.close()
        stream.close()
        assert stream.state is StreamState.DRAINING

    def test_send_after_close(self, stream: UpdateStream):
        stream.close()
        with pytest.raises(StreamClosed):
            stream.send(_update(1))

    def test_close_wakes_blocked_receiver(self, stream: UpdateStream):
        thread, outcome = _run_in_thread(stream.receive)
        time.sleep(0.05)
        assert thread.is_alive()

        stream.close()
        thread.join(timeout=1)

        assert not thread.is_alive()
        assert isinstance(outcome["error"], StreamClosed)

    def test_close_wakes_blocked_sender(self):
        stream = UpdateStream(maxsize=1)
        stream.send(_update(1))
        thread, outcome = _run_in_thread(lambda: stream.send(_update(2)))
        time.sleep(0.05)

        stream.close()
        thread.join(timeout=1)

        assert not thread.is_alive()
        assert isinstance(outcome["error"], StreamClosed)
        assert [update.update_id for update in stream] == [1]

    def test_context_manager_closes(self):
        with UpdateStream() as stream:
            stream.send(_update(1))
        assert stream.state is StreamState.DRAINING


class TestDiscardAll:
    def test_drops_buffered_updates(self, stream: UpdateStream):
        for update_id in range(4):
            stream.send(_update(update_id))

        assert stream.discard_all() == 4
        assert len(stream) == 0

    def test_empty_stream(self, stream: UpdateStream):
        assert stream.discard_all() == 0

    def test_receive_after_discard_waits_for_new_update(self, stream: UpdateStream):
        stream.send(_update(1))
        stream.send(_update(2))
        stream.discard_all()

        with pytest.raises(TimeoutError):
            stream.receive(timeout=0.05)

        thread, outcome = _run_in_thread(lambda: stream.receive(timeout=2))
        time.sleep(0.05)
        stream.send(_update(3))
        thread.join(timeout=2)

        assert outcome["value"].update_id == 3

    def test_updates_sent_after_discard_are_kept(self, stream: UpdateStream):
        stream.send(_update(1))
        stream.discard_all()
        stream.send(_update(2))

        assert stream.receive(timeout=1).update_id == 2

    def test_unblocks_producer(self):
        stream = UpdateStream(maxsize=1)
        stream.send(_update(1))
        thread, outcome = _run_in_thread(lambda: stream.send(_update(2)))
        time.sleep(0.05)

        assert stream.discard_all() == 1
        thread.join(timeout=1)

        assert "error" not in outcome
        assert stream.receive(timeout=1).update_id == 2

    def test_draining_stream_becomes_closed(self, stream: UpdateStream):
        stream.send(_update(1))
        stream.close()

        assert stream.discard_all() == 1
        assert stream.closed
        with pytest.raises(StreamClosed):
            stream.receive(timeout=1)

    def test_terminates_with_continuous_producer(self):
        stream = UpdateStream(maxsize=16)
        total = 2000

        def produce():
            for update_id in range(total):
                stream.send(_update(update_id))
            stream.close()

        producer = threading.Thread(target=produce, daemon=True)
        producer.start()

        dropped = sum(stream.discard_all() for _ in range(50))
        received = [update.update_id for update in stream]
        producer.join(timeout=5)

        assert not producer.is_alive()
        assert received == sorted(received)
        assert len(set(received)) == len(received)
        assert dropped + len(received) == total


class TestConcurrentConsumers:
    def test_every_update_is_delivered_once(self):
        stream = UpdateStream(maxsize=8)
        total = 500
        results: list[list[int]] = [[], [], []]

        def consume(bucket: list[int]):
            for update in stream:
                bucket.append(update.update_id)

        consumers = [threading.Thread(target=consume, args=(bucket,), daemon=True) for bucket in results]
        for consumer in consumers:
            consumer.start()
        for update_id in range(total):
            stream.send(_update(update_id))
        stream.close()
        for consumer in consumers:
            consumer.join(timeout=5)

        assert all(not consumer.is_alive() for consumer in consumers)
        delivered = [update_id for bucket in results for update_id in bucket]
        assert sorted(delivered) == list(range(total))
        for bucket in results:
            assert bucket == sorted(bucket)


class TestReceiveAsync:
    async def test_receive_async(self, stream: UpdateStream):
        stream.send(_update(9))
        update = await stream.receive_async(timeout=1)
        assert update.update_id == 9

    async def test_receive_async_end_of_stream(self, stream: UpdateStream):
        stream.close()
        with pytest.raises(StreamClosed):
            await stream.receive_async(timeout=1)

    async def test_cancelled_receive_does_not_lose_next_update(self, stream: UpdateStream):
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(stream.receive_async(), 0.05)

        stream.send(_update(1))
        await asyncio.sleep(0.1)

        assert len(stream) == 1
        assert (await stream.receive_async(timeout=1)).update_id == 1
        stream.close()

    async def test_cancelled_receive_keeps_order(self, stream: UpdateStream):
        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(stream.receive_async(), 0.05)

        stream.send(_update(1))
        await asyncio.sleep(0.1)
        stream.send(_update(2))
        stream.close()

        assert [update.update_id for update in stream] == [1, 2]
        assert stream.closed
