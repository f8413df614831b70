"""Bounded, ordered conduit between an ingestion source and its consumers.

One producer (a poller or webhook handler) calls ``send``; any number of
consumer threads call ``receive`` or iterate. The stream goes
``OPEN -> DRAINING -> CLOSED`` and never reopens::

    stream = UpdateStream(maxsize=100)
    poller = UpdatePoller(client, stream)
    poller.start()

    for update in stream:          # ends once the poller stops and the
        handle(update)             # buffered updates are consumed

A consumer that comes back from a long pause and does not want to process a
stale backlog calls ``stream.discard_all()``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import deque
from collections.abc import Iterator
from enum import Enum
from typing import Any

from .errors import StreamClosed
from .update import Update

logger = logging.getLogger(__name__)

DEFAULT_MAXSIZE = 100


class StreamState(str, Enum):
    """Lifecycle of an ``UpdateStream``."""

    OPEN = "open"
    DRAINING = "draining"  # producer finished, buffered updates remain
    CLOSED = "closed"


class UpdateStream:
    """Thread-safe FIFO of updates with back-pressure and bulk discard.

    ``send`` blocks while the buffer holds ``maxsize`` updates; ``receive``
    blocks while it is empty. Both accept an optional ``timeout`` in seconds
    and raise ``TimeoutError`` when it expires. ``close()`` wakes every
    blocked caller.
    """

    def __init__(self, maxsize: int = DEFAULT_MAXSIZE) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be positive")
        self._maxsize = maxsize
        self._buffer: deque[Update] = deque()
        self._state = StreamState.OPEN
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)

    @property
    def maxsize(self) -> int:
        return self._maxsize

    @property
    def state(self) -> StreamState:
        with self._lock:
            return self._state

    @property
    def closed(self) -> bool:
        return self.state is StreamState.CLOSED

    def __len__(self) -> int:
        with self._lock:
            return len(self._buffer)

    # ── Producer side ─────────────────────────────────────────────

    def send(self, update: Update, timeout: float | None = None) -> None:
        """Append an update, waiting for room if the stream is full.

        Raises:
            StreamClosed: If the stream was closed before or while waiting.
            TimeoutError: If ``timeout`` expired with the stream still full.
        """
        with self._not_full:
            has_room = self._not_full.wait_for(
                lambda: self._state is not StreamState.OPEN or len(self._buffer) < self._maxsize,
                timeout,
            )
            if self._state is not StreamState.OPEN:
                raise StreamClosed("Cannot send to a closed update stream")
            if not has_room:
                raise TimeoutError("Timed out waiting for room in the update stream")
            self._buffer.append(update)
            self._not_empty.notify()

    def close(self) -> None:
        """Stop accepting updates. Buffered updates stay readable.

        Safe to call more than once.
        """
        with self._lock:
            if self._state is not StreamState.OPEN:
                return
            pending = len(self._buffer)
            self._state = StreamState.DRAINING if pending else StreamState.CLOSED
            self._not_empty.notify_all()
            self._not_full.notify_all()
        logger.info("Update stream closed with %d buffered update(s)", pending)

    # ── Consumer side ─────────────────────────────────────────────

    def receive(self, timeout: float | None = None) -> Update:
        """Remove and return the oldest update.

        Raises:
            StreamClosed: End of stream, the stream is closed and empty.
            TimeoutError: If ``timeout`` expired with nothing to read.
        """
        with self._not_empty:
            ready = self._not_empty.wait_for(
                lambda: bool(self._buffer) or self._state is not StreamState.OPEN,
                timeout,
            )
            if not ready:
                raise TimeoutError("Timed out waiting for an update")
            if not self._buffer:
                raise StreamClosed("Update stream is closed")
            update = self._buffer.popleft()
            if self._state is StreamState.DRAINING and not self._buffer:
                self._state = StreamState.CLOSED
                self._not_empty.notify_all()
            self._not_full.notify()
            return update

    async def receive_async(self, timeout: float | None = None) -> Update:
        """Receive an update without blocking the event loop.

        The blocking ``receive`` runs in a worker thread. If the awaiting task
        is cancelled (for instance by ``asyncio.wait_for``), an update that
        worker takes afterwards goes back to the front of the buffer.
        """
        handoff = threading.Lock()
        taken: list[Update] = []
        abandoned = False

        def receive_in_thread() -> Update:
            update = self.receive(timeout)
            with handoff:
                if abandoned:
                    self._push_front(update)
                else:
                    taken.append(update)
            return update

        try:
            return await asyncio.to_thread(receive_in_thread)
        except asyncio.CancelledError:
            with handoff:
                abandoned = True
                if taken:
                    self._push_front(taken.pop())
            raise

    def _push_front(self, update: Update) -> None:
        """Return an update taken by an abandoned receive to the head of the buffer."""
        with self._lock:
            self._buffer.appendleft(update)
            # undo the DRAINING -> CLOSED step taken when it was removed
            if self._state is StreamState.CLOSED:
                self._state = StreamState.DRAINING
            self._not_empty.notify()

    def discard_all(self) -> int:
        """Drop every buffered update and return how many were dropped.

        Never waits on the producer. Updates sent after this returns are
        kept. A draining stream with nothing left becomes closed.
        """
        with self._lock:
            dropped = len(self._buffer)
            self._buffer.clear()
            if self._state is StreamState.DRAINING:
                self._state = StreamState.CLOSED
                self._not_empty.notify_all()
            if dropped:
                self._not_full.notify_all()
        if dropped:
            logger.info("Discarded %d buffered update(s)", dropped)
        return dropped

    def __iter__(self) -> Iterator[Update]:
        while True:
            try:
                yield self.receive()
            except StreamClosed:
                return

    def __enter__(self) -> UpdateStream:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
