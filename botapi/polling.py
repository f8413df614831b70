"""Long-poll ingestion source.

Repeatedly calls ``getUpdates`` with a moving offset and feeds the decoded
updates into an ``UpdateStream`` in the order the platform returned them.
"""

from __future__ import annotations

import logging
import threading

from .client import DEFAULT_POLL_LIMIT, DEFAULT_POLL_TIMEOUT, BotClient
from .errors import ApiError, BotAPIError, StreamClosed
from .stream import UpdateStream

logger = logging.getLogger(__name__)

DEFAULT_ERROR_BACKOFF_SECONDS = 3.0


class UpdatePoller:
    """Feeds an ``UpdateStream`` from ``getUpdates``.

    Usage::

        stream = UpdateStream()
        poller = UpdatePoller(BotClient(transport), stream)
        poller.start()
        for update in stream:
            ...
        # elsewhere: poller.stop()

    The poller is the stream's only producer. Invalid updates are logged and
    skipped; the offset still moves past them. An ``ApiError`` carrying
    ``retry_after`` (flood control) delays the next request by exactly that
    many seconds. Any other failure waits ``error_backoff`` seconds.
    """

    def __init__(
        self,
        client: BotClient,
        stream: UpdateStream,
        *,
        offset: int | None = None,
        limit: int = DEFAULT_POLL_LIMIT,
        timeout: int = DEFAULT_POLL_TIMEOUT,
        error_backoff: float = DEFAULT_ERROR_BACKOFF_SECONDS,
        strict: bool = False,
    ) -> None:
        self.client = client
        self.stream = stream
        self.offset = offset
        self.limit = limit
        self.timeout = timeout
        self.error_backoff = error_backoff
        self.strict = strict
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        """Poll once, send every decoded update, and return how many were sent.

        Raises:
            ApiError: If ``getUpdates`` reported a failure.
            StreamClosed: If the stream was closed while sending.
        """
        batch = self.client.get_updates(
            self.offset,
            limit=self.limit,
            timeout=self.timeout,
            strict=self.strict,
        )
        sent = 0
        for update in batch.updates:
            self.stream.send(update)
            self.offset = update.update_id + 1
            sent += 1
        if batch.next_offset is not None:
            self.offset = max(self.offset or 0, batch.next_offset)
        if batch.skipped:
            logger.warning("Skipped %d invalid update(s); next offset %s", len(batch.skipped), self.offset)
        return sent

    def run(self) -> None:
        """Poll until ``stop()`` is called or the stream closes, then close the stream."""
        logger.info("Update poller started (offset=%s)", self.offset)
        try:
            while not self._stop.is_set():
                try:
                    self.run_once()
                except StreamClosed:
                    break
                except ApiError as exc:
                    if exc.retry_after is not None:
                        logger.warning("Flood control on getUpdates, retrying in %ss", exc.retry_after)
                        self._stop.wait(exc.retry_after)
                    else:
                        logger.warning("getUpdates failed: %s; retrying in %.1fs", exc, self.error_backoff)
                        self._stop.wait(self.error_backoff)
                except BotAPIError as exc:
                    logger.warning("getUpdates failed: %s; retrying in %.1fs", exc, self.error_backoff)
                    self._stop.wait(self.error_backoff)
                except Exception:
                    logger.exception("Unexpected error in update poller")
                    self._stop.wait(self.error_backoff)
        finally:
            self.stream.close()
            logger.info("Update poller stopped (offset=%s)", self.offset)

    def start(self) -> None:
        """Run the poll loop on a daemon thread."""
        if self.running:
            raise RuntimeError("Update poller is already running")
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="botapi-update-poller", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Stop polling and close the stream so consumers drain and finish.

        ``timeout`` bounds the wait for an in-flight long poll to return.
        """
        self._stop.set()
        self.stream.close()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
