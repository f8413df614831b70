"""Webhook ingestion source.

The HTTP server itself lives in the application. It passes each request body
to ``WebhookHandler.handle`` and answers 200 whatever the outcome, so the
platform does not redeliver an update this library already rejected.
"""

from __future__ import annotations

import logging
import threading
from collections import deque

from .errors import InvalidUpdate
from .stream import UpdateStream
from .update import Update, decode_update

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_WINDOW = 1000


class WebhookHandler:
    """Decodes webhook bodies and sends them to an ``UpdateStream``.

    The platform may deliver the same update twice (for instance after a slow
    response). The last ``dedup_window`` identifiers are remembered and
    repeats are dropped; pass ``dedup_window=0`` to disable.
    """

    def __init__(
        self,
        stream: UpdateStream,
        *,
        strict: bool = False,
        dedup_window: int = DEFAULT_DEDUP_WINDOW,
    ) -> None:
        if dedup_window < 0:
            raise ValueError("dedup_window must be non-negative")
        self.stream = stream
        self.strict = strict
        self._recent: deque[int] = deque(maxlen=dedup_window or None)
        self._recent_ids: set[int] = set()
        self._dedup = dedup_window > 0
        self._lock = threading.Lock()

    def handle(self, body: bytes | str) -> Update | None:
        """Decode one webhook body and send it.

        Returns the update that was sent, or ``None`` when the body was
        invalid or a repeat.

        Raises:
            StreamClosed: If the stream no longer accepts updates.
        """
        try:
            update = decode_update(body, strict=self.strict)
        except InvalidUpdate as exc:
            logger.warning("Ignoring invalid webhook update (update_id=%s): %s", exc.update_id, exc)
            return None

        if self._dedup and not self._remember(update.update_id):
            logger.info("Ignoring repeated webhook update %s", update.update_id)
            return None

        self.stream.send(update)
        return update

    def _remember(self, update_id: int) -> bool:
        """Record ``update_id``; False if it was already in the window."""
        with self._lock:
            if update_id in self._recent_ids:
                return False
            if len(self._recent) == self._recent.maxlen:
                self._recent_ids.discard(self._recent[0])
            self._recent.append(update_id)
            self._recent_ids.add(update_id)
            return True
