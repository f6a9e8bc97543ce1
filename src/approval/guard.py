"""Apply-at-most-once guard for replies on a conversation thread.

Polling windows overlap, so the same inbound message can be seen more than
once. A message is applied only if its timestamp is newer than the thread's
``last_applied_at``; the check and the bump happen in one transaction
scoped to the thread.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime

from contentq.content.store import ContentStore, thread_scope
from contentq.errors import ThreadNotFound

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class IdempotencyGuard:
    """Decides whether an inbound message on a thread still needs applying."""

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def should_apply(self, thread_id: str, message_at: datetime) -> bool:
        """False when ``message_at`` is not newer than the last applied message."""
        thread = self._store.get_thread(thread_id)
        if thread is None:
            raise ThreadNotFound(thread_id)
        if thread.last_applied_at is None:
            return True
        return _as_utc(message_at) > _as_utc(thread.last_applied_at)

    @contextmanager
    def claim(self, thread_id: str, message_at: datetime) -> Iterator[bool]:
        """Hold the thread while a message is applied.

        Yields whether the message is new. When it is and the block finishes
        without error, ``last_applied_at`` moves to ``message_at`` inside the
        same transaction; if the block raises, nothing is recorded and a
        later retry of the message can still apply.
        """
        with self._store.transaction(thread_scope(thread_id)):
            fresh = self.should_apply(thread_id, message_at)
            if not fresh:
                logger.info(
                    "Thread %s: message at %s already applied, skipping",
                    thread_id,
                    message_at.isoformat(),
                )
            yield fresh
            if fresh:
                self._store.update_thread(thread_id, last_applied_at=_as_utc(message_at))
