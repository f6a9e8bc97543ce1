"""Turn a classified reviewer reply into one lifecycle transition."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, assert_never

from contentq.approval.guard import IdempotencyGuard
from contentq.approval.models import (
    Approve,
    ClassifiedReply,
    Resolution,
    Revise,
    parse_intent,
)
from contentq.content.models import ContentItem, ThreadStatus
from contentq.content.store import ContentStore
from contentq.errors import ThreadNotFound
from contentq.lifecycle.machine import LifecycleStateMachine

if TYPE_CHECKING:
    from contentq.review.transport import ReviewTransport

logger = logging.getLogger(__name__)


class ApprovalResolver:
    """Dispatch table from intent to lifecycle transition.

    Does no text generation of its own; the state machine's correctness
    does not depend on how good the upstream classification is.
    """

    def __init__(
        self,
        store: ContentStore,
        lifecycle: LifecycleStateMachine,
        guard: IdempotencyGuard,
        transport: ReviewTransport | None = None,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle
        self._guard = guard
        self._transport = transport

    def resolve(
        self,
        thread_id: str,
        reply_text: str,
        classified: ClassifiedReply,
        message_at: datetime,
    ) -> Resolution:
        """Apply one reply to the item its thread governs.

        A reply already applied returns ``applied=False`` and changes
        nothing. An unknown intent raises before any write so the reviewer
        can try again with clearer wording.
        """
        thread = self._store.get_thread(thread_id)
        if thread is None:
            raise ThreadNotFound(thread_id)
        content_id = thread.content_id

        with self._guard.claim(thread_id, message_at) as fresh:
            if not fresh:
                return Resolution(
                    thread_id=thread_id,
                    content_id=content_id,
                    applied=False,
                    message_at=message_at,
                )
            intent = parse_intent(classified, reply_text)
            item: ContentItem
            match intent:
                case Approve():
                    item = self._lifecycle.approve(content_id)
                    self._store.update_thread(thread_id, status=ThreadStatus.RESOLVED)
                case Revise(feedback=feedback):
                    item = self._lifecycle.revise(content_id, feedback, thread_id)
                case _:
                    assert_never(intent)

        if isinstance(intent, Approve) and self._transport is not None:
            self._transport.notify_confirmation(thread_id)

        logger.info(
            "Thread %s: applied %s to %s (state=%s, position=%s)",
            thread_id,
            intent.kind,
            content_id,
            item.state,
            item.queue_position,
        )
        return Resolution(
            thread_id=thread_id,
            content_id=content_id,
            applied=True,
            action=intent.kind,
            state=item.state,
            queue_position=item.queue_position,
            version=item.version,
            message_at=message_at,
        )
