"""Content lifecycle state machine.

Owns every state change of a ContentItem::

    draft -> pending_approval -> approved -> queued -> posted
                     |   ^
                     v   |
                   revision

Each operation validates against ``TRANSITIONS`` before writing anything and
runs in one store transaction, so a failure at any step (including the queue
or an external collaborator) leaves the item exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

from contentq.content.models import (
    ContentCategory,
    ContentItem,
    ContentState,
    ConversationThread,
)
from contentq.content.store import ContentStore, category_scope, content_scope
from contentq.errors import GenerationError, ThreadNotFound
from contentq.lifecycle.transitions import advance

if TYPE_CHECKING:
    from contentq.queue.engine import QueueEngine
    from contentq.review.transport import ReviewTransport

logger = logging.getLogger(__name__)


class Reviser(Protocol):
    """Produces a new version of a text from reviewer feedback."""

    def revise(self, original_text: str, feedback: str) -> str: ...


class LifecycleStateMachine:
    """Moves content items between lifecycle states.

    Collaborators are passed in explicitly so tests can swap in fakes.
    """

    def __init__(
        self,
        store: ContentStore,
        queue: QueueEngine,
        *,
        reviser: Reviser | None = None,
        transport: ReviewTransport | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._queue = queue
        self._reviser = reviser
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    def _transition(self, item: ContentItem, target: ContentState, **fields: Any) -> ContentItem:
        update = advance(item, target)
        updated = self._store.update(item.id, **update, **fields)
        logger.debug("Content %s: %s -> %s", item.id, item.state, target)
        return updated

    def _require_transport(self) -> ReviewTransport:
        if self._transport is None:
            raise RuntimeError("No review transport configured")
        return self._transport

    def create_draft(
        self,
        category: ContentCategory,
        text: str,
        *,
        title: str | None = None,
        excerpt: str | None = None,
        tags: list[str] | None = None,
        source_id: str | None = None,
    ) -> ContentItem:
        """Store a freshly generated piece of content as a draft."""
        if not text or not text.strip():
            raise GenerationError("Refusing to store a draft with empty text")
        content_id = self._store.insert(
            ContentItem(
                category=category,
                text=text.strip(),
                title=title,
                excerpt=excerpt,
                tags=list(tags or []),
                source_id=source_id,
            )
        )
        logger.info("Created %s draft %s", category, content_id)
        return self._store.require(content_id)

    def send_for_review(self, content_id: str) -> ConversationThread:
        """``draft -> pending_approval``: send the item out and open its thread."""
        transport = self._require_transport()
        with self._store.transaction(content_scope(content_id)):
            item = self._store.require(content_id)
            update = advance(item, ContentState.PENDING_APPROVAL)
            thread_id = transport.notify_for_review(item)
            thread = self._store.insert_thread(
                ConversationThread(
                    id=thread_id,
                    content_id=content_id,
                    last_applied_at=self._clock(),
                )
            )
            self._store.update(content_id, **update)
        logger.info("Sent %s for review on thread %s", content_id, thread_id)
        return thread

    def approve(self, content_id: str) -> ContentItem:
        """``pending_approval -> approved -> queued`` as one step.

        If the item cannot be enqueued the approval is rolled back too.
        """
        category = self._store.require(content_id).category
        with self._store.transaction(category_scope(category), content_scope(content_id)):
            item = self._store.require(content_id)
            self._transition(item, ContentState.APPROVED)
            self._queue.enqueue(content_id, category)
            approved = self._store.require(content_id)
        logger.info(
            "Approved %s, queued as %s #%s", content_id, category, approved.queue_position
        )
        return approved

    def revise(
        self, content_id: str, feedback: str, thread_id: str | None = None
    ) -> ContentItem:
        """``pending_approval -> revision -> pending_approval`` with new text.

        The reviser rewrites the text from ``feedback``, the version goes up
        by one and the revised text is sent back on the review thread.
        """
        if self._reviser is None:
            raise RuntimeError("No reviser configured")
        transport = self._require_transport()
        with self._store.transaction(content_scope(content_id)):
            item = self._store.require(content_id)
            item = self._transition(item, ContentState.REVISION)
            new_text = self._reviser.revise(item.text, feedback)
            if not new_text or not new_text.strip():
                raise GenerationError(f"Revision of {content_id} came back empty")
            item = self._store.update(
                content_id, text=new_text.strip(), version=item.version + 1
            )
            item = self._transition(item, ContentState.PENDING_APPROVAL)
            if thread_id is None:
                thread = self._store.open_thread_for(content_id)
                if thread is None:
                    raise ThreadNotFound(f"open thread for {content_id}")
                thread_id = thread.id
            transport.notify_revised(item, thread_id)
        logger.info("Revised %s to v%d", content_id, item.version)
        return item

    def mark_posted(self, content_id: str, external_id: str | None = None) -> ContentItem:
        """``queued -> posted`` once delivery is confirmed.

        Frees the queue slot and stamps ``published_at``.
        """
        category = self._store.require(content_id).category
        with self._store.transaction(category_scope(category), content_scope(content_id)):
            item = self._store.require(content_id)
            update = advance(item, ContentState.POSTED)
            self._queue.release(content_id)
            posted = self._store.update(
                content_id,
                published_at=self._clock(),
                external_id=external_id,
                **update,
            )
        logger.info("Posted %s (%s)", content_id, external_id or "no external id")
        return posted
