"""Intake pipeline — inbound messages -> new drafts or approval decisions."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from contentq.approval import (
    ApprovalResolver,
    IdempotencyGuard,
    IntentClassifier,
    Resolution,
)
from contentq.content import ContentStore, ThreadStatus
from contentq.errors import ContentQError, UnknownIntent
from contentq.generation import ContentGenerator
from contentq.lifecycle import LifecycleStateMachine

logger = logging.getLogger(__name__)

IntakeStatus = Literal["created", "applied", "skipped", "unclear", "failed"]


class InboundMessage(BaseModel):
    """One message pulled from the review inbox."""

    message_id: str
    body: str
    received_at: datetime
    thread_id: str | None = None
    sender: str | None = None


class IntakeResult(BaseModel):
    """What handling one inbound message did.

    ``skipped`` and ``unclear`` are not errors: the transport may mark the
    message consumed either way. ``failed`` is only produced by ``poll`` and
    leaves the store as it was before the message.
    """

    message_id: str
    status: IntakeStatus
    thread_id: str | None = None
    content_ids: list[str] = Field(default_factory=list)
    resolution: Resolution | None = None
    detail: str = ""


class IntakePipeline:
    """Routes inbound messages to the reply path or the new-idea path."""

    def __init__(
        self,
        store: ContentStore,
        lifecycle: LifecycleStateMachine,
        resolver: ApprovalResolver,
        guard: IdempotencyGuard,
        generator: ContentGenerator,
        classifier: IntentClassifier,
    ) -> None:
        self._store = store
        self._lifecycle = lifecycle
        self._resolver = resolver
        self._guard = guard
        self._generator = generator
        self._classifier = classifier

    def handle(self, message: InboundMessage) -> IntakeResult:
        """Process one inbound message."""
        if message.thread_id and self._store.get_thread(message.thread_id) is not None:
            return self._handle_reply(message, message.thread_id)
        return self._handle_idea(message)

    def poll(
        self, messages: Iterable[InboundMessage], since: datetime | None = None
    ) -> list[IntakeResult]:
        """Handle every message received after ``since``, oldest first."""
        cutoff = _as_utc(since) if since is not None else None
        pending = sorted(
            (m for m in messages if cutoff is None or _as_utc(m.received_at) > cutoff),
            key=lambda m: _as_utc(m.received_at),
        )
        return [self._handle_isolated(m) for m in pending]

    def _handle_isolated(self, message: InboundMessage) -> IntakeResult:
        try:
            return self.handle(message)
        except ContentQError as exc:
            logger.error("Message %s failed: %s", message.message_id, exc)
            return IntakeResult(
                message_id=message.message_id,
                status="failed",
                thread_id=message.thread_id,
                detail=str(exc),
            )

    def _handle_reply(self, message: InboundMessage, thread_id: str) -> IntakeResult:
        thread = self._store.get_thread(thread_id)
        if thread is not None and thread.status == ThreadStatus.RESOLVED:
            logger.info("Thread %s already resolved, ignoring %s", thread_id, message.message_id)
            return IntakeResult(
                message_id=message.message_id,
                status="skipped",
                thread_id=thread_id,
                content_ids=[thread.content_id],
                detail="thread already resolved",
            )
        # Cheap pre-check so replays never pay for classification.
        if not self._guard.should_apply(thread_id, message.received_at):
            return IntakeResult(
                message_id=message.message_id,
                status="skipped",
                thread_id=thread_id,
                detail="already applied",
            )

        classified = self._classifier.classify(message.body)
        try:
            resolution = self._resolver.resolve(
                thread_id, message.body, classified, message.received_at
            )
        except UnknownIntent as exc:
            logger.warning("Thread %s: could not act on reply: %s", thread_id, exc)
            return IntakeResult(
                message_id=message.message_id,
                status="unclear",
                thread_id=thread_id,
                detail=str(exc),
            )

        return IntakeResult(
            message_id=message.message_id,
            status="applied" if resolution.applied else "skipped",
            thread_id=thread_id,
            content_ids=[resolution.content_id],
            resolution=resolution,
        )

    def _handle_idea(self, message: InboundMessage) -> IntakeResult:
        existing = self._store.find_by_source(message.message_id)
        if existing:
            logger.info(
                "Message %s already produced %d item(s), skipping",
                message.message_id,
                len(existing),
            )
            return IntakeResult(
                message_id=message.message_id,
                status="skipped",
                content_ids=[i.id for i in existing],
                detail="already ingested",
            )

        batch = self._generator.generate(message.body)
        content_ids: list[str] = []
        # All drafts of one message commit or roll back together.
        with self._store.transaction():
            for generated in batch.items:
                item = self._lifecycle.create_draft(
                    generated.category,
                    generated.text,
                    title=generated.title,
                    excerpt=generated.excerpt,
                    source_id=message.message_id,
                )
                self._lifecycle.send_for_review(item.id)
                content_ids.append(item.id)

        logger.info(
            "Message %s: created %d item(s) (%s)",
            message.message_id,
            len(content_ids),
            batch.assessment or "no assessment",
        )
        return IntakeResult(
            message_id=message.message_id,
            status="created",
            content_ids=content_ids,
            detail=batch.assessment,
        )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
