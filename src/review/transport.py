"""Review-request transport.

The core reaches the human reviewer only through ``ReviewTransport``. How
the message travels (email, chat, a file) is the adapter's business. The
bundled ``OutboxTransport`` records rendered messages in a JSON outbox so a
separate sender, or a person, can deliver them.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field

from contentq.content.models import ContentItem
from contentq.review.messages import (
    SUBJECT_PREFIX,
    render_confirmation_message,
    render_review_message,
    render_review_subject,
    render_revision_message,
)

logger = logging.getLogger(__name__)

OUTBOX_FILENAME = ".contentq-outbox.json"


class ReviewTransport(Protocol):
    """How review requests reach a human."""

    def notify_for_review(self, item: ContentItem) -> str:
        """Send an item out for review and return the new thread id."""
        ...

    def notify_revised(self, item: ContentItem, thread_id: str) -> None:
        """Send a revised version on an existing thread."""
        ...

    def notify_confirmation(self, thread_id: str) -> None:
        """Confirm on the thread that the item was approved."""
        ...


class OutboundMessage(BaseModel):
    """A message queued for delivery to the reviewer."""

    thread_id: str
    kind: str  # "review", "revision", "confirmation"
    subject: str
    body: str
    content_id: str = ""
    sent_at: datetime


class _OutboxData(BaseModel):
    messages: list[OutboundMessage] = Field(default_factory=list)


class OutboxTransport:
    """File-backed transport that appends every message to a JSON outbox."""

    def __init__(
        self,
        path: Path | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = path
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._data = self._load()

    @property
    def messages(self) -> list[OutboundMessage]:
        return list(self._data.messages)

    def _load(self) -> _OutboxData:
        if self._path is None or not self._path.exists():
            return _OutboxData()
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            return _OutboxData.model_validate(raw)
        except (json.JSONDecodeError, ValueError):
            logger.warning("Corrupt outbox at %s, starting fresh", self._path)
            return _OutboxData()

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(self._data.model_dump_json(indent=2), encoding="utf-8")

    def _append(self, message: OutboundMessage) -> None:
        self._data.messages.append(message)
        self._save()
        logger.info("Outbox: %s message on thread %s", message.kind, message.thread_id)

    def notify_for_review(self, item: ContentItem) -> str:
        thread_id = f"thread-{uuid.uuid4().hex[:12]}"
        self._append(
            OutboundMessage(
                thread_id=thread_id,
                kind="review",
                subject=render_review_subject(item),
                body=render_review_message(item),
                content_id=item.id,
                sent_at=self._clock(),
            )
        )
        return thread_id

    def notify_revised(self, item: ContentItem, thread_id: str) -> None:
        self._append(
            OutboundMessage(
                thread_id=thread_id,
                kind="revision",
                subject=f"Re: {render_review_subject(item)}",
                body=render_revision_message(item),
                content_id=item.id,
                sent_at=self._clock(),
            )
        )

    def notify_confirmation(self, thread_id: str) -> None:
        self._append(
            OutboundMessage(
                thread_id=thread_id,
                kind="confirmation",
                subject=f"{SUBJECT_PREFIX} Approved",
                body=render_confirmation_message(),
                sent_at=self._clock(),
            )
        )
