"""Content domain models — pure Pydantic v2 data types.

A ContentItem is one piece of generated content (a blog post or a short
social post) tracked from draft, through human review, into its category's
publishing queue and finally to posted. A ConversationThread binds a
reviewer's replies to the one item it is currently reviewing.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ContentCategory(StrEnum):
    """Queue partition. Each category has its own position sequence."""

    BLOG = "blog"
    LINKEDIN = "linkedin"


class ContentState(StrEnum):
    """Lifecycle state of a content item."""

    DRAFT = "draft"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REVISION = "revision"
    QUEUED = "queued"
    POSTED = "posted"
    ABANDONED = "abandoned"


class ThreadStatus(StrEnum):
    """Review status of a conversation thread."""

    PENDING_APPROVAL = "pending_approval"
    RESOLVED = "resolved"


class ContentItem(BaseModel):
    """A piece of content moving through review and the publishing queue."""

    id: str = ""
    category: ContentCategory
    state: ContentState = ContentState.DRAFT
    version: int = 1
    queue_position: int | None = None
    title: str | None = None
    text: str
    excerpt: str | None = None
    tags: list[str] = Field(default_factory=list)
    source_id: str | None = None
    external_id: str | None = None
    published_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_queued(self) -> bool:
        return self.queue_position is not None

    @property
    def label(self) -> str:
        """Short human label: the title, or the first words of the text."""
        if self.title:
            return self.title
        words = self.text.split()
        preview = " ".join(words[:8])
        return preview + ("..." if len(words) > 8 else "")


class ConversationThread(BaseModel):
    """External review thread governing approval of one content item."""

    id: str
    content_id: str
    status: ThreadStatus = ThreadStatus.PENDING_APPROVAL
    last_applied_at: datetime | None = None
    created_at: datetime | None = None
