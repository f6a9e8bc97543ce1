"""Error taxonomy for the content lifecycle and publishing queue.

Every error raised by the queue, lifecycle and approval layers derives from
``ContentQError`` so callers (the intake poller, the publish tick, the CLI)
can surface them uniformly. Only ``StoreUnavailable`` is worth retrying on a
later tick; everything else needs new input or a fix.
"""

from __future__ import annotations


class ContentQError(Exception):
    """Base error for the content engine."""

    retryable: bool = False


# ── Queue ────────────────────────────────────────────────────────────────


class AlreadyQueued(ContentQError):
    """The item already holds a queue position."""

    def __init__(self, content_id: str, position: int) -> None:
        super().__init__(f"Content {content_id} is already queued at position {position}")
        self.content_id = content_id
        self.position = position


class QueueEmpty(ContentQError):
    """Nothing sits at the head of the category's queue."""

    def __init__(self, category: str) -> None:
        super().__init__(f"Queue for {category!r} is empty")
        self.category = category


class NoNextItem(ContentQError):
    """No item occupies the position after the one being swapped."""

    def __init__(self, content_id: str, position: int) -> None:
        super().__init__(f"No item after position {position} (content {content_id})")
        self.content_id = content_id
        self.position = position


class InvalidPosition(ContentQError):
    """A requested queue position is not usable."""


class NotQueued(InvalidPosition):
    """The item has no queue position."""

    def __init__(self, content_id: str) -> None:
        super().__init__(f"Content {content_id} is not in the queue")
        self.content_id = content_id


# ── Lifecycle / approval ─────────────────────────────────────────────────


class InvalidTransition(ContentQError):
    """The item's current state does not allow the requested transition."""

    def __init__(self, content_id: str, current: str, target: str) -> None:
        super().__init__(f"Content {content_id}: cannot move from {current!r} to {target!r}")
        self.content_id = content_id
        self.current = current
        self.target = target


class UnknownIntent(ContentQError):
    """A classified reply carried an intent we cannot act on."""

    def __init__(self, intent: object) -> None:
        super().__init__(f"Unknown intent: {intent!r}")
        self.intent = intent


class ContentNotFound(ContentQError, KeyError):
    """No content item with this id."""

    def __init__(self, content_id: str) -> None:
        super().__init__(content_id)
        self.content_id = content_id

    def __str__(self) -> str:
        return f"Content not found: {self.content_id}"


class ThreadNotFound(ContentQError, KeyError):
    """No conversation thread with this id."""

    def __init__(self, thread_id: str) -> None:
        super().__init__(thread_id)
        self.thread_id = thread_id

    def __str__(self) -> str:
        return f"Conversation thread not found: {self.thread_id}"


# ── Collaborators ────────────────────────────────────────────────────────


class StoreUnavailable(ContentQError):
    """The store could not complete the operation in time. Safe to retry."""

    retryable = True


class PublishFailed(ContentQError):
    """A publishing collaborator reported failure. The item stays queued."""

    def __init__(self, content_id: str, target: str, reason: str) -> None:
        super().__init__(f"Publishing {content_id} to {target} failed: {reason}")
        self.content_id = content_id
        self.target = target
        self.reason = reason


class GenerationError(ContentQError):
    """The generative-text collaborator returned nothing usable."""
