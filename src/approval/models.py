"""Approval data types.

A reviewer's free-text reply is classified upstream into a loose
``ClassifiedReply``. ``parse_intent`` narrows it to the closed ``Intent``
variant the resolver dispatches on; anything outside the variant is
rejected with ``UnknownIntent``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field

from contentq.content.models import ContentState
from contentq.errors import UnknownIntent


class ClassifiedReply(BaseModel):
    """Output of the intent classifier, before validation."""

    intent: str | None = None
    feedback_text: str | None = None


class Approve(BaseModel):
    kind: Literal["approve"] = "approve"


class Revise(BaseModel):
    kind: Literal["revise"] = "revise"
    feedback: str


Intent = Annotated[Approve | Revise, Field(discriminator="kind")]


def parse_intent(reply: ClassifiedReply, reply_text: str = "") -> Approve | Revise:
    """Narrow a classified reply to an ``Intent``.

    Revise without explicit feedback falls back to the raw reply text, which
    is what the reviewer actually asked for.

    Raises:
        UnknownIntent: The intent is missing or not one we act on.
    """
    raw = (reply.intent or "").strip().lower()
    if raw == "approve":
        return Approve()
    if raw == "revise":
        feedback = (reply.feedback_text or "").strip() or reply_text.strip()
        if not feedback:
            raise UnknownIntent("revise without feedback")
        return Revise(feedback=feedback)
    raise UnknownIntent(reply.intent)


class Resolution(BaseModel):
    """What applying one reply did."""

    thread_id: str
    content_id: str
    applied: bool
    action: str | None = None
    state: ContentState | None = None
    queue_position: int | None = None
    version: int | None = None
    message_at: datetime | None = None
