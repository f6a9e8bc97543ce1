"""Reviewer-facing messages and the transport port that delivers them."""

from contentq.review.messages import (
    render_confirmation_message,
    render_review_message,
    render_revision_message,
)
from contentq.review.transport import (
    OUTBOX_FILENAME,
    OutboundMessage,
    OutboxTransport,
    ReviewTransport,
)

__all__ = [
    "OUTBOX_FILENAME",
    "OutboundMessage",
    "OutboxTransport",
    "ReviewTransport",
    "render_confirmation_message",
    "render_review_message",
    "render_revision_message",
]
