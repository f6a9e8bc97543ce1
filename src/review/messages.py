"""Plain-text bodies for review, revision and confirmation messages."""

from __future__ import annotations

from contentq.content.models import ContentCategory, ContentItem

SUBJECT_PREFIX = "[Content Assistant]"
PREVIEW_CHARS = 200

_CATEGORY_HEADINGS: dict[ContentCategory, str] = {
    ContentCategory.BLOG: "BLOG POST",
    ContentCategory.LINKEDIN: "LINKEDIN POST",
}

REPLY_INSTRUCTIONS = (
    'Reply with "approved" to queue this content, or reply with the changes '
    "you want and a revised version will come back on this thread."
)


def _preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    text = text.strip()
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + "..."


def _heading(item: ContentItem) -> str:
    return _CATEGORY_HEADINGS.get(item.category, item.category.value.upper())


def render_review_subject(item: ContentItem) -> str:
    return f"{SUBJECT_PREFIX} New {item.category.value} content for approval"


def render_review_message(item: ContentItem) -> str:
    """Body of the first review request for an item.

    Long-form items are shown as a preview; short posts are shown in full
    because the reviewer approves the exact text that will be posted.
    """
    lines = [f"{_heading(item)} (v{item.version})", ""]
    if item.title:
        lines.extend([item.title, ""])
    if item.category == ContentCategory.BLOG:
        lines.append(_preview(item.text))
    else:
        lines.append(item.text.strip())
    lines.extend(["", "---", REPLY_INSTRUCTIONS])
    return "\n".join(lines)


def render_revision_message(item: ContentItem) -> str:
    """Body of the message carrying a revised version back to the reviewer."""
    lines = [f"Revised {_heading(item).lower()} (v{item.version})", ""]
    if item.title:
        lines.extend([item.title, ""])
    lines.append(item.text.strip())
    lines.extend(["", "---", REPLY_INSTRUCTIONS])
    return "\n".join(lines)


def render_confirmation_message(item: ContentItem | None = None) -> str:
    if item is None or item.queue_position is None:
        return "Approved and added to the publishing queue."
    return (
        f"Approved: {item.label}\n"
        f"Queued as {item.category.value} #{item.queue_position}."
    )
