"""Weekly lineup — what publishes on which day, plus what is up next."""

from __future__ import annotations

from contentq.content import ContentCategory
from contentq.queue import QueueEngine
from contentq.review.messages import PREVIEW_CHARS, SUBJECT_PREFIX

LINEUP_SUBJECT = f"{SUBJECT_PREFIX} Weekly Content Lineup"

# Publishing days per category; slot N takes queue position N.
WEEKLY_SLOTS: dict[ContentCategory, tuple[str, ...]] = {
    ContentCategory.BLOG: ("Monday",),
    ContentCategory.LINKEDIN: ("Tuesday", "Thursday", "Saturday"),
}

_HEADINGS = {
    ContentCategory.BLOG: "BLOG",
    ContentCategory.LINKEDIN: "LINKEDIN",
}


def build_lineup(
    queue: QueueEngine,
    depth: int = 3,
    slots: dict[ContentCategory, tuple[str, ...]] | None = None,
) -> str:
    """Render the coming week's lineup as plain text.

    Each slot shows the item scheduled for it; blog slots get a preview,
    LinkedIn slots the full post. Up to ``depth`` further items per
    category are listed after the scheduled ones.
    """
    slots = slots or WEEKLY_SLOTS
    lines: list[str] = ["WEEKLY CONTENT LINEUP", ""]

    for category, days in slots.items():
        queued = queue.list(category, limit=len(days) + depth)
        prefix = category.value[0].upper()
        heading = _HEADINGS.get(category, category.value.upper())

        for index, day in enumerate(days):
            lines.append(f"{heading} ({day}): [{prefix}{index + 1}]")
            if index >= len(queued):
                lines.append(f"No {category.value} post in queue")
                lines.append("")
                continue
            item = queued[index]
            if item.title and category == ContentCategory.BLOG:
                lines.append(f"Title: {item.title}")
            if category == ContentCategory.BLOG and len(item.text) > PREVIEW_CHARS:
                lines.append(item.text[:PREVIEW_CHARS].rstrip() + "...")
            else:
                lines.append(item.text)
            lines.append("")

        upcoming = queued[len(days) :]
        if upcoming:
            lines.append(f"Up next ({category.value}):")
            for item in upcoming:
                lines.append(f"  #{item.queue_position} {item.label}")
            lines.append("")

        health = queue.health(category)
        if health.needs_content:
            lines.append(
                f"Warning: only {health.depth} {category.value} item(s) queued "
                f"(minimum {health.minimum})"
            )
            lines.append("")

    return "\n".join(lines).rstrip() + "\n"
