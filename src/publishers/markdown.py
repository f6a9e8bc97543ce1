"""Plain markdown publisher that writes each item to a file."""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from contentq.content.models import ContentCategory, ContentItem
from contentq.errors import PublishFailed
from contentq.publishers.base import ContentPublisher, PublishReceipt

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _slugify(text: str) -> str:
    slug = _SLUG_RE.sub("-", text.lower()).strip("-")
    return slug[:60] or "post"


class MarkdownPublisher(ContentPublisher):
    """Writes items as markdown with minimal frontmatter.

    Useful for GitHub Pages, static sites, or as a dry-run target.
    """

    name = "markdown"

    def __init__(self, output_dir: Path | str = Path("published")) -> None:
        self._output_dir = Path(output_dir)

    def output_path(self, item: ContentItem) -> Path:
        slug = _slugify(item.title or item.id)
        return self._output_dir / item.category.value / f"{slug}-{item.id[:8]}.md"

    def format(self, item: ContentItem) -> str:
        lines = ["---"]
        if item.title:
            lines.append(f'title: "{item.title}"')
        lines.append(f"category: {item.category.value}")
        lines.append(f"date: {datetime.now(UTC).date().isoformat()}")
        if item.tags:
            lines.append("tags:")
            lines.extend(f"  - {tag}" for tag in item.tags)
        if item.excerpt:
            lines.append(f'excerpt: "{item.excerpt}"')
        lines.append("---")
        lines.append("")
        if item.title and item.category == ContentCategory.BLOG:
            lines.append(f"# {item.title}")
            lines.append("")
        lines.append(item.text.rstrip())
        lines.append("")
        return "\n".join(lines)

    def publish(self, item: ContentItem) -> PublishReceipt:
        path = self.output_path(item)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.format(item), encoding="utf-8")
        except OSError as exc:
            raise PublishFailed(item.id, self.name, str(exc)) from exc
        logger.info("Wrote %s to %s", item.id, path)
        return PublishReceipt(target=self.name, external_id=str(path), url=path.as_uri())
