"""Publisher factory and registry."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from contentq.publishers.base import ContentPublisher, PublishReceipt
from contentq.publishers.ghost import GhostAPIClient, GhostConfig, GhostPublisher
from contentq.publishers.linkedin import LinkedInConfig, LinkedInPublisher
from contentq.publishers.markdown import MarkdownPublisher


class Target(StrEnum):
    """Supported publishing targets."""

    GHOST = "ghost"
    LINKEDIN = "linkedin"
    MARKDOWN = "markdown"


def create_publisher(
    target: Target | str,
    *,
    ghost_config: GhostConfig | None = None,
    linkedin_config: LinkedInConfig | None = None,
    markdown_dir: Path | str | None = None,
) -> ContentPublisher:
    """Create a publisher for the given target.

    Raises:
        ValueError: If the target is unknown.
    """
    try:
        target = Target(target)
    except ValueError:
        raise ValueError(f"Unknown publishing target: {target!r}") from None

    if target is Target.GHOST:
        return GhostPublisher(ghost_config)
    if target is Target.LINKEDIN:
        return LinkedInPublisher(linkedin_config)
    return MarkdownPublisher(markdown_dir or Path("published"))


__all__ = [
    "ContentPublisher",
    "GhostAPIClient",
    "GhostConfig",
    "GhostPublisher",
    "LinkedInConfig",
    "LinkedInPublisher",
    "MarkdownPublisher",
    "PublishReceipt",
    "Target",
    "create_publisher",
]
