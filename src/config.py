"""Unified configuration loaded from .contentq.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from contentq.content.models import ContentCategory
from contentq.generation.models import GenerationConfig
from contentq.publishers import GhostConfig, LinkedInConfig, Target
from contentq.queue.engine import DEFAULT_MIN_DEPTH

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".contentq.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "contentq" / "config.toml"


class StoreSectionConfig(BaseModel):
    """[store] section."""

    path: str = ".contentq-store.json"
    lock_timeout_seconds: float = 10.0


class QueueSectionConfig(BaseModel):
    """[queue] section — minimum healthy depth per category."""

    min_depth: dict[ContentCategory, int] = Field(
        default_factory=lambda: dict(DEFAULT_MIN_DEPTH)
    )


class LLMSectionConfig(BaseModel):
    """[llm] section."""

    model: str | None = None
    timeout: int = 180
    classify_timeout: int = 60
    max_blog_posts: int = 2
    max_linkedin_posts: int = 3


class UserConfig(BaseModel):
    """[user] section — identity for LLM prompts."""

    name: str = ""
    role: str = "an independent consultant"
    bio: str = ""


class PublishingConfig(BaseModel):
    """[publishing] section — target per category."""

    blog: Target = Target.GHOST
    linkedin: Target = Target.LINKEDIN

    def target_for(self, category: ContentCategory) -> Target:
        return getattr(self, category.value)


class GhostSectionConfig(BaseModel):
    """[ghost] section."""

    url: str = ""
    admin_api_key: str = ""
    newsletter_slug: str = ""


class LinkedInSectionConfig(BaseModel):
    """[linkedin] section."""

    access_token: str = ""
    author_urn: str = ""
    visibility: str = "PUBLIC"


class MarkdownSectionConfig(BaseModel):
    """[markdown] section."""

    directory: str = "./published"


class ReviewSectionConfig(BaseModel):
    """[review] section."""

    outbox_path: str = ".contentq-outbox.json"


class ContentQConfig(BaseModel):
    """Top-level configuration model."""

    store: StoreSectionConfig = Field(default_factory=StoreSectionConfig)
    queue: QueueSectionConfig = Field(default_factory=QueueSectionConfig)
    llm: LLMSectionConfig = Field(default_factory=LLMSectionConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    publishing: PublishingConfig = Field(default_factory=PublishingConfig)
    ghost: GhostSectionConfig = Field(default_factory=GhostSectionConfig)
    linkedin: LinkedInSectionConfig = Field(default_factory=LinkedInSectionConfig)
    markdown: MarkdownSectionConfig = Field(default_factory=MarkdownSectionConfig)
    review: ReviewSectionConfig = Field(default_factory=ReviewSectionConfig)

    def to_generation_config(self) -> GenerationConfig:
        """Convert to GenerationConfig for the content generator."""
        return GenerationConfig(
            model=self.llm.model,
            timeout=self.llm.timeout,
            author=self.user.name or "the author",
            role=self.user.role,
            bio=self.user.bio,
            max_blog_posts=self.llm.max_blog_posts,
            max_linkedin_posts=self.llm.max_linkedin_posts,
        )

    def to_ghost_config(self) -> GhostConfig:
        """Convert to GhostConfig for Ghost CMS publishing."""
        return GhostConfig(
            url=self.ghost.url,
            admin_api_key=self.ghost.admin_api_key,
            newsletter_slug=self.ghost.newsletter_slug,
        )

    def to_linkedin_config(self) -> LinkedInConfig:
        """Convert to LinkedInConfig for LinkedIn publishing."""
        return LinkedInConfig(
            access_token=self.linkedin.access_token,
            author_urn=self.linkedin.author_urn,
            visibility=self.linkedin.visibility,
        )


def load_config(path: str | Path | None = None) -> ContentQConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .contentq.toml in CWD
    3. ~/.config/contentq/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = ContentQConfig.model_validate(data) if data else ContentQConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: ContentQConfig, **cli_kwargs: object) -> ContentQConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was provided (not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "store_path": ("store", "path"),
        "model": ("llm", "model"),
        "blog_target": ("publishing", "blog"),
        "linkedin_target": ("publishing", "linkedin"),
        "markdown_directory": ("markdown", "directory"),
        "outbox_path": ("review", "outbox_path"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return ContentQConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: ContentQConfig) -> ContentQConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "CONTENTQ_STORE_PATH": ("store", "path"),
        "CONTENTQ_MODEL": ("llm", "model"),
        "CONTENTQ_OUTBOX_PATH": ("review", "outbox_path"),
        "CONTENTQ_MARKDOWN_DIR": ("markdown", "directory"),
        "GHOST_URL": ("ghost", "url"),
        "GHOST_ADMIN_API_KEY": ("ghost", "admin_api_key"),
        "GHOST_NEWSLETTER_SLUG": ("ghost", "newsletter_slug"),
        "LINKEDIN_ACCESS_TOKEN": ("linkedin", "access_token"),
        "LINKEDIN_AUTHOR_URN": ("linkedin", "author_urn"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("CONTENTQ_LOCK_TIMEOUT")
    if timeout_raw is not None:
        data["store"]["lock_timeout_seconds"] = float(timeout_raw)

    return ContentQConfig.model_validate(data)
