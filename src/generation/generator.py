"""LLM-backed content generator and reviser."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from pydantic import BaseModel, Field, ValidationError

from contentq.content.models import ContentCategory
from contentq.errors import GenerationError
from contentq.generation.models import GeneratedBatch, GeneratedItem, GenerationConfig
from contentq.generation.prompts import (
    GENERATE_SYSTEM_PROMPT,
    GENERATE_USER_PROMPT,
    REVISE_SYSTEM_PROMPT,
    REVISE_USER_PROMPT,
)
from contentq.llm import LLMError, call_claude, strip_json_fences

logger = logging.getLogger(__name__)

LLMCall = Callable[..., str]


class _RawBlog(BaseModel):
    title: str = ""
    content: str = ""
    excerpt: str | None = None


class _RawLinkedIn(BaseModel):
    content: str = ""


class _RawBatch(BaseModel):
    assessment: str = ""
    blog: list[_RawBlog] = Field(default_factory=list)
    linkedin: list[_RawLinkedIn] = Field(default_factory=list)


class ContentGenerator:
    """Generates drafts from raw ideas and revises them from feedback."""

    def __init__(self, config: GenerationConfig | None = None, *, llm: LLMCall = call_claude):
        self._config = config or GenerationConfig()
        self._llm = llm

    def _system_prompt(self) -> str:
        cfg = self._config
        bio_section = f"\nABOUT {cfg.author.upper()}:\n{cfg.bio}\n" if cfg.bio else ""
        return GENERATE_SYSTEM_PROMPT.format(
            author=cfg.author,
            role=cfg.role,
            bio_section=bio_section,
            max_total=cfg.max_blog_posts + cfg.max_linkedin_posts,
            max_blog=cfg.max_blog_posts,
            max_linkedin=cfg.max_linkedin_posts,
            blog_words=cfg.blog_words,
            linkedin_words=cfg.linkedin_words,
        )

    def _call(self, system_prompt: str, user_prompt: str, label: str) -> str:
        try:
            return self._llm(
                system_prompt,
                user_prompt,
                model=self._config.model,
                timeout=self._config.timeout,
                label=label,
            )
        except LLMError as exc:
            raise GenerationError(str(exc)) from exc

    def generate(self, raw_idea: str) -> GeneratedBatch:
        """Turn a raw idea into one or more blog/LinkedIn drafts.

        Raises:
            GenerationError: The model failed, returned unparseable JSON,
                or proposed no usable content.
        """
        if not raw_idea.strip():
            raise GenerationError("Idea text is empty")

        response = self._call(
            self._system_prompt(),
            GENERATE_USER_PROMPT.format(idea=raw_idea.strip()),
            label="generate",
        )
        try:
            raw = _RawBatch.model_validate(json.loads(strip_json_fences(response)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise GenerationError(f"Could not parse generated content: {exc}") from exc

        items: list[GeneratedItem] = []
        for blog in raw.blog[: self._config.max_blog_posts]:
            if blog.content.strip():
                items.append(
                    GeneratedItem(
                        category=ContentCategory.BLOG,
                        title=blog.title.strip() or None,
                        text=blog.content,
                        excerpt=blog.excerpt,
                    )
                )
        for index, post in enumerate(raw.linkedin[: self._config.max_linkedin_posts], start=1):
            if post.content.strip():
                items.append(
                    GeneratedItem(
                        category=ContentCategory.LINKEDIN,
                        title=f"LinkedIn Post {index}",
                        text=post.content,
                    )
                )

        if not items:
            raise GenerationError("Generator returned no usable content")

        logger.info(
            "Generated %d blog and %d linkedin draft(s)",
            len([i for i in items if i.category == ContentCategory.BLOG]),
            len([i for i in items if i.category == ContentCategory.LINKEDIN]),
        )
        return GeneratedBatch(assessment=raw.assessment, items=items)

    def revise(self, original_text: str, feedback: str) -> str:
        """Rewrite ``original_text`` according to ``feedback``."""
        cfg = self._config
        revised = self._call(
            REVISE_SYSTEM_PROMPT.format(author=cfg.author, role=cfg.role),
            REVISE_USER_PROMPT.format(original=original_text, feedback=feedback),
            label="revise",
        ).strip()
        if not revised:
            raise GenerationError("Revision came back empty")
        return revised
