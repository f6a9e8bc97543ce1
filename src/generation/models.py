"""Data models for content generation. No I/O here."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from contentq.content.models import ContentCategory


class GenerationConfig(BaseModel):
    """Settings for the generative-text collaborator."""

    model: str | None = None
    timeout: int = 180
    author: str = "the author"
    role: str = "an independent consultant"
    bio: str = ""
    max_blog_posts: int = 2
    max_linkedin_posts: int = 3
    blog_words: str = "800-1200"
    linkedin_words: str = "75-200"


class GeneratedItem(BaseModel):
    """One piece of content proposed by the generator."""

    category: ContentCategory
    text: str
    title: str | None = None
    excerpt: str | None = None

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("generated text is empty")
        return value.strip()


class GeneratedBatch(BaseModel):
    """Everything generated from one raw idea."""

    assessment: str = ""
    items: list[GeneratedItem] = Field(default_factory=list)

    def by_category(self, category: ContentCategory) -> list[GeneratedItem]:
        return [i for i in self.items if i.category == category]
