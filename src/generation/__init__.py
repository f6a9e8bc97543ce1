"""Generative-text collaborator: raw idea -> drafts, draft + feedback -> revision."""

from contentq.generation.generator import ContentGenerator
from contentq.generation.models import GeneratedBatch, GeneratedItem, GenerationConfig

__all__ = [
    "ContentGenerator",
    "GeneratedBatch",
    "GeneratedItem",
    "GenerationConfig",
]
