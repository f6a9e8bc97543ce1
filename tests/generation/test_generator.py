"""Tests for ContentGenerator."""

import json
from unittest.mock import MagicMock

import pytest

from contentq.content.models import ContentCategory
from contentq.errors import GenerationError
from contentq.generation import ContentGenerator, GenerationConfig
from contentq.llm import LLMError


def _response(blog: list[dict] | None = None, linkedin: list[dict] | None = None) -> str:
    return json.dumps(
        {
            "assessment": "Single insight",
            "blog": blog or [],
            "linkedin": linkedin or [],
        }
    )


class TestGenerate:
    def test_builds_items_per_category(self):
        llm = MagicMock(
            return_value=_response(
                blog=[{"title": "Deep Dive", "content": "Long body", "excerpt": "Short"}],
                linkedin=[{"content": "Post one"}, {"content": "Post two"}],
            )
        )
        batch = ContentGenerator(llm=llm).generate("raw idea")

        assert batch.assessment == "Single insight"
        blogs = batch.by_category(ContentCategory.BLOG)
        assert len(blogs) == 1
        assert blogs[0].title == "Deep Dive"
        assert blogs[0].excerpt == "Short"
        posts = batch.by_category(ContentCategory.LINKEDIN)
        assert [p.text for p in posts] == ["Post one", "Post two"]
        assert posts[1].title == "LinkedIn Post 2"

    def test_prompt_carries_idea_and_author(self):
        llm = MagicMock(return_value=_response(linkedin=[{"content": "x"}]))
        config = GenerationConfig(author="Ben", role="a consultant", model="haiku")
        ContentGenerator(config, llm=llm).generate("  my idea  ")

        system_prompt, user_prompt = llm.call_args.args
        assert "Ben, a consultant" in system_prompt
        assert '"my idea"' in user_prompt
        assert llm.call_args.kwargs["model"] == "haiku"

    def test_caps_counts(self):
        llm = MagicMock(
            return_value=_response(linkedin=[{"content": f"p{i}"} for i in range(6)])
        )
        config = GenerationConfig(max_linkedin_posts=2)
        batch = ContentGenerator(config, llm=llm).generate("idea")
        assert len(batch.items) == 2

    def test_skips_blank_content(self):
        llm = MagicMock(
            return_value=_response(linkedin=[{"content": "  "}, {"content": "Real"}])
        )
        batch = ContentGenerator(llm=llm).generate("idea")
        assert [i.text for i in batch.items] == ["Real"]

    def test_fenced_json(self):
        body = _response(linkedin=[{"content": "x"}])
        llm = MagicMock(return_value=f"Here you go:\n```json\n{body}\n```")
        assert len(ContentGenerator(llm=llm).generate("idea").items) == 1

    def test_empty_idea(self):
        llm = MagicMock()
        with pytest.raises(GenerationError):
            ContentGenerator(llm=llm).generate("  ")
        llm.assert_not_called()

    def test_nothing_usable(self):
        llm = MagicMock(return_value=_response())
        with pytest.raises(GenerationError, match="no usable content"):
            ContentGenerator(llm=llm).generate("idea")

    def test_invalid_json(self):
        llm = MagicMock(return_value="not json at all")
        with pytest.raises(GenerationError, match="parse"):
            ContentGenerator(llm=llm).generate("idea")

    def test_llm_error_wrapped(self):
        llm = MagicMock(side_effect=LLMError("timeout"))
        with pytest.raises(GenerationError, match="timeout"):
            ContentGenerator(llm=llm).generate("idea")


class TestRevise:
    def test_returns_stripped_text(self):
        llm = MagicMock(return_value="  Shorter version.  ")
        result = ContentGenerator(llm=llm).revise("Long version.", "shorten it")

        assert result == "Shorter version."
        user_prompt = llm.call_args.args[1]
        assert "Long version." in user_prompt
        assert "shorten it" in user_prompt
        assert llm.call_args.kwargs["label"] == "revise"

    def test_llm_error_wrapped(self):
        llm = MagicMock(side_effect=LLMError("down"))
        with pytest.raises(GenerationError):
            ContentGenerator(llm=llm).revise("text", "feedback")
