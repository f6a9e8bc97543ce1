"""LLM-backed classification of reviewer replies."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from contentq.approval.models import ClassifiedReply
from contentq.generation.prompts import CLASSIFY_PROMPT
from contentq.llm import LLMError, call_claude, strip_json_fences

logger = logging.getLogger(__name__)

_APPROVAL_WORDS = ("approved", "approve", "looks good", "lgtm", "ship it")


class IntentClassifier:
    """Reads a free-text reply and guesses what the reviewer wants.

    The result is untrusted: ``parse_intent`` decides whether it is
    actionable. When the model is unreachable the classifier falls back to
    a plain keyword match on short replies and otherwise reports no intent.
    """

    def __init__(
        self,
        *,
        model: str | None = None,
        timeout: int = 60,
        llm: Callable[..., str] = call_claude,
    ) -> None:
        self._model = model
        self._timeout = timeout
        self._llm = llm

    def classify(self, reply_text: str) -> ClassifiedReply:
        text = reply_text.strip()
        if not text:
            return ClassifiedReply()

        try:
            response = self._llm(
                "",
                CLASSIFY_PROMPT.format(reply=text),
                model=self._model,
                timeout=self._timeout,
                label="classify",
            )
            data = json.loads(strip_json_fences(response))
        except (LLMError, json.JSONDecodeError) as exc:
            logger.warning("Reply classification failed, using keyword fallback: %s", exc)
            return self._keyword_fallback(text)

        if not isinstance(data, dict):
            return ClassifiedReply()

        intent = data.get("intent") or data.get("action")
        feedback = data.get("feedback") or data.get("feedback_text")
        return ClassifiedReply(
            intent=str(intent) if intent else None,
            feedback_text=str(feedback) if feedback else None,
        )

    @staticmethod
    def _keyword_fallback(text: str) -> ClassifiedReply:
        lowered = text.lower()
        first_line = lowered.splitlines()[0] if lowered else ""
        if any(first_line.startswith(word) for word in _APPROVAL_WORDS):
            return ClassifiedReply(intent="approve")
        return ClassifiedReply()
