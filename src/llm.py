"""Claude access for content generation, revision and reply classification.

``call_claude`` is the single entry point the generator and the intent
classifier use. It talks to the Anthropic API when ``ANTHROPIC_API_KEY`` is
set and falls back to the ``claude -p`` CLI otherwise (or when
``CONTENTQ_USE_CLI=1`` forces it). Every failure surfaces as ``LLMError`` so
callers can map it onto their own error type.
"""

from __future__ import annotations

import logging
import os
import re
import subprocess

import anthropic

logger = logging.getLogger(__name__)

MODEL_ALIASES: dict[str, str] = {
    "sonnet": "claude-sonnet-4-6",
    "haiku": "claude-haiku-4-5-20251001",
    "opus": "claude-opus-4-6",
}
DEFAULT_MODEL = MODEL_ALIASES["sonnet"]

_FENCED_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_BRACKETS = {"{": "}", "[": "]"}


class LLMError(Exception):
    """A Claude call failed or produced no text."""


def _resolve_model(model: str | None) -> str:
    if model is None:
        return DEFAULT_MODEL
    return MODEL_ALIASES.get(model, model)


def _api_key() -> str | None:
    """The API key to use, or None when the CLI backend applies."""
    if os.environ.get("CONTENTQ_USE_CLI", "").strip() == "1":
        return None
    return os.environ.get("ANTHROPIC_API_KEY", "").strip() or None


def _via_api(
    system_prompt: str,
    user_prompt: str,
    *,
    api_key: str,
    model: str | None,
    max_tokens: int,
    timeout: int,
    label: str,
) -> str:
    model_id = _resolve_model(model)
    logger.debug("Claude API call (%s) on %s", label, model_id)

    request: dict[str, object] = {
        "model": model_id,
        "max_tokens": max_tokens,
        "messages": [{"role": "user", "content": user_prompt}],
    }
    if system_prompt.strip():
        request["system"] = system_prompt

    client = anthropic.Anthropic(api_key=api_key, timeout=timeout)
    try:
        response = client.messages.create(**request)  # type: ignore[arg-type]
    except anthropic.APIError as exc:
        raise LLMError(f"Anthropic API call failed ({label}): {exc}") from exc

    text = "".join(b.text for b in response.content if b.type == "text").strip()
    if not text:
        raise LLMError(f"Anthropic API gave an empty reply ({label})")
    return text


def _via_cli(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None,
    timeout: int,
    label: str,
) -> str:
    cmd = ["claude", "-p"]
    if model:
        cmd += ["--model", model]
    prompt = f"{system_prompt}\n\n{user_prompt}" if system_prompt else user_prompt
    # A nested CLI refuses to start while CLAUDECODE is set.
    env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    logger.debug("Claude CLI call (%s)", label)
    try:
        proc = subprocess.run(
            cmd,
            input=prompt,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=env,
        )
    except FileNotFoundError as exc:
        raise LLMError(f"claude CLI not found on PATH ({label})") from exc
    except subprocess.TimeoutExpired as exc:
        raise LLMError(f"claude CLI timed out after {timeout}s ({label})") from exc

    if proc.returncode != 0:
        raise LLMError(
            f"claude CLI exited with {proc.returncode} ({label}): {proc.stderr[:500]}"
        )
    text = proc.stdout.strip()
    if not text:
        raise LLMError(f"claude CLI gave an empty reply ({label})")
    return text


def call_claude(
    system_prompt: str,
    user_prompt: str,
    *,
    model: str | None = None,
    max_tokens: int = 8192,
    timeout: int = 120,
    label: str = "generation",
) -> str:
    """Send one prompt to Claude and return the stripped reply text.

    ``model`` accepts an alias (``sonnet``, ``haiku``, ``opus``) or a full
    model id; ``label`` only tags log lines and error messages.

    Raises:
        LLMError: The backend failed, timed out or returned nothing.
    """
    api_key = _api_key()
    if api_key is not None:
        return _via_api(
            system_prompt,
            user_prompt,
            api_key=api_key,
            model=model,
            max_tokens=max_tokens,
            timeout=timeout,
            label=label,
        )
    return _via_cli(system_prompt, user_prompt, model=model, timeout=timeout, label=label)


def strip_json_fences(text: str) -> str:
    """Pull the JSON payload out of a model reply.

    Prefers a fenced block; otherwise returns the span from the first
    opening bracket to its last matching closer, or the text unchanged.
    """
    text = text.strip()
    fenced = _FENCED_RE.search(text)
    if fenced:
        return fenced.group(1).strip()

    openings = sorted((text.find(c), c) for c in _BRACKETS if text.find(c) != -1)
    for start, opener in openings:
        end = text.rfind(_BRACKETS[opener])
        if end > start:
            return text[start : end + 1]
    return text
