"""Optional semantic pass over flat text using an OpenAI-compatible chat model."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from typing import List, Mapping

import httpx
from openai import APIConnectionError, APIError, APITimeoutError, AsyncOpenAI, RateLimitError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..services.settings import Settings
from .models import Issue

__all__ = ["SemanticChecker", "SemanticSettings", "build_prompt", "parse_reply"]

LOGGER = logging.getLogger(__name__)
_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_LANGUAGE_LABELS: Mapping[str, str] = {"fr": "French", "en": "English"}

_PROMPT_TEMPLATE = """Analyze this {label} web content for semantic issues ONLY (NOT spelling/grammar, a separate tool handles that). Check for:
1. Inconsistent tone or register (formal vs informal mixing)
2. Incoherent statements or contradictions
3. Awkward phrasing that a spellchecker wouldn't catch
4. Missing words that change meaning

Return a JSON array of issues found. Each issue: {{ "message": "...", "context": "10-word excerpt around issue", "original": "problematic phrase", "suggestion": "improved version", "category": "COHERENCE|TONE|PHRASING|MISSING_WORD" }}

Return [] if no issues found. Be strict, only flag clear problems, not style preferences.

Text:
{text}"""


@dataclass(slots=True, frozen=True)
class SemanticSettings:
    """Connection and prompt limits for the semantic checker."""

    base_url: str = "https://api.openai.com/v1"
    api_key: str = ""
    model: str = "gpt-4o-mini"
    max_text_length: int = 8_000
    max_tokens: int = 2_048
    request_timeout: float = 60.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0

    @classmethod
    def from_settings(cls, settings: Settings) -> SemanticSettings:
        return cls(
            base_url=settings.ai_base_url,
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            max_text_length=settings.ai_max_text_length,
            max_retries=settings.max_retries,
            retry_min_seconds=settings.retry_min_seconds,
            retry_max_seconds=settings.retry_max_seconds,
        )


def build_prompt(text: str, language: str) -> str:
    label = _LANGUAGE_LABELS.get((language or "").split("-")[0].lower(), "English")
    return _PROMPT_TEMPLATE.format(label=label, text=text)


def parse_reply(reply: str, text: str) -> List[Issue]:
    """Extract the JSON array from ``reply`` and anchor each entry in ``text``.

    Entries whose ``original`` does not occur in ``text`` are dropped since
    they cannot be offered as offset-based corrections.
    """

    match = _JSON_ARRAY_RE.search(reply or "")
    if not match:
        return []
    try:
        raw_items = json.loads(match.group(0))
    except json.JSONDecodeError:
        LOGGER.warning("Semantic reply did not contain valid JSON")
        return []
    if not isinstance(raw_items, list):
        return []

    issues: List[Issue] = []
    for item in raw_items:
        if not isinstance(item, Mapping):
            continue
        original = item.get("original")
        if not isinstance(original, str) or not original:
            continue
        offset = text.find(original)
        if offset < 0:
            LOGGER.debug("Dropping semantic issue not found in text: %r", original)
            continue
        category = str(item.get("category") or "PHRASING").upper()
        suggestion = item.get("suggestion")
        issues.append(
            Issue(
                rule_id=f"AI_{category}",
                category=category,
                message=str(item.get("message", "")),
                offset=offset,
                length=len(original),
                original=original,
                replacements=(str(suggestion),) if suggestion else (),
                context=str(item.get("context", "")),
                source="ai",
            )
        )
    return issues


class SemanticChecker:
    """Asks a chat model for coherence, tone, phrasing and missing-word issues."""

    def __init__(self, settings: SemanticSettings | None = None, *, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings or SemanticSettings()
        self._client = client
        self._owns_client = client is None

    @property
    def settings(self) -> SemanticSettings:
        return self._settings

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self._settings.api_key)

    async def check(self, text: str, language: str) -> List[Issue]:
        if not text.strip() or not self.available:
            return []
        submitted = text[: self._settings.max_text_length]
        prompt = build_prompt(submitted, language)
        try:
            reply = await self._complete(prompt)
        except (APIError, httpx.HTTPError) as exc:
            LOGGER.error("Semantic check failed: %s", exc)
            return []
        issues = parse_reply(reply, submitted)
        LOGGER.debug("Semantic check reported %d issue(s)", len(issues))
        return issues

    async def _complete(self, prompt: str) -> str:
        client = self._get_client()
        async for attempt in self._retrying():
            with attempt:
                response = await client.chat.completions.create(
                    model=self._settings.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self._settings.max_tokens,
                    temperature=0,
                )
                choices = getattr(response, "choices", None) or []
                if not choices:
                    return "[]"
                message = getattr(choices[0], "message", None)
                return getattr(message, "content", None) or "[]"
        return "[]"  # pragma: no cover - AsyncRetrying always returns or raises

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.api_key,
                base_url=self._settings.base_url,
                timeout=self._settings.request_timeout,
            )
        return self._client

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._settings.max_retries)),
            wait=wait_exponential(
                multiplier=self._settings.retry_min_seconds,
                max=self._settings.retry_max_seconds,
            ),
            retry=retry_if_exception_type((APIConnectionError, APITimeoutError, RateLimitError)),
        )

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.close()

