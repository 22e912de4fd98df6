"""Async client for the LanguageTool ``/v2/check`` endpoint."""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..core.errors import CheckerError
from ..services.settings import Settings, redact_secret
from .models import Issue

__all__ = ["CheckerSettings", "LanguageToolClient", "Utf16Index", "parse_matches"]

LOGGER = logging.getLogger(__name__)
DEFAULT_DISABLED_RULES: tuple[str, ...] = (
    "WHITESPACE_RULE",
    "COMMA_PARENTHESIS_WHITESPACE",
    "UNPAIRED_BRACKETS",
)
_MAX_REPLACEMENTS = 3
_RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


@dataclass(slots=True, frozen=True)
class CheckerSettings:
    """Subset of settings required to talk to LanguageTool."""

    url: str = "https://api.languagetool.org/v2/check"
    max_text_length: int = 18_000
    request_timeout: float = 30.0
    max_retries: int = 3
    retry_min_seconds: float = 0.5
    retry_max_seconds: float = 6.0
    skip_rules: tuple[str, ...] = ()
    username: str | None = None
    api_key: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_settings(cls, settings: Settings) -> CheckerSettings:
        return cls(
            url=settings.languagetool_url,
            max_text_length=settings.max_text_length,
            request_timeout=settings.request_timeout,
            max_retries=settings.max_retries,
            retry_min_seconds=settings.retry_min_seconds,
            retry_max_seconds=settings.retry_max_seconds,
            skip_rules=tuple(settings.skip_rules),
            username=settings.languagetool_username,
            api_key=settings.languagetool_api_key,
        )

    def disabled_rules(self) -> list[str]:
        ordered: list[str] = []
        for rule in (*self.skip_rules, *DEFAULT_DISABLED_RULES):
            if rule and rule not in ordered:
                ordered.append(rule)
        return ordered


class _RetryableStatus(Exception):
    def __init__(self, response: httpx.Response) -> None:
        super().__init__(f"LanguageTool answered {response.status_code}")
        self.status_code = response.status_code


class Utf16Index:
    """Converts UTF-16 code-unit offsets (as counted by the service) to string indices."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._astral: list[int] = []
        units = 0
        for index, char in enumerate(text):
            if ord(char) > 0xFFFF:
                # code-unit position just after each surrogate pair
                units += 2
                self._astral.append(units)
            else:
                units += 1
        self._total_units = units

    def to_index(self, units: int) -> int:
        if not self._astral:
            return max(0, min(units, len(self._text)))
        units = max(0, min(units, self._total_units))
        # every astral char before this point used one extra unit
        extra = bisect.bisect_right(self._astral, units)
        return units - extra


def parse_matches(matches: Iterable[Mapping[str, Any]], text: str) -> list[Issue]:
    """Turn raw LanguageTool matches into :class:`Issue` objects indexed on ``text``."""

    index = Utf16Index(text)
    issues: list[Issue] = []
    for match in matches:
        try:
            unit_offset = int(match["offset"])
            unit_length = int(match["length"])
        except (KeyError, TypeError, ValueError):
            LOGGER.debug("Skipping malformed LanguageTool match: %r", match)
            continue
        start = index.to_index(unit_offset)
        end = index.to_index(unit_offset + unit_length)
        rule = match.get("rule") or {}
        category = rule.get("category") or {}
        context = match.get("context") or {}
        replacements: Sequence[Any] = match.get("replacements") or ()
        issues.append(
            Issue(
                rule_id=str(rule.get("id", "")),
                category=str(category.get("id", "")),
                message=str(match.get("message", "")),
                offset=start,
                length=end - start,
                original=text[start:end],
                replacements=tuple(
                    str(item["value"])
                    for item in list(replacements)[:_MAX_REPLACEMENTS]
                    if isinstance(item, Mapping) and "value" in item
                ),
                context=str(context.get("text", "")),
                context_offset=int(context.get("offset", 0) or 0),
                source="languagetool",
                is_premium=bool(rule.get("isPremium", False)),
            )
        )
    return issues


class LanguageToolClient:
    """Sends flat text to LanguageTool and returns issues with Python offsets.

    The text is truncated to ``max_text_length`` before submission; returned
    offsets index the submitted prefix, which is a prefix of the caller's text.
    """

    def __init__(self, settings: CheckerSettings | None = None, *, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings or CheckerSettings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._settings.request_timeout)

    @property
    def settings(self) -> CheckerSettings:
        return self._settings

    async def check(self, text: str, language: str) -> list[Issue]:
        if not text or not text.strip():
            return []
        submitted = text[: self._settings.max_text_length]
        form = self._build_form(submitted, language)
        LOGGER.debug(
            "Submitting %s chars (%s) to %s with key %s",
            len(submitted),
            language,
            self._settings.url,
            redact_secret(self._settings.api_key) or "<none>",
        )
        try:
            payload = await self._post(form)
        except _RetryableStatus as exc:
            raise CheckerError(
                message=f"LanguageTool unavailable after {self._settings.max_retries} attempt(s)",
                status_code=exc.status_code,
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise CheckerError(
                message=f"LanguageTool API error: {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise CheckerError(message=f"LanguageTool request failed: {exc}") from exc
        except ValueError as exc:
            raise CheckerError(message="LanguageTool returned invalid JSON") from exc

        matches = payload.get("matches") if isinstance(payload, Mapping) else None
        issues = parse_matches(matches or [], submitted)
        LOGGER.debug("LanguageTool reported %d issue(s)", len(issues))
        return issues

    def _build_form(self, text: str, language: str) -> dict[str, str]:
        form = {
            "text": text,
            "language": language,
            "disabledRules": ",".join(self._settings.disabled_rules()),
        }
        if self._settings.username and self._settings.api_key:
            form["username"] = self._settings.username
            form["apiKey"] = self._settings.api_key
        return form

    async def _post(self, form: Mapping[str, str]) -> Any:
        async for attempt in self._retrying():
            with attempt:
                response = await self._client.post(
                    self._settings.url,
                    data=dict(form),
                    headers=dict(self._settings.headers) or None,
                    timeout=self._settings.request_timeout,
                )
                if response.status_code in _RETRYABLE_STATUS:
                    raise _RetryableStatus(response)
                response.raise_for_status()
                return response.json()
        return None  # pragma: no cover - AsyncRetrying always returns or raises

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            reraise=True,
            stop=stop_after_attempt(max(1, self._settings.max_retries)),
            wait=wait_exponential(
                multiplier=self._settings.retry_min_seconds,
                max=self._settings.retry_max_seconds,
            ),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatus)),
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> LanguageToolClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
