"""Document-level checking: one extraction, one submission, filtered issues."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, runtime_checkable

from ..extraction.extractor import Extraction, extract
from ..richtext.walker import count_words
from ..services.settings import Settings
from .allowlist import AllowListCache
from .filters import FilterConfig, calculate_score, filter_false_positives
from .models import CheckReport, Issue
from .semantic import SemanticChecker

__all__ = ["DocumentChecker", "TextChecker"]

LOGGER = logging.getLogger(__name__)


@runtime_checkable
class TextChecker(Protocol):
    """Anything that reports issues with offsets into the exact text it received."""

    async def check(self, text: str, language: str) -> list[Issue]:
        ...


class DocumentChecker:
    """Runs a :class:`TextChecker` over a document's flat text.

    The returned :class:`CheckReport` keeps the :class:`Extraction` it was
    computed from, so a later fix can reuse the same segment list.
    """

    def __init__(
        self,
        checker: TextChecker,
        *,
        settings: Settings | None = None,
        semantic: SemanticChecker | None = None,
        allow_list: AllowListCache | None = None,
    ) -> None:
        self._checker = checker
        self._settings = settings or Settings()
        self._semantic = semantic
        self._allow_list = allow_list
        self._filters = FilterConfig.from_settings(self._settings)

    @property
    def settings(self) -> Settings:
        return self._settings

    def extract(self, document: Any, content_field: str | None = None) -> Extraction:
        return extract(
            document,
            content_field or self._settings.content_field,
            config=self._settings.extraction_config(),
        )

    async def check_document(
        self,
        document: Any,
        *,
        content_field: str | None = None,
        language: str | None = None,
        ignored: Iterable[Any] = (),
    ) -> CheckReport:
        extraction = self.extract(document, content_field)
        return await self.check_extraction(extraction, language=language, ignored=ignored)

    async def check_text(
        self,
        text: str,
        *,
        language: str | None = None,
        ignored: Iterable[Any] = (),
    ) -> CheckReport:
        stripped = (text or "").strip()
        return await self.check_extraction(Extraction(flat_text=stripped, joined=stripped), language=language, ignored=ignored)

    async def check_extraction(
        self,
        extraction: Extraction,
        *,
        language: str | None = None,
        ignored: Iterable[Any] = (),
    ) -> CheckReport:
        lang = language or self._settings.language
        if extraction.is_empty:
            return CheckReport(extraction=extraction, language=lang)

        text = extraction.flat_text[: self._settings.max_text_length]
        issues = list(await self._checker.check(text, lang))
        if self._semantic is not None and self._settings.enable_ai_fallback:
            issues.extend(await self._semantic.check(text, lang))

        allow_words = self._allow_list.words() if self._allow_list is not None else frozenset()
        kept = filter_false_positives(issues, self._filters, allow_words=allow_words, ignored=ignored)
        word_count = count_words(extraction.flat_text)
        score = calculate_score(word_count, len(kept))
        LOGGER.debug(
            "Checked %s words: %d raw issue(s), %d kept, score %s",
            word_count,
            len(issues),
            len(kept),
            score,
        )
        if score < self._settings.warning_threshold:
            LOGGER.info("Score %s is below the warning threshold %s", score, self._settings.warning_threshold)
        return CheckReport(
            extraction=extraction,
            issues=kept,
            word_count=word_count,
            score=score,
            language=lang,
        )
