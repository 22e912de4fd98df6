"""Sequential batch scanning of stored documents with progress tracking."""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Sequence

from ..core.errors import BatchAlreadyRunning
from ..services.documents import DocumentStore
from ..services.settings import Settings
from .checker import DocumentChecker
from .models import CheckReport

__all__ = [
    "BatchFailure",
    "BatchProgress",
    "BatchResult",
    "BatchScanner",
    "BatchState",
    "BatchSummary",
]

LOGGER = logging.getLogger(__name__)

ResultCallback = Callable[["BatchResult"], "Awaitable[None] | None"]


class BatchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


@dataclass(slots=True, frozen=True)
class BatchProgress:
    """Snapshot of a scan; ``last_progress_at`` uses the scanner's clock."""

    state: BatchState = BatchState.IDLE
    total: int = 0
    processed: int = 0
    failed: int = 0
    current_doc_id: str | None = None
    started_at: float | None = None
    last_progress_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "total": self.total,
            "processed": self.processed,
            "failed": self.failed,
            "currentDocId": self.current_doc_id,
        }


@dataclass(slots=True, frozen=True)
class BatchResult:
    doc_id: str
    report: CheckReport

    @property
    def score(self) -> int:
        return self.report.score

    @property
    def issue_count(self) -> int:
        return self.report.issue_count

    def to_dict(self) -> dict[str, Any]:
        payload = self.report.to_dict()
        payload["docId"] = self.doc_id
        return payload


@dataclass(slots=True, frozen=True)
class BatchFailure:
    doc_id: str
    error: str


@dataclass(slots=True)
class BatchSummary:
    """Totals for one scan. ``total_documents`` counts every id visited."""

    total_documents: int = 0
    total_issues: int = 0
    results: list[BatchResult] = field(default_factory=list)
    failures: list[BatchFailure] = field(default_factory=list)
    cancelled: bool = False

    @property
    def average_score(self) -> int:
        if not self.results:
            return 100
        mean = sum(result.score for result in self.results) / len(self.results)
        return math.floor(mean + 0.5)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalDocuments": self.total_documents,
            "totalIssues": self.total_issues,
            "averageScore": self.average_score,
            "results": [result.to_dict() for result in self.results],
            "failures": [{"docId": failure.doc_id, "error": failure.error} for failure in self.failures],
            "cancelled": self.cancelled,
        }


class BatchScanner:
    """Checks documents one at a time, pausing between checking-service calls.

    Only one run may be live at a time. A run that has made no progress for
    ``stale_after_seconds`` may be replaced, either by :meth:`force_reset` or
    by starting a new run.
    """

    def __init__(
        self,
        store: DocumentStore,
        checker: DocumentChecker,
        *,
        delay_seconds: float = 3.0,
        stale_after_seconds: float = 300.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._checker = checker
        self._delay = max(0.0, float(delay_seconds))
        self._stale_after = float(stale_after_seconds)
        self._sleep = sleep
        self._clock = clock
        self._progress = BatchProgress()
        self._generation = 0
        self._cancel_requested = False

    @classmethod
    def from_settings(
        cls,
        store: DocumentStore,
        checker: DocumentChecker,
        settings: Settings,
        **kwargs: Any,
    ) -> BatchScanner:
        return cls(
            store,
            checker,
            delay_seconds=settings.batch_delay,
            stale_after_seconds=settings.batch_stale_after,
            **kwargs,
        )

    @property
    def progress(self) -> BatchProgress:
        return self._progress

    def is_running(self) -> bool:
        return self._progress.state is BatchState.RUNNING

    def is_stale(self) -> bool:
        if not self.is_running():
            return False
        last = self._progress.last_progress_at
        if last is None:
            return False
        return self._clock() - last >= self._stale_after

    def cancel(self) -> bool:
        """Ask the live run to stop after the current document."""

        if not self.is_running():
            return False
        self._cancel_requested = True
        return True

    def force_reset(self) -> None:
        """Forget the current run; a detached run stops at its next step."""

        if self.is_running():
            LOGGER.warning("Resetting batch scan at %s/%s", self._progress.processed, self._progress.total)
        self._generation += 1
        self._cancel_requested = False
        self._progress = BatchProgress()

    async def run(self, doc_ids: Iterable[str], *, on_result: ResultCallback | None = None) -> BatchSummary:
        if self.is_running():
            if not self.is_stale():
                raise BatchAlreadyRunning(details={"progress": self._progress.to_dict()})
            LOGGER.warning("Replacing stale batch scan")
            self.force_reset()

        ids: Sequence[str] = [str(doc_id) for doc_id in doc_ids]
        self._generation += 1
        generation = self._generation
        self._cancel_requested = False
        now = self._clock()
        self._progress = BatchProgress(
            state=BatchState.RUNNING,
            total=len(ids),
            started_at=now,
            last_progress_at=now,
        )
        LOGGER.info("Starting batch scan of %d document(s)", len(ids))

        summary = BatchSummary()
        checked_any = False
        for doc_id in ids:
            if generation != self._generation:
                LOGGER.info("Batch scan superseded; stopping")
                summary.cancelled = True
                return summary
            if self._cancel_requested:
                summary.cancelled = True
                break

            summary.total_documents += 1
            self._update(current_doc_id=doc_id)
            try:
                document = self._store.load(doc_id)
                extraction = self._checker.extract(document)
                if extraction.is_empty:
                    LOGGER.debug("Document %s has no text; skipping", doc_id)
                    self._advance(generation)
                    continue
                if checked_any and self._delay:
                    await self._sleep(self._delay)
                checked_any = True
                report = await self._checker.check_extraction(extraction)
            except Exception as exc:
                LOGGER.warning("Batch check failed for %s: %s", doc_id, exc, exc_info=True)
                summary.failures.append(BatchFailure(doc_id=doc_id, error=str(exc)))
                self._advance(generation, failed=True)
                continue

            result = BatchResult(doc_id=doc_id, report=report)
            summary.results.append(result)
            summary.total_issues += report.issue_count
            await self._notify(on_result, result)
            self._advance(generation)

        if generation == self._generation:
            state = BatchState.CANCELLED if summary.cancelled else BatchState.COMPLETED
            self._progress = replace(self._progress, state=state, current_doc_id=None, last_progress_at=self._clock())
            self._cancel_requested = False
        LOGGER.info(
            "Batch scan finished: %d document(s), %d issue(s), average score %s",
            summary.total_documents,
            summary.total_issues,
            summary.average_score,
        )
        return summary

    def _update(self, **changes: Any) -> None:
        self._progress = replace(self._progress, **changes)

    def _advance(self, generation: int, *, failed: bool = False) -> None:
        if generation != self._generation:
            return
        self._update(
            processed=self._progress.processed + 1,
            failed=self._progress.failed + (1 if failed else 0),
            last_progress_at=self._clock(),
        )

    async def _notify(self, callback: ResultCallback | None, result: BatchResult) -> None:
        if callback is None:
            return
        try:
            outcome = callback(result)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            LOGGER.error("Failed to store batch result for %s", result.doc_id, exc_info=True)
