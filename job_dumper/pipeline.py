"""One harvesting run: fetch every keyword, normalize, merge, serialize.

Keywords are processed one after another. A keyword that fails (retries
exhausted, unreadable payload, transport error) is marked failed and replayed
from the cache when possible; it never stops the other keywords. The run as a
whole only fails when the artifact writer fails.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

import httpx
from pydantic import ValidationError

from .cache import ResponseCache
from .errors import ArtifactWriteError, FetchExhausted, MalformedLocation, MalformedPayload
from .export import build_artifact
from .models import Page
from .normalize import to_job_listing
from .sources.base import JobSource
from .store import MergeStore
from .utils import get_logger

logger = get_logger(__name__)

ArtifactWriter = Callable[[Dict[str, Any]], Any]


class RunState(str, Enum):
    INIT = "init"
    PER_KEYWORD = "per_keyword"
    SERIALIZING = "serializing"
    DONE = "done"


class KeywordState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    MERGING = "merging"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RunResult:
    """State owned by a single run. Nothing here outlives it."""

    store: MergeStore = field(default_factory=MergeStore)
    state: RunState = RunState.INIT
    keyword_states: Dict[str, KeywordState] = field(default_factory=dict)
    used_cache: List[str] = field(default_factory=list)
    skipped_records: int = 0
    artifact: Optional[Dict[str, Any]] = None

    @property
    def failed_keywords(self) -> List[str]:
        return [k for k, s in self.keyword_states.items() if s is KeywordState.FAILED]


class Pipeline:
    """Drives fetch -> normalize -> merge for every keyword, then serializes."""

    def __init__(
        self,
        source: JobSource,
        keywords: Iterable[str],
        writer: Optional[ArtifactWriter] = None,
        cache: Optional[ResponseCache] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._source = source
        self._keywords = list(keywords)
        self._writer = writer
        self._cache = cache
        self._clock = clock

    def _merge_page(self, result: RunResult, keyword: str, page: Page) -> int:
        """Normalize and insert every record of a page. Returns how many were new."""
        result.keyword_states[keyword] = KeywordState.NORMALIZING
        listings = []
        for i, raw in enumerate(page.jobs):
            try:
                listings.append(to_job_listing(raw))
            except (MalformedLocation, ValidationError) as exc:
                result.skipped_records += 1
                logger.warning(
                    "Skipping record #%d (jobId=%s) for keyword %r page %d: %s",
                    i, raw.get("jobId"), keyword, page.number, exc,
                )

        result.keyword_states[keyword] = KeywordState.MERGING
        return sum(1 for listing in listings if result.store.insert(listing))

    def _fall_back(self, result: RunResult, keyword: str) -> None:
        if self._cache is None:
            logger.error("Keyword %r failed and no cache is configured; its results may be partial", keyword)
            return
        try:
            page = self._cache.load(keyword)
        except (OSError, MalformedPayload) as exc:
            logger.error("Keyword %r: could not read cached results: %s", keyword, exc)
            return
        if page is None:
            logger.error("Keyword %r failed and has no cached results; its results may be partial", keyword)
            return
        added = self._merge_page(result, keyword, page)
        result.used_cache.append(keyword)
        logger.warning("Keyword %r: used cached results instead (%d new listings)", keyword, added)

    def _run_keyword(self, result: RunResult, keyword: str) -> None:
        raw_jobs: List[Dict[str, Any]] = []
        try:
            result.keyword_states[keyword] = KeywordState.FETCHING
            for page in self._source.iter_pages(keyword):
                raw_jobs.extend(page.jobs)
                added = self._merge_page(result, keyword, page)
                logger.info(
                    "Keyword %r page %d: %d records, %d new", keyword, page.number, len(page.jobs), added
                )
                result.keyword_states[keyword] = KeywordState.FETCHING
        except (FetchExhausted, MalformedPayload, httpx.HTTPError) as exc:
            result.keyword_states[keyword] = KeywordState.FAILED
            logger.error("An error occurred for search keyword %r: %s", keyword, exc)
            self._fall_back(result, keyword)
            result.keyword_states[keyword] = KeywordState.FAILED
            return

        result.keyword_states[keyword] = KeywordState.SUCCEEDED
        if self._cache is not None:
            try:
                self._cache.save(keyword, raw_jobs)
            except OSError as exc:
                logger.warning("Keyword %r: could not update cache: %s", keyword, exc)

    def run(self, keywords: Optional[Iterable[str]] = None) -> RunResult:
        """Process every keyword and hand the artifact to the writer.

        Raises `ArtifactWriteError` (carrying the result) if the writer fails.
        """
        result = RunResult()
        for keyword in (list(keywords) if keywords is not None else self._keywords):
            if keyword in result.keyword_states:
                continue
            result.keyword_states[keyword] = KeywordState.PENDING
            result.state = RunState.PER_KEYWORD
            self._run_keyword(result, keyword)

        result.state = RunState.SERIALIZING
        now = self._clock() if self._clock else None
        result.artifact = build_artifact(result.store.values(), now)
        logger.info(
            "Collected %d unique listings from %d keywords (%d failed, %d records skipped)",
            len(result.store), len(result.keyword_states), len(result.failed_keywords), result.skipped_records,
        )

        write_error = None
        if self._writer is not None:
            try:
                self._writer(result.artifact)
            except Exception as exc:
                logger.error("Failed to write the output artifact: %s", exc)
                write_error = exc

        result.state = RunState.DONE
        if write_error is not None:
            raise ArtifactWriteError(f"could not write artifact: {write_error}", result) from write_error
        return result
