"""Careers search connector.

The search endpoint takes the keyword as a query parameter; no auth is
required. It occasionally answers with a 502, and retrying the same request
usually succeeds, so every page gets a small retry budget with a growing
pause between attempts.

The newer API pages its results (20 per page) and reports `totalJobs`; the
legacy page returns everything in one response. `payloads.parse_page` tells
them apart, and pagination only continues for the paged shape.
"""

from __future__ import annotations

import math
import time
from typing import Any, Callable, Dict, Iterator, Optional

import httpx

from ..config import KEYWORD_PARAM, SEARCH_URL, Settings
from ..errors import FetchExhausted
from ..models import Page
from ..utils import decode_keyword, get_logger
from .base import JobSource
from .payloads import parse_page

logger = get_logger(__name__)

PAGE_SIZE = 20


def page_count(total_jobs: Optional[int], page_size: int = PAGE_SIZE) -> int:
    """Number of pages for `total_jobs` results; never less than one."""
    if not total_jobs or total_jobs <= 0:
        return 1
    return max(1, math.ceil(total_jobs / page_size))


class CareersSource(JobSource):
    """Fetch raw result pages for a keyword from the careers search."""

    name = "careers"

    def __init__(
        self,
        search_url: str = SEARCH_URL,
        keyword_param: str = KEYWORD_PARAM,
        retries: int = 2,
        base_delay: float = 10.0,
        timeout_s: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._search_url = search_url
        self._keyword_param = keyword_param
        self._retries = max(retries, 0)
        self._base_delay = base_delay
        self._timeout = timeout_s
        self._transport = transport
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "CareersSource":
        return cls(
            search_url=settings.search_url,
            keyword_param=settings.keyword_param,
            retries=settings.retries,
            base_delay=settings.base_delay,
            timeout_s=settings.request_timeout,
            **kwargs,
        )

    def _params(self, keyword: str, page: int) -> Dict[str, Any]:
        return {
            self._keyword_param: decode_keyword(keyword),
            "pg": page,
            "pgSz": PAGE_SIZE,
            "o": "Recent",
            "flt": "true",
        }

    def _get_page(self, client: httpx.Client, keyword: str, page: int) -> str:
        """GET one page, retrying failures. Raises `FetchExhausted` when out of attempts."""
        attempts = self._retries + 1
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                resp = client.get(self._search_url, params=self._params(keyword, page))
                logger.info(
                    "Search keyword %r page %d returned status %d on attempt #%d",
                    keyword, page, resp.status_code, attempt,
                )
                resp.raise_for_status()
                return resp.text
            except httpx.HTTPStatusError as exc:
                last_error = f"HTTP {exc.response.status_code}"
            except httpx.TransportError as exc:
                last_error = f"{type(exc).__name__}: {exc}"
                logger.warning("Search keyword %r page %d failed on attempt #%d: %s", keyword, page, attempt, last_error)

            if attempt < attempts:
                self._sleep(attempt * self._base_delay)

        logger.error("Encountered %d failures searching for keyword %r page %d", attempts, keyword, page)
        raise FetchExhausted(keyword, page, attempts, last_error)

    def iter_pages(self, keyword: str) -> Iterator[Page]:
        """Yield every page for `keyword`.

        Page 1 is always fetched; further pages only when the response reports
        more results than fit on one page.
        """
        with httpx.Client(timeout=self._timeout, follow_redirects=True, transport=self._transport) as client:
            first = parse_page(self._get_page(client, keyword, 1), number=1)
            yield first
            if first.kind != "envelope":
                return

            total_pages = page_count(first.total_jobs)
            logger.debug("Keyword %r: %s results over %d pages", keyword, first.total_jobs, total_pages)
            for number in range(2, total_pages + 1):
                yield parse_page(self._get_page(client, keyword, number), number=number)
