"""Response body parsers.

Two upstream shapes are understood, and `parse_page` picks one by looking at
the body:

- `envelope`: the JSON search API,
  `{"operationResult": {"result": {"totalJobs": N, "jobs": [...]}}}`.
- `html`: the legacy search results page. It is HTML, but it embeds one large
  JSON blob holding every listing (not paginated). The jobs node starts with
  `{"jobs":[` and is immediately followed by the `"aggregations"` node, so we
  cut the text between the two markers and close the object ourselves.

The html scan depends on the page layout. Keep it confined to
`extract_html_jobs` so it can be swapped out when the page changes.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from ..errors import MalformedPayload
from ..models import Page


JOBS_MARKER = '{"jobs":['
AGGREGATIONS_MARKER = ',"aggregations":['


def extract_html_jobs(body: str) -> List[Dict[str, Any]]:
    """Pull the jobs array out of a legacy search results page."""
    start = body.find(JOBS_MARKER)
    if start < 0:
        raise MalformedPayload(f"marker {JOBS_MARKER!r} not found")
    end = body.find(AGGREGATIONS_MARKER, start)
    if end < 0:
        raise MalformedPayload(f"marker {AGGREGATIONS_MARKER!r} not found")
    try:
        blob = json.loads(body[start:end] + "}")
    except json.JSONDecodeError as exc:
        raise MalformedPayload(f"embedded jobs blob is not valid JSON: {exc}") from exc
    return _job_list(blob.get("jobs"))


def _job_list(jobs: Any) -> List[Dict[str, Any]]:
    if not isinstance(jobs, list):
        raise MalformedPayload("jobs is not a list")
    return [j for j in jobs if isinstance(j, dict)]


def parse_envelope(payload: Dict[str, Any], number: int = 1) -> Page:
    """Build a page from a decoded search API envelope."""
    op = payload.get("operationResult")
    result = op.get("result") if isinstance(op, dict) else None
    if not isinstance(result, dict):
        raise MalformedPayload("operationResult.result missing from response")
    total = result.get("totalJobs")
    try:
        total_jobs = int(total) if total is not None else None
    except (TypeError, ValueError):
        total_jobs = None
    except OverflowError as exc:
        raise MalformedPayload(f"totalJobs is not a finite number: {total!r}") from exc
    return Page(kind="envelope", number=number, jobs=_job_list(result.get("jobs") or []), total_jobs=total_jobs)


def parse_page(body: str, number: int = 1) -> Page:
    """Parse a response body into a `Page`, choosing the strategy by shape."""
    text = (body or "").lstrip()
    if text.startswith("{"):
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            payload = None
        if isinstance(payload, dict) and "operationResult" in payload:
            return parse_envelope(payload, number)
    if JOBS_MARKER in text:
        return Page(kind="html", number=1, jobs=extract_html_jobs(text))
    raise MalformedPayload("response matches neither the search API envelope nor the legacy page")


def parse_cached(text: str) -> Page:
    """Parse a cache file written by `ResponseCache.save`."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedPayload(f"cache file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedPayload("cache file is not a JSON object")
    return Page(kind="cache", jobs=_job_list(payload.get("jobs")))
