"""Exceptions raised across the job dumper."""

from __future__ import annotations

from typing import Any, Optional


class JobDumperError(Exception):
    """Base class for all job dumper errors."""


class FetchExhausted(JobDumperError):
    """Every attempt for one page of a keyword failed."""

    def __init__(self, keyword: str, page: int, attempts: int, last_error: Optional[str] = None) -> None:
        self.keyword = keyword
        self.page = page
        self.attempts = attempts
        self.last_error = last_error
        msg = f"keyword={keyword!r} page={page}: gave up after {attempts} attempts"
        if last_error:
            msg += f" ({last_error})"
        super().__init__(msg)


class MalformedPayload(JobDumperError):
    """A response body matched neither known upstream shape."""


class MalformedLocation(JobDumperError):
    """A primary location string did not split into city, state and country."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"expected 'city, state, country', got {value!r}")


class ArtifactWriteError(JobDumperError):
    """The output artifact could not be written.

    The finished run is attached so callers still have the in-memory corpus.
    """

    def __init__(self, message: str, result: Any = None) -> None:
        self.result = result
        super().__init__(message)
