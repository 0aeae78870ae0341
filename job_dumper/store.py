"""In-memory deduplication of listings across keywords and pages."""

from __future__ import annotations

from typing import Dict, Iterator

from .models import JobListing
from .utils import get_logger

logger = get_logger(__name__)


class MergeStore:
    """Listings keyed by `job_id`, first write wins.

    One store belongs to one pipeline run. Only the driving thread writes to
    it, so no locking is done here.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, JobListing] = {}

    def insert(self, listing: JobListing) -> bool:
        """Store `listing` unless its id is already present. Returns True if stored."""
        if listing.job_id in self._jobs:
            logger.info("Skipping job ID %s (%s): already collected", listing.job_id, listing.title)
            return False
        self._jobs[listing.job_id] = listing
        return True

    def values(self) -> Iterator[JobListing]:
        """Stored listings in insertion order; each call starts a fresh iterator."""
        return iter(list(self._jobs.values()))

    def get(self, job_id: str) -> JobListing:
        return self._jobs[job_id]

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)
