"""Base classes for source connectors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

from ..models import Page


class JobSource(ABC):
    """Abstract base class for a paginated job source."""

    name: str

    @abstractmethod
    def iter_pages(self, keyword: str) -> Iterator[Page]:
        """Yield every result page for `keyword`, lazily and in page order."""
        raise NotImplementedError
