"""
Configuration settings for the job dumper.
Loads values from a .env file and the process environment and provides typed access.
"""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

from .utils import get_logger

logger = get_logger(__name__)

# Determine project root
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(project_root, ".env"))

ENVVAR_RETRIES = "JOBDUMPER_RETRIES"
ENVVAR_KEYWORDS = "JOBDUMPER_SEARCHKEYWORDS"

DEFAULT_RETRIES = 2
# URL encoded; phrases are wrapped in quotation marks.
DEFAULT_KEYWORDS = ["ddjl", "%23DevDiv", "DevDiv", '"Developer%20Division"']

SEARCH_URL = "https://gcsservices.careers.microsoft.com/search/api/v1/search"
KEYWORD_PARAM = "q"

# The older search results page: one unpaginated HTML response per keyword.
LEGACY_SEARCH_URL = "https://careers.microsoft.com/us/en/search-results"
LEGACY_KEYWORD_PARAM = "keywords"


def load_retries() -> int:
    """Retry budget from the environment, falling back to the default."""
    raw = os.getenv(ENVVAR_RETRIES)
    try:
        retries = int(raw) if raw is not None else None
    except ValueError:
        retries = None
    if retries is None or retries < 0:
        logger.info("Could not load retries from %s; using default: %d", ENVVAR_RETRIES, DEFAULT_RETRIES)
        return DEFAULT_RETRIES
    logger.info("Loaded retries from %s: %d", ENVVAR_RETRIES, retries)
    return retries


def load_float(name: str, default: float) -> float:
    """Float setting from the environment, falling back to `default` when unparseable."""
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Could not parse %s=%r; using default: %s", name, raw, default)
        return default


def parse_keywords(value: str) -> List[str]:
    """Split a comma separated keyword list, dropping blanks."""
    return [k.strip() for k in (value or "").split(",") if k.strip()]


def load_keywords() -> List[str]:
    """Search keywords from the environment, falling back to the built-in set."""
    keywords = parse_keywords(os.getenv(ENVVAR_KEYWORDS, ""))
    if keywords:
        logger.info("Loaded search keywords from %s: %s", ENVVAR_KEYWORDS, ",".join(keywords))
        return keywords
    logger.info("Could not load search keywords from %s; using default: %s", ENVVAR_KEYWORDS, ",".join(DEFAULT_KEYWORDS))
    return list(DEFAULT_KEYWORDS)


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    retries: int = field(default_factory=load_retries)
    keywords: List[str] = field(default_factory=load_keywords)

    # Seconds; attempt N waits N * base_delay before the next attempt.
    base_delay: float = field(
        default_factory=lambda: load_float("JOBDUMPER_BASE_DELAY", 10.0)
    )
    request_timeout: float = field(
        default_factory=lambda: load_float("JOBDUMPER_TIMEOUT", 30.0)
    )
    search_url: str = field(
        default_factory=lambda: os.getenv("JOBDUMPER_SEARCH_URL", SEARCH_URL)
    )
    keyword_param: str = field(
        default_factory=lambda: os.getenv("JOBDUMPER_KEYWORD_PARAM", KEYWORD_PARAM)
    )

    # Paths
    cache_dir: str = field(
        default_factory=lambda: os.getenv("JOBDUMPER_CACHE_DIR", "cache")
    )
    output_path: str = field(
        default_factory=lambda: os.getenv("JOBDUMPER_OUTPUT", "currentjobs.json")
    )

    def use_legacy_page(self) -> None:
        """Point the fetcher at the older search results page."""
        self.search_url = LEGACY_SEARCH_URL
        self.keyword_param = LEGACY_KEYWORD_PARAM
