"""Last-known-good raw results per keyword.

After a keyword is fetched completely its raw records are written to
`<cache_dir>/<keyword>.json` (keyword decoded, quotes removed). When a later
run exhausts its retries for that keyword, the file is replayed instead.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .models import Page
from .sources.payloads import parse_cached
from .utils import cache_name, get_logger

logger = get_logger(__name__)


class ResponseCache:
    """Directory of cached raw records, one JSON file per keyword."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self._dir = Path(directory).expanduser()

    def path_for(self, keyword: str) -> Path:
        return self._dir / f"{cache_name(keyword)}.json"

    def save(self, keyword: str, jobs: List[Dict[str, Any]]) -> Path:
        path = self.path_for(keyword)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps({"jobs": jobs}, ensure_ascii=False), encoding="utf-8")
        logger.debug("Cached %d raw records for keyword %r at %s", len(jobs), keyword, path)
        return path

    def load(self, keyword: str) -> Optional[Page]:
        """Cached page for `keyword`, or None when nothing was cached."""
        path = self.path_for(keyword)
        if not path.is_file():
            return None
        return parse_cached(path.read_text(encoding="utf-8"))
