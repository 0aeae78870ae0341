"""Output artifact and the derived CSV view."""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .classify import resolve_discipline
from .models import JobListing
from .utils import get_logger

logger = get_logger(__name__)

CSV_HEADER = ["Number", "PostedDate", "Title", "Location", "Discipline", "Level", "JobPostingUrl"]


def build_artifact(listings: Iterable[JobListing], now: Optional[datetime] = None) -> Dict[str, Any]:
    """The JSON value handed to storage: a timestamp plus every listing."""
    now = now or datetime.now(timezone.utc)
    return {
        "lastUpdated": now.astimezone(timezone.utc).isoformat(),
        "jobs": [j.model_dump(mode="json", by_alias=True) for j in listings],
    }


def write_artifact(artifact: Dict[str, Any], path: Union[str, Path]) -> Path:
    out_path = Path(path).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(artifact, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_path


def display_location(listing: JobListing) -> str:
    """Country, unless the listing names exactly one real city.

    Most US listings are posted with a list of cities, in which case the
    country is the useful summary.
    """
    loc = listing.location
    if len(loc.multi_location_array) == 1 and loc.city and loc.city != "Multiple Locations":
        return loc.city
    return loc.country or ""


def csv_row(number: int, listing: JobListing) -> List[str]:
    return [
        str(number),
        listing.posted_date,
        listing.title.replace(",", "-"),
        display_location(listing),
        resolve_discipline(listing.title, listing.discipline),
        listing.career_stage,
        listing.url,
    ]


def artifact_to_csv(artifact: Dict[str, Any]) -> str:
    """Render an artifact's jobs as CSV text.

    Jobs that can't be read as listings are logged and left out.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for i, raw in enumerate(artifact.get("jobs") or []):
        try:
            listing = JobListing.model_validate(raw)
        except ValueError as exc:
            logger.error("Error writing job #%d to CSV: %s", i, exc)
            continue
        writer.writerow(csv_row(i, listing))
    return buf.getvalue()
