"""Schema translation.

Upstream records come in two shapes:
- the legacy search page: flat records with `postedDate`, `city`, `country`,
  `subCategory` and `multi_location_array`;
- the search API: `postingDate` at the top level and location/discipline data
  nested under `properties` (`primaryLocation`, `locations`, `discipline`).

`to_job_listing` maps either one onto the canonical `JobListing`. It never
mutates its input; fields it doesn't model are kept as strings in
`extraProperties`.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .classify import infer_career_stage
from .errors import MalformedLocation
from .models import JobListing, Location, job_url


CANONICAL_FIELDS = frozenset(
    {"jobId", "title", "postedDate", "location", "discipline", "careerStage", "url", "extraProperties"}
)

# Raw fields consumed into canonical fields; never repeated in extraProperties.
MAPPED_FIELDS = frozenset(
    {
        "jobId",
        "title",
        "postedDate",
        "postingDate",
        "primaryLocation",
        "city",
        "country",
        "multi_location_array",
        "locations",
        "discipline",
        "subCategory",
        "properties",
    }
)


def split_primary_location(value: str) -> Tuple[str, str, str]:
    """Split `"Redmond, WA, United States"` into trimmed city, state, country."""
    parts = [p.strip() for p in (value or "").split(",")]
    if len(parts) != 3:
        raise MalformedLocation(value)
    return parts[0], parts[1], parts[2]


def is_canonical(raw: Mapping[str, Any]) -> bool:
    """True for records that already have the canonical shape."""
    return isinstance(raw.get("location"), Mapping) and "careerStage" in raw


def _lookup(raw: Mapping[str, Any], props: Mapping[str, Any], *names: str) -> Any:
    """First non-empty value for any of `names`, top level before `properties`."""
    for source in (raw, props):
        for name in names:
            value = source.get(name)
            if value not in (None, ""):
                return value
    return None


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _location(raw: Mapping[str, Any], props: Mapping[str, Any]) -> Location:
    multi = _lookup(raw, props, "multi_location_array", "locations")
    multi_list: List[Any] = list(multi) if isinstance(multi, (list, tuple)) else []

    primary = _lookup(raw, props, "primaryLocation")
    if isinstance(primary, str):
        city, state, country = split_primary_location(primary)
        return Location(
            city=city,
            state=state,
            country=country,
            primary_location=primary,
            multi_location_array=multi_list,
        )

    city = _lookup(raw, props, "city")
    country = _lookup(raw, props, "country")
    return Location(
        city=_as_text(city) if city is not None else None,
        country=_as_text(country) if country is not None else None,
        multi_location_array=multi_list,
    )


def _extra_properties(raw: Mapping[str, Any], props: Mapping[str, Any]) -> Dict[str, str]:
    extra: Dict[str, str] = {}
    for source in (raw, props):
        for key, value in source.items():
            if key in MAPPED_FIELDS or key in CANONICAL_FIELDS or key in extra:
                continue
            extra[key] = _as_text(value)
    return extra


def to_job_listing(raw: Mapping[str, Any]) -> JobListing:
    """Translate one raw upstream record into a canonical `JobListing`.

    Raises `MalformedLocation` when a primary location isn't exactly
    `city, state, country`, and pydantic's `ValidationError` when the record
    lacks a usable `jobId` or `title`.
    """
    if is_canonical(raw):
        return JobListing.model_validate(raw)

    props = raw.get("properties")
    if not isinstance(props, Mapping):
        props = {}

    job_id = raw.get("jobId")
    title = raw.get("title")
    discipline: Optional[Any] = _lookup(raw, props, "discipline", "subCategory")

    return JobListing(
        job_id=job_id,
        title=title,
        posted_date=_as_text(_lookup(raw, props, "postedDate", "postingDate")),
        location=_location(raw, props),
        discipline=_as_text(discipline),
        career_stage=infer_career_stage(title if isinstance(title, str) else ""),
        url=job_url(str(job_id).strip()),
        extra_properties=_extra_properties(raw, props),
    )
