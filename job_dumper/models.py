"""Data models for the job dumper.

The key idea: downstream consumers get one *stable* canonical schema no matter
which upstream response shape produced a listing. Field names are snake_case in
Python and camelCase on the wire (`job_id` <-> `jobId`).

This file uses Pydantic v2.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


JOB_URL_TEMPLATE = "https://careers.microsoft.com/us/en/job/{job_id}"

CareerStage = Literal["Entry Level", "Senior", "Principal"]


class _Canonical(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Location(_Canonical):
    """Where a listing is based. `state` is unset when upstream has no such field."""

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    primary_location: Optional[str] = None
    multi_location_array: List[Any] = Field(default_factory=list)


class JobListing(_Canonical):
    """A canonical job listing, the unit stored in the merge store.

    Instances are frozen: once a listing enters the store it never changes.
    """

    job_id: str = Field(..., description="Upstream job number; the dedup key.")
    title: str
    posted_date: str = Field(default="", description="Timestamp as supplied upstream, not reparsed.")
    location: Location = Field(default_factory=Location)
    discipline: str = ""
    career_stage: CareerStage = "Entry Level"
    url: str = ""
    extra_properties: Dict[str, str] = Field(default_factory=dict)

    @field_validator("job_id", mode="before")
    @classmethod
    def _job_id_digits(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        if not text.isdigit():
            raise ValueError(f"jobId must be digits, got {value!r}")
        return text


class Page(BaseModel):
    """One parsed upstream response.

    `kind` tags which extraction strategy produced it: `envelope` for the JSON
    search API, `html` for the legacy page with an embedded jobs blob.
    """

    kind: Literal["envelope", "html", "cache"]
    number: int = 1
    jobs: List[Dict[str, Any]] = Field(default_factory=list)
    total_jobs: Optional[int] = None


def job_url(job_id: str) -> str:
    """Public posting URL for a job number."""
    return JOB_URL_TEMPLATE.format(job_id=job_id)
