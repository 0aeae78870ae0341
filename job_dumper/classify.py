"""Title heuristics.

Discipline and career stage are derived from the listing title with a small,
ordered list of string rules. This is deliberately not a learned classifier:
the rules below are the whole behavior, and titles they don't recognize fall
back to the upstream discipline and to "Entry Level".
"""

from __future__ import annotations

from typing import List, Optional, Tuple


# (substrings, discipline); first match wins. "Manage" covers Manager and Management,
# "Research Scien" covers Scientist and Science.
DISCIPLINE_OVERRIDES: List[Tuple[Tuple[str, ...], str]] = [
    (("Product Manage", "Program Manage"), "Program Management"),
    (("Research Scien",), "Data Science"),
]

DEFAULT_CAREER_STAGE = "Entry Level"


def discipline_override(title: str) -> Optional[str]:
    """Discipline implied by the title alone, or None when no rule matches."""
    t = title or ""
    for needles, discipline in DISCIPLINE_OVERRIDES:
        if any(n in t for n in needles):
            return discipline
    return None


def resolve_discipline(title: str, upstream: Optional[str]) -> str:
    """Title override first, upstream discipline second."""
    return discipline_override(title) or (upstream or "")


def infer_career_stage(title: str) -> str:
    """Career stage from the title; later rules override earlier ones."""
    t = (title or "").lower()
    stage = DEFAULT_CAREER_STAGE
    # Leads count as Senior unless they also match the Principal rule.
    if "lead" in t:
        stage = "Senior"
    if t.startswith("senior") or t.startswith("sr"):
        stage = "Senior"
    if t.startswith("principal"):
        stage = "Principal"
    return stage


def classify_title(title: str, upstream_discipline: Optional[str] = None) -> Tuple[str, str]:
    """Return `(discipline, career_stage)` for a title."""
    return resolve_discipline(title, upstream_discipline), infer_career_stage(title)
