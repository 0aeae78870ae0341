"""Tests for the title heuristics."""

from __future__ import annotations

import pytest

from job_dumper.classify import classify_title, discipline_override, infer_career_stage, resolve_discipline


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Software Engineer", "Entry Level"),
        ("Senior Software Engineer", "Senior"),
        ("senior data scientist", "Senior"),
        ("Sr. Program Manager", "Senior"),
        ("Principal Program Manager", "Principal"),
        ("PRINCIPAL ENGINEER", "Principal"),
        ("Team Lead, Azure", "Senior"),
        ("Principal Engineering Lead", "Principal"),
        ("Engineer II (Senior track)", "Entry Level"),
    ],
)
def test_infer_career_stage(title: str, expected: str) -> None:
    assert infer_career_stage(title) == expected


def test_career_stage_ignores_call_order() -> None:
    titles = ["Principal PM", "Software Engineer", "Senior SWE", "Dev Lead"]
    first = [infer_career_stage(t) for t in titles]
    second = [infer_career_stage(t) for t in reversed(titles)][::-1]
    assert first == second


def test_discipline_override_rules() -> None:
    assert discipline_override("Senior Product Manager") == "Program Management"
    assert discipline_override("Technical Program Management Lead") == "Program Management"
    assert discipline_override("Research Scientist") == "Data Science"
    assert discipline_override("Principal Research Science Manager") == "Data Science"
    assert discipline_override("Software Engineer") is None


def test_resolve_discipline_prefers_title_then_upstream() -> None:
    assert resolve_discipline("Program Manager", "Software Engineering") == "Program Management"
    assert resolve_discipline("Software Engineer", "Software Engineering") == "Software Engineering"
    assert resolve_discipline("Software Engineer", None) == ""


def test_classify_principal_program_manager() -> None:
    assert classify_title("Principal Program Manager", "Software Engineering") == ("Program Management", "Principal")
