"""End-to-end runs of the pipeline against stubbed HTTP."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

import httpx
import pytest

from factories import envelope, legacy_html, legacy_record, search_record
from job_dumper.cache import ResponseCache
from job_dumper.errors import ArtifactWriteError
from job_dumper.pipeline import KeywordState, Pipeline, RunState
from job_dumper.sources.careers import CareersSource

FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _source(responses: Dict[str, object], retries: int = 1) -> CareersSource:
    """Serve `responses[keyword]`: a body string, a list of page bodies, or an int status."""

    def handler(request: httpx.Request) -> httpx.Response:
        body = responses[request.url.params["q"]]
        if isinstance(body, int):
            return httpx.Response(body)
        if isinstance(body, list):
            return httpx.Response(200, text=body[int(request.url.params["pg"]) - 1])
        return httpx.Response(200, text=body)

    return CareersSource(
        search_url="https://search.test/api",
        retries=retries,
        base_delay=0.0,
        transport=httpx.MockTransport(handler),
        sleep=lambda _s: None,
    )


def test_same_job_under_two_keywords_is_kept_once() -> None:
    source = _source(
        {
            "ddjl": envelope([search_record("1234567", "Senior Software Engineer")], total=1),
            "DevDiv": envelope(
                [search_record("1234567", "Renamed Engineer"), search_record("2222222", "Program Manager")],
                total=2,
            ),
        }
    )
    result = Pipeline(source, ["ddjl", "DevDiv"], clock=lambda: FIXED_NOW).run()

    assert len(result.store) == 2
    assert result.store.get("1234567").title == "Senior Software Engineer"
    assert [j["jobId"] for j in result.artifact["jobs"]] == ["1234567", "2222222"]
    assert result.state is RunState.DONE
    assert result.keyword_states == {"ddjl": KeywordState.SUCCEEDED, "DevDiv": KeywordState.SUCCEEDED}


def test_artifact_shape() -> None:
    written: List[dict] = []
    source = _source({"ddjl": envelope([search_record("1234567", "Senior Software Engineer")], total=1)})
    Pipeline(source, ["ddjl"], writer=written.append, clock=lambda: FIXED_NOW).run()

    artifact = written[0]
    assert artifact["lastUpdated"] == "2024-01-02T03:04:05+00:00"
    job = artifact["jobs"][0]
    assert job["jobId"] == "1234567"
    assert job["careerStage"] == "Senior"
    assert job["location"]["city"] == "Redmond"
    assert job["location"]["multiLocationArray"] == ["Redmond, WA, United States"]
    assert job["url"] == "https://careers.microsoft.com/us/en/job/1234567"
    assert "extraProperties" in job
    json.dumps(artifact)


def test_failed_keyword_does_not_stop_others(caplog: pytest.LogCaptureFixture) -> None:
    source = _source({"broken": 502, "ddjl": envelope([search_record("1", "Engineer")], total=1)})
    result = Pipeline(source, ["broken", "ddjl"]).run()

    assert result.keyword_states["broken"] is KeywordState.FAILED
    assert result.keyword_states["ddjl"] is KeywordState.SUCCEEDED
    assert result.failed_keywords == ["broken"]
    assert "1" in result.store
    assert "broken" in caplog.text


def test_bad_record_is_skipped_not_the_page() -> None:
    page = envelope(
        [search_record("1", "Engineer", primary="Nowhere"), search_record("2", "Engineer")],
        total=2,
    )
    result = Pipeline(_source({"ddjl": page}), ["ddjl"]).run()

    assert result.skipped_records == 1
    assert [j.job_id for j in result.store.values()] == ["2"]
    assert result.keyword_states["ddjl"] is KeywordState.SUCCEEDED


def test_multi_page_keyword() -> None:
    pages = [
        envelope([search_record(str(i), f"Job {i}") for i in range(1, 21)], total=25),
        envelope([search_record(str(i), f"Job {i}") for i in range(21, 26)], total=25),
    ]
    result = Pipeline(_source({"ddjl": pages}), ["ddjl"]).run()
    assert len(result.store) == 25


def test_legacy_and_new_shapes_merge() -> None:
    source = _source(
        {
            "old": legacy_html([legacy_record("1111111", "Research Scientist")]),
            "new": envelope([search_record("1111111", "Research Scientist"), search_record("3", "Sr PM")], total=2),
        }
    )
    result = Pipeline(source, ["old", "new"]).run()

    first = result.store.get("1111111")
    assert first.location.state is None
    assert first.location.city == "Redmond"
    assert len(result.store) == 2


def test_successful_keyword_is_cached_and_replayed(tmp_path: Path) -> None:
    cache = ResponseCache(tmp_path / "cache")
    good = _source({'"Developer Division"': envelope([search_record("77", "Engineer")], total=1)})
    Pipeline(good, ['"Developer%20Division"'], cache=cache).run()

    assert (tmp_path / "cache" / "Developer Division.json").is_file()

    bad = _source({'"Developer Division"': 500})
    result = Pipeline(bad, ['"Developer%20Division"'], cache=cache).run()

    assert result.keyword_states['"Developer%20Division"'] is KeywordState.FAILED
    assert result.used_cache == ['"Developer%20Division"']
    assert "77" in result.store


def test_failure_without_cache_file_is_logged(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    result = Pipeline(_source({"ddjl": 500}), ["ddjl"], cache=ResponseCache(tmp_path)).run()
    assert len(result.store) == 0
    assert result.used_cache == []
    assert "no cached results" in caplog.text


def test_write_failure_keeps_corpus() -> None:
    def writer(artifact: dict) -> None:
        raise OSError("disk full")

    source = _source({"ddjl": envelope([search_record("1", "Engineer")], total=1)})
    with pytest.raises(ArtifactWriteError) as info:
        Pipeline(source, ["ddjl"], writer=writer).run()

    result = info.value.result
    assert result.state is RunState.DONE
    assert "1" in result.store


def test_runs_do_not_share_state() -> None:
    source = _source({"ddjl": envelope([search_record("1", "Engineer")], total=1)})
    pipeline = Pipeline(source, ["ddjl"])
    first = pipeline.run()
    second = pipeline.run()
    assert first.store is not second.store
    assert len(second.store) == 1


def test_unexpected_writer_error_is_wrapped() -> None:
    def writer(artifact: dict) -> None:
        raise RuntimeError("blob service unavailable")

    source = _source({"ddjl": envelope([search_record("1", "Engineer")], total=1)})
    with pytest.raises(ArtifactWriteError) as info:
        Pipeline(source, ["ddjl"], writer=writer).run()

    assert isinstance(info.value.__cause__, RuntimeError)
    assert info.value.result.state is RunState.DONE
    assert "1" in info.value.result.store


def test_overflowing_total_fails_only_that_keyword() -> None:
    bad_body = '{"operationResult": {"result": {"totalJobs": 1e999, "jobs": []}}}'
    source = _source({"bad": bad_body, "ddjl": envelope([search_record("1", "Engineer")], total=1)})
    result = Pipeline(source, ["bad", "ddjl"]).run()

    assert result.keyword_states["bad"] is KeywordState.FAILED
    assert result.keyword_states["ddjl"] is KeywordState.SUCCEEDED
    assert "1" in result.store
