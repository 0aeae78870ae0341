"""CLI entry point.

This script runs one harvest: it searches every keyword, dedupes the listings,
and writes the canonical JSON artifact to disk (optionally a CSV view too).

Examples:
    python run_fetch.py --out currentjobs.json
    python run_fetch.py --out currentjobs.json --csv currentjobs.csv
    python run_fetch.py --keywords 'ddjl,%23DevDiv' --retries 3

Retries and keywords default to the JOBDUMPER_RETRIES and
JOBDUMPER_SEARCHKEYWORDS environment variables (a .env file works too).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from job_dumper.cache import ResponseCache
from job_dumper.config import Settings, parse_keywords
from job_dumper.errors import ArtifactWriteError
from job_dumper.export import artifact_to_csv, write_artifact
from job_dumper.pipeline import Pipeline
from job_dumper.sources.careers import CareersSource
from job_dumper.utils import configure_logging, get_logger

logger = get_logger("job_dumper.cli")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Harvest and dedupe job listings across search keywords.")
    p.add_argument("--out", type=str, default=None, help="Output JSON file path.")
    p.add_argument("--csv", type=str, default=None, help="Also write a CSV view to this path.")
    p.add_argument("--keywords", type=str, default=None, help="Comma separated, URL encoded search keywords.")
    p.add_argument("--retries", type=int, default=None, help="Extra attempts per page after a failure.")
    p.add_argument("--cache-dir", type=str, default=None, help="Directory for last-known-good results.")
    p.add_argument("--legacy-page", action="store_true", help="Search the older HTML results page instead of the API.")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    settings = Settings()
    if args.retries is not None:
        settings.retries = max(args.retries, 0)
    if args.keywords:
        settings.keywords = parse_keywords(args.keywords) or settings.keywords
    if args.out:
        settings.output_path = args.out
    if args.cache_dir:
        settings.cache_dir = args.cache_dir
    if args.legacy_page:
        settings.use_legacy_page()

    pipeline = Pipeline(
        source=CareersSource.from_settings(settings),
        keywords=settings.keywords,
        writer=lambda artifact: write_artifact(artifact, settings.output_path),
        cache=ResponseCache(settings.cache_dir),
    )

    try:
        result = pipeline.run()
    except ArtifactWriteError as exc:
        logger.error("Run failed: %s", exc)
        return 1

    logger.info("Wrote %d jobs to: %s", len(result.store), Path(settings.output_path).resolve())

    if args.csv:
        try:
            csv_path = Path(args.csv).expanduser().resolve()
            csv_path.parent.mkdir(parents=True, exist_ok=True)
            csv_path.write_text(artifact_to_csv(result.artifact), encoding="utf-8")
        except OSError as exc:
            logger.error("An error occurred writing to %s: %s", args.csv, exc)
            return 1
        logger.info("Wrote CSV view to: %s", csv_path)

    if result.failed_keywords:
        logger.warning("Keywords that failed this run: %s", ", ".join(result.failed_keywords))
    return 0


if __name__ == "__main__":
    sys.exit(main())
