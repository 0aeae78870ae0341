"""Job dumper package.

The package harvests job listings from the careers search API and keeps them in
one stable shape:
- `models.py` defines the canonical schema downstream consumers rely on.
- `sources/` contains the paginated fetcher and the upstream payload parsers.
- `normalize.py` translates upstream records into the canonical schema.
- `classify.py` holds the deterministic title heuristics.
- `pipeline.py` ties fetch, normalize and merge together for one run.
"""
