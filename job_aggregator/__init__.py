"""Job Aggregator Package.

This package aggregates job postings from several employer career sites into
one normalized, deduplicated dataset:
- normalizer: Cleans scraped fields and computes stable job identifiers
- source_extractor: Adapter contract and one adapter per career site
- aggregator: Runs all adapters concurrently and merges their results
- cache: Persists the last aggregation result with a validity window
- store: Keeps persistent storage in sync (insert/update/soft-delete)
- query: Inbound interface consumed by the presentation layer
"""

__version__ = "0.1.0"
