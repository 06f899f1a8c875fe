"""
Aggregator

Runs every configured source adapter concurrently and merges their output
into one deduplicated AggregationResult. The command-line entry point lives
in aggregator.main.
"""

from .aggregator import Aggregator, deduplicate_jobs

__all__ = ["Aggregator", "deduplicate_jobs"]
