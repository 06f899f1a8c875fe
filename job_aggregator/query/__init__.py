"""
Query Service

Cache-first access to the aggregated job list for the presentation layer.
"""

from .service import JobQueryService, source_status

__all__ = ["JobQueryService", "source_status"]
