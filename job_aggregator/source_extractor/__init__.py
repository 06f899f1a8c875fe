"""Source Extractor.

This package is responsible for fetching job postings from employer career
sites and turning them into normalized records.

Main components:
- SourceAdapter: Abstract base class for all career-site adapters
- RawExtract: Data class for postings as scraped
- SourceFetchError: Raised when a source cannot be reached
- Adapters: Site-specific implementations (in adapters/ directory)
- build_adapters: Instantiates the adapters listed in config/sources.yml
"""

from .base import RawExtract, SourceAdapter, SourceFetchError
from .registry import ADAPTER_REGISTRY, build_adapter, build_adapters
from .source_config import ProviderConfig, load_sources_config

__all__ = [
    "ADAPTER_REGISTRY",
    "ProviderConfig",
    "RawExtract",
    "SourceAdapter",
    "SourceFetchError",
    "build_adapter",
    "build_adapters",
    "load_sources_config",
]
