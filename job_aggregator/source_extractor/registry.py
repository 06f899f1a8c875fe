"""
Adapter registry.

Maps the `adapter` names used in `config/sources.yml` to SourceAdapter
classes and builds the ordered adapter list handed to the Aggregator.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from .adapters import (
    AirFranceAdapter,
    BergerLevraultAdapter,
    BPCEAdapter,
    EstreemAdapter,
    InfomilAdapter,
    LyraAdapter,
    MockAdapter,
)
from .base import SourceAdapter
from .source_config import ProviderConfig

logger = logging.getLogger(__name__)

ADAPTER_REGISTRY: dict[str, type[SourceAdapter]] = {
    "bpce": BPCEAdapter,
    "lyra": LyraAdapter,
    "berger_levrault": BergerLevraultAdapter,
    "estreem": EstreemAdapter,
    "infomil": InfomilAdapter,
    "airfrance": AirFranceAdapter,
    "mock": MockAdapter,
}


def build_adapter(name: str, params: Mapping | None = None) -> SourceAdapter:
    """Instantiate one adapter by registry name.

    Raises:
        ValueError: If the name is unknown or the params are rejected
    """
    adapter_cls = ADAPTER_REGISTRY.get(name)
    if adapter_cls is None:
        known = ", ".join(sorted(ADAPTER_REGISTRY))
        raise ValueError(f"Unknown adapter '{name}' (known adapters: {known})")

    try:
        return adapter_cls(**dict(params or {}))
    except TypeError as e:
        raise ValueError(f"Invalid params for adapter '{name}': {e}") from e


def build_adapters(providers: Mapping[str, ProviderConfig]) -> list[SourceAdapter]:
    """Instantiate every enabled provider, in configuration order."""
    adapters = []
    for provider_name, provider in providers.items():
        if not provider.enabled:
            logger.info("Skipping disabled source", extra={"provider": provider_name})
            continue
        adapters.append(build_adapter(provider.adapter, provider.params))

    logger.info(
        "Built source adapters",
        extra={"adapters": [adapter.source_name for adapter in adapters]},
    )
    return adapters


__all__ = ["ADAPTER_REGISTRY", "build_adapter", "build_adapters"]
