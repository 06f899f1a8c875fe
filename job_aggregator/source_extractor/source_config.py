"""
Source configuration loader for the job aggregator.

This module centralizes reading and validating the list of career sites from
`config/sources.yml`. The CLI, the query service and the tests all go through
this helper so that a source is enabled, disabled or tuned in one place.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

SOURCES_CONFIG_ENV_VAR = "SOURCES_CONFIG_PATH"


@dataclass
class ProviderConfig:
    """Configuration for a single career site."""

    adapter: str
    enabled: bool = True
    params: dict[str, Any] = field(default_factory=dict)


def _project_root() -> Path:
    """Return the project root path based on this file's location."""
    return Path(__file__).resolve().parent.parent.parent


def default_config_path() -> Path:
    """Path of the sources file: $SOURCES_CONFIG_PATH, else config/sources.yml."""
    override = os.getenv(SOURCES_CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return _project_root() / "config" / "sources.yml"


def load_sources_config(config_path: str | None = None) -> dict[str, ProviderConfig]:
    """
    Load provider configuration from YAML file.

    Provider order in the file is preserved; it is the adapter registration
    order, which decides which duplicate wins during aggregation.

    Args:
        config_path: Optional override for the config file path. When omitted,
            the function reads $SOURCES_CONFIG_PATH or `config/sources.yml`
            relative to the project root.

    Returns:
        Dictionary mapping provider names to `ProviderConfig` objects.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ValueError: If the YAML file cannot be parsed or has invalid structure.
    """
    path = Path(config_path) if config_path else default_config_path()
    if not path.exists():
        logger.error("Sources configuration file not found: %s", path)
        raise FileNotFoundError(f"Sources configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            raw_config: Mapping[str, Any] | None = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        logger.error("Failed to parse sources configuration: %s", exc)
        raise ValueError(f"Invalid YAML in sources configuration: {exc}") from exc

    if not raw_config:
        logger.warning("Sources configuration file is empty: %s", path)
        return {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Sources configuration must be a mapping")

    providers_section = raw_config.get("providers")
    if not isinstance(providers_section, Mapping):
        raise ValueError("`providers` section is missing or invalid in sources configuration")

    providers: dict[str, ProviderConfig] = {}
    for provider_name, provider_data in providers_section.items():
        if not isinstance(provider_data, Mapping):
            raise ValueError(f"Invalid provider configuration for '{provider_name}'")

        adapter = provider_data.get("adapter")
        if not isinstance(adapter, str) or not adapter.strip():
            raise ValueError(f"Provider '{provider_name}' must define a non-empty `adapter` string")

        enabled = bool(provider_data.get("enabled", True))
        params = provider_data.get("params") or {}
        if not isinstance(params, Mapping):
            raise ValueError(f"`params` for provider '{provider_name}' must be a mapping")

        providers[str(provider_name)] = ProviderConfig(
            adapter=adapter.strip(),
            enabled=enabled,
            params=dict(params),
        )

    logger.info(
        "Loaded sources configuration",
        extra={
            "sources_count": len(providers),
            "enabled_sources": [name for name, cfg in providers.items() if cfg.enabled],
        },
    )
    return providers


__all__ = ["ProviderConfig", "default_config_path", "load_sources_config"]
