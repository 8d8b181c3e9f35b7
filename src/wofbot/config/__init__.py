"""Application configuration helpers."""

from __future__ import annotations

from .env import first_env_var, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import BackoffPolicy, CacheConfig, RateLimit, ResilienceConfig
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .whosonfirst import WhosOnFirstConfig, get_whosonfirst_config
from .wikidata import WikidataConfig, get_wikidata_config

__all__ = [
    "BackoffPolicy",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "StorageConfig",
    "WhosOnFirstConfig",
    "WikidataConfig",
    "configure_logging",
    "first_env_var",
    "get_database_config",
    "get_storage_config",
    "get_whosonfirst_config",
    "get_wikidata_config",
    "require_env_var",
    "require_env_vars",
]
