"""Configuration module for newswatch."""

from newswatch.config.factory import create_crawler, create_store
from newswatch.config.loader import get_default_config_path, load_config
from newswatch.config.models import (
    ClassifierConfig,
    DomainConfig,
    EntityConfig,
    GovernorConfig,
    LoggingConfig,
    NewswatchConfig,
    QueryGroupConfig,
    ResolverConfig,
    SearchConfig,
    StoreConfig,
)

__all__ = [
    "ClassifierConfig",
    "DomainConfig",
    "EntityConfig",
    "GovernorConfig",
    "LoggingConfig",
    "NewswatchConfig",
    "QueryGroupConfig",
    "ResolverConfig",
    "SearchConfig",
    "StoreConfig",
    "create_crawler",
    "create_store",
    "get_default_config_path",
    "load_config",
]
