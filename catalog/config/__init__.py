"""Configuration module."""

from catalog.config.configuration import (
    AppConfig,
    CacheConfig,
    ConfigurationError,
    CosmosDBConfig,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    get_config,
    get_environment,
    load_config,
    reset_config,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "ConfigurationError",
    "CosmosDBConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "get_config",
    "get_environment",
    "load_config",
    "reset_config",
]
