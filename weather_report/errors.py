"""Error types for the weather reporter."""

from __future__ import annotations


class WeatherError(Exception):
    """Base error for weather reporter failures."""


class ConfigError(WeatherError):
    """Configuration could not be loaded."""


class MissingConfigError(ConfigError):
    """The configuration file does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Config file not found: {path}")
        self.path = path


class InvalidConfigError(ConfigError):
    """The configuration file is malformed or lacks required fields."""


class CacheError(WeatherError):
    """Base error for the on-disk result cache."""


class CacheMissingError(CacheError):
    """No cache entry exists at the configured path."""


class CorruptCacheError(CacheError):
    """The cache entry cannot be decoded into a result."""


class FetchError(WeatherError):
    """Retrieving a URL failed."""


class FetchTimeoutError(FetchError):
    """The fetch did not complete within its time bound."""


class FetchResponseError(FetchError):
    """The server answered with a non-success status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class UnreachableError(WeatherError):
    """The connectivity probe failed."""
