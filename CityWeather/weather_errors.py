"""Error types shared by the provider, cache and freshness layers."""
from typing import Optional


class WeatherError(Exception):
    """Base class for every error raised by this package."""
    pass


class WeatherProviderError(WeatherError):
    """Exception raised when a weather provider fails."""
    pass


class TransportError(WeatherProviderError):
    """The HTTP request failed or returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(WeatherError):
    """A response body or cache file is not valid JSON or lacks required structure."""
    pass


class CacheError(WeatherError):
    """A cache file could not be read from disk."""
    pass


class PersistError(CacheError):
    """A cache file could not be written."""
    pass
