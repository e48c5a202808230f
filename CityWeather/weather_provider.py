"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from weather_data import WeatherReading


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def build_url(self, lat: float, lon: float) -> str:
        """Return the query URL for the given coordinates."""
        pass

    @abstractmethod
    def get_current(self, url: str) -> WeatherReading:
        """
        Fetch current weather from a URL produced by build_url().

        Fields absent from the response are left as None in the reading.

        Returns:
            WeatherReading: Current weather information

        Raises:
            TransportError: If the request fails or returns a non-success status
            ParseError: If the response is not valid JSON or lacks required structure
        """
        pass
