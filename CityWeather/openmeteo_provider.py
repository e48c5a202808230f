"""Open-Meteo forecast API provider implementation."""
import logging
import requests

from weather_data import WeatherReading, as_number
from weather_errors import ParseError, TransportError
from weather_provider import WeatherProviderBase

BASE_URL = "https://api.open-meteo.com/v1/forecast"
CURRENT_FIELDS = "temperature_2m,relative_humidity_2m,wind_speed_10m"
DEFAULT_TIMEOUT_SECONDS = 10


def meteo_url(lat: float, lon: float, base_url: str = BASE_URL) -> str:
    """Build the current-conditions query URL, coordinates rounded to 2 decimals."""
    return f"{base_url}?latitude={lat:.2f}&longitude={lon:.2f}&current={CURRENT_FIELDS}"


class OpenMeteoProvider(WeatherProviderBase):
    """
    Weather provider using the Open-Meteo forecast API.

    Open-Meteo needs no API key: https://open-meteo.com/en/docs
    Only the "current" block is requested (temperature, humidity, wind).
    """

    def __init__(self, base_url: str = BASE_URL, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        """
        Initialize Open-Meteo provider.

        Args:
            base_url: Forecast endpoint
            timeout: HTTP request timeout in seconds
        """
        self.base_url = base_url
        self.timeout = timeout

    def build_url(self, lat: float, lon: float) -> str:
        return meteo_url(lat, lon, self.base_url)

    def get_current(self, url: str) -> WeatherReading:
        """
        Fetch current weather from Open-Meteo.

        Returns:
            WeatherReading: Current weather; fields missing or non-numeric
            in the response are None

        Raises:
            TransportError: If the request fails or the status is not 2xx
            ParseError: If the body is not JSON or has no "current" object
        """
        try:
            logging.info(f"Making Open-Meteo API request: {url}")
            response = requests.get(url, timeout=self.timeout, allow_redirects=True)
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request: {e}")
            raise TransportError(f"Network error: {str(e)}")

        logging.info(f"API response status: {response.status_code}")
        if not response.ok:
            logging.error(f"API request failed with status {response.status_code}")
            self._handle_error_response(response)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Failed to parse API response: {e}")
            raise ParseError(f"Failed to parse response: {str(e)}")
        logging.debug(f"API response (truncated): {str(data)[:500]}...")

        current = data.get("current") if isinstance(data, dict) else None
        if not isinstance(current, dict):
            logging.error("Response missing 'current' block")
            raise ParseError("Response missing 'current' block")

        reading = WeatherReading(
            temperature=as_number(current.get("temperature_2m")),
            wind_speed=as_number(current.get("wind_speed_10m")),
            relative_humidity=as_number(current.get("relative_humidity_2m")),
        )
        logging.info(
            f"Parsed weather data: temp={reading.temperature} wind={reading.wind_speed} "
            f"humidity={reading.relative_humidity}"
        )
        return reading

    def _handle_error_response(self, response: requests.Response) -> None:
        """Raise a TransportError describing an Open-Meteo error response."""
        try:
            error_data = response.json()
            reason = error_data.get("reason", "Unknown error")
            logging.error(f"Open-Meteo API error response: {error_data}")
            raise TransportError(
                f"Open-Meteo API error {response.status_code}: {reason}",
                status_code=response.status_code,
            )
        except (ValueError, AttributeError):
            # Not a JSON object, use HTTP status
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:500]}")
            raise TransportError(
                f"HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
