"""Tests for Open-Meteo provider."""
import pytest
import requests
from unittest.mock import Mock, patch
from openmeteo_provider import OpenMeteoProvider, meteo_url
from weather_data import WeatherReading
from weather_errors import ParseError, TransportError

STOCKHOLM_URL = (
    "https://api.open-meteo.com/v1/forecast?latitude=59.33&longitude=18.07"
    "&current=temperature_2m,relative_humidity_2m,wind_speed_10m"
)


@pytest.fixture
def sample_openmeteo_response():
    """Sample Open-Meteo API response."""
    return {
        "latitude": 59.33,
        "longitude": 18.07,
        "generationtime_ms": 0.03,
        "utc_offset_seconds": 0,
        "timezone": "GMT",
        "current_units": {
            "time": "iso8601",
            "interval": "seconds",
            "temperature_2m": "°C",
            "relative_humidity_2m": "%",
            "wind_speed_10m": "km/h",
        },
        "current": {
            "time": "2024-05-24T12:00",
            "interval": 900,
            "temperature_2m": 17.4,
            "relative_humidity_2m": 58,
            "wind_speed_10m": 3.6,
        },
    }


@pytest.fixture
def provider():
    """Create Open-Meteo provider instance."""
    return OpenMeteoProvider(timeout=5)


def mock_response(payload=None, ok=True, status_code=200):
    response = Mock()
    response.ok = ok
    response.status_code = status_code
    response.json.return_value = payload
    return response


def test_meteo_url_rounds_coordinates():
    assert meteo_url(59.3293, 18.0686) == STOCKHOLM_URL


def test_meteo_url_negative_coordinates():
    url = meteo_url(-33.8688, 151.2093)
    assert "latitude=-33.87&longitude=151.21" in url


def test_build_url_uses_configured_base(provider):
    custom = OpenMeteoProvider(base_url="http://localhost:8080/v1/forecast")
    assert provider.build_url(59.3293, 18.0686) == STOCKHOLM_URL
    assert custom.build_url(1, 2).startswith("http://localhost:8080/v1/forecast?latitude=1.00&longitude=2.00")


def test_openmeteo_provider_success(provider, sample_openmeteo_response):
    """Test successful API call and parsing."""
    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(sample_openmeteo_response)

        reading = provider.get_current(STOCKHOLM_URL)

        assert reading == WeatherReading(temperature=17.4, wind_speed=3.6, relative_humidity=58.0)
        mock_get.assert_called_once_with(STOCKHOLM_URL, timeout=5, allow_redirects=True)


def test_openmeteo_provider_partial_current(provider):
    """Missing or non-numeric fields come back as None."""
    payload = {"current": {"temperature_2m": -4.2, "wind_speed_10m": "calm", "relative_humidity_2m": 91}}

    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload)

        reading = provider.get_current(STOCKHOLM_URL)

        assert reading.temperature == -4.2
        assert reading.wind_speed is None
        assert reading.relative_humidity == 91.0


def test_openmeteo_provider_http_error(provider):
    """Test handling of HTTP errors."""
    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(
            {"error": True, "reason": "Latitude must be in range of -90 to 90°."},
            ok=False,
            status_code=400,
        )

        with pytest.raises(TransportError) as exc_info:
            provider.get_current(STOCKHOLM_URL)

        assert exc_info.value.status_code == 400
        assert "400" in str(exc_info.value)
        assert "Latitude must be in range" in str(exc_info.value)


def test_openmeteo_provider_http_error_non_json(provider):
    with patch('openmeteo_provider.requests.get') as mock_get:
        response = mock_response(ok=False, status_code=502)
        response.json.side_effect = ValueError("No JSON")
        response.text = "<html>Bad Gateway</html>"
        mock_get.return_value = response

        with pytest.raises(TransportError) as exc_info:
            provider.get_current(STOCKHOLM_URL)

        assert "HTTP 502" in str(exc_info.value)


def test_openmeteo_provider_network_error(provider):
    """Test handling of network errors."""
    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.side_effect = requests.exceptions.ConnectionError("Connection refused")

        with pytest.raises(TransportError) as exc_info:
            provider.get_current(STOCKHOLM_URL)

        assert "Network error" in str(exc_info.value)
        assert exc_info.value.status_code is None


def test_openmeteo_provider_invalid_json(provider):
    with patch('openmeteo_provider.requests.get') as mock_get:
        response = mock_response()
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(ParseError):
            provider.get_current(STOCKHOLM_URL)


@pytest.mark.parametrize("payload", [{"latitude": 59.33}, {"current": None}, {"current": [1, 2]}, []])
def test_openmeteo_provider_missing_current(provider, payload):
    """Test handling of a missing or malformed 'current' block."""
    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload)

        with pytest.raises(ParseError) as exc_info:
            provider.get_current(STOCKHOLM_URL)

        assert "missing 'current' block" in str(exc_info.value)


def test_openmeteo_provider_oversized_number(provider):
    payload = {"current": {"temperature_2m": 10 ** 400, "wind_speed_10m": 3.0, "relative_humidity_2m": 60}}

    with patch('openmeteo_provider.requests.get') as mock_get:
        mock_get.return_value = mock_response(payload)

        reading = provider.get_current(STOCKHOLM_URL)

        assert reading == WeatherReading(wind_speed=3.0, relative_humidity=60.0)
