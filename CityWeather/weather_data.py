"""Weather domain model - pure data structures independent of any API."""
import math
import numbers
from dataclasses import dataclass, field, replace
from typing import Optional


def as_number(value) -> Optional[float]:
    """Convert a decoded JSON value to a finite float, or None if it is not one."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class WeatherReading:
    """Current conditions for a city. ``None`` marks a field that was never fetched."""
    temperature: Optional[float] = None  # °C
    wind_speed: Optional[float] = None  # m/s
    relative_humidity: Optional[float] = None  # percent

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (self.temperature, self.wind_speed, self.relative_humidity)
        )

    def merged(self, other: "WeatherReading") -> "WeatherReading":
        """Return a copy updated with every field ``other`` actually carries."""
        return replace(
            self,
            temperature=self.temperature if other.temperature is None else other.temperature,
            wind_speed=self.wind_speed if other.wind_speed is None else other.wind_speed,
            relative_humidity=(
                self.relative_humidity if other.relative_humidity is None else other.relative_humidity
            ),
        )


@dataclass
class CityRecord:
    """A known city: identity, coordinates and the last weather seen for it."""
    name: str
    latitude: float
    longitude: float
    url: str
    cache_file_path: str
    weather: WeatherReading = field(default_factory=WeatherReading)
    cached_at: int = 0  # UNIX timestamp of the last update, 0 if never

    def __post_init__(self):
        if not self.name:
            raise ValueError("City name must not be empty")

    def age_seconds(self, now: float) -> int:
        """Seconds since the record was last updated (negative if cached_at is in the future)."""
        return int(now - self.cached_at)
