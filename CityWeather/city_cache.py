"""Per-city JSON cache files with a cached_at timestamp."""
import glob
import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from weather_data import CityRecord, WeatherReading, as_number
from weather_errors import CacheError, ParseError, PersistError

DEFAULT_CACHE_DIR = "cities"


@dataclass
class CacheEntry:
    """Whatever fields a cache file held. Identity fields are None when absent."""
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    weather: WeatherReading = field(default_factory=WeatherReading)
    cached_at: int = 0

    @property
    def has_identity(self) -> bool:
        return bool(self.name) and self.latitude is not None and self.longitude is not None


def _timestamp(value) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class CacheStore:
    """
    Reads and writes one JSON file per city.

    The file name is derived from the city name and its coordinates so the
    same city maps to the same file across runs.
    """

    def __init__(self, cache_dir: str = DEFAULT_CACHE_DIR, clock: Callable[[], float] = time.time):
        self.cache_dir = cache_dir
        self.clock = clock

    def path_for(self, name: str, lat: float, lon: float) -> str:
        return os.path.join(self.cache_dir, f"{name}_{lat:.2f}_{lon:.2f}.json")

    def cache_files(self) -> List[str]:
        """All *.json files in the cache directory, sorted by path."""
        if not os.path.isdir(self.cache_dir):
            return []
        return sorted(
            path for path in glob.glob(os.path.join(self.cache_dir, "*.json"))
            if os.path.isfile(path)
        )

    def save(self, record: CityRecord) -> None:
        """
        Write the full record to its cache file, stamped with the current time.

        The record's cached_at is moved to the stamp on success.

        Raises:
            PersistError: If the directory or the file cannot be written
        """
        now = int(self.clock())
        document = {
            "name": record.name,
            "fp": record.cache_file_path,
            "lat": record.latitude,
            "lon": record.longitude,
            "temp": record.weather.temperature,
            "windspeed": record.weather.wind_speed,
            "rel_hum": record.weather.relative_humidity,
            "cached_at": now,
        }
        try:
            directory = os.path.dirname(record.cache_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(record.cache_file_path, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logging.error(f"Failed to write cache file {record.cache_file_path}: {e}")
            raise PersistError(f"Failed to save cache for {record.name}: {e}") from e

        record.cached_at = now
        logging.debug(f"Saved cache for {record.name} to {record.cache_file_path} (cached_at={now})")

    def _read(self, path: str) -> dict:
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except OSError as e:
            raise CacheError(f"Cannot read cache file {path}: {e}") from e
        except ValueError as e:
            raise ParseError(f"Invalid JSON in cache file {path}: {e}") from e
        if not isinstance(document, dict):
            raise ParseError(f"Cache file {path} does not hold a JSON object")
        return document

    def load(self, path: str) -> CacheEntry:
        """
        Deserialize whatever fields the cache file holds.

        Missing or mistyped fields come back as None (cached_at as 0)
        instead of failing the load.

        Raises:
            CacheError: If the file is missing or unreadable
            ParseError: If the file is not a JSON object
        """
        document = self._read(path)
        name = document.get("name")
        entry = CacheEntry(
            name=name if isinstance(name, str) else None,
            latitude=as_number(document.get("lat")),
            longitude=as_number(document.get("lon")),
            weather=WeatherReading(
                temperature=as_number(document.get("temp")),
                wind_speed=as_number(document.get("windspeed")),
                relative_humidity=as_number(document.get("rel_hum")),
            ),
            cached_at=_timestamp(document.get("cached_at")) or 0,
        )
        return entry

    def age_seconds(self, path: str) -> Optional[int]:
        """
        Age of a cache file according to its cached_at field.

        Returns:
            Seconds since the file was written, or None if the file is missing,
            unparsable or has no integer cached_at
        """
        try:
            document = self._read(path)
        except (CacheError, ParseError) as e:
            logging.debug(f"No usable cache age for {path}: {e}")
            return None
        cached_at = _timestamp(document.get("cached_at"))
        if cached_at is None:
            return None
        return int(self.clock()) - cached_at
