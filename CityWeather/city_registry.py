"""Ordered registry of known cities, rehydrated from cache files or bootstrapped."""
import logging
from typing import Iterable, Iterator, List, NamedTuple, Optional

from city_cache import CacheStore
from weather_data import CityRecord
from weather_errors import CacheError, ParseError, PersistError
from weather_provider import WeatherProviderBase


class BootstrapCity(NamedTuple):
    name: str
    lat: float
    lon: float


BOOTSTRAP_CITIES = (
    BootstrapCity("Stockholm", 59.3293, 18.0686),
    BootstrapCity("Göteborg", 57.7089, 11.9746),
    BootstrapCity("Malmö", 55.6050, 13.0038),
    BootstrapCity("Uppsala", 59.8586, 17.6389),
    BootstrapCity("Västerås", 59.6099, 16.5448),
    BootstrapCity("Örebro", 59.2741, 15.2066),
    BootstrapCity("Linköping", 58.4109, 15.6216),
    BootstrapCity("Helsingborg", 56.0465, 12.6945),
    BootstrapCity("Jönköping", 57.7815, 14.1562),
    BootstrapCity("Norrköping", 58.5877, 16.1924),
    BootstrapCity("Lund", 55.7047, 13.1910),
    BootstrapCity("Gävle", 60.6749, 17.1413),
    BootstrapCity("Sundsvall", 62.3908, 17.3069),
    BootstrapCity("Umeå", 63.8258, 20.2630),
    BootstrapCity("Luleå", 65.5848, 22.1567),
    BootstrapCity("Kiruna", 67.8558, 20.2253),
)


class CityRegistry:
    """Cities in insertion order, looked up by exact name."""

    def __init__(self, cache: CacheStore, provider: WeatherProviderBase):
        self.cache = cache
        self.provider = provider
        self._records: List[CityRecord] = []

    @classmethod
    def initialize(
        cls,
        cache: CacheStore,
        provider: WeatherProviderBase,
        bootstrap: Iterable[BootstrapCity] = BOOTSTRAP_CITIES,
    ) -> "CityRegistry":
        """
        Build the registry from the cache directory.

        Every parseable cache file becomes a record. When none can be loaded,
        the bootstrap cities are registered and each is saved to a new cache
        file with empty weather.
        """
        registry = cls(cache, provider)
        loaded = registry.load_cache_files()
        if loaded > 0:
            logging.info(f"Loaded {loaded} cities from cache")
            return registry

        logging.info("Cache empty, using bootstrap cities and saving to cache")
        for city in bootstrap:
            record = registry.make_record(city.name, city.lat, city.lon)
            registry.add(record)
            try:
                cache.save(record)
            except PersistError as e:
                logging.warning(f"Could not save bootstrap cache for {record.name}: {e}")
        return registry

    def make_record(self, name: str, lat: float, lon: float) -> CityRecord:
        return CityRecord(
            name=name,
            latitude=lat,
            longitude=lon,
            url=self.provider.build_url(lat, lon),
            cache_file_path=self.cache.path_for(name, lat, lon),
        )

    def load_cache_files(self) -> int:
        """Append a record for every usable cache file; return how many were loaded."""
        loaded = 0
        for path in self.cache.cache_files():
            try:
                entry = self.cache.load(path)
            except (CacheError, ParseError) as e:
                logging.warning(f"Skipping cache file {path}: {e}")
                continue
            if not entry.has_identity:
                logging.warning(f"Skipping cache file {path}: missing name or coordinates")
                continue

            record = self.make_record(entry.name, entry.latitude, entry.longitude)
            # Keep writing to the file the city came from
            record.cache_file_path = path
            record.weather = entry.weather
            record.cached_at = entry.cached_at
            self.add(record)
            loaded += 1
        return loaded

    def add(self, record: CityRecord) -> None:
        self._records.append(record)

    def find_by_name(self, name: str) -> Optional[CityRecord]:
        for record in self._records:
            if record.name == name:
                return record
        return None

    def names(self) -> List[str]:
        return [record.name for record in self._records]

    def __iter__(self) -> Iterator[CityRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
