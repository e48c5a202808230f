"""Weather service resolving a city's weather from memory, cache file or network."""
import logging
import time
from typing import Callable

from city_cache import CacheStore
from weather_data import CityRecord
from weather_errors import CacheError, ParseError, PersistError
from weather_provider import WeatherProviderBase

DEFAULT_MAX_AGE_SECONDS = 900

SOURCE_MEMORY = "memory"
SOURCE_CACHE = "cache"
SOURCE_NETWORK = "network"


class WeatherService:
    """
    Keeps a city's weather no older than max_age_seconds, preferring cheap sources.

    Tiers are tried in order: the in-memory record, the city's cache file,
    then the provider. Cache problems fall through to the network; a network
    failure ends the attempt. There are no retries.
    """

    def __init__(
        self,
        provider: WeatherProviderBase,
        cache: CacheStore,
        max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize weather service.

        Args:
            provider: Weather provider used for network fetches
            cache: Store holding the per-city cache files
            max_age_seconds: Oldest data (inclusive) that is still served
            clock: Returns the current UNIX time
        """
        self.provider = provider
        self.cache = cache
        self.max_age_seconds = max_age_seconds
        self.clock = clock

    def is_fresh(self, age: int) -> bool:
        # Negative ages come from timestamps in the future and count as stale.
        return 0 <= age <= self.max_age_seconds

    def resolve(self, record: CityRecord) -> str:
        """
        Make sure record.weather is fresh, updating the record in place.

        Returns:
            str: The tier that supplied the data ("memory", "cache" or "network")

        Raises:
            TransportError: If the network fetch fails
            ParseError: If the network response cannot be parsed
        """
        now = int(self.clock())

        if record.weather.has_data:
            age = record.age_seconds(now)
            if self.is_fresh(age):
                logging.info(f"Using fresh in-memory data for {record.name} (age {age}s)")
                return SOURCE_MEMORY
            logging.debug(f"In-memory data for {record.name} is stale (age {age}s > {self.max_age_seconds}s)")

        if self._load_from_cache(record):
            return SOURCE_CACHE

        logging.info(f"Data missing, old, or cache invalid for {record.name}, fetching from network")
        reading = self.provider.get_current(record.url)
        record.weather = record.weather.merged(reading)
        record.cached_at = now

        try:
            self.cache.save(record)
        except PersistError as e:
            logging.warning(f"Failed to save cache for {record.name}: {e}")
        return SOURCE_NETWORK

    def _load_from_cache(self, record: CityRecord) -> bool:
        path = record.cache_file_path
        file_age = self.cache.age_seconds(path)
        if file_age is None:
            logging.debug(f"No valid cache file for {record.name} at {path}")
            return False
        if not self.is_fresh(file_age):
            logging.info(f"Cache file for {record.name} is stale (age {file_age}s)")
            return False

        try:
            entry = self.cache.load(path)
        except (CacheError, ParseError) as e:
            logging.warning(f"Failed to read cached JSON for {record.name}: {e}")
            return False

        if not entry.weather.has_data:
            logging.info(f"Cache file for {record.name} exists but has no weather data")
            return False

        record.weather = record.weather.merged(entry.weather)
        record.cached_at = entry.cached_at
        logging.info(f"Using fresh cached file for {record.name} (age {file_age}s)")
        return True
