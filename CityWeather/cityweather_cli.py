"""Interactive city weather lookup backed by Open-Meteo and per-city cache files."""
import argparse
import logging
import os
import sys
from typing import Callable, Optional, Tuple

from dotenv import load_dotenv

from city_cache import CacheStore, DEFAULT_CACHE_DIR
from city_registry import CityRegistry
from openmeteo_provider import DEFAULT_TIMEOUT_SECONDS, OpenMeteoProvider
from weather_data import CityRecord
from weather_errors import ParseError, TransportError
from weather_service import DEFAULT_MAX_AGE_SECONDS, WeatherService

QUIT_COMMAND = "q"
EXIT_OK = 0
EXIT_FAIL = 1


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("City weather lookup")
    parser.add_argument("--cache-dir", default=None, help="Directory holding per-city cache files")
    parser.add_argument("--max-age", type=int, default=None, help="Seconds before cached data is refetched")
    parser.add_argument("--timeout", type=float, default=None, help="HTTP timeout in seconds")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def load_config(args: argparse.Namespace) -> Tuple[str, int, float]:
    """Resolve cache dir, max age and timeout from CLI flags, then environment, then defaults."""
    load_dotenv()
    cache_dir = args.cache_dir or os.getenv("WEATHER_CACHE_DIR", DEFAULT_CACHE_DIR)
    max_age = args.max_age
    timeout = args.timeout

    try:
        if max_age is None:
            max_age = int(os.getenv("WEATHER_MAX_AGE", DEFAULT_MAX_AGE_SECONDS))
        if timeout is None:
            timeout = float(os.getenv("WEATHER_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
    except ValueError as exc:
        raise SystemExit(f"Invalid numeric setting: {exc}") from exc

    if max_age < 0:
        raise SystemExit("Max age must not be negative")

    logging.info("Configuration loaded: cache_dir=%s max_age=%ss timeout=%ss", cache_dir, max_age, timeout)
    return cache_dir, max_age, timeout


def build_weather_service(cache_dir: str, max_age: int, timeout: float) -> Tuple[CityRegistry, WeatherService]:
    provider = OpenMeteoProvider(timeout=timeout)
    cache = CacheStore(cache_dir)
    registry = CityRegistry.initialize(cache, provider)
    service = WeatherService(provider=provider, cache=cache, max_age_seconds=max_age)
    logging.info("Weather service ready (%s cities, max age=%ss)", len(registry), max_age)
    return registry, service


def _fmt(value: Optional[float]) -> str:
    return "N/A" if value is None else f"{value:.2f}"


def format_weather(record: CityRecord) -> str:
    weather = record.weather
    return (
        f"Current Weather for {record.name}:\n"
        f"Temperature: {_fmt(weather.temperature)} °C\n"
        f"Wind speed: {_fmt(weather.wind_speed)} m/s\n"
        f"Humidity: {_fmt(weather.relative_humidity)} %"
    )


def format_city_list(registry: CityRegistry) -> str:
    return "\n".join(f"{index:2d}. {name}" for index, name in enumerate(registry.names(), start=1))


def weather_loop(
    registry: CityRegistry,
    service: WeatherService,
    input_func: Optional[Callable[[str], str]] = None,
    output: Callable[[str], None] = print,
) -> int:
    """Prompt for cities until the user quits. Returns the process exit status."""
    input_func = input_func or input
    while True:
        output(format_city_list(registry))
        try:
            choice = input_func("Select a city: ").strip()
        except EOFError:
            choice = QUIT_COMMAND

        if choice == QUIT_COMMAND:
            output("User pressed 'q' to exit.")
            return EXIT_OK

        record = registry.find_by_name(choice)
        if record is None:
            output("City not found.")
            continue
        output(f"You selected: {record.name}")

        try:
            source = service.resolve(record)
        except (TransportError, ParseError) as err:
            logging.error("Weather lookup failed for %s: %s", record.name, err)
            output(f"Could not get weather for {record.name}: {err}")
            return EXIT_FAIL

        logging.debug("Weather for %s served from %s", record.name, source)
        output(format_weather(record))


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    cache_dir, max_age, timeout = load_config(args)
    registry, service = build_weather_service(cache_dir, max_age, timeout)

    try:
        return weather_loop(registry, service)
    except KeyboardInterrupt:
        logging.info("Interrupted, exiting")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
