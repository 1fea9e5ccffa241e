"""OpenWeather and PEGELONLINE clients with retry support."""

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import requests

from .errors import ProviderUnavailable

# Configure logging
logger = logging.getLogger(__name__)

# Constants
OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
PEGELONLINE_URL = "https://www.pegelonline.wsv.de/webservices/rest-api/v2"
OPENWEATHER_API_KEY_ENV = "OPENWEATHER_API_KEY"

# Retry settings
MAX_RETRIES = 3
CONNECT_TIMEOUT = 5.0
READ_TIMEOUT = 15.0
BACKOFF_BASE = 1.0  # seconds

# HTTP codes that trigger retry
RETRY_STATUS_CODES = {408, 429, 500, 502, 503, 504}


@dataclass(frozen=True)
class WeatherSnapshot:
    """Current weather at a location."""
    temp: float  # °C
    pressure: int  # hPa
    humidity: int  # %
    wind_speed: float  # m/s
    clouds: int  # % cloud cover
    description: str = ""


class WaterLevelTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


@dataclass(frozen=True)
class WaterLevelReading:
    """Latest water-level measurement of a gauge station."""
    station: str
    water_level: float
    trend: WaterLevelTrend
    timestamp: str


def _should_retry(response: Optional[requests.Response] = None,
                  exception: Optional[Exception] = None) -> bool:
    """Check if request should be retried."""
    if exception is not None:
        # Retry on timeout and connection errors
        if isinstance(exception, (requests.Timeout, requests.ConnectionError)):
            return True
    if response is not None:
        return response.status_code in RETRY_STATUS_CODES
    return False


def _http_get_with_retry(
    url: str,
    params: Optional[dict] = None,
    max_retries: int = MAX_RETRIES,
    connect_timeout: float = CONNECT_TIMEOUT,
    read_timeout: float = READ_TIMEOUT,
) -> requests.Response:
    """HTTP GET with exponential backoff and retries.

    Raises:
        ProviderUnavailable: If all retries exhausted or non-retryable error.
    """
    last_error: str = ""

    for attempt in range(max_retries):
        try:
            resp = requests.get(
                url,
                params=params,
                timeout=(connect_timeout, read_timeout),
            )
        except requests.RequestException as e:
            last_error = f"{e.__class__.__name__}: {e}"
            if _should_retry(exception=e):
                wait_time = BACKOFF_BASE * (2 ** attempt)
                logger.warning(
                    f"Request failed with {e.__class__.__name__}, "
                    f"retry {attempt + 1}/{max_retries} in {wait_time:.1f}s"
                )
                time.sleep(wait_time)
                continue
            raise ProviderUnavailable(f"Request to {url} failed: {e}") from e

        if _should_retry(response=resp):
            last_error = f"HTTP {resp.status_code}"
            wait_time = BACKOFF_BASE * (2 ** attempt)
            logger.warning(
                f"Request failed with {resp.status_code}, "
                f"retry {attempt + 1}/{max_retries} in {wait_time:.1f}s"
            )
            time.sleep(wait_time)
            continue

        if resp.status_code != 200:
            raise ProviderUnavailable(f"{url} returned {resp.status_code}: {resp.text}")

        return resp

    raise ProviderUnavailable(
        f"Request to {url} failed after {max_retries} retries: {last_error}"
    )


def parse_weather(data: Dict[str, Any]) -> WeatherSnapshot:
    """Build a WeatherSnapshot from an OpenWeather current-weather payload.

    Raises:
        ProviderUnavailable: If required fields are missing.
    """
    try:
        main = data["main"]
        conditions = data.get("weather") or [{}]
        return WeatherSnapshot(
            temp=float(main["temp"]),
            pressure=int(main["pressure"]),
            humidity=int(main.get("humidity", 0)),
            wind_speed=float(data.get("wind", {}).get("speed", 0.0)),
            clouds=int(data.get("clouds", {}).get("all", 0)),
            description=conditions[0].get("description", ""),
        )
    except (AttributeError, IndexError, KeyError, TypeError, ValueError) as e:
        raise ProviderUnavailable(f"Unexpected OpenWeather payload: {e}") from e


def fetch_weather(lat: float, lon: float, api_key: Optional[str] = None) -> WeatherSnapshot:
    """Fetch current weather for a coordinate (metric units).

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        api_key: OpenWeather key. Defaults to $OPENWEATHER_API_KEY.

    Raises:
        RuntimeError: If no API key is configured.
        ProviderUnavailable: If the weather could not be retrieved.
    """
    api_key = api_key or os.environ.get(OPENWEATHER_API_KEY_ENV)
    if not api_key:
        raise RuntimeError(f"{OPENWEATHER_API_KEY_ENV} environment variable not set")

    params = {
        "lat": lat,
        "lon": lon,
        "appid": api_key,
        "units": "metric",
    }

    resp = _http_get_with_retry(OPENWEATHER_URL, params)
    try:
        data = resp.json()
    except ValueError as e:
        raise ProviderUnavailable(f"OpenWeather returned invalid JSON: {e}") from e
    weather = parse_weather(data)
    logger.info(
        f"Weather at ({lat:.4f}, {lon:.4f}): {weather.temp:.1f}°C, "
        f"{weather.pressure} hPa, wind {weather.wind_speed:.1f} m/s, clouds {weather.clouds}%"
    )
    return weather


def _parse_trend(value: Any) -> WaterLevelTrend:
    if value == 1:
        return WaterLevelTrend.RISING
    if value == -1:
        return WaterLevelTrend.FALLING
    return WaterLevelTrend.STABLE


def fetch_water_level(station_id: str) -> Optional[WaterLevelReading]:
    """Fetch the current water level of a PEGELONLINE station.

    Many stations have no live feed, so every failure is logged and
    reported as None.
    """
    url = f"{PEGELONLINE_URL}/stations/{station_id}/W/currentmeasurement.json"
    try:
        resp = _http_get_with_retry(url, max_retries=1)
        data = resp.json()
        return WaterLevelReading(
            station=station_id,
            water_level=float(data["value"]),
            trend=_parse_trend(data.get("trend")),
            timestamp=str(data.get("timestamp", "")),
        )
    except (ProviderUnavailable, KeyError, TypeError, ValueError) as e:
        logger.warning(f"No water level for station '{station_id}': {e}")
        return None
