"""Current weather from the Open-Meteo forecast API."""

from typing import Any

import httpx
import structlog

from slopewatch.config import get_config
from slopewatch.features import WeatherReading

logger = structlog.get_logger()


def _last_hourly(hourly: dict[str, Any], name: str, last_idx: int) -> float | None:
    values = hourly.get(name) or []
    if last_idx < len(values):
        return values[last_idx]
    return None


def parse_weather(payload: dict[str, Any]) -> WeatherReading:
    """Parse an Open-Meteo forecast response.

    The most recent hourly sample is used. Missing or null values fall back
    to the current-weather block where one exists, then to the defaults.

    Args:
        payload: Decoded JSON response.

    Returns:
        Live WeatherReading.
    """
    hourly = payload.get("hourly") or {}
    current = payload.get("current_weather") or {}
    times = hourly.get("time") or []
    last_idx = max(0, len(times) - 1)

    temp = _last_hourly(hourly, "temperature_2m", last_idx)
    if temp is None:
        temp = current.get("temperature")
    if temp is None:
        temp = 25.0

    humidity = _last_hourly(hourly, "relativehumidity_2m", last_idx)
    if humidity is None:
        humidity = 50.0

    precip = _last_hourly(hourly, "precipitation", last_idx)
    if precip is None:
        precip = 0.0

    code = current.get("weathercode")
    if code is None:
        code = 0

    return WeatherReading(
        temp=float(temp),
        humidity=float(humidity),
        rain=float(precip) * 10,
        precip_real=float(precip),
        code=int(code),
    )


async def fetch_weather(
    client: httpx.AsyncClient,
    lat: float,
    lon: float,
    url: str | None = None,
) -> WeatherReading:
    """Fetch current weather for a point.

    Never raises: request and parse failures yield the fallback reading.
    """
    url = url or get_config().sources.weather_url
    params = {
        "latitude": lat,
        "longitude": lon,
        "hourly": "temperature_2m,relativehumidity_2m,precipitation",
        "current_weather": "true",
        "timezone": "UTC",
    }
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        reading = parse_weather(response.json())
    except (httpx.HTTPError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        logger.warning("Weather API error, using fallback", lat=lat, lon=lon, error=str(e))
        return WeatherReading.fallback()

    logger.debug("Fetched weather", lat=lat, lon=lon, precip=reading.precip_real, code=reading.code)
    return reading
