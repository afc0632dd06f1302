"""Elevation and slope from the Open-Meteo elevation API."""

import math
from typing import Any

import httpx
import structlog

from slopewatch.config import get_config
from slopewatch.features import TerrainReading

logger = structlog.get_logger()

# Neighbour offset in degrees and the ground distance it is taken to span
SAMPLE_OFFSET_DEG = 0.002
SAMPLE_SPACING_M = 220.0


def slope_from_elevations(
    h_center: float,
    h_north: float,
    h_east: float,
    spacing_m: float = SAMPLE_SPACING_M,
) -> float:
    """Slope in degrees from a centre height and its north/east neighbours.

    Uses the gradient magnitude of the two finite differences, rounded to one
    decimal.
    """
    dz_dx = (h_east - h_center) / spacing_m
    dz_dy = (h_north - h_center) / spacing_m
    rise = math.sqrt(dz_dx * dz_dx + dz_dy * dz_dy)
    return round(math.degrees(math.atan(rise)), 1)


def parse_elevation(payload: dict[str, Any]) -> TerrainReading:
    """Parse an elevation response for (centre, north, east) sample points."""
    elevations = payload.get("elevation") or []

    def _at(index: int, default: float) -> float:
        if index < len(elevations) and elevations[index] is not None:
            return float(elevations[index])
        return default

    h0 = _at(0, 0.0)
    h_north = _at(1, h0)
    h_east = _at(2, h0)

    return TerrainReading(elevation=h0, slope=slope_from_elevations(h0, h_north, h_east))


async def fetch_terrain(
    client: httpx.AsyncClient,
    lat: float,
    lon: float,
    url: str | None = None,
) -> TerrainReading:
    """Fetch elevation and estimate slope for a point.

    Never raises: request and parse failures yield the fallback reading.
    """
    url = url or get_config().sources.elevation_url
    params = {
        "latitude": f"{lat},{lat + SAMPLE_OFFSET_DEG},{lat}",
        "longitude": f"{lon},{lon},{lon + SAMPLE_OFFSET_DEG}",
    }
    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        reading = parse_elevation(response.json())
    except (httpx.HTTPError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        logger.warning("Elevation API error, using fallback", lat=lat, lon=lon, error=str(e))
        return TerrainReading.fallback()

    logger.debug("Fetched terrain", lat=lat, lon=lon, elevation=reading.elevation, slope=reading.slope)
    return reading
