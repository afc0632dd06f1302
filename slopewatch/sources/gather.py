"""Concurrent collection of the features for one location."""

import asyncio

import httpx
import structlog

from slopewatch.config import get_config
from slopewatch.features import FeatureSet, build_feature_set
from slopewatch.sources.elevation import fetch_terrain
from slopewatch.sources.soil import fetch_soil
from slopewatch.sources.weather import fetch_weather

logger = structlog.get_logger()


async def gather_features(
    lat: float,
    lon: float,
    manual_rain: float | None = None,
    client: httpx.AsyncClient | None = None,
) -> tuple[FeatureSet, bool]:
    """Fetch weather, soil and terrain concurrently and merge them.

    Each source absorbs its own failures, so this returns a (possibly fully
    defaulted) FeatureSet rather than raising for upstream errors.

    Args:
        lat: Latitude in degrees.
        lon: Longitude in degrees.
        manual_rain: Optional simulated precipitation in mm.
        client: Optional shared HTTP client. One is created (and closed) when
            not supplied.

    Returns:
        Tuple of (features, is_simulated).
    """
    if client is None:
        timeout = get_config().sources.timeout
        async with httpx.AsyncClient(timeout=timeout) as owned_client:
            return await gather_features(lat, lon, manual_rain, client=owned_client)

    weather, soil, terrain = await asyncio.gather(
        fetch_weather(client, lat, lon),
        fetch_soil(client, lat, lon),
        fetch_terrain(client, lat, lon),
    )

    features, is_simulated = build_feature_set(weather, soil, terrain, manual_rain)
    logger.info(
        "Gathered features",
        lat=lat,
        lon=lon,
        weather=weather.status.value,
        soil=soil.status.value,
        terrain=terrain.status.value,
        simulated=is_simulated,
    )
    return features, is_simulated
