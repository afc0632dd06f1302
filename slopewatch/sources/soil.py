"""Topsoil texture and bulk density from the ISRIC SoilGrids API."""

from typing import Any

import httpx
import structlog

from slopewatch.config import get_config
from slopewatch.features import SoilReading

logger = structlog.get_logger()

SOIL_PROPERTIES = ["bdod", "clay", "sand"]
SOIL_DEPTH = "0-5cm"


def _layer_mean(layers: list[dict[str, Any]], name: str) -> float:
    """Mean of the first depth interval of a named layer, or 0."""
    layer = next((item for item in layers if item.get("name") == name), None)
    if not layer or not layer.get("depths"):
        return 0.0
    values = layer["depths"][0].get("values")
    if not values:
        return 0.0
    return values.get("mean") or 0.0


def _legacy_mean(properties: dict[str, Any], name: str) -> float:
    """Mean from the older ``properties.<name>.values`` response shape, or 0."""
    prop = properties.get(name)
    if not isinstance(prop, dict) or not prop.get("values"):
        return 0.0
    return prop["values"].get("mean") or 0.0


def parse_soil(payload: dict[str, Any]) -> SoilReading:
    """Parse a SoilGrids properties query.

    SoilGrids reports clay and sand in g/kg and bulk density in cg/cm3.
    Texture is converted to percent; bulk density is kept as reported.

    Args:
        payload: Decoded JSON response.

    Returns:
        SoilReading. The fallback reading when the response has no
        properties block; the water reading when every property is empty.
    """
    properties = payload.get("properties")
    if properties is None:
        return SoilReading.fallback()

    layers = properties.get("layers") or []
    clay = _layer_mean(layers, "clay") or _legacy_mean(properties, "clay")
    sand = _layer_mean(layers, "sand") or _legacy_mean(properties, "sand")
    bulk_density = _layer_mean(layers, "bdod") or _legacy_mean(properties, "bdod")

    if not clay and not sand and not bulk_density:
        return SoilReading.water()

    return SoilReading.from_texture(
        bulk_density=float(bulk_density),
        clay=float(clay) / 10,
        sand=float(sand) / 10,
    )


async def fetch_soil(
    client: httpx.AsyncClient,
    lat: float,
    lon: float,
    url: str | None = None,
) -> SoilReading:
    """Fetch topsoil properties for a point.

    Never raises: request and parse failures yield the fallback reading.
    """
    url = url or get_config().sources.soil_url
    params = [("lat", lat), ("lon", lon)]
    params += [("property", p) for p in SOIL_PROPERTIES]
    params.append(("depth", SOIL_DEPTH))

    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        reading = parse_soil(response.json())
    except (httpx.HTTPError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
        logger.warning("Soil API error, using fallback", lat=lat, lon=lon, error=str(e))
        return SoilReading.fallback()

    if reading.is_water:
        logger.info("No soil properties returned, treating as open water", lat=lat, lon=lon)
    return reading
