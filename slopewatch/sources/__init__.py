"""Upstream weather, soil and terrain data sources."""

from slopewatch.sources.elevation import fetch_terrain, slope_from_elevations
from slopewatch.sources.gather import gather_features
from slopewatch.sources.soil import fetch_soil
from slopewatch.sources.weather import fetch_weather

__all__ = [
    "fetch_weather",
    "fetch_soil",
    "fetch_terrain",
    "slope_from_elevations",
    "gather_features",
]
