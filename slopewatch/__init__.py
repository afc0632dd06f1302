"""SlopeWatch: point landslide risk from live weather, soil and terrain data."""

__version__ = "0.1.0"
