"""HTTP boundary for the risk engine."""

from slopewatch.api.server import create_app

__all__ = ["create_app"]
