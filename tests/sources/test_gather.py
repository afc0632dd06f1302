"""Tests for concurrent feature gathering."""

import asyncio

import httpx
import pytest

from slopewatch.risk.engine import RiskEngine, RiskLevel
from slopewatch.sources.gather import gather_features

FORECAST = {
    "hourly": {
        "time": ["t0"],
        "temperature_2m": [9.0],
        "relativehumidity_2m": [92],
        "precipitation": [15.0],
    },
    "current_weather": {"temperature": 9.0, "weathercode": 63},
}
SOIL = {
    "properties": {
        "layers": [
            {"name": "bdod", "depths": [{"values": {"mean": 140}}]},
            {"name": "clay", "depths": [{"values": {"mean": 500}}]},
            {"name": "sand", "depths": [{"values": {"mean": 200}}]},
        ]
    }
}
ELEVATION = {"elevation": [900.0, 1000.0, 900.0]}


def _routing_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("/forecast"):
        return httpx.Response(200, json=FORECAST)
    if request.url.path.endswith("/elevation"):
        return httpx.Response(200, json=ELEVATION)
    if "soilgrids" in request.url.path:
        return httpx.Response(200, json=SOIL)
    return httpx.Response(404)


def _gather(handler, manual_rain=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await gather_features(46.5, 7.9, manual_rain=manual_rain, client=client)

    return asyncio.run(run())


class TestGatherFeatures:
    """Tests for gather_features."""

    def test_merges_all_sources(self):
        features, is_simulated = _gather(_routing_handler)

        assert is_simulated is False
        assert features.temp == 9.0
        assert features.humidity == 92.0
        assert features.rain == 150.0
        assert features.code == 63
        assert features.clay == 50.0
        assert features.sand == 20.0
        assert features.silt == pytest.approx(30.0)
        assert features.bulk_density == 140.0
        assert features.elevation == 900.0
        assert features.slope == pytest.approx(24.4)

    def test_manual_rain_override(self):
        features, is_simulated = _gather(_routing_handler, manual_rain=90)

        assert is_simulated is True
        assert features.precip_real == 90.0
        assert features.rain == 900.0

    def test_all_sources_failing_degrades_to_defaults(self):
        features, is_simulated = _gather(lambda request: httpx.Response(503))

        assert is_simulated is False
        assert (features.temp, features.rain, features.code) == (25.0, 0.0, 0)
        assert (features.clay, features.sand, features.silt, features.bulk_density) == (33.0, 33.0, 34.0, 130.0)
        assert (features.elevation, features.slope) == (0.0, 0.0)

        result = RiskEngine().evaluate(features)
        assert result.level == RiskLevel.LOW
        assert result.details.FoS == 20.0

    def test_one_source_failing_keeps_the_others(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if "soilgrids" in request.url.path:
                raise httpx.ReadTimeout("timed out", request=request)
            return _routing_handler(request)

        features, _ = _gather(handler)

        assert features.clay == 33.0
        assert features.temp == 9.0
        assert features.slope == pytest.approx(24.4)
