"""Tests for feature readings and normalization."""

import pytest

from slopewatch.features import (
    FeatureSet,
    ReadingStatus,
    SoilReading,
    TerrainReading,
    WeatherReading,
    build_feature_set,
)


def _readings():
    weather = WeatherReading(temp=14.0, humidity=80.0, rain=32.0, precip_real=3.2, code=61)
    soil = SoilReading.from_texture(bulk_density=135.0, clay=25.0, sand=40.0)
    terrain = TerrainReading(elevation=850.0, slope=22.4)
    return weather, soil, terrain


class TestReadings:
    """Tests for the collaborator reading defaults."""

    def test_weather_fallback(self):
        reading = WeatherReading.fallback()

        assert (reading.temp, reading.humidity, reading.rain, reading.precip_real, reading.code) == (
            25.0, 50.0, 0.0, 0.0, 0,
        )
        assert reading.status == ReadingStatus.FALLBACK

    def test_soil_fallback(self):
        reading = SoilReading.fallback()

        assert (reading.bulk_density, reading.clay, reading.sand, reading.silt) == (130.0, 33.0, 33.0, 34.0)
        assert reading.is_water is False
        assert reading.status == ReadingStatus.FALLBACK

    def test_soil_water(self):
        reading = SoilReading.water()

        assert (reading.bulk_density, reading.clay, reading.sand, reading.silt) == (0.0, 0.0, 0.0, 0.0)
        assert reading.is_water is True
        assert reading.status == ReadingStatus.NO_DATA

    def test_terrain_fallback(self):
        reading = TerrainReading.fallback()
        assert (reading.elevation, reading.slope, reading.status) == (0.0, 0.0, ReadingStatus.FALLBACK)

    @pytest.mark.parametrize(
        "clay, sand, expected_silt",
        [(25.0, 40.0, 35.0), (60.0, 50.0, 0.0), (0.0, 0.0, 100.0)],
        ids=["loam", "over_100_clipped", "all_silt"],
    )
    def test_silt_is_remainder(self, clay, sand, expected_silt):
        reading = SoilReading.from_texture(bulk_density=130.0, clay=clay, sand=sand)
        assert reading.silt == pytest.approx(expected_silt)
        assert reading.status == ReadingStatus.LIVE


class TestBuildFeatureSet:
    """Tests for build_feature_set."""

    def test_merges_readings(self):
        features, is_simulated = build_feature_set(*_readings())

        assert is_simulated is False
        assert features.rain == 32.0
        assert features.precip_real == 3.2
        assert features.temp == 14.0
        assert features.code == 61
        assert features.humidity == 80.0
        assert features.bulk_density == 135.0
        assert features.clay == 25.0
        assert features.sand == 40.0
        assert features.silt == pytest.approx(35.0)
        assert features.is_water is False
        assert features.elevation == 850.0
        assert features.slope == 22.4

    def test_manual_rain_overrides_precipitation(self):
        features, is_simulated = build_feature_set(*_readings(), manual_rain=50)

        assert is_simulated is True
        assert features.precip_real == 50.0
        assert features.rain == 500.0

    def test_zero_manual_rain_is_still_an_override(self):
        features, is_simulated = build_feature_set(*_readings(), manual_rain=0)

        assert is_simulated is True
        assert features.rain == 0.0

    def test_water_reading_propagates(self):
        weather, _, terrain = _readings()
        features, _ = build_feature_set(weather, SoilReading.water(), terrain)
        assert features.is_water is True

    def test_feature_set_is_immutable(self):
        features, _ = build_feature_set(*_readings())
        with pytest.raises(AttributeError):
            features.slope = 10.0


class TestFeatureSetDict:
    """Tests for FeatureSet.to_dict / from_dict."""

    def test_to_dict_keys(self):
        features, _ = build_feature_set(*_readings())
        data = features.to_dict()

        assert list(data) == [
            "temp", "humidity", "rain", "precip_real", "code", "bulk_density",
            "clay", "sand", "silt", "isWater", "elevation", "slope",
        ]
        assert data["isWater"] is False

    def test_from_dict_accepts_api_shape(self):
        features, _ = build_feature_set(*_readings())
        assert FeatureSet.from_dict(features.to_dict()) == features

    def test_from_dict_derives_missing_values(self):
        features = FeatureSet.from_dict({"precip_real": 12.0, "clay": 50.0, "sand": 20.0, "slope": 30})

        assert features.rain == 120.0
        assert features.silt == 30.0
        assert features.bulk_density == 130.0
        assert features.temp == 25.0
        assert features.is_water is False

    def test_from_dict_accepts_snake_case_water_flag(self):
        assert FeatureSet.from_dict({"is_water": True}).is_water is True
