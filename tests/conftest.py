"""Shared test fixtures for slopewatch tests."""

import pytest

from slopewatch.config import reload_config
from slopewatch.features import FeatureSet


@pytest.fixture
def make_features():
    """Factory for FeatureSets with a temperate hillside default, applying any overrides."""

    def _make(**overrides) -> FeatureSet:
        defaults = dict(
            rain=0.0,
            precip_real=0.0,
            slope=20.0,
            elevation=500.0,
            temp=20.0,
            code=0,
            bulk_density=130.0,
            clay=33.0,
            sand=33.0,
            silt=34.0,
            is_water=False,
        )
        defaults.update(overrides)
        return FeatureSet(**defaults)

    return _make


@pytest.fixture
def steep_clay_features(make_features):
    """A dry, steep, clay-rich slope."""
    return make_features(slope=45.0, clay=60.0, sand=20.0, silt=20.0)


@pytest.fixture
def restore_config():
    """Reset the global configuration after a test that reloads it."""
    yield
    reload_config()
