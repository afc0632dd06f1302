"""Feature records supplied to the risk engine.

Each upstream source returns a tagged reading. A reading is never an error:
when a source fails it hands back its documented fallback values, and the
status records what happened. ``build_feature_set`` merges the three readings
(plus an optional manual rainfall override) into the immutable ``FeatureSet``
the engine evaluates.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ReadingStatus(str, Enum):
    """How a collaborator reading was obtained."""

    LIVE = "live"
    FALLBACK = "fallback"
    NO_DATA = "no_data"  # upstream answered, but had nothing for this point


@dataclass(frozen=True)
class WeatherReading:
    """Weather conditions at a point."""

    temp: float
    humidity: float
    rain: float  # precipitation x 10
    precip_real: float
    code: int
    status: ReadingStatus = ReadingStatus.LIVE

    @classmethod
    def fallback(cls) -> "WeatherReading":
        return cls(temp=25.0, humidity=50.0, rain=0.0, precip_real=0.0, code=0,
                   status=ReadingStatus.FALLBACK)


@dataclass(frozen=True)
class SoilReading:
    """Topsoil texture and bulk density at a point."""

    bulk_density: float  # cg/cm3, e.g. 130 = 1.3 g/cm3
    clay: float  # %
    sand: float  # %
    silt: float  # %, remainder floored at 0
    is_water: bool = False
    status: ReadingStatus = ReadingStatus.LIVE

    @classmethod
    def fallback(cls) -> "SoilReading":
        return cls(bulk_density=130.0, clay=33.0, sand=33.0, silt=34.0,
                   is_water=False, status=ReadingStatus.FALLBACK)

    @classmethod
    def water(cls) -> "SoilReading":
        """Reading used when the soil survey has no properties for a point."""
        return cls(bulk_density=0.0, clay=0.0, sand=0.0, silt=0.0,
                   is_water=True, status=ReadingStatus.NO_DATA)

    @classmethod
    def from_texture(cls, bulk_density: float, clay: float, sand: float) -> "SoilReading":
        """Build a reading from clay/sand percentages, deriving silt."""
        silt = max(0.0, 100.0 - clay - sand)
        return cls(bulk_density=bulk_density, clay=clay, sand=sand, silt=silt)


@dataclass(frozen=True)
class TerrainReading:
    """Elevation and slope at a point."""

    elevation: float
    slope: float
    status: ReadingStatus = ReadingStatus.LIVE

    @classmethod
    def fallback(cls) -> "TerrainReading":
        return cls(elevation=0.0, slope=0.0, status=ReadingStatus.FALLBACK)


@dataclass(frozen=True)
class FeatureSet:
    """Normalized environmental features for one risk evaluation."""

    rain: float
    precip_real: float
    slope: float
    elevation: float
    temp: float
    code: int
    bulk_density: float
    clay: float
    sand: float
    silt: float
    is_water: bool = False
    humidity: float = 50.0  # reported only, never read by the engine

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape returned by the API."""
        return {
            "temp": self.temp,
            "humidity": self.humidity,
            "rain": self.rain,
            "precip_real": self.precip_real,
            "code": self.code,
            "bulk_density": self.bulk_density,
            "clay": self.clay,
            "sand": self.sand,
            "silt": self.silt,
            "isWater": self.is_water,
            "elevation": self.elevation,
            "slope": self.slope,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeatureSet":
        """Build a FeatureSet from a dictionary (accepts ``isWater`` or ``is_water``).

        Missing texture values default to the soil fallback; silt is derived
        when not supplied.
        """
        clay = float(data.get("clay", 33.0))
        sand = float(data.get("sand", 33.0))
        silt = data.get("silt")
        if silt is None:
            silt = max(0.0, 100.0 - clay - sand)
        rain = data.get("rain")
        precip_real = float(data.get("precip_real", 0.0))
        if rain is None:
            rain = precip_real * 10

        return cls(
            rain=float(rain),
            precip_real=precip_real,
            slope=float(data.get("slope", 0.0)),
            elevation=float(data.get("elevation", 0.0)),
            temp=float(data.get("temp", 25.0)),
            code=int(data.get("code", 0)),
            bulk_density=float(data.get("bulk_density", 130.0)),
            clay=clay,
            sand=sand,
            silt=float(silt),
            is_water=bool(data.get("isWater", data.get("is_water", False))),
            humidity=float(data.get("humidity", 50.0)),
        )


def build_feature_set(
    weather: WeatherReading,
    soil: SoilReading,
    terrain: TerrainReading,
    manual_rain: float | None = None,
) -> tuple[FeatureSet, bool]:
    """Merge collaborator readings into a FeatureSet.

    Args:
        weather: Weather reading (live or fallback).
        soil: Soil reading (live, fallback, or water).
        terrain: Terrain reading (live or fallback).
        manual_rain: Optional simulated precipitation in mm. When not None it
            replaces the live precipitation.

    Returns:
        Tuple of (features, is_simulated).
    """
    precip_real = weather.precip_real
    rain = weather.rain
    is_simulated = False

    if manual_rain is not None:
        precip_real = float(manual_rain)
        rain = precip_real * 10
        is_simulated = True

    features = FeatureSet(
        rain=rain,
        precip_real=precip_real,
        slope=terrain.slope,
        elevation=terrain.elevation,
        temp=weather.temp,
        code=weather.code,
        bulk_density=soil.bulk_density,
        clay=soil.clay,
        sand=soil.sand,
        silt=soil.silt,
        is_water=soil.is_water,
        humidity=weather.humidity,
    )
    return features, is_simulated
