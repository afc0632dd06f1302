"""Landslide risk engine: infinite-slope stability with pore-pressure correction."""

import copy
import math
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from slopewatch.features import FeatureSet
from slopewatch.risk.narrative import build_reason, round_half_up

WATER_REASON = (
    "\U0001f30a Water body / Sea detected (flat terrain at sea level). "
    "This is not a typical land slope."
)
SNOW_REASON = (
    "\u2744\ufe0f Ice/Snow detected. Risk is predominantly from Avalanche "
    "or Thaw-Slump, not typical soil shear."
)


class RiskLevel(str, Enum):
    """Discrete landslide risk level."""

    SAFE = "Safe"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class SoilStrength:
    """Mohr-Coulomb strength parameters."""

    cohesion: float  # kPa
    friction_deg: float


@dataclass
class StabilityResult:
    """Infinite-slope stresses and the resulting factor of safety."""

    normal_stress: float
    pore_pressure: float
    effective_normal_stress: float
    shear_stress: float  # driving
    shear_strength: float  # resisting
    factor_of_safety: float


@dataclass
class RiskDetails:
    """Strength and stress breakdown reported with a prediction."""

    FoS: float
    cohesion_base: float
    friction_base: float
    cohesion_effective: float
    friction_effective: float
    shear_strength: float
    shear_stress: float


@dataclass
class PredictionResult:
    """Outcome of a single risk evaluation."""

    level: RiskLevel
    reason: str
    details: RiskDetails
    probability: float | None = None  # None when a special case short-circuits

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape returned by the API."""
        return {
            "level": self.level.value,
            "reason": self.reason,
            "details": asdict(self.details),
            "probability": self.probability,
        }


# Default risk model. Threshold lists are evaluated in order, first match wins.
DEFAULT_MODEL = {
    "water": {
        "min_elevation_m": -5.0,
        "max_elevation_m": 5.0,
        "max_slope_deg": 0.5,
        "max_bulk_density": 20.0,
        "fos": 100.0,
    },
    "snow": {
        # WMO codes: snow fall (71/73/75), snow grains (77), snow showers (85/86)
        "weather_codes": [71, 73, 75, 77, 85, 86],
        "max_temp_c": -1.0,
        "steep_slope_deg": 30.0,
        "steep_fos": 0.9,
        "gentle_fos": 1.5,
        "cohesion": 50.0,
        "friction_deg": 10.0,
    },
    "soil_strength": {
        "cohesion_weights": {"clay": 35.0, "silt": 10.0, "sand": 1.0},
        "friction_weights": {"sand": 34.0, "silt": 28.0, "clay": 18.0},
    },
    "saturation": {
        "thresholds": [
            {"rain_mm": 800, "index": 1.0, "pore_pressure_ratio": 0.5},
            {"rain_mm": 400, "index": 0.7, "pore_pressure_ratio": 0.3},
            {"rain_mm": 100, "index": 0.4, "pore_pressure_ratio": 0.1},
        ],
        "default_index": 0.1,
        "default_pore_pressure_ratio": 0.0,
        "cohesion_loss": 0.5,
        "friction_loss": 0.3,
        "min_cohesion": 0.0,
        "min_friction_deg": 5.0,
    },
    "stability": {
        "gravity": 9.81,
        "slip_depth_m": 3.0,
        "driving_epsilon": 0.001,  # keeps flat terrain finite
    },
    "flat_terrain": {
        "max_slope_deg": 1.0,
        "fos": 20.0,
        "probability": 0.01,
    },
    "probability": {
        "thresholds": [
            {"max_fos": 1.0, "probability": 0.95},
            {"max_fos": 1.2, "probability": 0.75},
            {"max_fos": 1.5, "probability": 0.40},
            {"max_fos": 2.0, "probability": 0.20},
        ],
        "default": 0.05,
    },
    "risk_levels": [
        {"name": "High", "min_probability": 0.7},
        {"name": "Medium", "min_probability": 0.3},
        {"name": "Low", "min_probability": None},
    ],
}


class RiskEngine:
    """Landslide risk engine with configurable thresholds.

    The engine holds no per-evaluation state; ``evaluate`` is a pure function
    of its FeatureSet and may be called concurrently.
    """

    def __init__(self, config: dict[str, Any] | None = None, config_path: Path | None = None):
        """Initialize the engine with optional model overrides.

        Args:
            config: Partial risk model dictionary merged over DEFAULT_MODEL.
            config_path: Path to a YAML file with the same structure.
        """
        self.config = copy.deepcopy(DEFAULT_MODEL)

        if config_path and config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f)
                if yaml_config:
                    self._merge_config(yaml_config)

        if config:
            self._merge_config(config)

    def _merge_config(self, config: dict[str, Any]) -> None:
        """Merge configuration into current config."""
        for key, settings in config.items():
            if key not in self.config:
                continue
            if isinstance(self.config[key], dict) and isinstance(settings, dict):
                self.config[key].update(settings)
            else:
                self.config[key] = settings

    def evaluate(self, features: FeatureSet) -> PredictionResult:
        """Evaluate landslide risk for a feature snapshot.

        Args:
            features: Normalized weather, soil and terrain features.

        Returns:
            PredictionResult with level, narrative reason and stress details.
        """
        special = self.classify_special_case(features)
        if special is not None:
            return special

        base = self.estimate_soil_strength(features)
        saturation = self.saturation_index(features.rain)
        effective = self.effective_strength(base, saturation)
        stability = self.analyze_stability(features, effective)

        fos, probability = self.failure_probability(stability.factor_of_safety, features.slope)
        level = self.risk_level(probability)

        return PredictionResult(
            level=level,
            reason=build_reason(features),
            details=RiskDetails(
                FoS=fos,
                cohesion_base=round_half_up(base.cohesion, 2),
                friction_base=round_half_up(base.friction_deg, 2),
                cohesion_effective=round_half_up(effective.cohesion, 2),
                friction_effective=round_half_up(effective.friction_deg, 2),
                shear_strength=stability.shear_strength,
                shear_stress=stability.shear_stress,
            ),
            probability=probability,
        )

    def classify_special_case(self, features: FeatureSet) -> PredictionResult | None:
        """Short-circuit water bodies and snow/ice terrain.

        Water is checked before snow. Returns None when normal slope physics
        applies.
        """
        if self.is_water_body(features):
            return PredictionResult(
                level=RiskLevel.SAFE,
                reason=WATER_REASON,
                details=RiskDetails(
                    FoS=self.config["water"]["fos"],
                    cohesion_base=0.0,
                    friction_base=0.0,
                    cohesion_effective=0.0,
                    friction_effective=0.0,
                    shear_strength=0.0,
                    shear_stress=0.0,
                ),
            )

        if self.is_snow_or_ice(features):
            snow = self.config["snow"]
            steep = features.slope > snow["steep_slope_deg"]
            return PredictionResult(
                level=RiskLevel.HIGH if steep else RiskLevel.MEDIUM,
                reason=SNOW_REASON,
                details=RiskDetails(
                    FoS=snow["steep_fos"] if steep else snow["gentle_fos"],
                    cohesion_base=snow["cohesion"],
                    friction_base=snow["friction_deg"],
                    cohesion_effective=snow["cohesion"],
                    friction_effective=snow["friction_deg"],
                    shear_strength=0.0,
                    shear_stress=0.0,
                ),
            )

        return None

    def is_water_body(self, features: FeatureSet) -> bool:
        """Open water: flagged by the soil survey, or flat, sea-level and soil-less."""
        if features.is_water:
            return True
        water = self.config["water"]
        return (
            water["min_elevation_m"] <= features.elevation <= water["max_elevation_m"]
            and abs(features.slope) < water["max_slope_deg"]
            and features.bulk_density < water["max_bulk_density"]
        )

    def is_snow_or_ice(self, features: FeatureSet) -> bool:
        """Snow/ice: snowfall weather code or sub-freezing temperature."""
        snow = self.config["snow"]
        return features.code in snow["weather_codes"] or features.temp < snow["max_temp_c"]

    def estimate_soil_strength(self, features: FeatureSet) -> SoilStrength:
        """Texture-weighted baseline cohesion and friction angle.

        Clay dominates cohesion and sand dominates internal friction. Fractions
        are taken as-is and are not re-normalized.
        """
        weights = self.config["soil_strength"]
        fractions = {
            "clay": features.clay / 100,
            "sand": features.sand / 100,
            "silt": features.silt / 100,
        }
        c_w = weights["cohesion_weights"]
        phi_w = weights["friction_weights"]

        cohesion = (
            fractions["clay"] * c_w["clay"]
            + fractions["silt"] * c_w["silt"]
            + fractions["sand"] * c_w["sand"]
        )
        friction = (
            fractions["sand"] * phi_w["sand"]
            + fractions["silt"] * phi_w["silt"]
            + fractions["clay"] * phi_w["clay"]
        )
        return SoilStrength(cohesion=cohesion, friction_deg=friction)

    def _saturation_band(self, rain: float) -> dict[str, Any] | None:
        for threshold in self.config["saturation"]["thresholds"]:
            if rain > threshold["rain_mm"]:
                return threshold
        return None

    def saturation_index(self, rain: float) -> float:
        """Discrete saturation index for a rainfall intensity."""
        band = self._saturation_band(rain)
        if band is None:
            return self.config["saturation"]["default_index"]
        return band["index"]

    def pore_pressure_ratio(self, rain: float) -> float:
        """Pore-water pressure as a fraction of total normal stress."""
        band = self._saturation_band(rain)
        if band is None:
            return self.config["saturation"]["default_pore_pressure_ratio"]
        return band["pore_pressure_ratio"]

    def effective_strength(self, base: SoilStrength, saturation_index: float) -> SoilStrength:
        """Reduce strength for saturation; friction is floored to stay non-trivial."""
        sat = self.config["saturation"]
        c_eff = base.cohesion * (1 - sat["cohesion_loss"] * saturation_index)
        phi_eff = base.friction_deg * (1 - sat["friction_loss"] * saturation_index)
        return SoilStrength(
            cohesion=max(sat["min_cohesion"], c_eff),
            friction_deg=max(sat["min_friction_deg"], phi_eff),
        )

    def analyze_stability(self, features: FeatureSet, strength: SoilStrength) -> StabilityResult:
        """Infinite-slope limit equilibrium with a rainfall pore-pressure term.

        Args:
            features: Feature snapshot (slope, bulk density, rain).
            strength: Effective cohesion and friction angle.

        Returns:
            StabilityResult with stresses and factor of safety.
        """
        stab = self.config["stability"]
        gamma = (features.bulk_density / 100) * stab["gravity"]
        z = stab["slip_depth_m"]
        beta = features.slope * (math.pi / 180)

        sigma = gamma * z * math.cos(beta) ** 2
        tau_driving = gamma * z * math.sin(beta) * math.cos(beta)

        u = sigma * self.pore_pressure_ratio(features.rain)
        sigma_effective = max(0.0, sigma - u)
        tan_phi = math.tan(strength.friction_deg * (math.pi / 180))

        tau_resisting = strength.cohesion + sigma_effective * tan_phi
        fos = tau_resisting / (tau_driving + stab["driving_epsilon"])

        return StabilityResult(
            normal_stress=sigma,
            pore_pressure=u,
            effective_normal_stress=sigma_effective,
            shear_stress=tau_driving,
            shear_strength=tau_resisting,
            factor_of_safety=fos,
        )

    def failure_probability(self, fos: float, slope: float) -> tuple[float, float]:
        """Map factor of safety to a failure probability.

        Flat terrain overrides both the FoS and the probability table.

        Returns:
            Tuple of (reported FoS, probability).
        """
        flat = self.config["flat_terrain"]
        if slope < flat["max_slope_deg"]:
            return flat["fos"], flat["probability"]

        prob = self.config["probability"]
        for threshold in prob["thresholds"]:
            if fos < threshold["max_fos"]:
                return fos, threshold["probability"]
        return fos, prob["default"]

    def risk_level(self, probability: float) -> RiskLevel:
        """Get risk level from failure probability."""
        for level in self.config["risk_levels"]:
            minimum = level["min_probability"]
            if minimum is None or probability > minimum:
                return RiskLevel(level["name"])
        return RiskLevel.LOW


# Convenience function with default engine
def evaluate(features: FeatureSet) -> PredictionResult:
    """Evaluate landslide risk using the default model."""
    engine = RiskEngine()
    return engine.evaluate(features)
