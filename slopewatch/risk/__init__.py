"""Landslide risk engine and narrative rules."""

from slopewatch.risk.engine import (
    DEFAULT_MODEL,
    PredictionResult,
    RiskDetails,
    RiskEngine,
    RiskLevel,
    evaluate,
)
from slopewatch.risk.narrative import build_reason

__all__ = [
    "evaluate",
    "RiskEngine",
    "RiskLevel",
    "PredictionResult",
    "RiskDetails",
    "DEFAULT_MODEL",
    "build_reason",
]
