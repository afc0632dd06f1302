"""Rule-based narrative for landslide risk predictions.

Rules are grouped by concern (texture, slope, rain). Groups are evaluated in a
fixed order and at most one rule fires per group: the first whose predicate
matches. The sentences of the fired rules are joined with single spaces.
"""

from collections.abc import Callable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from slopewatch.features import FeatureSet


@dataclass(frozen=True)
class NarrativeRule:
    """A predicate paired with the sentence it contributes."""

    name: str
    predicate: Callable[["FeatureSet"], bool]
    render: Callable[["FeatureSet"], str]


@dataclass(frozen=True)
class NarrativeGroup:
    """Mutually exclusive rules; the first matching rule wins."""

    name: str
    rules: tuple[NarrativeRule, ...]

    def select(self, features: "FeatureSet") -> NarrativeRule | None:
        for rule in self.rules:
            if rule.predicate(features):
                return rule
        return None


def format_number(value: float) -> str:
    """Render a number the way a JavaScript template literal would (40, 12.5)."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with exact halves going away from zero (46.5 -> 47, 0.125 -> 0.13)."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


TEXTURE_RULES = NarrativeGroup(
    name="texture",
    rules=(
        NarrativeRule(
            name="clay_rich",
            predicate=lambda f: f.clay / 100 > 0.45,
            render=lambda f: (
                f"The terrain is Clay-rich ({round_half_up(f.clay):.0f}%), "
                "which is cohesive but slippery when wet."
            ),
        ),
        NarrativeRule(
            name="sandy",
            predicate=lambda f: f.sand / 100 > 0.6,
            render=lambda f: (
                f"The terrain is Sandy ({round_half_up(f.sand):.0f}%), "
                "which is loose and prone to washout."
            ),
        ),
        NarrativeRule(
            name="balanced",
            predicate=lambda f: True,
            render=lambda f: (
                "The soil has a balanced mix of sand, silt, and clay, "
                "providing moderate stability."
            ),
        ),
    ),
)

SLOPE_RULES = NarrativeGroup(
    name="slope",
    rules=(
        NarrativeRule(
            name="extremely_steep",
            predicate=lambda f: f.slope > 35,
            render=lambda f: (
                f"The slope is extremely steep ({format_number(f.slope)}\u00b0), "
                "making it naturally unstable."
            ),
        ),
        NarrativeRule(
            name="flat",
            predicate=lambda f: f.slope < 5,
            render=lambda f: (
                f"The land is flat ({format_number(f.slope)}\u00b0), "
                "significantly reducing landslide risk."
            ),
        ),
    ),
)

RAIN_RULES = NarrativeGroup(
    name="rain",
    rules=(
        NarrativeRule(
            name="critical_saturation",
            predicate=lambda f: f.rain > 400,
            render=lambda f: (
                "\u26a0\ufe0f CRITICAL: Heavy rainfall is saturating the ground, "
                "reducing cohesion and friction."
            ),
        ),
        NarrativeRule(
            name="moderate_rain",
            predicate=lambda f: f.rain > 100,
            render=lambda f: (
                "Moderate rain detected. Pore pressure is increasing "
                "and effective strength is reduced."
            ),
        ),
    ),
)

NARRATIVE_GROUPS = (TEXTURE_RULES, SLOPE_RULES, RAIN_RULES)


def fired_rules(features: "FeatureSet") -> list[NarrativeRule]:
    """Return the rules that fire for the given features, in narrative order."""
    fired = []
    for group in NARRATIVE_GROUPS:
        rule = group.select(features)
        if rule is not None:
            fired.append(rule)
    return fired


def build_reason(features: "FeatureSet") -> str:
    """Compose the human-readable reason for a prediction."""
    return " ".join(rule.render(features) for rule in fired_rules(features))
