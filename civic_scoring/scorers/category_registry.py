"""Category/Dimension Registry - fixed vocabulary of the needs-based model.

Need categories (what a policy helps or harms) and dimensions (how broadly,
how critically, how fast, how feasibly) share one 0-10 scale:

    0  Extremely harmful
    1-4 Harmful (varying degrees)
    5  No effect / neutral
    6-9 Beneficial (varying degrees)
    10 Extremely beneficial

Default category weights favor safety, then physiological needs:
physiological 0.25, safety 0.30, community 0.15, opportunity 0.20,
self-actualization 0.10.

Also provides the boundary checks every scorer runs on caller input.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Union

from civic_scoring.constants import MAX_RATING, MAX_SCORE, MIN_RATING, MIN_SCORE
from civic_scoring.errors import ConfigurationError, RangeError
from civic_scoring.schemas.common import Dimension, NeedCategory
from civic_scoring.schemas.impact import ImpactScore

WeightProfile = Mapping[Union[NeedCategory, str], float]


@dataclass(frozen=True)
class CategoryDefinition:
    """Human-readable metadata for one need category."""

    name: str
    description: str
    examples: tuple[str, ...]
    default_weight: float


@dataclass(frozen=True)
class DimensionDefinition:
    """Human-readable metadata and scale anchors for one dimension."""

    name: str
    short_label: str
    key_question: str
    anchor_low: str  # meaning of 0
    anchor_neutral: str  # meaning of 5
    anchor_high: str  # meaning of 10


CATEGORY_DEFINITIONS: Mapping[NeedCategory, CategoryDefinition] = MappingProxyType(
    {
        NeedCategory.PHYSIOLOGICAL: CategoryDefinition(
            name="Physiological",
            description="Basic survival needs: food, water, shelter, healthcare, sleep",
            examples=("Healthcare access", "Housing stability", "Food security", "Clean water"),
            default_weight=0.25,
        ),
        NeedCategory.SAFETY: CategoryDefinition(
            name="Safety",
            description="Security, stability, protection from harm and uncertainty",
            examples=("Personal safety", "Financial security", "Health security", "Job security"),
            default_weight=0.30,
        ),
        NeedCategory.COMMUNITY: CategoryDefinition(
            name="Community",
            description="Social belonging, connection, civic participation",
            examples=("Civic engagement", "Social cohesion", "Family support", "Community programs"),
            default_weight=0.15,
        ),
        NeedCategory.OPPORTUNITY: CategoryDefinition(
            name="Opportunity",
            description="Esteem and growth through employment, education, economic mobility",
            examples=("Job access", "Education access", "Career advancement", "Entrepreneurship"),
            default_weight=0.20,
        ),
        NeedCategory.SELF_ACTUALIZATION: CategoryDefinition(
            name="Self-Actualization",
            description="Personal fulfillment, creativity, reaching full potential",
            examples=("Arts programs", "Cultural enrichment", "Creative expression", "Personal growth"),
            default_weight=0.10,
        ),
    }
)

DIMENSION_DEFINITIONS: Mapping[Dimension, DimensionDefinition] = MappingProxyType(
    {
        Dimension.POPULATION_AFFECTED: DimensionDefinition(
            name="Population Affected",
            short_label="Reach",
            key_question="What proportion of the population will be affected by this policy?",
            anchor_low="Harms everyone",
            anchor_neutral="Affects no one / neutral",
            anchor_high="Benefits everyone universally",
        ),
        Dimension.ESSENTIAL_TO_SURVIVAL: DimensionDefinition(
            name="Essential to Survival",
            short_label="Essential",
            key_question="How critical is this policy to preventing mortality or addressing basic survival needs?",
            anchor_low="Directly causes death/harm",
            anchor_neutral="Irrelevant to survival",
            anchor_high="Directly prevents death / ensures survival",
        ),
        Dimension.TIME_TO_OUTCOME: DimensionDefinition(
            name="Time to Outcome",
            short_label="Speed",
            key_question="How quickly will the effects of this policy be realized?",
            anchor_low="Immediate harm",
            anchor_neutral="No effect / never materializes",
            anchor_high="Immediate benefit (days to months)",
        ),
        Dimension.FEASIBILITY: DimensionDefinition(
            name="Feasibility",
            short_label="Feasible",
            key_question="How politically and practically achievable is this policy?",
            anchor_low="Actively blocked / illegal",
            anchor_neutral="Impossible to pass",
            anchor_high="Already has broad support, easy path",
        ),
    }
)

# Display order (matches the needs hierarchy)
CATEGORY_ORDER: tuple[NeedCategory, ...] = tuple(NeedCategory)
DIMENSION_ORDER: tuple[Dimension, ...] = tuple(Dimension)

DEFAULT_WEIGHTS: Mapping[NeedCategory, float] = MappingProxyType(
    {category: definition.default_weight for category, definition in CATEGORY_DEFINITIONS.items()}
)

DEFAULT_DIMENSION_WEIGHTS: Mapping[Dimension, float] = MappingProxyType({d: 0.25 for d in DIMENSION_ORDER})


def category_name(category: NeedCategory) -> str:
    return CATEGORY_DEFINITIONS[category].name


# =============================================================================
# Boundary validation
# =============================================================================


def check_score(value: float, what: str) -> float:
    """Reject a 0-10 score that is non-numeric, non-finite or out of range."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise RangeError(f"{what} must be a finite number in [{MIN_SCORE}, {MAX_SCORE}], got {value!r}")
    if not MIN_SCORE <= value <= MAX_SCORE:
        raise RangeError(f"{what} must be in [{MIN_SCORE}, {MAX_SCORE}], got {value}")
    return float(value)


def check_rating(rating: int, what: str = "rating") -> int:
    """Reject anything that is not an integer in {-2, -1, 0, 1, 2}."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise RangeError(f"{what} must be an integer in [{MIN_RATING}, {MAX_RATING}], got {rating!r}")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise RangeError(f"{what} must be in [{MIN_RATING}, {MAX_RATING}], got {rating}")
    return rating


def validate_impact(impact: ImpactScore, require_categories: bool = True, require_dimensions: bool = False) -> None:
    """Check an ImpactScore before it is used in any computation.

    Raises:
        ConfigurationError: no categories (when required) or a missing
            dimension (when required)
        RangeError: any category or dimension value outside [0, 10]
    """
    if require_categories and not impact.categories:
        raise ConfigurationError("ImpactScore has no need categories; no meaningful score can be produced")
    for category, category_score in impact.categories.items():
        check_score(category_score.value, f"{category.value} category score")
    for dimension, value in impact.dimensions.items():
        check_score(value, f"{dimension.value} dimension score")
    if require_dimensions:
        missing = [d.value for d in DIMENSION_ORDER if d not in impact.dimensions]
        if missing:
            raise ConfigurationError(f"ImpactScore is missing dimension scores: {missing}")


def coerce_weight_profile(weights: WeightProfile) -> dict[NeedCategory, float]:
    """Turn a caller weight mapping into ``{NeedCategory: weight}``.

    Every category must be present; weights must be finite and non-negative.
    They need not sum to 1 (normalization happens at use time).
    """
    coerced: dict[NeedCategory, float] = {}
    for key, weight in weights.items():
        try:
            category = NeedCategory(key)
        except ValueError as e:
            raise ConfigurationError(f"Unknown need category in weight profile: {key!r}") from e
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
            raise ConfigurationError(f"Weight for {category.value} must be a finite number, got {weight!r}")
        if weight < 0:
            raise ConfigurationError(f"Weight for {category.value} must be non-negative, got {weight}")
        coerced[category] = float(weight)

    missing = [c.value for c in CATEGORY_ORDER if c not in coerced]
    if missing:
        raise ConfigurationError(f"Weight profile missing categories: {missing}")
    return coerced


def coerce_dimension_weights(weights: Mapping[Union[Dimension, str], float]) -> dict[Dimension, float]:
    """Dimension weights with unspecified dimensions filled from the defaults."""
    coerced = dict(DEFAULT_DIMENSION_WEIGHTS)
    for key, weight in weights.items():
        try:
            dimension = Dimension(key)
        except ValueError as e:
            raise ConfigurationError(f"Unknown dimension in dimension weights: {key!r}") from e
        if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight) or weight < 0:
            raise ConfigurationError(f"Weight for {dimension.value} must be a finite non-negative number, got {weight!r}")
        coerced[dimension] = float(weight)
    return coerced
