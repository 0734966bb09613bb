"""Configuration objects for the scoring core.

Each component takes its thresholds from one of these frozen dataclasses
instead of inlining numbers, so they can be tuned without touching the
algorithms:

- **LabelBands**: qualitative labels for an overall 0-10 score
- **ConsensusThresholds**: strong / moderate cut-offs for population ratings
- **ProfileConfig**: rating weights, display range and confidence cut-offs
- **SpreadThresholds**: cross-archetype agreement classification

``DEFAULT_CONFIG`` bundles the defaults. Configs are validated on creation and
raise ConfigurationError when malformed.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from civic_scoring.constants import (
    CONSENSUS_MODERATE_THRESHOLD,
    CONSENSUS_STRONG_THRESHOLD,
    MAX_SCORE,
    MIN_SCORE,
    NEUTRAL_SCORE,
    NEUTRAL_TOLERANCE,
    PROFILE_DISPLAY_MAX,
    PROFILE_DISPLAY_MIN,
    PROFILE_HIGH_CONFIDENCE_AT,
    PROFILE_MEDIUM_CONFIDENCE_AT,
    RATING_VALUES,
    SPREAD_ALL_HIGH,
    SPREAD_ALL_LOW,
    SPREAD_HIDDEN_AGREEMENT_MEAN,
    SPREAD_HIGH_STDEV,
    SPREAD_LOW_STDEV,
)
from civic_scoring.errors import ConfigurationError

# =============================================================================
# Score labels
# =============================================================================


@dataclass(frozen=True)
class LabelBand:
    """One qualitative band: scores up to ``upper`` get ``label``.

    ``inclusive`` decides whether a score exactly at ``upper`` belongs here
    or to the next band.
    """

    upper: float
    label: str
    inclusive: bool = True

    def contains(self, score: float) -> bool:
        return score <= self.upper if self.inclusive else score < self.upper


DEFAULT_LABEL_BANDS = (
    LabelBand(2.0, "extremely harmful"),
    LabelBand(3.5, "very harmful"),
    LabelBand(5.0, "somewhat harmful", inclusive=False),
    LabelBand(6.5, "somewhat beneficial", inclusive=False),
    LabelBand(8.0, "very beneficial", inclusive=False),
    LabelBand(MAX_SCORE, "extremely beneficial"),
)


@dataclass(frozen=True)
class LabelBands:
    """Monotonic, non-overlapping bucketing of an overall score.

    A score within ``neutral_tolerance`` of ``neutral_score`` is always
    labeled ``neutral_label``; everything else falls into the first band
    that contains it.
    """

    bands: tuple[LabelBand, ...] = DEFAULT_LABEL_BANDS
    neutral_label: str = "neutral"
    neutral_score: float = NEUTRAL_SCORE
    neutral_tolerance: float = NEUTRAL_TOLERANCE

    def __post_init__(self):
        if not self.bands:
            raise ConfigurationError("Label bands must not be empty")
        uppers = [b.upper for b in self.bands]
        if any(later <= earlier for earlier, later in zip(uppers, uppers[1:])):
            raise ConfigurationError(f"Label band upper bounds must be strictly increasing, got {uppers}")
        last = self.bands[-1]
        if last.upper < MAX_SCORE or (last.upper == MAX_SCORE and not last.inclusive):
            raise ConfigurationError(f"Label bands must cover the full scale up to {MAX_SCORE}")
        if uppers[0] < MIN_SCORE:
            raise ConfigurationError(f"Label band upper bound {uppers[0]} is below {MIN_SCORE}")
        if self.neutral_tolerance < 0:
            raise ConfigurationError("neutral_tolerance must be non-negative")

    def label_for(self, score: float) -> str:
        """Return the qualitative label for a 0-10 score."""
        if abs(score - self.neutral_score) <= self.neutral_tolerance:
            return self.neutral_label
        for band in self.bands:
            if band.contains(score):
                return band.label
        # Unreachable for validated bands and in-range scores
        return self.bands[-1].label


# =============================================================================
# Consensus
# =============================================================================


@dataclass(frozen=True)
class ConsensusThresholds:
    """Whole-percent cut-offs applied to the majority side."""

    strong: int = CONSENSUS_STRONG_THRESHOLD
    moderate: int = CONSENSUS_MODERATE_THRESHOLD

    def __post_init__(self):
        if not 0 <= self.moderate <= self.strong <= 100:
            raise ConfigurationError(
                f"Consensus thresholds must satisfy 0 <= moderate <= strong <= 100 "
                f"(moderate={self.moderate}, strong={self.strong})"
            )


# =============================================================================
# Preference profile
# =============================================================================

DEFAULT_RATING_WEIGHTS: Mapping[int, float] = MappingProxyType({-2: -2.0, -1: -1.0, 0: 0.0, 1: 1.0, 2: 2.0})


@dataclass(frozen=True)
class ProfileConfig:
    """Coefficients for turning sparse ratings into a preference profile.

    Attributes:
        rating_weights: Pull applied per rating value. Sign must match the
            rating (opposition pushes away) and 0 must map to 0 (no signal).
        display_min: Profile value for a dimension at scale 0
        display_max: Profile value for a dimension at scale 10
        medium_confidence_at: Contributing ratings needed for "medium"
        high_confidence_at: Contributing ratings needed for "high"
    """

    rating_weights: Mapping[int, float] = field(default_factory=lambda: DEFAULT_RATING_WEIGHTS)
    display_min: float = PROFILE_DISPLAY_MIN
    display_max: float = PROFILE_DISPLAY_MAX
    medium_confidence_at: int = PROFILE_MEDIUM_CONFIDENCE_AT
    high_confidence_at: int = PROFILE_HIGH_CONFIDENCE_AT

    def __post_init__(self):
        if set(self.rating_weights) != set(RATING_VALUES):
            raise ConfigurationError(
                f"rating_weights must have exactly the keys {list(RATING_VALUES)}, got {sorted(self.rating_weights)}"
            )
        for rating, weight in self.rating_weights.items():
            if not math.isfinite(weight):
                raise ConfigurationError(f"rating weight for {rating} is not finite: {weight}")
            if (rating > 0 and weight <= 0) or (rating < 0 and weight >= 0) or (rating == 0 and weight != 0):
                raise ConfigurationError(f"rating weight {weight} for rating {rating} has the wrong sign")
        if self.display_max <= self.display_min:
            raise ConfigurationError("display_max must be greater than display_min")
        if not 0 < self.medium_confidence_at <= self.high_confidence_at:
            raise ConfigurationError("confidence thresholds must satisfy 0 < medium <= high")
        # Freeze caller-supplied dicts
        object.__setattr__(self, "rating_weights", MappingProxyType(dict(self.rating_weights)))

    def rescale(self, value: float) -> float:
        """Map a 0-10 scale value into the display range."""
        span = self.display_max - self.display_min
        return self.display_min + (value - MIN_SCORE) / (MAX_SCORE - MIN_SCORE) * span


# =============================================================================
# Cross-archetype spread
# =============================================================================


@dataclass(frozen=True)
class SpreadThresholds:
    """Cut-offs for classifying how archetypes agree on one policy (0-10 scale)."""

    all_high: float = SPREAD_ALL_HIGH
    all_low: float = SPREAD_ALL_LOW
    low_stdev: float = SPREAD_LOW_STDEV
    high_stdev: float = SPREAD_HIGH_STDEV
    hidden_agreement_mean: float = SPREAD_HIDDEN_AGREEMENT_MEAN

    def __post_init__(self):
        if not 0 <= self.low_stdev <= self.high_stdev:
            raise ConfigurationError("Spread thresholds must satisfy 0 <= low_stdev <= high_stdev")
        if self.all_low > self.all_high:
            raise ConfigurationError("all_low must not exceed all_high")


# =============================================================================
# Aggregate
# =============================================================================


@dataclass(frozen=True)
class EngineConfig:
    """All tunables for the scoring core in one injectable object."""

    labels: LabelBands = field(default_factory=LabelBands)
    consensus: ConsensusThresholds = field(default_factory=ConsensusThresholds)
    profile: ProfileConfig = field(default_factory=ProfileConfig)
    spread: SpreadThresholds = field(default_factory=SpreadThresholds)


DEFAULT_CONFIG = EngineConfig()
