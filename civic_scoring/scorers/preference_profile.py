"""
Preference Profile Engine - infers a dense per-dimension profile from sparse ratings.

For each dimension d, over every policy p that is both rated (non-zero) and
present in the catalog:

    centered[d] = Σ w(rating_p) × (score_p[d] − 5) / Σ |w(rating_p)|
    profile[d]  = rescale(5 + centered[d])          # 0-10 → display range

- Magnitude of opinion, not count of ratings, controls influence: a +2 pulls
  twice as hard as a +1.
- Opposition pulls the profile away from the policy's values (mirrored
  around the neutral midpoint), because disagreement is informative.
- A 0 rating is "no signal": it adds nothing and is left out of the
  denominator.
- A lone +2 reproduces the policy's vector; a lone −2 mirrors it.

No signal at all returns None rather than a fake all-neutral profile; the
display layer decides what to show instead.

The rating weights w(r), display range and confidence cut-offs come from
ProfileConfig.
"""

import logging
import math
from typing import Iterable, Mapping, Optional, Union

from civic_scoring.config import DEFAULT_CONFIG, ProfileConfig
from civic_scoring.constants import NEUTRAL_SCORE
from civic_scoring.schemas.common import Dimension, ProfileConfidence
from civic_scoring.schemas.impact import ImpactScore
from civic_scoring.schemas.profile import PreferenceProfile, RadarPoint
from civic_scoring.scorers.category_registry import (
    DIMENSION_DEFINITIONS,
    DIMENSION_ORDER,
    check_rating,
    validate_impact,
)
from civic_scoring.utils.logger import format_fields
from civic_scoring.utils.scoring_audit import AuditEvent, ScoringAuditLog

logger = logging.getLogger(__name__)

RatingsInput = Union[Mapping[str, int], Iterable[tuple[str, int]]]


class PreferenceProfileEngine:
    """Pure recomputation of a rater's preference profile.

    Holds only its configuration (and an optional caller-owned audit log);
    every call recomputes from the full rating set.
    """

    def __init__(self, config: Optional[ProfileConfig] = None, audit_log: Optional[ScoringAuditLog] = None):
        self.config = config or DEFAULT_CONFIG.profile
        self._audit_log = audit_log

    def _audit(self, policy_id: str, event: AuditEvent, **details):
        if self._audit_log is not None:
            self._audit_log.record(policy_id, event, scorer=type(self).__name__, **details)

    def collapse_ratings(self, ratings: RatingsInput) -> dict[str, int]:
        """Validate ratings and resolve duplicate ids to their last value.

        Raises:
            RangeError: any rating that is not an integer in {-2..2}
        """
        pairs = ratings.items() if isinstance(ratings, Mapping) else ratings
        collapsed: dict[str, int] = {}
        for policy_id, rating in pairs:
            check_rating(rating, f"rating for {policy_id}")
            if policy_id in collapsed:
                self._audit(policy_id, AuditEvent.DUPLICATE_RATING, previous=collapsed[policy_id], kept=rating)
                # Re-insert so iteration order follows the last occurrence
                del collapsed[policy_id]
            collapsed[policy_id] = rating
        return collapsed

    def infer(self, ratings: RatingsInput, catalog: Mapping[str, ImpactScore]) -> Optional[PreferenceProfile]:
        """Infer a preference profile, or None when no rating carries signal.

        Raises:
            RangeError: a rating outside {-2..2} or a dimension score outside [0, 10]
            ConfigurationError: a contributing policy has only some dimension scores
        """
        effective = self.collapse_ratings(ratings)

        contributors: list[tuple[float, ImpactScore]] = []
        for policy_id, rating in effective.items():
            impact = catalog.get(policy_id)
            if impact is None:
                logger.debug(format_fields("Ignoring rating for policy without impact data", policy_id=policy_id))
                self._audit(policy_id, AuditEvent.RATING_IGNORED, rating=rating, reason="not_in_catalog")
                continue
            if rating == 0:
                self._audit(policy_id, AuditEvent.NEUTRAL_EXCLUDED)
                continue
            if not impact.dimensions:
                # Approach not yet given a dimension vector
                logger.debug(format_fields("Ignoring rating for policy without dimensions", policy_id=policy_id))
                self._audit(policy_id, AuditEvent.RATING_IGNORED, rating=rating, reason="no_dimensions")
                continue
            validate_impact(impact, require_categories=False, require_dimensions=True)
            contributors.append((self.config.rating_weights[rating], impact))

        if not contributors:
            return None

        denominator = sum(abs(weight) for weight, _ in contributors)
        dimensions: dict[Dimension, float] = {}
        for dimension in DIMENSION_ORDER:
            centered = sum(weight * (impact.dimensions[dimension] - NEUTRAL_SCORE) for weight, impact in contributors)
            dimensions[dimension] = self.config.rescale(NEUTRAL_SCORE + centered / denominator)

        return PreferenceProfile(
            dimensions=dimensions,
            approaches_rated=len(contributors),
            confidence=self._confidence(len(contributors)),
            display_min=self.config.display_min,
            display_max=self.config.display_max,
        )

    def _confidence(self, count: int) -> ProfileConfidence:
        if count >= self.config.high_confidence_at:
            return ProfileConfidence.HIGH
        if count >= self.config.medium_confidence_at:
            return ProfileConfidence.MEDIUM
        return ProfileConfidence.LOW

    def policy_vector(self, impact: ImpactScore) -> dict[Dimension, float]:
        """A policy's dimension scores in the profile's display range."""
        validate_impact(impact, require_categories=False, require_dimensions=True)
        return {d: self.config.rescale(impact.dimensions[d]) for d in DIMENSION_ORDER}

    def similarity(self, profile: PreferenceProfile, impact: ImpactScore) -> int:
        """Cosine similarity (0-100) between a profile and a policy's vector."""
        policy = self.policy_vector(impact)
        dot = sum(profile.dimensions[d] * policy[d] for d in DIMENSION_ORDER)
        profile_norm = math.sqrt(sum(profile.dimensions[d] ** 2 for d in DIMENSION_ORDER))
        policy_norm = math.sqrt(sum(policy[d] ** 2 for d in DIMENSION_ORDER))
        if profile_norm == 0 or policy_norm == 0:
            return 0
        return round(dot / (profile_norm * policy_norm) * 100)


def radar_points(profile: Union[PreferenceProfile, Mapping[Dimension, float]]) -> list[RadarPoint]:
    """Join a profile (or a bare policy vector) against display order."""
    dimensions = profile.dimensions if isinstance(profile, PreferenceProfile) else profile
    points = []
    for dimension in DIMENSION_ORDER:
        definition = DIMENSION_DEFINITIONS[dimension]
        points.append(
            RadarPoint(
                dimension=dimension,
                label=definition.short_label,
                title=definition.name,
                value=dimensions[dimension],
                low_label=definition.anchor_low,
                high_label=definition.anchor_high,
            )
        )
    return points


_default_engine = PreferenceProfileEngine()


def infer(
    ratings: RatingsInput,
    catalog: Mapping[str, ImpactScore],
    config: Optional[ProfileConfig] = None,
) -> Optional[PreferenceProfile]:
    """Module-level convenience for ``PreferenceProfileEngine(config).infer``."""
    engine = _default_engine if config is None else PreferenceProfileEngine(config)
    return engine.infer(ratings, catalog)


def profile_similarity(profile: PreferenceProfile, impact: ImpactScore, config: Optional[ProfileConfig] = None) -> int:
    engine = _default_engine if config is None else PreferenceProfileEngine(config)
    return engine.similarity(profile, impact)


def policy_vector(impact: ImpactScore, config: Optional[ProfileConfig] = None) -> dict[Dimension, float]:
    engine = _default_engine if config is None else PreferenceProfileEngine(config)
    return engine.policy_vector(impact)
