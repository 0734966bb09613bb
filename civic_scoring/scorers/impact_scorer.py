"""
Impact Scorer - reduces a policy's needs-based assessment to one 0-10 score.

    overall = Σ normalized_weight[c] × category_score[c]   for c in present categories

Weights for categories the policy does not score are dropped and the rest are
renormalized to sum to 1, so a policy without (say) a self-actualization
rationale is not penalized as if it scored 0 there.

Also provides the combined needs + dimensions score (50/50), ranking of a
catalog, and the personalized-vs-default difference.

All functions are deterministic and side-effect free. ImpactScorer adds
memoization by (policy identity, weight profile) and an optional audit trail.
"""

import logging
from collections import OrderedDict
from typing import Any, Mapping, Optional, Union

from civic_scoring.config import DEFAULT_CONFIG, LabelBands
from civic_scoring.constants import (
    COMBINED_DIMENSION_SHARE,
    COMBINED_NEED_SHARE,
    IMPACT_CACHE_MAXSIZE,
    NEUTRAL_SCORE,
)
from civic_scoring.errors import ConfigurationError
from civic_scoring.schemas.common import Dimension, NeedCategory
from civic_scoring.schemas.impact import ImpactAssessment, ImpactResult, ImpactScore, ScoreComponent
from civic_scoring.scorers.category_registry import (
    CATEGORY_ORDER,
    DEFAULT_WEIGHTS,
    DIMENSION_ORDER,
    WeightProfile,
    category_name,
    coerce_dimension_weights,
    coerce_weight_profile,
    validate_impact,
)
from civic_scoring.utils.logger import format_fields
from civic_scoring.utils.scoring_audit import AuditEvent, ScoringAuditLog

logger = logging.getLogger(__name__)

DEFAULT_LABEL_BANDS = DEFAULT_CONFIG.labels

# A weight profile, or anything carrying one (e.g. a NeedArchetype)
WeightsLike = Union[WeightProfile, Any]


def _weights_of(weights: Optional[WeightsLike]) -> dict[NeedCategory, float]:
    if weights is None:
        return dict(DEFAULT_WEIGHTS)
    profile = getattr(weights, "weights", weights)
    return coerce_weight_profile(profile)


def normalize_weights(
    weights: Mapping[NeedCategory, float],
    present: list[NeedCategory],
) -> dict[NeedCategory, float]:
    """Restrict weights to present categories and rescale them to sum to 1.

    Raises:
        ConfigurationError: no present categories, or their weights total 0
    """
    if not present:
        raise ConfigurationError("Cannot normalize weights over an empty set of categories")
    total = sum(weights[c] for c in present)
    if total <= 0:
        raise ConfigurationError(
            f"Weights for present categories {[c.value for c in present]} sum to {total}; cannot renormalize"
        )
    return {c: weights[c] / total for c in present}


def _weighted_need_mean(impact: ImpactScore, weights: Mapping[NeedCategory, float]) -> float:
    normalized = normalize_weights(weights, impact.present_categories)
    return sum(normalized[c] * impact.categories[c].value for c in normalized)


def score(
    impact: ImpactScore,
    weights: Optional[WeightsLike] = None,
    bands: Optional[LabelBands] = None,
) -> ImpactResult:
    """Score a policy under a weight profile (default weights if None).

    Raises:
        ConfigurationError: the policy has no need categories, or the profile
            gives its categories zero total weight
        RangeError: a category or dimension score outside [0, 10]
    """
    validate_impact(impact)
    overall = _weighted_need_mean(impact, _weights_of(weights))
    return ImpactResult(overall=overall, label=(bands or DEFAULT_LABEL_BANDS).label_for(overall))


def combined_score(
    impact: ImpactScore,
    weights: Optional[WeightsLike] = None,
    dimension_weights: Optional[Mapping[Union[Dimension, str], float]] = None,
) -> float:
    """Needs-based overall blended 50/50 with the weighted dimension mean.

    Dimension weights default to 0.25 each; partial mappings are filled from
    the defaults and the result is renormalized.
    """
    validate_impact(impact, require_dimensions=True)
    need_score = _weighted_need_mean(impact, _weights_of(weights))

    dim_weights = coerce_dimension_weights(dimension_weights or {})
    dim_total = sum(dim_weights.values())
    if dim_total <= 0:
        raise ConfigurationError("Dimension weights sum to 0")
    dimension_score = sum(impact.dimensions[d] * dim_weights[d] for d in DIMENSION_ORDER) / dim_total

    return need_score * COMBINED_NEED_SHARE + dimension_score * COMBINED_DIMENSION_SHARE


def score_difference(impact: ImpactScore, weights: WeightsLike) -> float:
    """Personalized overall minus the default-weights overall.

    Positive means the profile rates the policy above the default.
    """
    return score(impact, weights).overall - score(impact).overall


def rank_policies(
    catalog: Mapping[str, ImpactScore],
    weights: Optional[WeightsLike] = None,
    bands: Optional[LabelBands] = None,
) -> list[tuple[str, ImpactResult]]:
    """Score every policy and sort highest first (ties by policy id)."""
    scored = [(policy_id, score(impact, weights, bands)) for policy_id, impact in catalog.items()]
    scored.sort(key=lambda item: (-item[1].overall, item[0]))
    return scored


def is_beneficial(value: float) -> bool:
    return value > NEUTRAL_SCORE


def is_harmful(value: float) -> bool:
    return value < NEUTRAL_SCORE


class ImpactScorer:
    """Scores policies against weight profiles with a full breakdown.

    The default profile and label bands are injected at construction and
    treated as frozen for the scorer's lifetime. The memo holds at most
    ``maxsize`` results and drops the least recently used first.
    """

    def __init__(
        self,
        default_weights: Optional[WeightsLike] = None,
        bands: Optional[LabelBands] = None,
        audit_log: Optional[ScoringAuditLog] = None,
        maxsize: int = IMPACT_CACHE_MAXSIZE,
    ):
        if maxsize < 1:
            raise ConfigurationError(f"maxsize must be at least 1, got {maxsize}")
        self._default_weights = _weights_of(default_weights)
        self._bands = bands or DEFAULT_LABEL_BANDS
        self._audit_log = audit_log
        # (id(impact), weights key) -> (impact, result); the impact is kept to pin its id
        self._cache: OrderedDict[tuple, tuple[ImpactScore, ImpactResult]] = OrderedDict()
        self._maxsize = maxsize

    @property
    def default_weights(self) -> dict[NeedCategory, float]:
        return dict(self._default_weights)

    def _resolve(self, weights: Optional[WeightsLike]) -> dict[NeedCategory, float]:
        return self._default_weights if weights is None else _weights_of(weights)

    def score(self, impact: ImpactScore, weights: Optional[WeightsLike] = None) -> ImpactResult:
        """Memoized ``score``; identical inputs return the same result object."""
        resolved = self._resolve(weights)
        key = (id(impact), tuple((c.value, resolved[c]) for c in CATEGORY_ORDER))
        cached = self._cache.get(key)
        if cached is not None and cached[0] is impact:
            self._cache.move_to_end(key)
            return cached[1]

        result = score(impact, resolved, self._bands)
        self._cache[key] = (impact, result)
        self._cache.move_to_end(key)
        if len(self._cache) > self._maxsize:
            self._cache.popitem(last=False)
        return result

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    def evaluate(
        self,
        impact: ImpactScore,
        weights: Optional[WeightsLike] = None,
        policy_id: str = "",
    ) -> ImpactAssessment:
        """Score a policy and explain how each category contributed."""
        validate_impact(impact)
        resolved = self._resolve(weights)
        present = impact.present_categories
        normalized = normalize_weights(resolved, present)

        components: list[ScoreComponent] = []
        for category in present:
            value = impact.categories[category].value
            components.append(
                ScoreComponent(
                    category=category,
                    name=category_name(category),
                    value=value,
                    weight=normalized[category],
                    contribution=normalized[category] * value,
                    rationale=impact.categories[category].rationale,
                )
            )

        overall = sum(c.contribution for c in components)
        dropped = [c for c in CATEGORY_ORDER if c not in impact.categories]
        if dropped and self._audit_log is not None:
            self._audit_log.record(
                policy_id,
                AuditEvent.CATEGORIES_RENORMALIZED,
                scorer=type(self).__name__,
                dropped=[c.value for c in dropped],
                normalized_weights={c.value: round(w, 6) for c, w in normalized.items()},
            )

        dimension_average = None
        if impact.dimensions:
            dimension_average = sum(impact.dimensions.values()) / len(impact.dimensions)

        label = self._bands.label_for(overall)
        logger.debug(format_fields("Scored policy", policy_id=policy_id, overall=f"{overall:.3f}", label=label))

        return ImpactAssessment(
            overall=overall,
            label=label,
            components=components,
            dropped_categories=dropped,
            dimension_average=dimension_average,
            rationale=impact.rationale,
        )
