"""Archetype Registry - named need-weight profiles.

Archetypes ("Survivalist", "Idealist", ...) are alternative weight profiles a
caller can substitute for the default when scoring policies, or use to seed a
user's starting profile. They are loaded once from YAML and never mutated.

Usage:
    from civic_scoring.scorers.archetype_registry import get_archetype, find_closest_archetype

    survivalist = get_archetype("survivalist")
    score(impact, survivalist)                       # re-score under its weights
    find_closest_archetype(questionnaire_weights)    # nearest named profile

A caller that wants its own archetypes builds an ArchetypeRegistry directly
(``ArchetypeRegistry.from_mapping(raw)``) and passes it in instead of relying
on the packaged default.
"""

import logging
import math
import statistics
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml

from civic_scoring.config import DEFAULT_CONFIG, SpreadThresholds
from civic_scoring.constants import ARCHETYPE_MAX_DISTANCE, ARCHETYPE_SIMILARITY_DECAY, WEIGHT_SUM_TOLERANCE
from civic_scoring.errors import ConfigurationError
from civic_scoring.schemas.common import ArchetypeSpread, Dimension, NeedCategory
from civic_scoring.schemas.impact import ImpactScore
from civic_scoring.schemas.profile import ArchetypeAnalysis, ArchetypeMatch, DivergenceDriver
from civic_scoring.scorers.category_registry import (
    CATEGORY_ORDER,
    DEFAULT_WEIGHTS,
    WeightProfile,
    category_name,
    coerce_dimension_weights,
    coerce_weight_profile,
    validate_impact,
)
from civic_scoring.scorers.impact_scorer import normalize_weights, score

logger = logging.getLogger(__name__)

DEFAULT_ARCHETYPE_ID = "balanced"


@dataclass(frozen=True)
class NeedArchetype:
    """Weight profile for a single archetype."""

    id: str
    name: str
    weights: Mapping[NeedCategory, float]
    short_description: str = ""
    description: str = ""
    philosopher: Optional[str] = None
    philosophy_name: Optional[str] = None
    dimension_weights: Optional[Mapping[Dimension, float]] = field(default=None)

    def top_priorities(self, count: int = 2) -> list[NeedCategory]:
        return _top_priorities(self.weights, count)


def _top_priorities(weights: Mapping[NeedCategory, float], count: int) -> list[NeedCategory]:
    # Stable sort keeps hierarchy order among equal weights
    return sorted(CATEGORY_ORDER, key=lambda c: -weights.get(c, 0.0))[:count]


def _validate_weights(archetype_id: str, weights: WeightProfile) -> dict[NeedCategory, float]:
    """Validate that weights cover every category and sum to 1."""
    try:
        coerced = coerce_weight_profile(weights)
    except ConfigurationError as e:
        raise ConfigurationError(f"Archetype {archetype_id}: {e}") from e
    total = sum(coerced.values())
    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        raise ConfigurationError(f"Archetype {archetype_id} weights sum to {total}, expected 1.0")
    return coerced


class ArchetypeRegistry:
    """Frozen collection of archetypes plus the default archetype id."""

    def __init__(self, archetypes: list[NeedArchetype], default_archetype: str = DEFAULT_ARCHETYPE_ID):
        if not archetypes:
            raise ConfigurationError("Archetype registry must contain at least one archetype")
        by_id: dict[str, NeedArchetype] = {}
        for archetype in archetypes:
            if archetype.id in by_id:
                raise ConfigurationError(f"Duplicate archetype id: {archetype.id}")
            by_id[archetype.id] = archetype
        if default_archetype not in by_id:
            raise ConfigurationError(f"Default archetype '{default_archetype}' is not defined")
        self._archetypes = MappingProxyType(by_id)
        self._default_id = default_archetype

    @classmethod
    def from_mapping(cls, raw: Mapping) -> "ArchetypeRegistry":
        """Build from the parsed YAML structure (``archetypes`` + ``default_archetype``)."""
        entries = raw.get("archetypes") or {}
        if not isinstance(entries, Mapping):
            raise ConfigurationError("'archetypes' must be a mapping of id -> definition")

        archetypes: list[NeedArchetype] = []
        for archetype_id, data in entries.items():
            if not isinstance(data, Mapping):
                raise ConfigurationError(f"Archetype {archetype_id} definition must be a mapping")
            weights = _validate_weights(archetype_id, data.get("weights") or {})
            dimension_weights = None
            if data.get("dimension_weights"):
                dimension_weights = MappingProxyType(coerce_dimension_weights(data["dimension_weights"]))
            archetypes.append(
                NeedArchetype(
                    id=archetype_id,
                    name=data.get("name", archetype_id.replace("_", " ").title()),
                    weights=MappingProxyType(weights),
                    short_description=data.get("short_description", ""),
                    description=data.get("description", ""),
                    philosopher=data.get("philosopher"),
                    philosophy_name=data.get("philosophy_name"),
                    dimension_weights=dimension_weights,
                )
            )
        return cls(archetypes, raw.get("default_archetype", DEFAULT_ARCHETYPE_ID))

    @classmethod
    def from_yaml(cls, path: Path) -> "ArchetypeRegistry":
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        registry = cls.from_mapping(raw)
        logger.info(f"Loaded {len(registry)} need archetypes from {path}")
        return registry

    def get(self, archetype_id: str) -> NeedArchetype:
        """Look up an archetype; unknown ids are a ConfigurationError."""
        archetype = self._archetypes.get(archetype_id)
        if archetype is None:
            raise ConfigurationError(f"Unknown archetype '{archetype_id}'; known: {list(self._archetypes)}")
        return archetype

    @property
    def default(self) -> NeedArchetype:
        return self._archetypes[self._default_id]

    def ids(self) -> list[str]:
        return list(self._archetypes)

    def __iter__(self):
        return iter(self._archetypes.values())

    def __len__(self) -> int:
        return len(self._archetypes)

    def __contains__(self, archetype_id: object) -> bool:
        return archetype_id in self._archetypes


# Module-level cache
_registry_cache: Optional[ArchetypeRegistry] = None


def _get_config_path() -> Path:
    return Path(__file__).parent.parent / "data" / "need_archetypes.yaml"


def _build_default_registry() -> ArchetypeRegistry:
    """Fallback: single balanced archetype using the default weights."""
    return ArchetypeRegistry(
        [
            NeedArchetype(
                id=DEFAULT_ARCHETYPE_ID,
                name="Balanced",
                weights=DEFAULT_WEIGHTS,
                short_description="Default balanced weights",
            )
        ]
    )


def load_registry(config_path: Optional[Path] = None) -> ArchetypeRegistry:
    """Load and cache the archetype registry from YAML.

    Passing ``config_path`` bypasses the cache and loads that file.
    """
    global _registry_cache
    if config_path is not None:
        return ArchetypeRegistry.from_yaml(config_path)
    if _registry_cache is not None:
        return _registry_cache

    path = _get_config_path()
    if not path.exists():
        logger.warning(f"Need archetypes config not found at {path}, using defaults")
        _registry_cache = _build_default_registry()
        return _registry_cache

    _registry_cache = ArchetypeRegistry.from_yaml(path)
    return _registry_cache


def get_archetype(archetype_id: str, registry: Optional[ArchetypeRegistry] = None) -> NeedArchetype:
    return (registry or load_registry()).get(archetype_id)


def get_archetype_weights(archetype_id: str, registry: Optional[ArchetypeRegistry] = None) -> dict[NeedCategory, float]:
    """Weights of an archetype as a fresh dict (safe for callers to edit)."""
    return dict(get_archetype(archetype_id, registry).weights)


def default_archetype(registry: Optional[ArchetypeRegistry] = None) -> NeedArchetype:
    return (registry or load_registry()).default


def list_archetypes(registry: Optional[ArchetypeRegistry] = None) -> list[str]:
    """List all available archetype ids."""
    return (registry or load_registry()).ids()


def clear_cache():
    """Clear the registry cache (useful for testing)."""
    global _registry_cache
    _registry_cache = None


# =============================================================================
# Archetype matching
# =============================================================================


def weight_distance(w1: Mapping[NeedCategory, float], w2: Mapping[NeedCategory, float]) -> float:
    """Euclidean distance between two category weight vectors."""
    return math.sqrt(sum((w1.get(c, 0.0) - w2.get(c, 0.0)) ** 2 for c in CATEGORY_ORDER))


def distance_to_similarity(distance: float, max_distance: float = ARCHETYPE_MAX_DISTANCE) -> int:
    """0-100 similarity; exponential decay so small distances stay high."""
    normalized = min(distance / max_distance, 1.0)
    return round(math.exp(-normalized * ARCHETYPE_SIMILARITY_DECAY) * 100)


def _explain_match(
    user_weights: Mapping[NeedCategory, float],
    archetype: NeedArchetype,
    similarity: int,
    shared: list[str],
) -> str:
    focus = archetype.short_description.lower() or archetype.name.lower()
    if len(shared) >= 2:
        return (
            f"Your emphasis on {shared[0]} and {shared[1]} aligns closely with the {archetype.name} "
            f"profile. This perspective values {focus}."
        )
    if len(shared) == 1:
        return (
            f"Your priority on {shared[0]} resonates with the {archetype.name} approach. While your "
            f"profile is unique, you share similar core values around {focus}."
        )
    user_top = " and ".join(category_name(c) for c in _top_priorities(user_weights, 2))
    return (
        f"Based on your overall weighting pattern, the {archetype.name} profile is your closest match "
        f"at {similarity}% similarity. Your emphasis on {user_top} creates a unique but related perspective."
    )


def find_closest_archetype(
    weights: WeightProfile,
    registry: Optional[ArchetypeRegistry] = None,
) -> ArchetypeMatch:
    """Find the archetype nearest to a caller's weight profile.

    Ties go to the archetype listed first in the registry.
    """
    registry = registry or load_registry()
    user_weights = coerce_weight_profile(weights)

    closest: Optional[NeedArchetype] = None
    min_distance = math.inf
    for archetype in registry:
        distance = weight_distance(user_weights, archetype.weights)
        if distance < min_distance:
            closest, min_distance = archetype, distance

    similarity = distance_to_similarity(min_distance)
    archetype_top = set(_top_priorities(closest.weights, 3))
    shared = [category_name(c) for c in _top_priorities(user_weights, 3) if c in archetype_top]

    return ArchetypeMatch(
        archetype_id=closest.id,
        archetype_name=closest.name,
        distance=min_distance,
        similarity=similarity,
        top_shared_priorities=shared,
        explanation=_explain_match(user_weights, closest, similarity, shared),
    )


# =============================================================================
# Cross-archetype analysis
# =============================================================================


def _classify_spread(scores: list[float], mean: float, std_dev: float, thresholds: SpreadThresholds) -> ArchetypeSpread:
    if all(s > thresholds.all_high for s in scores) and std_dev < thresholds.low_stdev:
        return ArchetypeSpread.SUPER_CONSENSUS
    if all(s < thresholds.all_low for s in scores):
        return ArchetypeSpread.UNIVERSAL_REJECT
    if mean > thresholds.hidden_agreement_mean and thresholds.low_stdev <= std_dev < thresholds.high_stdev:
        return ArchetypeSpread.HIDDEN_AGREEMENT
    if std_dev >= thresholds.high_stdev:
        return ArchetypeSpread.BATTLEGROUND
    return ArchetypeSpread.MIXED


def _divergence_drivers(impact: ImpactScore, registry: ArchetypeRegistry, top_n: int) -> list[DivergenceDriver]:
    present = impact.present_categories
    normalized = {a.id: normalize_weights(a.weights, present) for a in registry}
    names = {a.id: a.name for a in registry}

    drivers: list[DivergenceDriver] = []
    for category in present:
        value = impact.categories[category].value
        contributions = {aid: weights[category] * value for aid, weights in normalized.items()}
        values = list(contributions.values())
        high_id = max(contributions, key=contributions.get)
        low_id = min(contributions, key=contributions.get)
        spread = contributions[high_id] - contributions[low_id]

        if spread > 0.5:
            narrative = (
                f"{category_name(category)} creates a {spread:.1f}-point gap between "
                f"{names[high_id]} and {names[low_id]}."
            )
        else:
            narrative = f"{category_name(category)} contributes similarly across perspectives."

        drivers.append(
            DivergenceDriver(
                category=category,
                variance=statistics.pvariance(values),
                spread=spread,
                narrative=narrative,
            )
        )

    drivers.sort(key=lambda d: -d.variance)
    return drivers[:top_n]


def _narrate(spread: ArchetypeSpread, scores: dict[str, float], mean: float, std_dev: float,
             drivers: list[DivergenceDriver], registry: ArchetypeRegistry) -> str:
    lead = drivers[0].narrative if drivers else ""
    if spread == ArchetypeSpread.SUPER_CONSENSUS:
        text = f"Strong agreement across all perspectives (avg: {mean:.1f}, spread: {std_dev:.1f}). {lead}"
    elif spread == ArchetypeSpread.HIDDEN_AGREEMENT:
        text = f"Surprising alignment despite different priorities (avg: {mean:.1f}, spread: {std_dev:.1f}). {lead}"
    elif spread == ArchetypeSpread.BATTLEGROUND:
        high_id = max(scores, key=scores.get)
        low_id = min(scores, key=scores.get)
        text = (
            f"Sharp disagreement: {registry.get(high_id).name} scores {scores[high_id]:.1f} while "
            f"{registry.get(low_id).name} scores {scores[low_id]:.1f}. {lead}"
        )
    elif spread == ArchetypeSpread.UNIVERSAL_REJECT:
        text = f"Low scores across all perspectives (avg: {mean:.1f}). {lead}"
    else:
        text = (
            f"Moderate variation in scores (avg: {mean:.1f}, spread: {std_dev:.1f}). "
            "Different values lead to different conclusions."
        )
    return text.strip()


def analyze_across_archetypes(
    impact: ImpactScore,
    registry: Optional[ArchetypeRegistry] = None,
    thresholds: Optional[SpreadThresholds] = None,
    top_drivers: int = 3,
) -> ArchetypeAnalysis:
    """Score one policy under every archetype and classify their agreement."""
    registry = registry or load_registry()
    thresholds = thresholds or DEFAULT_CONFIG.spread
    validate_impact(impact)

    scores = {archetype.id: score(impact, archetype).overall for archetype in registry}
    values = list(scores.values())
    mean = statistics.fmean(values)
    std_dev = statistics.pstdev(values)
    spread = _classify_spread(values, mean, std_dev, thresholds)
    drivers = _divergence_drivers(impact, registry, top_drivers)

    return ArchetypeAnalysis(
        scores=scores,
        spread=spread,
        mean=mean,
        std_dev=std_dev,
        drivers=drivers,
        narrative=_narrate(spread, scores, mean, std_dev, drivers, registry),
    )
