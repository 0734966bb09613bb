"""Deterministic scoring modules for needs-based policy evaluation."""

from civic_scoring.scorers.archetype_registry import (
    ArchetypeRegistry,
    NeedArchetype,
    analyze_across_archetypes,
    clear_cache,
    default_archetype,
    find_closest_archetype,
    get_archetype,
    get_archetype_weights,
    list_archetypes,
    load_registry,
)
from civic_scoring.scorers.category_registry import (
    CATEGORY_DEFINITIONS,
    CATEGORY_ORDER,
    DEFAULT_DIMENSION_WEIGHTS,
    DEFAULT_WEIGHTS,
    DIMENSION_DEFINITIONS,
    DIMENSION_ORDER,
)
from civic_scoring.scorers.consensus_aggregator import (
    ConsensusAggregator,
    aggregate,
    american_mandate,
    is_bipartisan,
    is_consensus_item,
    national_consensus,
    user_alignment,
)
from civic_scoring.scorers.impact_scorer import (
    ImpactScorer,
    combined_score,
    is_beneficial,
    is_harmful,
    normalize_weights,
    rank_policies,
    score,
    score_difference,
)
from civic_scoring.scorers.preference_profile import (
    PreferenceProfileEngine,
    infer,
    policy_vector,
    profile_similarity,
    radar_points,
)

__all__ = [
    # Registry
    "CATEGORY_DEFINITIONS",
    "CATEGORY_ORDER",
    "DEFAULT_DIMENSION_WEIGHTS",
    "DEFAULT_WEIGHTS",
    "DIMENSION_DEFINITIONS",
    "DIMENSION_ORDER",
    # Impact
    "ImpactScorer",
    "combined_score",
    "is_beneficial",
    "is_harmful",
    "normalize_weights",
    "rank_policies",
    "score",
    "score_difference",
    # Archetypes
    "ArchetypeRegistry",
    "NeedArchetype",
    "analyze_across_archetypes",
    "clear_cache",
    "default_archetype",
    "find_closest_archetype",
    "get_archetype",
    "get_archetype_weights",
    "list_archetypes",
    "load_registry",
    # Preference profile
    "PreferenceProfileEngine",
    "infer",
    "policy_vector",
    "profile_similarity",
    "radar_points",
    # Consensus
    "ConsensusAggregator",
    "aggregate",
    "american_mandate",
    "is_bipartisan",
    "is_consensus_item",
    "national_consensus",
    "user_alignment",
]
