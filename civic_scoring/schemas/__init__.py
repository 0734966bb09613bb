"""Pydantic schemas for policy content, ratings and scoring results."""

from civic_scoring.schemas.common import (
    ArchetypeSpread,
    ConsensusLevel,
    Dimension,
    NeedCategory,
    ProfileConfidence,
    StanceDirection,
)
from civic_scoring.schemas.consensus import (
    AlignmentItem,
    AmericanMandate,
    BucketDistribution,
    ConsensusItem,
    ConsensusSnapshot,
    DetailedDistribution,
    GroupBreakdown,
    MandateItem,
    NationalConsensus,
    RatingRecord,
    UserAlignment,
)
from civic_scoring.schemas.impact import (
    CategoryScore,
    ImpactAssessment,
    ImpactResult,
    ImpactScore,
    ScoreComponent,
)
from civic_scoring.schemas.profile import (
    ArchetypeAnalysis,
    ArchetypeMatch,
    DivergenceDriver,
    PreferenceProfile,
    RadarPoint,
)

__all__ = [
    # Enums
    "ArchetypeSpread",
    "ConsensusLevel",
    "Dimension",
    "NeedCategory",
    "ProfileConfidence",
    "StanceDirection",
    # Impact
    "CategoryScore",
    "ImpactScore",
    "ImpactResult",
    "ImpactAssessment",
    "ScoreComponent",
    # Profile / archetypes
    "PreferenceProfile",
    "RadarPoint",
    "ArchetypeMatch",
    "ArchetypeAnalysis",
    "DivergenceDriver",
    # Consensus
    "RatingRecord",
    "BucketDistribution",
    "DetailedDistribution",
    "GroupBreakdown",
    "ConsensusSnapshot",
    "AlignmentItem",
    "UserAlignment",
    "ConsensusItem",
    "MandateItem",
    "AmericanMandate",
    "NationalConsensus",
]
