"""Pydantic models for population ratings and consensus snapshots."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from civic_scoring.schemas.common import ConsensusLevel, StanceDirection


class RatingRecord(BaseModel):
    """One rater's stance on one policy, optionally tagged with a sub-group."""

    model_config = ConfigDict(frozen=True)

    rating: int = Field(description="-2 strongly oppose .. +2 strongly support")
    group: Optional[str] = Field(default=None, description="Sub-group id, e.g. a party or cohort")


class BucketDistribution(BaseModel):
    """Whole-number percentages that always sum to 100 (or all 0 for no data)."""

    support: int = 0
    neutral: int = 0
    oppose: int = 0


class DetailedDistribution(BaseModel):
    """Five-point breakdown, also summing to 100 (or all 0 for no data)."""

    strongly_support: int = 0
    support: int = 0
    neutral: int = 0
    oppose: int = 0
    strongly_oppose: int = 0


class GroupBreakdown(BaseModel):
    """Support and opposition within one sub-group."""

    support: int
    oppose: int
    neutral: int
    total_participants: int


class ConsensusSnapshot(BaseModel):
    """Aggregate population opinion on one policy.

    ``by_group`` is None (not an empty dict) when no rating carried a group.
    """

    support_percent: int
    oppose_percent: int
    distribution: BucketDistribution
    detailed_distribution: DetailedDistribution
    total_participants: int
    by_group: Optional[dict[str, GroupBreakdown]] = None
    consensus_level: ConsensusLevel


class AlignmentItem(BaseModel):
    """A rated policy compared against the population majority."""

    policy_id: str
    user_rating: int
    consensus_percent: int = Field(description="Size of the majority side")
    consensus_direction: StanceDirection


class UserAlignment(BaseModel):
    """How often a rater sides with the majority."""

    alignment_percent: int
    aligned_with: list[AlignmentItem] = Field(default_factory=list)
    differs_from: list[AlignmentItem] = Field(default_factory=list)
    summary: str = ""


class ConsensusItem(BaseModel):
    """A policy listed in a rollup, with its headline support."""

    policy_id: str
    support_percent: int
    participant_count: int


class MandateItem(ConsensusItem):
    """A grouped policy with each group's support."""

    group_support: dict[str, int] = Field(default_factory=dict)
    is_consensus: bool = False


class AmericanMandate(BaseModel):
    """Policies with broad and cross-group support, strongest first."""

    consensus_threshold: int
    consensus_items: list[MandateItem] = Field(default_factory=list)
    bipartisan_items: list[MandateItem] = Field(default_factory=list)
    total_issues_explored: int = 0
    issues_with_consensus: int = 0
    average_bipartisan_agreement: int = Field(
        default=0, description="Mean group support across bipartisan items, 0 when there are none"
    )


class NationalConsensus(BaseModel):
    """Headline figures across every policy's snapshot."""

    total_ratings: int = 0
    max_participants: int = Field(default=0, description="Largest participant count on any one policy")
    average_consensus_percent: int = 0
    top_consensus_items: list[ConsensusItem] = Field(default_factory=list)
