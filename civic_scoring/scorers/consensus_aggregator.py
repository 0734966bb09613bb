"""
Consensus Aggregator - turns a population's ratings on one policy into a snapshot.

Buckets: support (rating > 0), neutral (rating == 0), oppose (rating < 0).

Percentages are whole numbers that always sum to exactly 100:
each bucket is rounded half-up, then whatever drift rounding introduced is
added to the bucket with the largest raw share (ties resolved support,
neutral, oppose). The same correction applies to the five-point
distribution.

The consensus level is read off the larger of the two *rounded* sides, so
what a reader sees is what was classified:

    strong    majority >= 70
    moderate  majority >= 55
    divided   otherwise (including no participants)
"""

import logging
import math
from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional, Union

from civic_scoring.config import DEFAULT_CONFIG, ConsensusThresholds
from civic_scoring.constants import (
    BIPARTISAN_THRESHOLD,
    CONSENSUS_ITEM_THRESHOLD,
    TOP_CONSENSUS_LIMIT,
    TOP_CONSENSUS_THRESHOLD,
)
from civic_scoring.schemas.common import ConsensusLevel, StanceDirection
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
from civic_scoring.scorers.category_registry import check_rating

logger = logging.getLogger(__name__)

RatingRow = Union[int, RatingRecord, Mapping[str, Any]]

# Five-point order, strongest support first
_DETAILED_ORDER = (2, 1, 0, -1, -2)


def whole_percentages(counts: list[int]) -> list[int]:
    """Convert bucket counts to whole percentages summing to 100.

    All zeros when there are no counts at all.
    """
    total = sum(counts)
    if total == 0:
        return [0] * len(counts)

    raw = [count * 100 / total for count in counts]
    rounded = [math.floor(share + 0.5) for share in raw]
    drift = 100 - sum(rounded)
    if drift:
        # max() keeps the first of equal shares, so tie order follows ``counts``
        largest = max(range(len(raw)), key=lambda i: raw[i])
        rounded[largest] += drift
    return rounded


def _stance_counts(ratings: Iterable[int]) -> list[int]:
    support = neutral = oppose = 0
    for rating in ratings:
        if rating > 0:
            support += 1
        elif rating < 0:
            oppose += 1
        else:
            neutral += 1
    return [support, neutral, oppose]


def _normalize_rows(rows: Iterable[RatingRow]) -> list[RatingRecord]:
    records = []
    for row in rows:
        if isinstance(row, Mapping):
            row = RatingRecord.model_validate(row)
        if isinstance(row, RatingRecord):
            check_rating(row.rating)
            records.append(row)
        else:
            records.append(RatingRecord(rating=check_rating(row)))
    return records


class ConsensusAggregator:
    """Aggregates ratings into ConsensusSnapshots under fixed thresholds."""

    def __init__(self, thresholds: Optional[ConsensusThresholds] = None):
        self.thresholds = thresholds or DEFAULT_CONFIG.consensus

    def level_for(self, support_percent: int, oppose_percent: int) -> ConsensusLevel:
        majority = max(support_percent, oppose_percent)
        if majority >= self.thresholds.strong:
            return ConsensusLevel.STRONG
        if majority >= self.thresholds.moderate:
            return ConsensusLevel.MODERATE
        return ConsensusLevel.DIVIDED

    def aggregate(self, rows: Iterable[RatingRow]) -> ConsensusSnapshot:
        """Build a snapshot from ints, RatingRecords or {"rating", "group"} dicts.

        Raises:
            RangeError: a rating outside {-2..2}
        """
        records = _normalize_rows(rows)
        ratings = [r.rating for r in records]

        support, neutral, oppose = whole_percentages(_stance_counts(ratings))
        detailed = whole_percentages([ratings.count(value) for value in _DETAILED_ORDER])

        return ConsensusSnapshot(
            support_percent=support,
            oppose_percent=oppose,
            distribution=BucketDistribution(support=support, neutral=neutral, oppose=oppose),
            detailed_distribution=DetailedDistribution(
                strongly_support=detailed[0],
                support=detailed[1],
                neutral=detailed[2],
                oppose=detailed[3],
                strongly_oppose=detailed[4],
            ),
            total_participants=len(records),
            by_group=self._by_group(records),
            consensus_level=self.level_for(support, oppose),
        )

    def _by_group(self, records: list[RatingRecord]) -> Optional[dict[str, GroupBreakdown]]:
        grouped: dict[str, list[int]] = defaultdict(list)
        for record in records:
            if record.group is not None:
                grouped[record.group].append(record.rating)
        if not grouped:
            return None

        breakdown = {}
        for group, ratings in grouped.items():
            support, neutral, oppose = whole_percentages(_stance_counts(ratings))
            breakdown[group] = GroupBreakdown(
                support=support, oppose=oppose, neutral=neutral, total_participants=len(ratings)
            )
        return breakdown


_default_aggregator = ConsensusAggregator()


def aggregate(rows: Iterable[RatingRow], thresholds: Optional[ConsensusThresholds] = None) -> ConsensusSnapshot:
    aggregator = _default_aggregator if thresholds is None else ConsensusAggregator(thresholds)
    return aggregator.aggregate(rows)


def is_consensus_item(snapshot: ConsensusSnapshot, threshold: int = CONSENSUS_ITEM_THRESHOLD) -> bool:
    return snapshot.support_percent >= threshold


def is_bipartisan(snapshot: ConsensusSnapshot, threshold: int = BIPARTISAN_THRESHOLD) -> bool:
    """Every group supports the policy above ``threshold`` percent.

    False when the snapshot has no group breakdown.
    """
    if not snapshot.by_group:
        return False
    return all(group.support > threshold for group in snapshot.by_group.values())


def user_alignment(
    user_ratings: Mapping[str, int],
    snapshots: Mapping[str, ConsensusSnapshot],
) -> Optional[UserAlignment]:
    """Compare one rater's stances against each policy's majority.

    Neutral ratings and evenly split policies count as neither agreement nor
    difference. Returns None when nothing is comparable.

    Raises:
        RangeError: a rating outside {-2..2}
    """
    aligned: list[AlignmentItem] = []
    differs: list[AlignmentItem] = []

    for policy_id, rating in user_ratings.items():
        check_rating(rating, f"rating for {policy_id}")
        snapshot = snapshots.get(policy_id)
        if snapshot is None or rating == 0:
            continue
        if snapshot.support_percent == snapshot.oppose_percent:
            continue

        majority_supports = snapshot.support_percent > snapshot.oppose_percent
        item = AlignmentItem(
            policy_id=policy_id,
            user_rating=rating,
            consensus_percent=snapshot.support_percent if majority_supports else snapshot.oppose_percent,
            consensus_direction=StanceDirection.SUPPORT if majority_supports else StanceDirection.OPPOSE,
        )
        if (rating > 0) == majority_supports:
            aligned.append(item)
        else:
            differs.append(item)

    compared = len(aligned) + len(differs)
    if compared == 0:
        logger.debug("No rated policy has a comparable majority; skipping alignment")
        return None

    alignment_percent = math.floor(len(aligned) / compared * 100 + 0.5)
    return UserAlignment(
        alignment_percent=alignment_percent,
        aligned_with=aligned,
        differs_from=differs,
        summary=f"You agree with the majority on {alignment_percent}% of the policies you rated.",
    )


def _by_support(items: list) -> list:
    # Stable, so equal support keeps the snapshots' order
    return sorted(items, key=lambda item: -item.support_percent)


def american_mandate(
    snapshots: Mapping[str, ConsensusSnapshot],
    consensus_threshold: int = CONSENSUS_ITEM_THRESHOLD,
    bipartisan_threshold: int = BIPARTISAN_THRESHOLD,
) -> AmericanMandate:
    """Consensus and bipartisan policies among those with a group breakdown.

    ``average_bipartisan_agreement`` averages each bipartisan item's mean
    group support; 0 when no item is bipartisan.
    """
    consensus_items: list[MandateItem] = []
    bipartisan_items: list[MandateItem] = []

    for policy_id, snapshot in snapshots.items():
        if not snapshot.by_group:
            continue
        item = MandateItem(
            policy_id=policy_id,
            support_percent=snapshot.support_percent,
            participant_count=snapshot.total_participants,
            group_support={group: breakdown.support for group, breakdown in snapshot.by_group.items()},
            is_consensus=is_consensus_item(snapshot, consensus_threshold),
        )
        if item.is_consensus:
            consensus_items.append(item)
        if is_bipartisan(snapshot, bipartisan_threshold):
            bipartisan_items.append(item)

    average_agreement = 0
    if bipartisan_items:
        group_means = [sum(i.group_support.values()) / len(i.group_support) for i in bipartisan_items]
        average_agreement = math.floor(sum(group_means) / len(group_means) + 0.5)

    return AmericanMandate(
        consensus_threshold=consensus_threshold,
        consensus_items=_by_support(consensus_items),
        bipartisan_items=_by_support(bipartisan_items),
        total_issues_explored=len(snapshots),
        issues_with_consensus=len(consensus_items),
        average_bipartisan_agreement=average_agreement,
    )


def national_consensus(
    snapshots: Mapping[str, ConsensusSnapshot],
    top_threshold: int = TOP_CONSENSUS_THRESHOLD,
    limit: int = TOP_CONSENSUS_LIMIT,
) -> NationalConsensus:
    """Headline totals plus the best-supported policies (at most ``limit``)."""
    if not snapshots:
        return NationalConsensus()

    top_items = [
        ConsensusItem(
            policy_id=policy_id,
            support_percent=snapshot.support_percent,
            participant_count=snapshot.total_participants,
        )
        for policy_id, snapshot in snapshots.items()
        if snapshot.support_percent >= top_threshold
    ]
    support_total = sum(s.support_percent for s in snapshots.values())

    return NationalConsensus(
        total_ratings=sum(s.total_participants for s in snapshots.values()),
        max_participants=max(s.total_participants for s in snapshots.values()),
        average_consensus_percent=math.floor(support_total / len(snapshots) + 0.5),
        top_consensus_items=_by_support(top_items)[:limit],
    )
