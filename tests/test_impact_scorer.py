"""Tests for the Impact Scorer - weighted mean over present need categories.

overall = Σ normalized_weight[c] × score[c], weights renormalized over the
categories the policy actually scores.
"""

import pytest

from civic_scoring.config import LabelBand, LabelBands
from civic_scoring.errors import ConfigurationError, RangeError
from civic_scoring.schemas import Dimension, ImpactScore, NeedCategory
from civic_scoring.scorers.archetype_registry import get_archetype, list_archetypes
from civic_scoring.scorers.category_registry import CATEGORY_ORDER, DEFAULT_WEIGHTS
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
from civic_scoring.utils.scoring_audit import AuditEvent, ScoringAuditLog

# ─── Helpers ──────────────────────────────────────────────────────────────────


def _impact(**categories) -> ImpactScore:
    """Build an ImpactScore from category=value keyword arguments."""
    return ImpactScore(categories=categories)


def _profiles():
    """Default weights plus every packaged archetype's weights."""
    return [dict(DEFAULT_WEIGHTS)] + [dict(get_archetype(a).weights) for a in list_archetypes()]


# ─── normalize_weights ────────────────────────────────────────────────────────


class TestNormalizeWeights:
    """Renormalization over present categories."""

    def test_two_present_categories(self):
        normalized = normalize_weights(DEFAULT_WEIGHTS, [NeedCategory.SAFETY, NeedCategory.OPPORTUNITY])
        assert normalized[NeedCategory.SAFETY] == pytest.approx(0.6)
        assert normalized[NeedCategory.OPPORTUNITY] == pytest.approx(0.4)

    def test_sums_to_one_for_every_subset_and_profile(self):
        """Any non-empty subset under any profile renormalizes to 1 ± 1e-9."""
        subsets = [list(CATEGORY_ORDER[:n]) for n in range(1, 6)] + [
            [NeedCategory.COMMUNITY],
            [NeedCategory.SELF_ACTUALIZATION, NeedCategory.PHYSIOLOGICAL],
        ]
        for weights in _profiles():
            for present in subsets:
                assert sum(normalize_weights(weights, present).values()) == pytest.approx(1.0, abs=1e-9)

    def test_empty_present_raises(self):
        with pytest.raises(ConfigurationError):
            normalize_weights(DEFAULT_WEIGHTS, [])

    def test_zero_total_raises(self):
        weights = {c: 0.0 for c in CATEGORY_ORDER}
        weights[NeedCategory.PHYSIOLOGICAL] = 1.0
        with pytest.raises(ConfigurationError):
            normalize_weights(weights, [NeedCategory.SAFETY])


# ─── score ────────────────────────────────────────────────────────────────────


class TestScore:
    """Single-policy scoring and labels."""

    def test_renormalized_scenario(self, partial_impact):
        """safety 8, opportunity 6 under defaults → 0.6×8 + 0.4×6 = 7.2."""
        result = score(partial_impact)
        assert result.overall == pytest.approx(7.2)
        assert result.label == "very beneficial"

    def test_all_categories_default_weights(self, full_impact):
        result = score(full_impact)
        assert result.overall == pytest.approx(6.65)
        assert result.label == "very beneficial"

    def test_archetype_accepted_as_weights(self, full_impact):
        """0.40×9 + 0.35×7 + 0.10×6 + 0.10×5 + 0.05×4 = 7.35."""
        assert score(full_impact, get_archetype("survivalist")).overall == pytest.approx(7.35)

    def test_string_keyed_weights(self, partial_impact):
        weights = {
            "physiological": 0.2,
            "safety": 0.2,
            "community": 0.2,
            "opportunity": 0.2,
            "selfActualization": 0.2,
        }
        assert score(partial_impact, weights).overall == pytest.approx(7.0)

    def test_neutral_round_trip_every_profile(self, neutral_impact):
        """All-5 categories → overall 5 and 'neutral' under every profile."""
        subset = _impact(safety=5, community=5)
        for weights in _profiles():
            for impact in (neutral_impact, subset):
                result = score(impact, weights)
                assert result.overall == pytest.approx(5.0)
                assert result.label == "neutral"

    def test_monotonic_in_each_category(self, full_impact):
        """Raising one category never lowers overall, under any profile."""
        for weights in _profiles():
            for category in CATEGORY_ORDER:
                previous = None
                for value in range(0, 11):
                    categories = {c: s.value for c, s in full_impact.categories.items()}
                    categories[category] = value
                    overall = score(ImpactScore(categories=categories), weights).overall
                    if previous is not None:
                        assert overall >= previous - 1e-12
                    previous = overall

    def test_empty_categories_raises(self):
        with pytest.raises(ConfigurationError):
            score(ImpactScore())

    @pytest.mark.parametrize("bad", [-0.5, 10.5, 11, float("nan")])
    def test_out_of_range_category_raises(self, bad):
        with pytest.raises(RangeError):
            score(_impact(safety=bad))

    def test_out_of_range_dimension_raises(self):
        impact = ImpactScore(categories={"safety": 6}, dimensions={"feasibility": 12})
        with pytest.raises(RangeError):
            score(impact)

    def test_zero_weight_over_present_categories_raises(self, partial_impact):
        weights = {"physiological": 0.5, "safety": 0, "community": 0.5, "opportunity": 0, "self_actualization": 0}
        with pytest.raises(ConfigurationError):
            score(partial_impact, weights)

    def test_incomplete_weight_profile_raises(self, partial_impact):
        with pytest.raises(ConfigurationError):
            score(partial_impact, {"safety": 0.5, "opportunity": 0.5})

    def test_unknown_weight_key_raises(self, partial_impact):
        weights = dict(DEFAULT_WEIGHTS)
        weights["esteem"] = 0.1
        with pytest.raises(ConfigurationError):
            score(partial_impact, weights)

    def test_negative_weight_raises(self, partial_impact):
        weights = dict(DEFAULT_WEIGHTS)
        weights[NeedCategory.COMMUNITY] = -0.1
        with pytest.raises(ConfigurationError):
            score(partial_impact, weights)

    def test_custom_bands(self, partial_impact):
        bands = LabelBands(bands=(LabelBand(5.0, "bad", inclusive=False), LabelBand(10.0, "good")))
        assert score(partial_impact, bands=bands).label == "good"


# ─── Labels ───────────────────────────────────────────────────────────────────


class TestLabelBands:
    """Band edges of the default qualitative labels."""

    @pytest.mark.parametrize(
        "value,label",
        [
            (0.0, "extremely harmful"),
            (2.0, "extremely harmful"),
            (2.01, "very harmful"),
            (3.5, "very harmful"),
            (3.51, "somewhat harmful"),
            (4.99, "somewhat harmful"),
            (5.0, "neutral"),
            (5.0 + 1e-12, "neutral"),
            (5.01, "somewhat beneficial"),
            (6.49, "somewhat beneficial"),
            (6.5, "very beneficial"),
            (7.99, "very beneficial"),
            (8.0, "extremely beneficial"),
            (10.0, "extremely beneficial"),
        ],
    )
    def test_default_edges(self, value, label):
        assert LabelBands().label_for(value) == label

    def test_empty_bands_rejected(self):
        with pytest.raises(ConfigurationError):
            LabelBands(bands=())

    def test_non_increasing_bands_rejected(self):
        with pytest.raises(ConfigurationError):
            LabelBands(bands=(LabelBand(6.0, "a"), LabelBand(4.0, "b"), LabelBand(10.0, "c")))

    def test_bands_must_reach_top_of_scale(self):
        with pytest.raises(ConfigurationError):
            LabelBands(bands=(LabelBand(5.0, "low"), LabelBand(9.0, "high")))


# ─── combined_score / ranking / helpers ──────────────────────────────────────


class TestCombinedScore:
    """50/50 blend of the needs score and the weighted dimension mean."""

    def test_default_dimension_weights(self, full_impact):
        # needs 6.65, dimensions mean (8 + 6 + 4 + 7) / 4 = 6.25
        assert combined_score(full_impact) == pytest.approx(6.45)

    def test_partial_dimension_weights_filled_with_defaults(self, full_impact):
        # feasibility 0.75, others 0.25: (2 + 1.5 + 1 + 5.25) / 1.5 = 6.5
        assert combined_score(full_impact, dimension_weights={"feasibility": 0.75}) == pytest.approx(6.575)

    def test_archetype_dimension_weights(self, full_impact):
        survivalist = get_archetype("survivalist")
        # needs 7.35; dimensions 0.2×8 + 0.4×6 + 0.3×4 + 0.1×7 = 5.9
        result = combined_score(full_impact, survivalist, survivalist.dimension_weights)
        assert result == pytest.approx((7.35 + 5.9) / 2)

    def test_missing_dimension_raises(self):
        impact = ImpactScore(categories={"safety": 7}, dimensions={Dimension.FEASIBILITY: 6})
        with pytest.raises(ConfigurationError):
            combined_score(impact)

    def test_unknown_dimension_weight_raises(self, full_impact):
        with pytest.raises(ConfigurationError):
            combined_score(full_impact, dimension_weights={"urgency": 0.5})


class TestRankingAndHelpers:
    """Catalog ranking, personalized difference and sign helpers."""

    def test_rank_policies_highest_first(self, catalog):
        ranked = rank_policies(catalog)
        assert [policy_id for policy_id, _ in ranked] == ["p2", "p1", "neutral"]
        assert ranked[0][1].overall == pytest.approx(7.2)

    def test_rank_ties_broken_by_id(self, neutral_impact):
        ranked = rank_policies({"b": neutral_impact, "a": neutral_impact})
        assert [policy_id for policy_id, _ in ranked] == ["a", "b"]

    def test_score_difference(self, full_impact):
        assert score_difference(full_impact, get_archetype("survivalist")) == pytest.approx(0.7)

    def test_score_difference_zero_for_default(self, full_impact):
        assert score_difference(full_impact, DEFAULT_WEIGHTS) == pytest.approx(0.0)

    def test_beneficial_and_harmful(self):
        assert is_beneficial(5.1) and not is_harmful(5.1)
        assert is_harmful(4.9) and not is_beneficial(4.9)
        assert not is_beneficial(5.0) and not is_harmful(5.0)


# ─── ImpactScorer ─────────────────────────────────────────────────────────────


class TestImpactScorer:
    """Memoization, breakdown and audit trail."""

    def test_memoized_result_is_same_object(self, full_impact):
        scorer = ImpactScorer()
        assert scorer.score(full_impact) is scorer.score(full_impact)

    def test_different_weights_not_shared(self, full_impact):
        scorer = ImpactScorer()
        default = scorer.score(full_impact)
        survivalist = scorer.score(full_impact, get_archetype("survivalist"))
        assert default is not survivalist
        assert survivalist.overall == pytest.approx(7.35)

    def test_memo_is_bounded(self):
        scorer = ImpactScorer(maxsize=8)
        for _ in range(100):
            scorer.score(ImpactScore(categories={"safety": 6}))
        assert scorer.cache_size == 8

    def test_memo_evicts_least_recently_used(self, full_impact, partial_impact, neutral_impact):
        scorer = ImpactScorer(maxsize=2)
        first = scorer.score(full_impact)
        scorer.score(partial_impact)
        assert scorer.score(full_impact) is first  # refreshes full_impact
        scorer.score(neutral_impact)  # evicts partial_impact

        assert scorer.cache_size == 2
        assert scorer.score(full_impact) is first
        assert scorer.score(partial_impact).overall == pytest.approx(7.2)

    def test_clear_cache(self, full_impact):
        scorer = ImpactScorer()
        first = scorer.score(full_impact)
        scorer.clear_cache()
        assert scorer.cache_size == 0
        assert scorer.score(full_impact) is not first

    def test_invalid_maxsize(self):
        with pytest.raises(ConfigurationError):
            ImpactScorer(maxsize=0)

    def test_injected_default_weights(self, full_impact):
        scorer = ImpactScorer(default_weights=get_archetype("survivalist"))
        assert scorer.score(full_impact).overall == pytest.approx(7.35)
        assert scorer.default_weights[NeedCategory.PHYSIOLOGICAL] == pytest.approx(0.40)

    def test_default_weights_is_a_copy(self):
        scorer = ImpactScorer()
        scorer.default_weights[NeedCategory.SAFETY] = 0.99
        assert scorer.default_weights[NeedCategory.SAFETY] == pytest.approx(0.30)

    def test_evaluate_components(self, partial_impact):
        assessment = ImpactScorer().evaluate(partial_impact, policy_id="p2")
        assert [c.category for c in assessment.components] == [NeedCategory.SAFETY, NeedCategory.OPPORTUNITY]
        assert sum(c.weight for c in assessment.components) == pytest.approx(1.0)
        assert sum(c.contribution for c in assessment.components) == pytest.approx(assessment.overall)
        assert assessment.overall == pytest.approx(7.2)
        assert assessment.dropped_categories == [
            NeedCategory.PHYSIOLOGICAL,
            NeedCategory.COMMUNITY,
            NeedCategory.SELF_ACTUALIZATION,
        ]
        assert assessment.dimension_average == pytest.approx(2.0)

    def test_evaluate_carries_rationale(self, full_impact):
        assessment = ImpactScorer().evaluate(full_impact)
        assert assessment.rationale == "Broad benefit with a slow rollout"
        assert assessment.components[0].name == "Physiological"
        assert assessment.components[0].rationale == "Expands coverage"
        assert assessment.dropped_categories == []

    def test_evaluate_without_dimensions(self, neutral_impact):
        assert ImpactScorer().evaluate(neutral_impact).dimension_average is None

    def test_audit_records_renormalization(self, partial_impact, full_impact):
        audit_log = ScoringAuditLog()
        scorer = ImpactScorer(audit_log=audit_log)
        scorer.evaluate(partial_impact, policy_id="p2")
        scorer.evaluate(full_impact, policy_id="p1")

        entries = audit_log.get_entries(AuditEvent.CATEGORIES_RENORMALIZED)
        assert len(entries) == 1
        assert entries[0].policy_id == "p2"
        assert entries[0].details["dropped"] == ["physiological", "community", "self_actualization"]
        assert entries[0].scorer_name == "ImpactScorer"


# ─── Content loading ─────────────────────────────────────────────────────────


class TestImpactScoreContent:
    """Building ImpactScore from the authored camelCase content shape."""

    def test_from_content(self):
        impact = ImpactScore.from_content(
            {
                "needCategories": {
                    "safety": {"score": 8, "reasoning": "Fewer injuries"},
                    "selfActualization": {"score": 6},
                },
                "dimensions": {
                    "populationAffected": 7,
                    "essentialToSurvival": 6,
                    "timeToOutcome": 5,
                    "feasibility": 4,
                },
                "rationale": "Targeted",
                "methodologyId": "needs-model",
            }
        )
        assert impact.present_categories == [NeedCategory.SAFETY, NeedCategory.SELF_ACTUALIZATION]
        assert impact.categories[NeedCategory.SAFETY].rationale == "Fewer injuries"
        assert impact.dimensions[Dimension.POPULATION_AFFECTED] == 7
        assert impact.methodology_id == "needs-model"
        assert score(impact).overall == pytest.approx((0.30 * 8 + 0.10 * 6) / 0.40)

    def test_unknown_category_is_rejected(self):
        """Structurally malformed content fails model validation (a ValueError)."""
        with pytest.raises(ValueError):
            ImpactScore(categories={"esteem": 7})

    def test_impact_score_is_frozen(self, full_impact):
        with pytest.raises(ValueError):
            full_impact.rationale = "changed"
