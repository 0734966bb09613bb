"""Shared fixtures for civic_scoring tests."""

import sys
from pathlib import Path

import pytest

# Add the repo root to path so tests import the working tree
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def fresh_archetype_cache():
    """Every test starts and ends with an empty archetype registry cache."""
    from civic_scoring.scorers.archetype_registry import clear_cache

    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def full_impact():
    """A policy scored on every need category and dimension.

    Default-weight overall: 0.25*9 + 0.30*7 + 0.15*6 + 0.20*5 + 0.10*4 = 6.65
    """
    from civic_scoring.schemas import ImpactScore

    return ImpactScore(
        categories={
            "physiological": {"value": 9, "rationale": "Expands coverage"},
            "safety": {"value": 7, "rationale": "Reduces medical debt"},
            "community": 6,
            "opportunity": 5,
            "self_actualization": 4,
        },
        dimensions={
            "population_affected": 8,
            "essential_to_survival": 6,
            "time_to_outcome": 4,
            "feasibility": 7,
        },
        rationale="Broad benefit with a slow rollout",
    )


@pytest.fixture
def partial_impact():
    """Scores only safety (8) and opportunity (6)."""
    from civic_scoring.schemas import ImpactScore

    return ImpactScore(
        categories={"safety": 8, "opportunity": 6},
        dimensions={
            "population_affected": 2,
            "essential_to_survival": 2,
            "time_to_outcome": 2,
            "feasibility": 2,
        },
    )


@pytest.fixture
def neutral_impact():
    from civic_scoring.schemas import ImpactScore

    return ImpactScore(categories={c: 5 for c in ("physiological", "safety", "community", "opportunity", "self_actualization")})


@pytest.fixture
def catalog(full_impact, partial_impact, neutral_impact):
    return {"p1": full_impact, "p2": partial_impact, "neutral": neutral_impact}
