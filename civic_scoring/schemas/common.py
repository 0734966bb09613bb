"""Shared enums used across the scoring schemas.

Need categories and dimensions are closed vocabularies: never extended at
runtime. Both accept the camelCase spellings used by the policy content files
(``selfActualization``, ``populationAffected``) as aliases of their
snake_case values.
"""

import re
from enum import Enum

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(value: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", value).replace("-", "_").lower()


class _AliasedEnum(str, Enum):
    """str Enum that also resolves camelCase / kebab-case spellings."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = _snake_case(value)
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class NeedCategory(_AliasedEnum):
    """Maslow-inspired need categories a policy can help or harm."""

    PHYSIOLOGICAL = "physiological"  # Food, water, shelter, healthcare
    SAFETY = "safety"  # Security, stability, protection
    COMMUNITY = "community"  # Belonging, civic participation
    OPPORTUNITY = "opportunity"  # Employment, education, mobility
    SELF_ACTUALIZATION = "self_actualization"  # Arts, culture, personal growth


class Dimension(_AliasedEnum):
    """The four policy-scoring axes (0-10, 5 = neutral)."""

    POPULATION_AFFECTED = "population_affected"
    ESSENTIAL_TO_SURVIVAL = "essential_to_survival"
    TIME_TO_OUTCOME = "time_to_outcome"
    FEASIBILITY = "feasibility"


class ConsensusLevel(str, Enum):
    """Qualitative population agreement on one policy."""

    STRONG = "strong"
    MODERATE = "moderate"
    DIVIDED = "divided"


class ProfileConfidence(str, Enum):
    """How much rating signal backs a preference profile."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ArchetypeSpread(str, Enum):
    """How differently the archetypes score the same policy.

    - SUPER_CONSENSUS: every archetype scores high with little spread
    - HIDDEN_AGREEMENT: high mean despite moderate spread
    - BATTLEGROUND: archetypes disagree sharply
    - UNIVERSAL_REJECT: every archetype scores low
    - MIXED: anything else
    """

    SUPER_CONSENSUS = "super_consensus"
    HIDDEN_AGREEMENT = "hidden_agreement"
    BATTLEGROUND = "battleground"
    UNIVERSAL_REJECT = "universal_reject"
    MIXED = "mixed"


class StanceDirection(str, Enum):
    """Which side a majority (or a single rater) is on."""

    SUPPORT = "support"
    OPPOSE = "oppose"
