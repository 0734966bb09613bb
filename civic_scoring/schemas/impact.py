"""Pydantic models for policy impact content and Impact Scorer results.

An ImpactScore is static content authored once per policy: per-need-category
scores with reasoning, the four dimension scores, and an overall rationale.
It is read-only input to the scorers; range checks happen at the scorer
boundary (see ``civic_scoring.scorers.category_registry.validate_impact``)
so that out-of-range content surfaces as RangeError rather than a pydantic
ValidationError.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from civic_scoring.schemas.common import Dimension, NeedCategory


class CategoryScore(BaseModel):
    """Score for a single need category (0-10, 5 = neutral)."""

    model_config = ConfigDict(frozen=True)

    value: float = Field(description="0 = maximally harmful, 5 = no effect, 10 = maximally beneficial")
    rationale: str = Field(default="", description="Why the policy affects this need the way it does")


class ImpactScore(BaseModel):
    """Needs-based impact assessment for one policy.

    ``categories`` may cover any subset of the need categories; a category the
    policy does not touch is simply absent.
    """

    model_config = ConfigDict(frozen=True)

    categories: dict[NeedCategory, CategoryScore] = Field(default_factory=dict)
    dimensions: dict[Dimension, float] = Field(default_factory=dict)
    rationale: str = ""
    methodology_id: Optional[str] = None

    @field_validator("categories", mode="before")
    @classmethod
    def _coerce_category_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            coerced = {}
            for key, score in value.items():
                if isinstance(score, (int, float)) and not isinstance(score, bool):
                    score = {"value": score}
                coerced[NeedCategory(key)] = score
            return coerced
        return value

    @field_validator("dimensions", mode="before")
    @classmethod
    def _coerce_dimension_keys(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {Dimension(key): score for key, score in value.items()}
        return value

    @classmethod
    def from_content(cls, content: dict) -> "ImpactScore":
        """Build from the authored content shape.

        Accepts ``needCategories: {name: {score, reasoning}}`` with camelCase
        dimension keys, as the policy content files are written.
        """
        categories = {
            name: {"value": entry["score"], "rationale": entry.get("reasoning", "")}
            for name, entry in (content.get("needCategories") or {}).items()
            if entry is not None
        }
        return cls(
            categories=categories,
            dimensions=content.get("dimensions") or {},
            rationale=content.get("rationale") or "",
            methodology_id=content.get("methodologyId"),
        )

    @property
    def present_categories(self) -> list[NeedCategory]:
        """Categories this policy scores, in hierarchy order."""
        return [c for c in NeedCategory if c in self.categories]


class ImpactResult(BaseModel):
    """Single comparable score for a policy under one weight profile."""

    overall: float = Field(description="Weighted mean of present category scores (0-10)")
    label: str = Field(description="Qualitative band for the overall score")


class ScoreComponent(BaseModel):
    """One need category's share of an overall score.

    Display layers render these as rows: raw value, the renormalized weight
    it received, and what it contributed.
    """

    category: NeedCategory
    name: str = Field(description="Display name, e.g. 'Self-Actualization'")
    value: float = Field(description="Raw 0-10 category score")
    weight: float = Field(description="Weight after renormalizing over present categories")
    contribution: float = Field(description="weight * value")
    rationale: str = ""


class ImpactAssessment(ImpactResult):
    """Full Impact Scorer output: the result plus its breakdown."""

    components: list[ScoreComponent] = Field(default_factory=list)
    dropped_categories: list[NeedCategory] = Field(
        default_factory=list,
        description="Categories absent from the policy whose weights were dropped",
    )
    dimension_average: Optional[float] = Field(
        default=None,
        description="Unweighted mean of the dimension scores, None if the policy has none",
    )
    rationale: str = ""
