"""Pydantic models for preference profiles and archetype comparisons."""

from typing import Optional

from pydantic import BaseModel, Field

from civic_scoring.schemas.common import ArchetypeSpread, Dimension, NeedCategory, ProfileConfidence


class PreferenceProfile(BaseModel):
    """A rater's inferred position on each dimension.

    Always recomputed wholesale from the full rating set; never stored as
    authoritative state.
    """

    dimensions: dict[Dimension, float] = Field(description="Per-dimension value in the display range")
    approaches_rated: int = Field(description="Non-neutral ratings that contributed")
    confidence: ProfileConfidence
    display_min: float = 0.0
    display_max: float = 100.0


class RadarPoint(BaseModel):
    """One axis of a radar chart, in registry display order."""

    dimension: Dimension
    label: str
    title: str
    value: float
    low_label: str
    high_label: str


class ArchetypeMatch(BaseModel):
    """Closest archetype to a caller-supplied weight profile."""

    archetype_id: str
    archetype_name: str
    distance: float = Field(description="Euclidean distance between the weight vectors")
    similarity: int = Field(description="0-100, exponential decay of distance")
    top_shared_priorities: list[str] = Field(default_factory=list)
    explanation: str = ""


class DivergenceDriver(BaseModel):
    """A need category whose contribution varies most between archetypes."""

    category: NeedCategory
    variance: float
    spread: float = Field(description="Highest minus lowest contribution across archetypes")
    narrative: str


class ArchetypeAnalysis(BaseModel):
    """How every archetype scores one policy, and how much they agree."""

    scores: dict[str, float] = Field(description="archetype id -> overall 0-10")
    spread: ArchetypeSpread
    mean: float
    std_dev: float
    drivers: list[DivergenceDriver] = Field(default_factory=list)
    narrative: Optional[str] = None
