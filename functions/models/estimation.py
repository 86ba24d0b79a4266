"""Rehab estimate models for Rehab Analyzer.

Structured form of the markdown estimate returned by the model: a project
summary plus an ordered, itemized list of repairs.
"""

from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator


DIFFICULTY_DESCRIPTIONS: Dict[int, str] = {
    1: "Very Easy",
    2: "Easy",
    3: "Medium",
    4: "Hard",
    5: "Very Hard",
}


def describe_difficulty(difficulty: Optional[int]) -> str:
    """Human label for a 1-5 difficulty, 'Unknown' when not parseable."""
    return DIFFICULTY_DESCRIPTIONS.get(difficulty, "Unknown")


class GroundingSource(BaseModel):
    """External reference the model attributed its claims to."""

    uri: str = ""
    title: str = ""

    @field_validator("uri", "title", mode="before")
    @classmethod
    def text_or_empty(cls, value):
        return "" if value is None else str(value)


class RepairItem(BaseModel):
    """One row of the itemized breakdown table."""

    area: str = Field(default="", description="Area of the property, e.g. Kitchen")
    observations: str = Field(default="")
    recommendations: str = Field(default="")
    estimated_cost: str = Field(
        default="",
        alias="estimatedCost",
        description="Cost range string as written by the model"
    )
    difficulty: Optional[int] = Field(
        default=None,
        description="1-5, None when the model gave no usable number"
    )

    class Config:
        populate_by_name = True

    @property
    def difficulty_label(self) -> str:
        return describe_difficulty(self.difficulty)


class EstimationSummary(BaseModel):
    """Project summary section of a rehab estimate."""

    total_estimated_cost: Optional[str] = Field(
        default=None,
        alias="totalEstimatedCost",
        description="Verbatim range, e.g. '$55,000 - $60,000'"
    )
    overall_difficulty: Optional[int] = Field(
        default=None,
        alias="overallDifficulty",
        description="1-5, None means unknown"
    )
    assumptions: List[str] = Field(default_factory=list)
    key_risks: List[str] = Field(default_factory=list, alias="keyRisks")
    actionable_advice: List[str] = Field(default_factory=list, alias="actionableAdvice")
    grounding_sources: List[GroundingSource] = Field(
        default_factory=list,
        alias="groundingSources"
    )

    class Config:
        populate_by_name = True

    @property
    def difficulty_label(self) -> str:
        return describe_difficulty(self.overall_difficulty)


class Estimation(BaseModel):
    """A parsed rehab estimate.

    Repairs keep the order of the source table. Only the summary's grounding
    sources may change after parsing.
    """

    summary: EstimationSummary = Field(default_factory=EstimationSummary)
    repairs: List[RepairItem] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    def attach_grounding_sources(self, sources: Iterable[GroundingSource]) -> None:
        self.summary.grounding_sources = list(sources)

    def condition_summary(self) -> str:
        """One-line-per-area recap used to give the model repair context."""
        if not self.repairs:
            return "No detailed area observations provided."
        return ". ".join(f"{r.area}: {r.observations}" for r in self.repairs)
