"""Investment analysis models for Rehab Analyzer.

Two shapes live here:
- RawInvestmentAnalysis: the loosely-typed JSON object found in the model
  response, before any local recomputation.
- InvestmentAnalysis: the final, display-ready analysis whose numeric fields
  (purchase price, MAO, fits-criteria, verdict) come from the local
  financial metrics calculator.
"""

from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from models.estimation import GroundingSource


def _to_display_str(value: Any) -> Any:
    """Models sometimes emit numbers or nulls for display fields."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


DisplayStr = Annotated[str, BeforeValidator(_to_display_str)]


# =============================================================================
# ENUMS
# =============================================================================


class RepairLevel(str, Enum):
    """Categorical rehab scope, as judged by the model."""

    LIGHT_COSMETIC = "Light Cosmetic"
    MEDIUM = "Medium"
    HEAVY = "Heavy"
    GUT = "Gut"
    UNKNOWN = "Unknown"

    @classmethod
    def coerce(cls, value: Any) -> "RepairLevel":
        """Map free model text onto a level; anything unrecognised is Unknown."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for level in cls:
                if level.value.lower() == wanted:
                    return level
        return cls.UNKNOWN

    @property
    def description(self) -> str:
        return REPAIR_LEVEL_DESCRIPTIONS[self]


REPAIR_LEVEL_DESCRIPTIONS = {
    RepairLevel.LIGHT_COSMETIC: "Minor repairs like paint, fixtures, and deep cleaning.",
    RepairLevel.MEDIUM: "Moderate repairs including flooring, countertops, and some system updates.",
    RepairLevel.HEAVY: "Significant work involving kitchens, baths, and potentially major systems.",
    RepairLevel.GUT: "Complete teardown of the interior to the studs.",
    RepairLevel.UNKNOWN: "The level of repair could not be determined.",
}


class DealVerdict(str, Enum):
    """Deal quality tiers, worst to best."""

    POOR = "Poor Deal"
    MARGINAL = "Marginal Deal"
    GOOD = "Good Deal"
    EXCELLENT = "Excellent Deal"

    @property
    def rank(self) -> int:
        return list(DealVerdict).index(self)


# =============================================================================
# SHARED PIECES
# =============================================================================


class ComparableProperty(BaseModel):
    """A recent comparable sale. Display strings only."""

    address: DisplayStr = ""
    sold_date: DisplayStr = Field(default="", alias="soldDate")
    sold_price: DisplayStr = Field(default="", alias="soldPrice")
    sqft: DisplayStr = ""
    bed_bath: DisplayStr = Field(default="", alias="bedBath")

    class Config:
        populate_by_name = True
        frozen = True


class ExitStrategy(BaseModel):
    """An exit strategy with free-text details."""

    strategy: DisplayStr = ""
    details: DisplayStr = ""

    class Config:
        populate_by_name = True
        frozen = True


class InvestorFit(BaseModel):
    """Whether the deal fits investor criteria, with narrative."""

    fits_criteria: bool = Field(default=False, alias="fitsCriteria")
    analysis: DisplayStr = ""

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("fits_criteria", mode="before")
    @classmethod
    def non_bool_is_false(cls, value: Any) -> bool:
        # Replaced by compute_metrics downstream
        return value if isinstance(value, bool) else False


# =============================================================================
# RAW MODEL OUTPUT
# =============================================================================


class RawInvestmentAnalysis(BaseModel):
    """Investment analysis JSON as produced by the model.

    Every field is optional; numeric fields are untrusted and get replaced
    by the local calculator.
    """

    suggested_arv: DisplayStr = Field(default="", alias="suggestedARV")
    estimated_repair_cost: DisplayStr = Field(default="", alias="estimatedRepairCost")
    suggested_mao: DisplayStr = Field(default="", alias="suggestedMAO")
    investor_fit: InvestorFit = Field(default_factory=InvestorFit, alias="investorFit")
    property_condition: DisplayStr = Field(default="", alias="propertyCondition")
    estimated_repair_level: RepairLevel = Field(
        default=RepairLevel.UNKNOWN,
        alias="estimatedRepairLevel"
    )
    comparables: List[ComparableProperty] = Field(default_factory=list)
    exit_strategies: List[ExitStrategy] = Field(default_factory=list, alias="exitStrategies")
    grounding_sources: List[GroundingSource] = Field(default_factory=list, alias="groundingSources")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("estimated_repair_level", mode="before")
    @classmethod
    def coerce_repair_level(cls, value: Any) -> RepairLevel:
        return RepairLevel.coerce(value)

    @field_validator("investor_fit", mode="before")
    @classmethod
    def default_investor_fit(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, InvestorFit)) else {}

    @field_validator("comparables", "exit_strategies", "grounding_sources", mode="before")
    @classmethod
    def default_list(cls, value: Any) -> Any:
        """Non-list values become empty; entries that are not objects are dropped."""
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, (dict, BaseModel))]


# =============================================================================
# CALCULATOR OUTPUT
# =============================================================================


class FinancialMetrics(BaseModel):
    """Deterministic figures derived from price, ARV and repair cost."""

    purchase_price: str = Field(..., description="Currency-formatted purchase price")
    suggested_mao: str = Field(..., description="Currency-formatted MAO (70% rule)")
    numeric_purchase_price: float
    numeric_arv: float
    numeric_max_rehab: float = Field(..., description="High end of the repair cost range")
    numeric_mao: float
    profit_potential: float
    margin_percentage: float
    fits_criteria: bool
    verdict: DealVerdict
    verdict_text: str

    class Config:
        frozen = True


# =============================================================================
# FINAL ANALYSIS
# =============================================================================


class InvestmentAnalysis(BaseModel):
    """Display-ready investment analysis.

    Never updated in place: a price change produces a new instance.
    """

    purchase_price: str = Field(..., alias="purchasePrice")
    suggested_arv: str = Field(..., alias="suggestedARV")
    estimated_repair_cost: str = Field(..., alias="estimatedRepairCost")
    suggested_mao: str = Field(..., alias="suggestedMAO", description="Always computed locally")
    investor_fit: InvestorFit = Field(..., alias="investorFit")
    property_condition: str = Field(default="", alias="propertyCondition")
    estimated_repair_level: RepairLevel = Field(
        default=RepairLevel.UNKNOWN,
        alias="estimatedRepairLevel"
    )
    comparables: List[ComparableProperty] = Field(default_factory=list)
    exit_strategies: List[ExitStrategy] = Field(default_factory=list, alias="exitStrategies")
    grounding_sources: List[GroundingSource] = Field(default_factory=list, alias="groundingSources")
    verdict: DealVerdict = Field(..., description="Locally computed deal tier")
    profit_margin: float = Field(default=0.0, alias="profitMargin", description="Percent of ARV")

    class Config:
        populate_by_name = True
        frozen = True

    @field_validator("estimated_repair_level", mode="before")
    @classmethod
    def coerce_repair_level(cls, value: Any) -> RepairLevel:
        return RepairLevel.coerce(value)

    def to_response_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the frontend expects."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def repair_level_description(self) -> Optional[str]:
        return self.estimated_repair_level.description
