"""Prompt templates for the rehab estimate and investment analysis calls."""

from models.estimation import Estimation
from models.property_input import FinishLevel


REHAB_ESTIMATE_PROMPT = """
You are an expert real-estate rehab estimator. Provide a detailed, area-by-area rehabilitation cost estimate for the property at "{address}".

The investor's purchase price is ${purchase_price}.

All cost estimates should be tailored to a "{finish_level}" finish level and be as precise as possible, aiming for a tight range of +/- 5%.

Follow this structure in **Markdown**:

### Project Summary
**Total Estimated Cost:** [e.g., $55,000 - $60,000]
**Overall Difficulty:** [1-5]
**Assumptions:**
* [Assumption 1]
* [Assumption 2]
**Key Risks:**
* [Risk 1]
* [Risk 2]
**Actionable Advice:**
* [Advice 1]
* [Advice 2]

### Itemized Breakdown
| Area | Observations | Recommendations | Estimated Cost | Difficulty (1-5) |
| :--- | :--- | :--- | :--- | :--- |
| [Kitchen] | [...] | [...] | [$12,500 - $13,800] | [3] |
| [Next Area] | ... | ... | ... | ... |
""".strip()


INVESTMENT_ANALYSIS_PROMPT = """
You are an expert real estate investment analyst. Provide a complete analysis for the property at "{address}" using the estimated rehab costs below.

Property:
- Purchase Price: ${purchase_price}
- Estimated Rehab Cost: {total_repair_cost}
- Condition Summary: {condition_summary}

Return ONLY a JSON object inside a Markdown code block, matching exactly this schema:

```json
{{
  "suggestedARV": "...",
  "estimatedRepairCost": "{total_repair_cost}",
  "suggestedMAO": "...",
  "investorFit": {{
    "fitsCriteria": true,
    "analysis": "..."
  }},
  "propertyCondition": "...",
  "estimatedRepairLevel": "Light Cosmetic | Medium | Heavy | Gut",
  "comparables": [
    {{ "address": "...", "soldDate": "...", "soldPrice": "...", "sqft": "...", "bedBath": "..." }}
  ],
  "exitStrategies": [
    {{ "strategy": "...", "details": "..." }}
  ]
}}
```
""".strip()


def build_rehab_estimate_prompt(address: str, finish_level: FinishLevel, purchase_price: str) -> str:
    return REHAB_ESTIMATE_PROMPT.format(
        address=address,
        finish_level=FinishLevel(finish_level).value,
        purchase_price=purchase_price,
    )


def build_investment_analysis_prompt(address: str, estimation: Estimation, purchase_price: str) -> str:
    return INVESTMENT_ANALYSIS_PROMPT.format(
        address=address,
        purchase_price=purchase_price,
        total_repair_cost=estimation.summary.total_estimated_cost or "Unknown",
        condition_summary=estimation.condition_summary(),
    )
