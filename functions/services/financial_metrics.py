"""Financial metrics calculator.

Computes MAO, profit potential, margin and the deal verdict from the
purchase price, the model's ARV and the repair cost range. This module is
the single source of truth for every numerically derived field of an
InvestmentAnalysis: whatever MAO or fit judgement the model proposed is
overwritten here. All functions are pure.

Rules:
- MAO (70% rule) = ARV x 0.70 - high end of the repair cost range
- fits criteria  = price > 0 and MAO > 0 and price <= MAO
- margin         = (ARV - price - max rehab) / ARV x 100, 0 when ARV is 0
"""

from typing import Optional

import structlog

from models.estimation import Estimation
from models.investment_analysis import (
    DealVerdict,
    FinancialMetrics,
    InvestmentAnalysis,
    InvestorFit,
    RawInvestmentAnalysis,
)
from services.currency import (
    format_currency,
    parse_max_of_range,
    parse_plain_float,
    parse_single_amount,
)

logger = structlog.get_logger(__name__)

MAO_ARV_RATIO = 0.70
EXCELLENT_PROFIT_RATIO = 0.15
GOOD_PROFIT_RATIO = 0.10
MARGINAL_MAO_TOLERANCE = 1.10

VERDICT_TEMPLATES = {
    DealVerdict.EXCELLENT: (
        "Excellent Deal: the purchase price is {gap} {direction} the MAO, "
        "with a projected profit margin of {margin}."
    ),
    DealVerdict.GOOD: (
        "Good Deal: the purchase price is {gap} {direction} the MAO, "
        "with a projected profit margin of {margin}."
    ),
    DealVerdict.MARGINAL: (
        "Marginal Deal: the purchase price is {gap} {direction} the MAO, "
        "for a thin projected profit margin of {margin}."
    ),
    DealVerdict.POOR: (
        "Poor Deal: the purchase price is {gap} {direction} the MAO, "
        "leaving a projected profit margin of {margin}."
    ),
}


def classify_deal(
    purchase_price: float,
    mao: float,
    arv: float,
    profit_potential: float,
    fits_criteria: bool
) -> DealVerdict:
    """Pick the verdict tier; the first matching rule wins."""
    if fits_criteria and profit_potential > EXCELLENT_PROFIT_RATIO * arv:
        return DealVerdict.EXCELLENT
    if fits_criteria and profit_potential > GOOD_PROFIT_RATIO * arv:
        return DealVerdict.GOOD
    if purchase_price <= mao * MARGINAL_MAO_TOLERANCE:
        return DealVerdict.MARGINAL
    return DealVerdict.POOR


def verdict_message(
    verdict: DealVerdict,
    purchase_price: float,
    mao: float,
    margin_percentage: float
) -> str:
    """Fixed-format sentence naming the price/MAO gap and the margin."""
    return VERDICT_TEMPLATES[verdict].format(
        gap=format_currency(abs(mao - purchase_price)),
        direction="below" if purchase_price <= mao else "above",
        margin=f"{margin_percentage:.1f}%",
    )


def compute_metrics(
    purchase_price_text: Optional[str],
    raw_arv: Optional[str],
    repair_cost_range_text: Optional[str]
) -> FinancialMetrics:
    """Compute the deterministic investment figures.

    Args:
        purchase_price_text: Bare numeric purchase price from the form.
        raw_arv: ARV as written by the model, e.g. "$275,000".
        repair_cost_range_text: Repair cost range, e.g. "$45,000 - $50,000".

    Returns:
        FinancialMetrics. Never raises: unparsable inputs count as 0.

    Example:
        >>> m = compute_metrics("185000", "$275,000", "$45,000 - $50,000")
        >>> m.suggested_mao, m.verdict.value
        ('$142,500', 'Poor Deal')
    """
    numeric_purchase_price = parse_plain_float(purchase_price_text)
    numeric_arv = parse_single_amount(raw_arv)
    numeric_max_rehab = parse_max_of_range(repair_cost_range_text)

    numeric_mao = numeric_arv * MAO_ARV_RATIO - numeric_max_rehab

    fits_criteria = (
        numeric_purchase_price > 0
        and numeric_mao > 0
        and numeric_purchase_price <= numeric_mao
    )

    profit_potential = numeric_arv - numeric_purchase_price - numeric_max_rehab
    margin_percentage = (profit_potential / numeric_arv * 100) if numeric_arv else 0.0

    verdict = classify_deal(
        purchase_price=numeric_purchase_price,
        mao=numeric_mao,
        arv=numeric_arv,
        profit_potential=profit_potential,
        fits_criteria=fits_criteria,
    )

    return FinancialMetrics(
        purchase_price=format_currency(numeric_purchase_price),
        suggested_mao=format_currency(numeric_mao),
        numeric_purchase_price=numeric_purchase_price,
        numeric_arv=numeric_arv,
        numeric_max_rehab=numeric_max_rehab,
        numeric_mao=numeric_mao,
        profit_potential=profit_potential,
        margin_percentage=margin_percentage,
        fits_criteria=fits_criteria,
        verdict=verdict,
        verdict_text=verdict_message(verdict, numeric_purchase_price, numeric_mao, margin_percentage),
    )


def resolve_repair_cost(raw: RawInvestmentAnalysis, estimation: Optional[Estimation]) -> str:
    """Repair cost range to analyse: the estimate's total, else the model's echo."""
    if estimation is not None and estimation.summary.total_estimated_cost:
        return estimation.summary.total_estimated_cost
    return raw.estimated_repair_cost


def build_investment_analysis(
    raw: RawInvestmentAnalysis,
    purchase_price_text: str,
    estimation: Optional[Estimation] = None
) -> InvestmentAnalysis:
    """Combine the model's narrative with locally computed figures.

    The verdict sentence is prepended to the model's analysis text; MAO,
    purchase price and fits-criteria come only from compute_metrics.
    """
    repair_cost = resolve_repair_cost(raw, estimation)
    metrics = compute_metrics(purchase_price_text, raw.suggested_arv, repair_cost)

    if raw.suggested_mao and raw.suggested_mao != metrics.suggested_mao:
        logger.info(
            "model_mao_overridden",
            model_mao=raw.suggested_mao,
            computed_mao=metrics.suggested_mao,
        )

    model_analysis = raw.investor_fit.analysis.strip()
    analysis_text = f"{metrics.verdict_text} {model_analysis}".strip()

    analysis = InvestmentAnalysis(
        purchase_price=metrics.purchase_price,
        suggested_arv=raw.suggested_arv,
        estimated_repair_cost=repair_cost,
        suggested_mao=metrics.suggested_mao,
        investor_fit=InvestorFit(
            fits_criteria=metrics.fits_criteria,
            analysis=analysis_text,
        ),
        property_condition=raw.property_condition,
        estimated_repair_level=raw.estimated_repair_level,
        comparables=raw.comparables,
        exit_strategies=raw.exit_strategies,
        grounding_sources=raw.grounding_sources,
        verdict=metrics.verdict,
        profit_margin=round(metrics.margin_percentage, 1),
    )

    logger.info(
        "investment_analysis_built",
        verdict=metrics.verdict.value,
        fits_criteria=metrics.fits_criteria,
        suggested_mao=metrics.suggested_mao,
        margin_percentage=round(metrics.margin_percentage, 2),
    )
    return analysis
