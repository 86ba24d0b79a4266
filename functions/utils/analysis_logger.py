"""Analysis Result Logger for Rehab Analyzer.

Provides highly visible, formatted logging of parsed estimates and deal
verdicts with distinctive visual markers that stand out in log streams.
"""

import structlog

from models.estimation import Estimation
from models.investment_analysis import DealVerdict, InvestmentAnalysis

logger = structlog.get_logger()

# Visual markers for different log types
BANNER_WIDTH = 80
ESTIMATE_BANNER_CHAR = "═"
VERDICT_BANNER_CHAR = "─"

VERDICT_ICONS = {
    DealVerdict.EXCELLENT: "✓✓",
    DealVerdict.GOOD: "✓",
    DealVerdict.MARGINAL: "~",
    DealVerdict.POOR: "✗",
}


def _create_banner(char: str, text: str, width: int = BANNER_WIDTH) -> str:
    """Create a centered banner with given character."""
    text_with_spaces = f" {text} "
    padding = (width - len(text_with_spaces)) // 2
    return char * padding + text_with_spaces + char * (width - padding - len(text_with_spaces))


def log_estimate_summary(address: str, estimation: Estimation) -> None:
    """Log a parsed rehab estimate with a banner and per-area lines."""
    summary = estimation.summary

    print("\n")
    print(_create_banner(ESTIMATE_BANNER_CHAR, "REHAB ESTIMATE"))
    print(f"║ Address      : {address}")
    print(f"║ Total Cost   : {summary.total_estimated_cost or 'N/A'}")
    print(f"║ Difficulty   : {summary.difficulty_label}")
    print(f"║ Repair Items : {len(estimation.repairs)}")
    for item in estimation.repairs:
        print(f"║   • {item.area:<20} {item.estimated_cost}")
    print(ESTIMATE_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "estimate_summary_logged",
        address=address,
        total_estimated_cost=summary.total_estimated_cost,
        repair_count=len(estimation.repairs),
    )


def log_deal_verdict(address: str, analysis: InvestmentAnalysis) -> None:
    """Log the locally computed deal verdict."""
    icon = VERDICT_ICONS.get(analysis.verdict, "")

    print("\n")
    print(_create_banner(VERDICT_BANNER_CHAR, f"{icon} {analysis.verdict.value.upper()}"))
    print(f"│ Address        : {address}")
    print(f"│ Purchase Price : {analysis.purchase_price}")
    print(f"│ Suggested ARV  : {analysis.suggested_arv}")
    print(f"│ Repair Cost    : {analysis.estimated_repair_cost}")
    print(f"│ Suggested MAO  : {analysis.suggested_mao}")
    print(f"│ Profit Margin  : {analysis.profit_margin:.1f}%")
    print(f"│ Fits Criteria  : {'YES' if analysis.investor_fit.fits_criteria else 'NO'}")
    print(VERDICT_BANNER_CHAR * BANNER_WIDTH)
    print("\n")

    logger.info(
        "deal_verdict_logged",
        address=address,
        verdict=analysis.verdict.value,
        fits_criteria=analysis.investor_fit.fits_criteria,
    )
