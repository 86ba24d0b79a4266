"""Unit tests for the financial metrics calculator."""

import pytest

from models.investment_analysis import DealVerdict, InvestmentAnalysis, RepairLevel
from services.financial_metrics import (
    build_investment_analysis,
    classify_deal,
    compute_metrics,
    resolve_repair_cost,
    verdict_message,
)
from services.investment_extractor import extract_investment_json
from services.markdown_parser import parse_estimation_markdown
from tests.fixtures.mock_llm_responses import INVESTMENT_RESPONSE

ARV = "$275,000"
REPAIRS = "$45,000 - $50,000"


class TestComputeMetrics:
    """Tests for compute_metrics."""

    def test_reference_deal_is_poor(self):
        """185k against a 142.5k MAO is more than 10% over, so Poor."""
        metrics = compute_metrics("185000", ARV, REPAIRS)

        assert metrics.numeric_max_rehab == 50000
        assert metrics.numeric_mao == pytest.approx(142500)
        assert metrics.suggested_mao == "$142,500"
        assert metrics.purchase_price == "$185,000"
        assert metrics.fits_criteria is False
        assert metrics.profit_potential == pytest.approx(40000)
        assert metrics.margin_percentage == pytest.approx(14.545, abs=1e-3)
        assert metrics.verdict == DealVerdict.POOR
        assert metrics.verdict_text == (
            "Poor Deal: the purchase price is $42,500 above the MAO, "
            "leaving a projected profit margin of 14.5%."
        )

    def test_price_within_tolerance_is_marginal(self):
        metrics = compute_metrics("150000", ARV, REPAIRS)

        assert metrics.fits_criteria is False
        assert metrics.verdict == DealVerdict.MARGINAL
        assert "$7,500 above" in metrics.verdict_text
        assert "27.3%" in metrics.verdict_text

    def test_price_at_tolerance_boundary_is_marginal(self):
        metrics = compute_metrics("156750", ARV, REPAIRS)

        assert metrics.verdict == DealVerdict.MARGINAL

    def test_price_under_mao_is_excellent(self):
        metrics = compute_metrics("100000", ARV, REPAIRS)

        assert metrics.fits_criteria is True
        assert metrics.verdict == DealVerdict.EXCELLENT
        assert metrics.verdict_text.startswith("Excellent Deal: the purchase price is $42,500 below the MAO")
        assert metrics.verdict_text.endswith("45.5%.")

    def test_price_equal_to_mao_fits(self):
        metrics = compute_metrics("142500", "$300,000", "$67,500")

        assert metrics.numeric_mao == pytest.approx(142500)
        assert metrics.fits_criteria is True
        assert "$0 below" in metrics.verdict_text

    def test_zero_arv_gives_zero_margin(self):
        metrics = compute_metrics("185000", "N/A", REPAIRS)

        assert metrics.numeric_arv == 0
        assert metrics.margin_percentage == 0
        assert metrics.fits_criteria is False
        assert metrics.verdict == DealVerdict.POOR
        assert metrics.suggested_mao == "-$50,000"
        assert "0.0%" in metrics.verdict_text

    def test_unparsable_repair_cost_is_zero(self):
        metrics = compute_metrics("185000", ARV, "TBD")

        assert metrics.numeric_max_rehab == 0
        assert metrics.suggested_mao == "$192,500"
        assert metrics.fits_criteria is True

    def test_zero_price_never_fits(self):
        metrics = compute_metrics("", ARV, REPAIRS)

        assert metrics.numeric_purchase_price == 0
        assert metrics.fits_criteria is False

    def test_negative_mao_never_fits(self):
        metrics = compute_metrics("1000", "$100,000", "$90,000")

        assert metrics.numeric_mao < 0
        assert metrics.fits_criteria is False
        assert metrics.verdict == DealVerdict.POOR

    def test_idempotent(self):
        first = compute_metrics("185000", ARV, REPAIRS)
        second = compute_metrics("185000", ARV, REPAIRS)

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_verdict_never_worsens_as_price_drops(self):
        ranks = [
            compute_metrics(str(price), ARV, REPAIRS).verdict.rank
            for price in range(300000, 0, -2500)
        ]

        assert ranks == sorted(ranks)
        assert ranks[0] == DealVerdict.POOR.rank
        assert ranks[-1] == DealVerdict.EXCELLENT.rank


class TestClassifyDeal:
    """Tier rules are applied top to bottom."""

    def test_good_tier(self):
        verdict = classify_deal(
            purchase_price=100, mao=100, arv=1000, profit_potential=120, fits_criteria=True
        )
        assert verdict == DealVerdict.GOOD

    def test_fit_with_thin_profit_falls_through(self):
        verdict = classify_deal(
            purchase_price=100, mao=100, arv=1000, profit_potential=50, fits_criteria=True
        )
        assert verdict == DealVerdict.MARGINAL

    def test_profit_alone_is_not_enough(self):
        verdict = classify_deal(
            purchase_price=200, mao=100, arv=1000, profit_potential=500, fits_criteria=False
        )
        assert verdict == DealVerdict.POOR


class TestVerdictMessage:
    """Tests for verdict_message."""

    def test_marginal_wording(self):
        message = verdict_message(DealVerdict.MARGINAL, 150000, 142500, 27.27)

        assert message == (
            "Marginal Deal: the purchase price is $7,500 above the MAO, "
            "for a thin projected profit margin of 27.3%."
        )

    def test_good_wording(self):
        message = verdict_message(DealVerdict.GOOD, 90000, 100000, 12.04)

        assert message == (
            "Good Deal: the purchase price is $10,000 below the MAO, "
            "with a projected profit margin of 12.0%."
        )


class TestBuildInvestmentAnalysis:
    """Tests for merging the model JSON with computed metrics."""

    @pytest.fixture
    def raw(self):
        return extract_investment_json(INVESTMENT_RESPONSE)

    def test_model_figures_overridden(self, raw, sample_estimation):
        analysis = build_investment_analysis(raw, "185000", sample_estimation)

        assert isinstance(analysis, InvestmentAnalysis)
        assert analysis.suggested_mao == "$142,500"
        assert analysis.purchase_price == "$185,000"
        assert analysis.investor_fit.fits_criteria is False
        assert analysis.verdict == DealVerdict.POOR
        assert analysis.profit_margin == 14.5

    def test_model_narrative_kept(self, raw, sample_estimation):
        analysis = build_investment_analysis(raw, "185000", sample_estimation)

        assert analysis.suggested_arv == "$275,000"
        assert analysis.estimated_repair_level == RepairLevel.MEDIUM
        assert analysis.property_condition == raw.property_condition
        assert analysis.comparables == raw.comparables
        assert analysis.exit_strategies == raw.exit_strategies

    def test_verdict_prefixes_model_analysis(self, raw, sample_estimation):
        analysis = build_investment_analysis(raw, "185000", sample_estimation)

        assert analysis.investor_fit.analysis.startswith("Poor Deal: ")
        assert analysis.investor_fit.analysis.endswith(
            "Strong rental demand in the neighborhood supports the ARV."
        )

    def test_estimate_total_preferred_over_model_echo(self, raw):
        estimation = parse_estimation_markdown("**Total Estimated Cost:** $80,000 - $90,000\n")

        analysis = build_investment_analysis(raw, "185000", estimation)

        assert analysis.estimated_repair_cost == "$80,000 - $90,000"
        assert analysis.suggested_mao == "$102,500"

    def test_model_echo_used_without_estimate(self, raw):
        assert resolve_repair_cost(raw, None) == "$45,000 - $50,000"

        analysis = build_investment_analysis(raw, "185000")

        assert analysis.suggested_mao == "$142,500"

    def test_price_change_produces_new_instance(self, raw, sample_estimation):
        first = build_investment_analysis(raw, "185000", sample_estimation)
        second = build_investment_analysis(raw, "100000", sample_estimation)

        assert first is not second
        assert first.verdict == DealVerdict.POOR
        assert second.verdict == DealVerdict.EXCELLENT

    def test_response_dict_uses_camel_case(self, sample_investment_analysis):
        data = sample_investment_analysis.to_response_dict()

        assert data["suggestedMAO"] == "$142,500"
        assert data["investorFit"]["fitsCriteria"] is False
        assert data["estimatedRepairLevel"] == "Medium"
        assert data["verdict"] == "Poor Deal"
        assert data["comparables"][0]["soldPrice"] == "$279,000"
