"""Caller-side state for one property analysis.

PropertyAnalysisSession owns the current Estimation and InvestmentAnalysis
and drives the two model calls. Investment analyses can be re-requested
whenever the purchase price changes; each request is tagged with a
monotonically increasing sequence number and only the latest one may
commit its result or error. Older completions are discarded.
"""

import itertools
from typing import Optional

import structlog

from config.errors import RehabAnalyzerError, ValidationError
from models.estimation import Estimation
from models.investment_analysis import InvestmentAnalysis
from models.property_input import InvestmentAnalysisRequest, RehabEstimateRequest
from services.financial_metrics import build_investment_analysis
from services.investment_extractor import extract_investment_json
from services.llm_service import LLMService
from services.markdown_parser import parse_estimation_markdown
from utils.analysis_logger import log_deal_verdict, log_estimate_summary

logger = structlog.get_logger(__name__)

ESTIMATE_FAILED_MESSAGE = "Failed to generate the rehab estimate."
ANALYSIS_FAILED_MESSAGE = "Failed to generate investment analysis."


class PropertyAnalysisSession:
    """Holds the estimate and analysis for the property being worked on."""

    def __init__(self, llm_service: Optional[LLMService] = None):
        self.llm_service = llm_service or LLMService()

        self.address: str = ""
        self.purchase_price: str = ""
        self.estimation: Optional[Estimation] = None
        self.investment_analysis: Optional[InvestmentAnalysis] = None
        self.error: Optional[str] = None

        self._sequence = itertools.count(1)
        self._latest_request = 0

    # ------------------------------------------------------------------
    # Request sequencing
    # ------------------------------------------------------------------

    def _next_request(self) -> int:
        self._latest_request = next(self._sequence)
        return self._latest_request

    def is_current(self, request_id: int) -> bool:
        return request_id == self._latest_request

    @property
    def latest_request(self) -> int:
        return self._latest_request

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Start over. In-flight requests from before the reset are dropped."""
        self._next_request()
        self.address = ""
        self.purchase_price = ""
        self.estimation = None
        self.investment_analysis = None
        self.error = None
        logger.info("session_reset")

    async def generate_estimate(self, request: RehabEstimateRequest) -> Optional[Estimation]:
        """Run the rehab estimate for a new property.

        Returns:
            The parsed Estimation, or None when a newer request superseded
            this one before it completed.

        Raises:
            ValidationError: If the request is incomplete.
            RehabAnalyzerError: If the model call fails.
        """
        try:
            request.validate_for_submission()
        except ValidationError as e:
            self.error = e.message
            raise

        self.reset()
        request_id = self.latest_request
        self.purchase_price = request.purchase_price

        try:
            markdown, sources = await self.llm_service.generate_rehab_estimate(
                address=request.address,
                photos=request.photos,
                finish_level=request.finish_level,
                purchase_price=request.purchase_price,
            )
        except RehabAnalyzerError as e:
            if not self.is_current(request_id):
                logger.info("stale_estimate_error_discarded", request_id=request_id, error=e.message)
                return None
            self.error = f"{ESTIMATE_FAILED_MESSAGE} {e.message}"
            logger.warning("rehab_estimate_failed", request_id=request_id, code=e.code)
            raise

        estimation = parse_estimation_markdown(markdown)
        estimation.attach_grounding_sources(sources)

        if not self.is_current(request_id):
            logger.info("stale_estimate_discarded", request_id=request_id, latest=self.latest_request)
            return None

        self.address = request.address
        self.estimation = estimation
        log_estimate_summary(request.address, estimation)
        return estimation

    async def analyze_investment(self, purchase_price: Optional[str] = None) -> Optional[InvestmentAnalysis]:
        """Request an investment analysis for the current estimate.

        Args:
            purchase_price: New purchase price; defaults to the one already
                on the session.

        Returns:
            The new InvestmentAnalysis, or None when this request was
            superseded by a newer one before it completed.

        Raises:
            ValidationError: If there is no estimate or the price is unusable.
            ResponseFormatError: If the model response holds no usable JSON.
                The previous analysis and the estimate are left untouched.
        """
        if self.estimation is None:
            raise ValidationError(message="Generate a rehab estimate first.", field="estimation")

        price = self.purchase_price if purchase_price is None else purchase_price
        analysis_request = InvestmentAnalysisRequest(
            address=self.address,
            estimation=self.estimation,
            purchase_price=price,
        )
        analysis_request.validate_for_submission()

        request_id = self._next_request()
        estimation = self.estimation
        logger.info("investment_analysis_started", request_id=request_id, purchase_price=analysis_request.purchase_price)

        try:
            text = await self.llm_service.generate_investment_analysis(
                address=analysis_request.address,
                estimation=estimation,
                purchase_price=analysis_request.purchase_price,
            )
            raw = extract_investment_json(text)
            analysis = build_investment_analysis(raw, analysis_request.purchase_price, estimation)
        except RehabAnalyzerError as e:
            if not self.is_current(request_id):
                logger.info("stale_analysis_error_discarded", request_id=request_id, error=e.message)
                return None
            self.error = f"{ANALYSIS_FAILED_MESSAGE} {e.message}"
            logger.warning("investment_analysis_failed", request_id=request_id, code=e.code)
            raise

        if not self.is_current(request_id):
            logger.info("stale_analysis_discarded", request_id=request_id, latest=self.latest_request)
            return None

        self.purchase_price = analysis_request.purchase_price
        self.investment_analysis = analysis
        self.error = None
        log_deal_verdict(self.address, analysis)
        return analysis
