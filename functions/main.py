"""HTTP entry points for Rehab Analyzer.

Provides JSON endpoints for:
- Generating a rehab estimate from an address, photos and finish level
- Generating an investment analysis for an estimated property
- Exporting the combined PDF report

The API is stateless: the caller keeps the Estimation and passes it back
for the investment analysis and the PDF export.

Usage:
    cd functions
    python main.py
"""

import asyncio
from typing import Any, Dict

import structlog
from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from pydantic import ValidationError as PydanticValidationError

from config.settings import settings
from config.errors import ErrorCode, RehabAnalyzerError, ValidationError
from models.estimation import Estimation
from models.investment_analysis import InvestmentAnalysis
from models.property_input import InvestmentAnalysisRequest, RehabEstimateRequest
from services.financial_metrics import build_investment_analysis
from services.investment_extractor import extract_investment_json
from services.llm_service import LLMService
from services.markdown_parser import parse_estimation_markdown
from services.pdf_generator import generate_pdf_bytes, report_file_name
from utils.logging_config import configure_logging

logger = structlog.get_logger()

# ============================================================================
# Helper Functions
# ============================================================================


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Build success response."""
    return {"success": True, "data": data}


def error_response(code: str, message: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build error response."""
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "details": details or {}
        }
    }


def get_request_json() -> Dict[str, Any]:
    """Extract JSON from request body.

    Raises:
        ValidationError: If JSON is invalid.
    """
    data = request.get_json(force=True, silent=True)
    if not isinstance(data, dict):
        raise ValidationError(message="Invalid JSON in request body")
    return data


def _status_for(error: RehabAnalyzerError) -> int:
    if error.code in (ErrorCode.VALIDATION_ERROR, ErrorCode.MISSING_FIELD, ErrorCode.INVALID_FIELD):
        return 400
    if error.code.startswith("LLM_") or error.code == ErrorCode.RESPONSE_FORMAT_ERROR:
        return 502
    return 500


def _parse_model(model_cls, data: Dict[str, Any]):
    try:
        return model_cls.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(
            message=f"Invalid {model_cls.__name__}",
            details={"validation_errors": e.errors(include_url=False, include_context=False)}
        ) from e


# ============================================================================
# Application
# ============================================================================


def create_app(llm_service: LLMService = None) -> Flask:
    """Build the Flask app.

    Args:
        llm_service: LLM service to use (default: a new LLMService).
    """
    app = Flask(__name__)
    CORS(app)
    app.config["LLM_SERVICE"] = llm_service

    def get_llm_service() -> LLMService:
        if app.config["LLM_SERVICE"] is None:
            app.config["LLM_SERVICE"] = LLMService()
        return app.config["LLM_SERVICE"]

    @app.errorhandler(RehabAnalyzerError)
    def handle_rehab_error(error: RehabAnalyzerError):
        logger.warning("request_failed", path=request.path, code=error.code, message=error.message)
        return jsonify(error_response(error.code, error.message, error.details)), _status_for(error)

    @app.route("/rehab_estimate", methods=["POST"])
    def rehab_estimate():
        estimate_request = _parse_model(RehabEstimateRequest, get_request_json())
        estimate_request.validate_for_submission()

        markdown, sources = asyncio.run(get_llm_service().generate_rehab_estimate(
            address=estimate_request.address,
            photos=estimate_request.photos,
            finish_level=estimate_request.finish_level,
            purchase_price=estimate_request.purchase_price,
        ))
        estimation = parse_estimation_markdown(markdown)
        estimation.attach_grounding_sources(sources)

        return jsonify(success_response({
            "address": estimate_request.address,
            "purchasePrice": estimate_request.purchase_price,
            "estimation": estimation.model_dump(mode="json", by_alias=True),
        }))

    @app.route("/investment_analysis", methods=["POST"])
    def investment_analysis():
        analysis_request = _parse_model(InvestmentAnalysisRequest, get_request_json())
        analysis_request.validate_for_submission()

        text = asyncio.run(get_llm_service().generate_investment_analysis(
            address=analysis_request.address,
            estimation=analysis_request.estimation,
            purchase_price=analysis_request.purchase_price,
        ))
        raw = extract_investment_json(text)
        analysis = build_investment_analysis(
            raw,
            analysis_request.purchase_price,
            analysis_request.estimation,
        )
        return jsonify(success_response({"investmentAnalysis": analysis.to_response_dict()}))

    @app.route("/report_pdf", methods=["POST"])
    def report_pdf():
        data = get_request_json()
        address = str(data.get("address") or "").strip()
        if not address:
            raise ValidationError(message="Please provide a property address.", field="address")
        if not data.get("estimation"):
            raise ValidationError(message="Missing estimation", field="estimation")

        estimation = _parse_model(Estimation, data["estimation"])
        analysis = None
        if data.get("investmentAnalysis"):
            analysis = _parse_model(InvestmentAnalysis, data["investmentAnalysis"])

        pdf_bytes = generate_pdf_bytes(estimation, analysis, address)
        return Response(
            pdf_bytes,
            mimetype="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{report_file_name(address)}"'},
        )

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "ok", "service": "rehab-analyzer"})

    return app


if __name__ == "__main__":
    configure_logging()
    settings.validate()
    create_app().run(host="127.0.0.1", port=settings.port, debug=True, threaded=True)
