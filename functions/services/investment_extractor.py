"""Investment analysis JSON extraction.

The investment-analysis prompt asks the model for exactly one fenced JSON
block. Unlike the markdown estimate parser this step is strict: without a
parseable object carrying ``suggestedARV`` the financial calculator has
nothing to work with, so those failures raise ResponseFormatError.
Malformed narrative fields (comparables, exit strategies, investor fit)
fall back to their defaults.
"""

import json
import re
from typing import Any, Dict, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from config.errors import ResponseFormatError
from models.investment_analysis import RawInvestmentAnalysis

logger = structlog.get_logger(__name__)

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)\s*```")

REQUIRED_KEY = "suggestedARV"


def find_json_block(response_text: Optional[str]) -> Optional[str]:
    """Return the contents of the first ```json fenced block, if any."""
    if not response_text:
        return None
    match = _JSON_FENCE.search(response_text)
    if not match or not match.group(1).strip():
        return None
    return match.group(1)


def extract_investment_json(response_text: Optional[str]) -> RawInvestmentAnalysis:
    """Extract the investment-analysis object from a model response.

    Args:
        response_text: Raw model response text.

    Returns:
        RawInvestmentAnalysis straight from the model JSON.

    Raises:
        ResponseFormatError: If no fenced JSON block is present, the block
            is not a valid JSON object, or ``suggestedARV`` is missing.
    """
    block = find_json_block(response_text)
    if block is None:
        logger.warning("investment_json_missing", content_length=len(response_text or ""))
        raise ResponseFormatError(
            message="Could not find JSON in the model's response for investment analysis.",
            raw_content=response_text or ""
        )

    try:
        data: Any = json.loads(block)
    except json.JSONDecodeError as e:
        logger.warning("investment_json_invalid", error=str(e))
        raise ResponseFormatError(
            message="The model's investment analysis was not valid JSON.",
            raw_content=block,
            details={"parse_error": str(e)}
        ) from e

    if not isinstance(data, dict):
        raise ResponseFormatError(
            message="The model's investment analysis JSON was not an object.",
            raw_content=block
        )

    if data.get(REQUIRED_KEY) in (None, ""):
        raise ResponseFormatError(
            message=f"The model's investment analysis is missing '{REQUIRED_KEY}'.",
            raw_content=block,
            details={"keys": sorted(data.keys())}
        )

    return _validate(data, block)


def _validate(data: Dict[str, Any], block: str) -> RawInvestmentAnalysis:
    try:
        raw = RawInvestmentAnalysis.model_validate(data)
    except PydanticValidationError as e:
        logger.warning("investment_json_shape_invalid", error_count=e.error_count())
        raise ResponseFormatError(
            message="The model's investment analysis JSON had an unexpected shape.",
            raw_content=block,
            details={"validation_errors": e.errors(include_url=False, include_context=False)}
        ) from e

    logger.info(
        "investment_json_extracted",
        suggested_arv=raw.suggested_arv,
        comparables=len(raw.comparables),
        exit_strategies=len(raw.exit_strategies),
    )
    return raw
