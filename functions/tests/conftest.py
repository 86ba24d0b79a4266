"""Pytest configuration and shared fixtures for Rehab Analyzer tests."""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch


# ============================================================================
# Ensure local imports work (models/, services/, config/, utils/)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`.
# This guarantees that `functions/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


from tests.fixtures.mock_llm_responses import (  # noqa: E402
    INVESTMENT_RESPONSE,
    REHAB_MARKDOWN,
)


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content="Mock response content",
        response_metadata={"token_usage": {"total_tokens": 100}}
    )
    return mock


@pytest.fixture
def mock_llm_service(mock_chat_openai):
    """LLMService with a mocked ChatOpenAI client."""
    from services.llm_service import LLMService

    with patch('services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        service = LLMService(api_key="test-api-key")
        service._client = mock_chat_openai
        return service


@pytest.fixture
def stub_llm_service():
    """LLMService stand-in returning canned rehab and investment responses."""
    from services.llm_service import LLMService

    service = MagicMock(spec=LLMService)
    service.generate_rehab_estimate = AsyncMock(return_value=(REHAB_MARKDOWN, []))
    service.generate_investment_analysis = AsyncMock(return_value=INVESTMENT_RESPONSE)
    return service


# ============================================================================
# Domain Fixtures
# ============================================================================

@pytest.fixture
def sample_photo():
    """A tiny uploaded photo."""
    from models.property_input import UploadedPhoto

    return UploadedPhoto.from_bytes(
        name="kitchen.jpg",
        data=b"\xff\xd8\xff\xe0fake-jpeg",
        mime_type="image/jpeg",
        last_modified=1700000000000,
    )


@pytest.fixture
def sample_estimate_request(sample_photo):
    """A complete rehab estimate request."""
    from models.property_input import FinishLevel, RehabEstimateRequest

    return RehabEstimateRequest(
        address="123 Main St, Baltimore, MD 21201",
        photos=[sample_photo],
        finish_level=FinishLevel.INTERMEDIATE,
        purchase_price="185000",
    )


@pytest.fixture
def sample_estimation():
    """Estimation parsed from the canned rehab markdown."""
    from services.markdown_parser import parse_estimation_markdown

    return parse_estimation_markdown(REHAB_MARKDOWN)


@pytest.fixture
def sample_investment_analysis(sample_estimation):
    """Final investment analysis for the canned responses at $185,000."""
    from services.financial_metrics import build_investment_analysis
    from services.investment_extractor import extract_investment_json

    raw = extract_investment_json(INVESTMENT_RESPONSE)
    return build_investment_analysis(raw, "185000", sample_estimation)


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def mock_settings():
    """Pin settings for all tests."""
    from config.settings import settings

    with patch.object(settings, "openai_api_key", "test-api-key"), \
            patch.object(settings, "llm_model", "gpt-4o"), \
            patch.object(settings, "llm_temperature", 0.2), \
            patch.object(settings, "llm_max_tokens", None), \
            patch.object(settings, "report_company_name", "TEST INVESTMENTS"), \
            patch.object(settings, "report_contact_line", "Test Contact | 555-0100"), \
            patch.object(settings, "report_disclaimer", "Estimates only. Not a contractor bid."), \
            patch.object(settings, "log_level", "INFO"):
        yield settings
