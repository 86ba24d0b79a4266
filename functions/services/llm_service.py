"""LLM service for Rehab Analyzer.

Provides the LangChain/OpenAI calls behind the rehab estimate (multimodal,
prompt plus property photos) and the investment analysis. Responses are
returned as raw text; parsing lives in the markdown parser and the
investment extractor.
"""

from typing import Any, Dict, List, Optional, Tuple

import openai
import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage

from config.settings import settings
from config.errors import ErrorCode, LLMError
from models.estimation import Estimation, GroundingSource
from models.property_input import FinishLevel, UploadedPhoto
from services.prompts import build_investment_analysis_prompt, build_rehab_estimate_prompt

logger = structlog.get_logger(__name__)


def photo_to_content_part(photo: UploadedPhoto) -> Dict[str, Any]:
    """Image content block for a multimodal chat message."""
    return {
        "type": "image_url",
        "image_url": {"url": photo.data_uri},
    }


def _grounding_sources(response: Any) -> List[GroundingSource]:
    """Collect URL citations the model attached to its answer, if any."""
    sources: List[GroundingSource] = []
    content = getattr(response, "content", None)
    if not isinstance(content, list):
        return sources
    for block in content:
        if not isinstance(block, dict):
            continue
        for annotation in block.get("annotations") or []:
            if isinstance(annotation, dict) and annotation.get("type") == "url_citation":
                sources.append(GroundingSource(
                    uri=annotation.get("url", ""),
                    title=annotation.get("title", ""),
                ))
    return sources


def _response_text(response: Any) -> str:
    content = getattr(response, "content", "")
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LLMService:
    """Service for LLM operations using LangChain.

    Provides a wrapper around ChatOpenAI with token tracking
    and error handling.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        api_key: Optional[str] = None,
        max_tokens: Optional[int] = None
    ):
        """Initialize LLMService.

        Args:
            model: Model name (default from settings).
            temperature: Temperature (default from settings).
            api_key: OpenAI API key (default from settings).
            max_tokens: Response token cap (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.api_key = api_key or settings.openai_api_key
        self.max_tokens = max_tokens or settings.llm_max_tokens

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            self._client = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                api_key=self.api_key
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        """Get total tokens used across all calls."""
        return self._total_tokens_used

    async def _invoke(self, messages: List[BaseMessage]) -> Any:
        kwargs = {}
        if self.max_tokens:
            kwargs["max_tokens"] = self.max_tokens
        return await self.client.ainvoke(messages, **kwargs)

    async def generate(self, messages: List[BaseMessage]) -> Tuple[str, Any]:
        """Send messages to the model.

        Args:
            messages: List of LangChain messages.

        Returns:
            Tuple of (response text, raw response message).

        Raises:
            LLMError: If the LLM call fails.
        """
        try:
            response = await self._invoke(messages)
        except Exception as e:
            raise self._translate_error(e) from e

        tokens_used = 0
        metadata = getattr(response, "response_metadata", None)
        if isinstance(metadata, dict):
            usage = metadata.get("token_usage") or {}
            tokens_used = usage.get("total_tokens", 0)
            self._total_tokens_used += tokens_used

        text = _response_text(response)
        logger.info(
            "llm_generated",
            model=self.model,
            tokens_used=tokens_used,
            content_length=len(text)
        )
        return text, response

    async def generate_rehab_estimate(
        self,
        address: str,
        photos: List[UploadedPhoto],
        finish_level: FinishLevel,
        purchase_price: str
    ) -> Tuple[str, List[GroundingSource]]:
        """Ask the model for an area-by-area rehab estimate in markdown.

        Args:
            address: Property address.
            photos: Property photos, sent as inline images.
            finish_level: Target finish level.
            purchase_price: User-supplied purchase price.

        Returns:
            Tuple of (markdown text, grounding sources).
        """
        prompt = build_rehab_estimate_prompt(address, finish_level, purchase_price)
        content: List[Dict[str, Any]] = [{"type": "text", "text": prompt}]
        content.extend(photo_to_content_part(photo) for photo in photos)

        logger.info(
            "rehab_estimate_requested",
            address=address,
            photo_count=len(photos),
            finish_level=FinishLevel(finish_level).value,
        )
        text, response = await self.generate([HumanMessage(content=content)])
        return text, _grounding_sources(response)

    async def generate_investment_analysis(
        self,
        address: str,
        estimation: Estimation,
        purchase_price: str
    ) -> str:
        """Ask the model for an investment analysis wrapped in a JSON block.

        Args:
            address: Property address.
            estimation: Parsed rehab estimate, for repair-cost context.
            purchase_price: User-supplied purchase price.

        Returns:
            Raw response text (expected to contain one ```json block).
        """
        prompt = build_investment_analysis_prompt(address, estimation, purchase_price)
        logger.info("investment_analysis_requested", address=address, purchase_price=purchase_price)
        text, _ = await self.generate([HumanMessage(content=prompt)])
        return text

    @staticmethod
    def _translate_error(error: Exception) -> LLMError:
        error_msg = str(error)
        lowered = error_msg.lower()

        # Detect specific error types
        if isinstance(error, openai.RateLimitError) or "rate_limit" in lowered or "rate limit" in lowered:
            return LLMError(
                code=ErrorCode.LLM_RATE_LIMIT,
                message="OpenAI rate limit exceeded",
                original_error=error_msg
            )
        if "context_length" in lowered or "maximum context" in lowered:
            return LLMError(
                code=ErrorCode.LLM_CONTEXT_TOO_LONG,
                message="Input too long for model context",
                original_error=error_msg
            )
        logger.error("llm_generation_failed", error=error_msg, error_type=type(error).__name__)
        return LLMError(
            code=ErrorCode.LLM_ERROR,
            message=f"LLM generation failed: {error_msg}",
            original_error=error_msg
        )
