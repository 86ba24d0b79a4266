"""Rehab Analyzer configuration settings.

Loads configuration from environment variables with sensible defaults.
"""

import os
from typing import Optional
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file for local development (API key, model overrides, branding)
load_dotenv()


DEFAULT_COMPANY_NAME = "LIKE FATHER LIKE SON INVESTMENTS"
DEFAULT_CONTACT_LINE = "Real Estate Investment Analysis"
DEFAULT_DISCLAIMER = (
    "This report is provided for informational purposes only and is intended "
    "solely as a rough estimate for real estate investors. It is not a "
    "contractor bid, quote, or guarantee of costs. Actual repair expenses may "
    "vary. By using this report, you agree that the issuer assumes no "
    "liability for investment decisions or outcomes."
)


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # LLM Configuration
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4o"))
    llm_temperature: float = field(default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2")))
    llm_max_tokens: Optional[int] = field(default_factory=lambda: _optional_int("LLM_MAX_TOKENS"))
    openai_api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"), repr=False)

    # Report branding (footer repeated on every PDF page)
    report_company_name: str = field(default_factory=lambda: os.getenv("REPORT_COMPANY_NAME", DEFAULT_COMPANY_NAME))
    report_contact_line: str = field(default_factory=lambda: os.getenv("REPORT_CONTACT_LINE", DEFAULT_CONTACT_LINE))
    report_disclaimer: str = field(default_factory=lambda: os.getenv("REPORT_DISCLAIMER", DEFAULT_DISCLAIMER))
    report_output_dir: str = field(default_factory=lambda: os.getenv("REPORT_OUTPUT_DIR", "reports"))

    # HTTP server
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "5002")))

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    def validate(self) -> None:
        """Validate required settings are present.

        Raises:
            ValueError: If required settings are missing.
        """
        if not self.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required")


# Singleton settings instance
settings = Settings()
