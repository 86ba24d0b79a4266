"""Rehab Analyzer configuration.

This package contains:
- settings: Environment variables and configuration
- errors: Custom exceptions and error codes
"""

from config.settings import settings
from config.errors import RehabAnalyzerError, ResponseFormatError, ValidationError

__all__ = [
    "settings",
    "RehabAnalyzerError",
    "ResponseFormatError",
    "ValidationError",
]
