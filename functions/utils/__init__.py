"""Utility modules for Rehab Analyzer functions."""

from utils.analysis_logger import log_deal_verdict, log_estimate_summary
from utils.logging_config import configure_logging

__all__ = [
    "configure_logging",
    "log_deal_verdict",
    "log_estimate_summary",
]
