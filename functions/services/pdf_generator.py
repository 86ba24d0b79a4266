"""
PDF Report Generation Service for Rehab Analyzer.

Generates the property analysis PDF using WeasyPrint and Jinja2 templates.
The report combines the rehab estimate and, when available, the investment
analysis:

- Rehab Estimate: summary key/values, key risks, actionable advice,
  assumptions, itemized repairs table
- Investment Analysis: ARV / repair cost / MAO, deal analysis, property
  condition, comparable sales table, exit strategies

Every page carries the branded footer (company name, contact line,
disclaimer, page number), rendered through CSS paged-media margin boxes.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import re
import time

import structlog
from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.errors import ReportError
from config.settings import settings
from models.estimation import Estimation
from models.investment_analysis import InvestmentAnalysis

# Configure structlog logger
logger = structlog.get_logger(__name__)

# Template directory
TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

REPORT_TEMPLATE = "property_report.html"
REPORT_TITLE = "AI Property Analysis Report"


# =============================================================================
# Data Models
# =============================================================================


@dataclass
class PDFGenerationResult:
    """
    Result of PDF generation.

    Attributes:
        file_name: Suggested download file name
        output_path: Absolute path of the written file (local generation only)
        page_count: Number of pages in the generated PDF
        file_size_bytes: Size of the PDF file in bytes
        generated_at: ISO timestamp when the PDF was generated
    """

    file_name: str
    output_path: Optional[str]
    page_count: int
    file_size_bytes: int
    generated_at: str


# =============================================================================
# Template Engine Setup
# =============================================================================


def _get_jinja_env() -> Environment:
    """
    Create and configure Jinja2 environment.

    Returns:
        Configured Jinja2 Environment
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    return env


def report_file_name(address: str) -> str:
    """
    Download file name for a property, e.g.
    "123 Main St" -> "Property-Analysis-123_main_st.pdf".
    """
    slug = re.sub(r"[^a-z0-9]", "_", address, flags=re.IGNORECASE).lower()
    return f"Property-Analysis-{slug}.pdf"


# =============================================================================
# PDF Generation
# =============================================================================


def _build_context(
    estimation: Estimation,
    investment_analysis: Optional[InvestmentAnalysis],
    address: str,
) -> Dict[str, Any]:
    summary = estimation.summary
    return {
        "title": REPORT_TITLE,
        "address": address,
        "report_date": datetime.now().strftime("%B %d, %Y"),
        "footer": {
            "company_name": settings.report_company_name,
            "contact_line": settings.report_contact_line,
            "disclaimer": settings.report_disclaimer,
        },
        "estimate": {
            "total_cost": summary.total_estimated_cost or "N/A",
            "difficulty": (
                f"{summary.overall_difficulty}/5" if summary.overall_difficulty is not None else "Unknown"
            ),
            "key_risks": summary.key_risks,
            "actionable_advice": summary.actionable_advice,
            "assumptions": summary.assumptions,
            "grounding_sources": summary.grounding_sources,
            "repairs": [
                {
                    "area": item.area,
                    "recommendations": item.recommendations,
                    "estimated_cost": item.estimated_cost,
                    "difficulty": f"{item.difficulty}/5" if item.difficulty is not None else "N/A",
                }
                for item in estimation.repairs
            ],
        },
        "analysis": investment_analysis,
    }


def _render_html(
    estimation: Estimation,
    investment_analysis: Optional[InvestmentAnalysis],
    address: str,
) -> str:
    """
    Render HTML from the Jinja2 template.

    Args:
        estimation: Parsed rehab estimate
        investment_analysis: Final investment analysis, or None
        address: Property address shown under the title

    Returns:
        Rendered HTML string
    """
    env = _get_jinja_env()
    template = env.get_template(REPORT_TEMPLATE)
    return template.render(**_build_context(estimation, investment_analysis, address))


def _html_to_pdf(html_content: str) -> bytes:
    """
    Convert HTML to PDF using WeasyPrint.

    Args:
        html_content: Rendered HTML string

    Returns:
        PDF content as bytes
    """
    from weasyprint import HTML
    from weasyprint.text.fonts import FontConfiguration

    font_config = FontConfiguration()
    html_doc = HTML(string=html_content, base_url=str(TEMPLATE_DIR))
    return html_doc.write_pdf(font_config=font_config)


def _count_pdf_pages(pdf_bytes: bytes) -> int:
    """
    Count the number of pages in a PDF.

    Args:
        pdf_bytes: PDF content as bytes

    Returns:
        Number of pages
    """
    content = pdf_bytes.decode("latin-1", errors="ignore")
    return len(re.findall(r"/Type\s*/Page(?!s)", content))


def generate_pdf_bytes(
    estimation: Estimation,
    investment_analysis: Optional[InvestmentAnalysis],
    address: str,
) -> bytes:
    """
    Render the combined property report to PDF bytes.

    Raises:
        ReportError: If rendering or PDF conversion fails.
    """
    start_time = time.perf_counter()
    logger.info(
        "pdf_generation_started",
        address=address,
        include_investment=investment_analysis is not None,
        repair_count=len(estimation.repairs),
    )

    try:
        html_content = _render_html(estimation, investment_analysis, address)
        pdf_bytes = _html_to_pdf(html_content)
    except Exception as e:
        logger.error(
            "pdf_generation_error",
            address=address,
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        raise ReportError(
            message=f"Failed to generate PDF report: {e}",
            details={"error_type": type(e).__name__}
        ) from e

    logger.info(
        "pdf_generated",
        address=address,
        file_size_kb=round(len(pdf_bytes) / 1024, 2),
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return pdf_bytes


# =============================================================================
# Local PDF Generation
# =============================================================================


def generate_pdf_local(
    estimation: Estimation,
    investment_analysis: Optional[InvestmentAnalysis],
    address: str,
    output_dir: Optional[str] = None,
) -> PDFGenerationResult:
    """
    Generate the report and save it under ``output_dir``.

    Args:
        estimation: Parsed rehab estimate
        investment_analysis: Final investment analysis, or None
        address: Property address
        output_dir: Target directory (default from settings)

    Returns:
        PDFGenerationResult with the local file path
    """
    pdf_bytes = generate_pdf_bytes(estimation, investment_analysis, address)

    file_name = report_file_name(address)
    output_file = Path(output_dir or settings.report_output_dir) / file_name
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_bytes(pdf_bytes)

    result = PDFGenerationResult(
        file_name=file_name,
        output_path=str(output_file.absolute()),
        page_count=max(_count_pdf_pages(pdf_bytes), 1),
        file_size_bytes=len(pdf_bytes),
        generated_at=datetime.now().isoformat(),
    )

    logger.info(
        "pdf_generated_local",
        output_path=result.output_path,
        page_count=result.page_count,
        file_size_kb=round(result.file_size_bytes / 1024, 2),
    )
    return result
