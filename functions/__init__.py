"""Rehab Analyzer - Property Rehab and Investment Analysis.

This package contains the Python services behind the Rehab Analyzer
workflow: a multimodal rehab cost estimate followed by a 70% rule
investment analysis and a branded PDF report.

Flow:
- Rehab estimate: address, photos and finish level in, markdown estimate out
- Investment analysis: model JSON narrative plus locally computed MAO and verdict
- PDF report: estimate and analysis rendered with Jinja2 and WeasyPrint
"""

__version__ = "1.0.0"
