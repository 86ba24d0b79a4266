"""Markdown estimate parser.

Turns the rehab-estimate markdown written by the model into an Estimation.
The model output is not schema-validated, so parsing is best effort: missing
labels, missing sections and malformed table rows degrade to empty or
unknown values and never raise.

Expected layout::

    ### Project Summary
    **Total Estimated Cost:** $55,000 - $60,000
    **Overall Difficulty:** 3
    **Assumptions:**
    * ...
    **Key Risks:**
    * ...
    **Actionable Advice:**
    * ...

    ### Itemized Breakdown
    | Area | Observations | Recommendations | Estimated Cost | Difficulty (1-5) |
    | :--- | :--- | :--- | :--- | :--- |
    | Kitchen | ... | ... | $12,500 - $13,800 | 3 |
"""

import re
from typing import List, Optional

import structlog

from models.estimation import Estimation, EstimationSummary, RepairItem

logger = structlog.get_logger(__name__)

ITEMIZED_BREAKDOWN_MARKER = "### Itemized Breakdown"

TOTAL_COST_LABEL = "Total Estimated Cost"
DIFFICULTY_LABEL = "Overall Difficulty"
ASSUMPTIONS_LABEL = "Assumptions"
KEY_RISKS_LABEL = "Key Risks"
ADVICE_LABEL = "Actionable Advice"

# Row cells: "", area, observations, recommendations, cost, difficulty
MIN_TABLE_CELLS = 6

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_BULLET_PREFIX = re.compile(r"^(?:\*(?!\*)|-|•)\s*")


def _label_pattern(label: str) -> "re.Pattern[str]":
    return re.compile(
        r"^\s*\*\*" + re.escape(label) + r":?\*\*:?[ \t]*(.*)$",
        re.MULTILINE,
    )


def _parse_int(text: Optional[str]) -> Optional[int]:
    """Leading-integer parse ("3", "3/5", "4 (Hard)"); None when absent."""
    if not text:
        return None
    match = _LEADING_INT.match(text)
    return int(match.group(0)) if match else None


def _parse_difficulty(text: Optional[str]) -> Optional[int]:
    value = _parse_int(text)
    if value is None or not 1 <= value <= 5:
        return None
    return value


def _single_line_field(section: str, label: str) -> Optional[str]:
    match = _label_pattern(label).search(section)
    if not match:
        return None
    value = match.group(1).strip()
    return value or None


def _is_label_line(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("**") or stripped.startswith("#")


def _bulleted_list(section: str, label: str) -> List[str]:
    """Collect the bullets that follow ``**label:**`` up to the next label."""
    match = _label_pattern(label).search(section)
    if not match:
        return []

    candidates = [match.group(1)]
    for line in section[match.end():].splitlines():
        if _is_label_line(line):
            break
        candidates.append(line)

    items = []
    for line in candidates:
        stripped = line.strip()
        if not _BULLET_PREFIX.match(stripped):
            continue
        item = _BULLET_PREFIX.sub("", stripped, count=1).strip()
        if item:
            items.append(item)
    return items


def _parse_summary(section: str) -> EstimationSummary:
    return EstimationSummary(
        total_estimated_cost=_single_line_field(section, TOTAL_COST_LABEL),
        overall_difficulty=_parse_difficulty(_single_line_field(section, DIFFICULTY_LABEL)),
        assumptions=_bulleted_list(section, ASSUMPTIONS_LABEL),
        key_risks=_bulleted_list(section, KEY_RISKS_LABEL),
        actionable_advice=_bulleted_list(section, ADVICE_LABEL),
    )


def _parse_table(section: str) -> List[RepairItem]:
    rows = [
        line.strip()
        for line in section.splitlines()
        if line.strip().startswith("|")
    ]

    repairs = []
    # Skip header and separator rows
    for row in rows[2:]:
        cells = [cell.strip() for cell in row.split("|")]
        if len(cells) < MIN_TABLE_CELLS:
            logger.debug("table_row_skipped", row=row[:120], cell_count=len(cells))
            continue
        repairs.append(
            RepairItem(
                area=cells[1],
                observations=cells[2],
                recommendations=cells[3],
                estimated_cost=cells[4],
                difficulty=_parse_difficulty(cells[5]),
            )
        )
    return repairs


def parse_estimation_markdown(markdown: Optional[str]) -> Estimation:
    """Parse the model's rehab-estimate markdown into an Estimation.

    Args:
        markdown: Raw model response text.

    Returns:
        Estimation with whatever could be recovered; empty lists and None
        values stand in for anything missing.
    """
    text = markdown if isinstance(markdown, str) else ""

    summary_section, marker, table_section = text.partition(ITEMIZED_BREAKDOWN_MARKER)
    if not marker:
        logger.warning("itemized_breakdown_missing", content_length=len(text))

    estimation = Estimation(
        summary=_parse_summary(summary_section),
        repairs=_parse_table(table_section) if marker else [],
    )

    logger.info(
        "estimate_parsed",
        total_estimated_cost=estimation.summary.total_estimated_cost,
        overall_difficulty=estimation.summary.overall_difficulty,
        repair_count=len(estimation.repairs),
    )
    return estimation
