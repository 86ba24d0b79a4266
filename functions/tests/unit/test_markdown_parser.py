"""Unit tests for the markdown estimate parser."""

import pytest

from models.estimation import Estimation
from services.markdown_parser import parse_estimation_markdown
from tests.fixtures.mock_llm_responses import MINIMAL_MARKDOWN


class TestSummaryParsing:
    """Tests for the project summary section."""

    def test_minimal_markdown_fields(self):
        """Literal summary values come through unchanged."""
        estimation = parse_estimation_markdown(MINIMAL_MARKDOWN)
        summary = estimation.summary

        assert summary.total_estimated_cost == "$50,000 - $55,000"
        assert summary.overall_difficulty == 3
        assert summary.assumptions == ["Standard finishes"]
        assert summary.key_risks == ["Foundation cracks"]
        assert summary.actionable_advice == ["Get an inspection"]
        assert summary.grounding_sources == []

    def test_minimal_markdown_single_repair(self):
        estimation = parse_estimation_markdown(MINIMAL_MARKDOWN)

        assert len(estimation.repairs) == 1
        item = estimation.repairs[0]
        assert item.area == "Kitchen"
        assert item.observations == "old"
        assert item.recommendations == "replace"
        assert item.estimated_cost == "$10,000"
        assert item.difficulty == 2

    def test_lists_stop_at_next_label(self, sample_estimation):
        summary = sample_estimation.summary

        assert summary.assumptions == [
            "Roof and foundation are structurally sound.",
            "No permits beyond standard electrical and plumbing.",
        ]
        assert summary.key_risks == [
            "Hidden water damage behind the bathroom tile.",
            "Knob-and-tube wiring in the original section.",
        ]

    def test_empty_bullets_are_dropped(self, sample_estimation):
        assert sample_estimation.summary.actionable_advice == [
            "Get a licensed electrician to inspect the panel before closing.",
            "Budget a 10% contingency.",
        ]

    def test_dash_bullets_accepted(self):
        markdown = "**Key Risks:**\n- Mold in basement\n- Old roof\n"
        estimation = parse_estimation_markdown(markdown)

        assert estimation.summary.key_risks == ["Mold in basement", "Old roof"]

    def test_bullet_with_inline_emphasis_kept_whole(self):
        markdown = "**Assumptions:**\n* Uses *builder-grade* fixtures\n"
        estimation = parse_estimation_markdown(markdown)

        assert estimation.summary.assumptions == ["Uses *builder-grade* fixtures"]

    def test_one_bullet_per_line(self):
        inline = parse_estimation_markdown("**Assumptions:** * a * b\n")
        stacked = parse_estimation_markdown("**Assumptions:**\n* a\n* b\n")

        assert inline.summary.assumptions == ["a * b"]
        assert stacked.summary.assumptions == ["a", "b"]

    @pytest.mark.parametrize("value", ["High", "", "[1-5]", "7"])
    def test_unusable_difficulty_is_unknown(self, value):
        markdown = f"**Overall Difficulty:** {value}\n"
        estimation = parse_estimation_markdown(markdown)

        assert estimation.summary.overall_difficulty is None
        assert estimation.summary.difficulty_label == "Unknown"

    def test_difficulty_with_suffix(self):
        estimation = parse_estimation_markdown("**Overall Difficulty:** 4/5 (Hard)\n")

        assert estimation.summary.overall_difficulty == 4
        assert estimation.summary.difficulty_label == "Hard"

    def test_missing_labels_default(self):
        estimation = parse_estimation_markdown("The model rambled without structure.")

        assert estimation.summary.total_estimated_cost is None
        assert estimation.summary.overall_difficulty is None
        assert estimation.summary.assumptions == []
        assert estimation.summary.key_risks == []
        assert estimation.summary.actionable_advice == []


class TestTableParsing:
    """Tests for the itemized breakdown table."""

    def test_rows_in_source_order(self, sample_estimation):
        assert [r.area for r in sample_estimation.repairs] == ["Kitchen", "Bathroom", "Exterior"]

    def test_short_rows_skipped(self, sample_estimation):
        assert all(r.area != "Broken row" for r in sample_estimation.repairs)

    def test_bad_row_difficulty_is_tolerated(self, sample_estimation):
        exterior = sample_estimation.repairs[-1]

        assert exterior.estimated_cost == "$6,000 - $7,000"
        assert exterior.difficulty is None

    def test_header_and_separator_skipped(self, sample_estimation):
        assert all(r.area not in ("Area", ":---") for r in sample_estimation.repairs)

    def test_missing_marker_means_no_repairs(self):
        markdown = MINIMAL_MARKDOWN.replace("### Itemized Breakdown", "### Breakdown")
        estimation = parse_estimation_markdown(markdown)

        assert estimation.repairs == []
        assert estimation.summary.total_estimated_cost == "$50,000 - $55,000"

    def test_marker_without_rows(self):
        estimation = parse_estimation_markdown("### Itemized Breakdown\nNothing to report.")

        assert estimation.repairs == []


class TestTolerance:
    """The parser never raises."""

    @pytest.mark.parametrize("markdown", [
        "",
        None,
        "### Itemized Breakdown",
        "| | |\n|---|\n|a|b|c|",
        "**Total Estimated Cost:**",
        "**Assumptions:**\n*\n*\n",
        "### Itemized Breakdown\n|a|b|c|d|e|\n|-|-|-|-|-|\n||||||\n",
        "\x00\x01 garbage **Key Risks:** ***",
    ])
    def test_returns_estimation(self, markdown):
        estimation = parse_estimation_markdown(markdown)

        assert isinstance(estimation, Estimation)

    def test_empty_row_cells_are_kept_as_empty_strings(self):
        markdown = "### Itemized Breakdown\n|a|b|c|d|e|\n|-|-|-|-|-|\n||||||\n"
        estimation = parse_estimation_markdown(markdown)

        assert len(estimation.repairs) == 1
        assert estimation.repairs[0].area == ""
        assert estimation.repairs[0].difficulty is None
