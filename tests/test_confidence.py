"""Tests for confidence bands."""

import pytest

from project_grader.grading.confidence import (
    ConfidenceBand,
    classify_confidence,
    render_confidence_instructions,
)


@pytest.mark.parametrize("score,band", [
    (100, ConfidenceBand.HIGH),
    (80, ConfidenceBand.HIGH),
    (79, ConfidenceBand.MEDIUM),
    (50, ConfidenceBand.MEDIUM),
    (49, ConfidenceBand.LOW),
    (0, ConfidenceBand.LOW),
])
def test_classify_confidence(score, band):
    assert classify_confidence(score) is band


def test_band_values_are_display_strings():
    assert ConfidenceBand.HIGH.value == "High"
    assert ConfidenceBand.LOW == "Low"


def test_instructions_list_every_band():
    text = render_confidence_instructions()
    assert "- 100: Full repository access + full report + full prompt logs" in text
    assert "- 70-80:" in text
    assert "- <50: Critical evidence missing" in text
