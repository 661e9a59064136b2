"""Confidence policy: the bands the engine must follow and how consumers read them."""

from enum import Enum

HIGH_CONFIDENCE_THRESHOLD = 80
MEDIUM_CONFIDENCE_THRESHOLD = 50

CONFIDENCE_SCORING_BANDS = (
    ("100", "Full repository access + full report + full prompt logs"),
    ("70-80", "One secondary source (repo or logs) missing, report strong"),
    ("<50", "Critical evidence missing"),
)


class ConfidenceBand(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


def classify_confidence(score: int) -> ConfidenceBand:
    """Display band for a confidence score: >=80 High, 50-79 Medium, <50 Low."""
    if score >= HIGH_CONFIDENCE_THRESHOLD:
        return ConfidenceBand.HIGH
    if score >= MEDIUM_CONFIDENCE_THRESHOLD:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


def render_confidence_instructions() -> str:
    lines = [
        "CONFIDENCE SCORE (confidenceScore, integer 0-100) rates how complete the evidence was:",
    ]
    for score_range, meaning in CONFIDENCE_SCORING_BANDS:
        lines.append(f"- {score_range}: {meaning}")
    lines.append("Lower the score whenever the repository, report or prompt logs could not be read.")
    return "\n".join(lines)
