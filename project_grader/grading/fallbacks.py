"""Fixed results returned when no credential is configured or inference fails."""

from .models import (
    AIInsights,
    AnalysisResult,
    CodebaseVerification,
    ReportAnalysis,
    RubricItem,
    Scores,
)

FAILED_TEXT = "Analysis Failed."


def build_mock_result(student_name: str) -> AnalysisResult:
    """Deterministic placeholder used when no API key is configured."""
    return AnalysisResult(
        student_name=student_name,
        confidence_score=0,
        text_snippet="Mock analysis: no report text was analyzed (No API Key).",
        scores=Scores(product=75, process=70, ai_efficiency=60, overall=70),
        rubric_breakdown=[
            RubricItem(
                criteria="System Simulation",
                score=7,
                max_score=10,
                comment="Mock analysis generated (No API Key).",
            )
        ],
        ai_insights=AIInsights(
            summary="Unable to analyze prompt logs without API key.",
            efficiency_band="Unknown",
            prompt_quality="Unknown",
        ),
        codebase_verification=CodebaseVerification(
            github_structure="Mock: Unable to verify GitHub without API Key.",
            script_quality="Mock: Unable to verify scripts.",
            readme_credibility="Mock: Unknown.",
            overall_credibility="Medium",
            file_analyses=[],
        ),
        report_analysis=ReportAnalysis(
            structure_quality="Mock Analysis.",
            visual_evidence="Mock Analysis.",
            criteria_met=["Mock Criterion 1"],
            criteria_missed=["Mock Criterion 2"],
            key_inferences="Mock Analysis.",
            additional_effort="Mock Analysis.",
        ),
        feedback="Please provide a valid API Key to get real AI insights.",
    )


def build_failure_result(student_name: str, error: str) -> AnalysisResult:
    """All-failure result used when the inference call itself fails."""
    return AnalysisResult(
        student_name=student_name,
        confidence_score=0,
        text_snippet=FAILED_TEXT,
        scores=Scores(product=0, process=0, ai_efficiency=0, overall=0),
        rubric_breakdown=[],
        ai_insights=AIInsights(
            summary=FAILED_TEXT,
            efficiency_band=FAILED_TEXT,
            prompt_quality=FAILED_TEXT,
        ),
        codebase_verification=CodebaseVerification(
            github_structure=FAILED_TEXT,
            script_quality=FAILED_TEXT,
            readme_credibility=FAILED_TEXT,
            overall_credibility="Low",
            file_analyses=[],
        ),
        report_analysis=ReportAnalysis(
            structure_quality=FAILED_TEXT,
            visual_evidence=FAILED_TEXT,
            criteria_met=[],
            criteria_missed=[],
            key_inferences=FAILED_TEXT,
            additional_effort=FAILED_TEXT,
        ),
        feedback=f"An error occurred during analysis: {error}. Please check the inputs and try again.",
    )
