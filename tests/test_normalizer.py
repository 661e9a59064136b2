"""Tests for JSON extraction and per-field defaulting of engine responses."""

import json

import pytest

from project_grader.grading.normalizer import (
    ANALYSIS_DEFAULTS,
    PARSE_FAILURE_FEEDBACK,
    AnalysisPayload,
    extract_json_text,
    fill_defaults,
    normalize_analysis,
    parse_json,
    parse_json_object,
)


class TestExtractJson:
    """Test the extraction order: json fence, bare fence, brace span, raw text."""

    def test_json_fence(self):
        assert extract_json_text("```json\n{\"a\":1}\n```") == '{"a":1}'

    def test_bare_fence(self):
        assert extract_json_text("Here you go:\n```\n{\"b\": 2}\n```\nThanks") == '{"b": 2}'

    def test_brace_span(self):
        assert extract_json_text("prefix {\"a\":1} suffix") == '{"a":1}'

    def test_json_fence_preferred_over_bare_fence(self):
        text = "```\n{\"wrong\": true}\n```\n```json\n{\"right\": true}\n```"
        assert json.loads(extract_json_text(text)) == {"right": True}

    def test_nested_braces_use_outermost_span(self):
        text = 'Result: {"scores": {"overall": 70}} done'
        assert json.loads(extract_json_text(text)) == {"scores": {"overall": 70}}

    def test_empty_text_is_empty_object(self):
        assert extract_json_text("") == "{}"
        assert extract_json_text(None) == "{}"

    def test_parse_json(self):
        assert parse_json("```json\n[1, 2]\n```") == [1, 2]

    def test_parse_json_bare_list_of_objects(self):
        assert parse_json('[{"a": 1}, {"b": 2}]') == [{"a": 1}, {"b": 2}]

    def test_parse_json_list_after_prose(self):
        assert parse_json('Here: ["a", "b"]') == ["a", "b"]

    def test_parse_json_object_containing_list(self):
        assert parse_json('Result {"groups": [1]} done') == {"groups": [1]}

    def test_parse_json_deep_nesting_is_value_error(self):
        with pytest.raises(ValueError):
            parse_json("[" * 100000 + "]" * 100000)

    def test_parse_json_object_rejects_list(self):
        with pytest.raises(ValueError):
            parse_json_object('[{"a": 1}]')


class TestNormalizeAnalysis:
    """Test that any engine output becomes a complete AnalysisResult."""

    def test_full_response(self, full_response):
        result = normalize_analysis(full_response, "Sarah Jenkins")

        assert result.student_name == "Sarah Jenkins"
        assert result.confidence_score == 100
        assert result.scores.overall == 89
        assert result.scores.ai_efficiency == 85
        assert len(result.rubric_breakdown) == 2
        assert result.rubric_breakdown[0].max_score == 40
        assert result.codebase_verification.overall_credibility == "High"
        assert result.codebase_verification.file_analyses[0].rating == "Good"
        assert result.report_analysis.criteria_missed == ["Load testing"]
        assert result.feedback == "Great ownership of the code."

    def test_fenced_response(self, full_response):
        result = normalize_analysis(f"Sure!\n```json\n{full_response}\n```", "Sarah Jenkins")
        assert result.scores.overall == 89

    def test_garbage_gives_parse_failure_and_defaults(self):
        result = normalize_analysis("I cannot grade this submission, sorry.", "Marcus Ray")

        assert result.feedback == PARSE_FAILURE_FEEDBACK
        assert result.student_name == "Marcus Ray"
        assert result.confidence_score == ANALYSIS_DEFAULTS["confidenceScore"]
        assert result.text_snippet == ANALYSIS_DEFAULTS["textSnippet"]
        assert result.scores.overall == 0
        assert result.rubric_breakdown == []
        assert result.ai_insights.summary == ANALYSIS_DEFAULTS["aiInsights"]["summary"]
        assert result.codebase_verification.overall_credibility == "Low"
        assert result.codebase_verification.file_analyses == []
        assert result.report_analysis.criteria_met == []
        assert result.report_analysis.criteria_missed == []

    def test_broken_json_gives_parse_failure(self):
        result = normalize_analysis('{"confidenceScore": 90, "scores": ', "Marcus Ray")
        assert result.feedback == PARSE_FAILURE_FEEDBACK
        assert result.confidence_score == 50

    def test_json_array_is_parse_failure(self):
        result = normalize_analysis("[1, 2, 3]", "Marcus Ray")
        assert result.feedback == PARSE_FAILURE_FEEDBACK

    def test_deeply_nested_json_is_parse_failure(self):
        raw = '{"a": ' + "[" * 100000 + "]" * 100000 + "}"
        result = normalize_analysis(raw, "Eve")

        assert result.feedback == PARSE_FAILURE_FEEDBACK
        assert result.student_name == "Eve"
        assert result.scores.overall == 0

    def test_empty_object_uses_feedback_default(self):
        result = normalize_analysis("{}", "Marcus Ray")
        assert result.feedback == ANALYSIS_DEFAULTS["feedback"]

    def test_partial_response_keeps_good_fields(self):
        raw = json.dumps({
            "confidenceScore": 75,
            "scores": {"overall": 64, "product": "high"},
            "reportAnalysis": {"criteriaMet": "OAuth", "keyInferences": "Solid understanding."},
        })
        result = normalize_analysis(raw, "Marcus Ray")

        assert result.confidence_score == 75
        assert result.scores.overall == 64
        assert result.scores.product == 0
        assert result.report_analysis.criteria_met == []
        assert result.report_analysis.key_inferences == "Solid understanding."
        assert result.report_analysis.structure_quality == "Analysis failed."

    def test_student_name_comes_from_submission(self, full_response):
        data = json.loads(full_response)
        data["studentName"] = "Someone Else"
        result = normalize_analysis(json.dumps(data), "Sarah Jenkins")
        assert result.student_name == "Sarah Jenkins"

    def test_scores_are_clamped(self):
        raw = json.dumps({"confidenceScore": 140, "scores": {"overall": -5, "process": "85"}})
        result = normalize_analysis(raw, "Marcus Ray")
        assert result.confidence_score == 100
        assert result.scores.overall == 0
        assert result.scores.process == 85

    def test_rubric_score_never_exceeds_max(self):
        raw = json.dumps({"rubricBreakdown": [
            {"criteria": "Testing", "score": 12, "max": 10, "comment": "Generous"},
            {"criteria": "Docs", "score": 3},
            "not an item",
        ]})
        result = normalize_analysis(raw, "Marcus Ray")

        assert len(result.rubric_breakdown) == 2
        for item in result.rubric_breakdown:
            assert item.score <= item.max_score
        assert result.rubric_breakdown[0].score == 10

    def test_invalid_enums_fall_back(self):
        raw = json.dumps({"codebaseVerification": {
            "overallCredibility": "Very High",
            "fileAnalyses": [{"fileName": "main.py", "critique": "ok", "rating": "Average"}],
        }})
        result = normalize_analysis(raw, "Marcus Ray")
        assert result.codebase_verification.overall_credibility == "Low"
        assert result.codebase_verification.file_analyses[0].rating == "Fair"

    def test_enum_case_is_normalized(self):
        raw = json.dumps({"codebaseVerification": {"overallCredibility": "unverified"}})
        result = normalize_analysis(raw, "Marcus Ray")
        assert result.codebase_verification.overall_credibility == "Unverified"


class TestFillDefaults:
    """The default table itself is the contract for missing fields."""

    def test_empty_object_matches_table(self):
        assert fill_defaults({}) == ANALYSIS_DEFAULTS

    def test_non_dict_sections_are_replaced(self):
        filled = fill_defaults({"scores": [1, 2], "aiInsights": "great"})
        assert filled["scores"] == ANALYSIS_DEFAULTS["scores"]
        assert filled["aiInsights"] == ANALYSIS_DEFAULTS["aiInsights"]


class TestAnalysisPayload:
    """Field-level leniency of the payload model."""

    def test_invalid_fields_take_their_defaults(self):
        payload = AnalysisPayload.model_validate({
            "confidenceScore": float("nan"),
            "textSnippet": "   ",
            "feedback": 42,
        })
        assert payload.confidence_score == ANALYSIS_DEFAULTS["confidenceScore"]
        assert payload.text_snippet == ANALYSIS_DEFAULTS["textSnippet"]
        assert payload.feedback == "42"

    def test_rubric_item_without_max_uses_score(self):
        payload = AnalysisPayload.model_validate({"rubricBreakdown": [{"score": -4, "max": "ten"}, 7]})

        assert len(payload.rubric_breakdown) == 1
        item = payload.rubric_breakdown[0]
        assert item.criteria == "Unnamed criterion"
        assert item.score == 0
        assert item.max_score == 0

    def test_criteria_lists_keep_plain_items(self):
        payload = AnalysisPayload.model_validate({"reportAnalysis": {
            "criteriaMet": ["OAuth", 3, "", None, {"x": 1}, True],
        }})
        assert payload.report_analysis.criteria_met == ["OAuth", "3"]

    def test_file_rating_case_is_normalized(self):
        payload = AnalysisPayload.model_validate({"codebaseVerification": {
            "fileAnalyses": [{"fileName": "app.py", "rating": "excellent"}, "app.py"],
        }})
        files = payload.codebase_verification.file_analyses
        assert len(files) == 1
        assert files[0].rating == "Excellent"
        assert files[0].critique == "No critique provided."
