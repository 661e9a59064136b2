"""Defensive normalization of raw engine output into a complete AnalysisResult.

The engine may answer with fenced JSON, JSON buried in prose, partial objects or
garbage. Whatever arrives, ``normalize_analysis`` returns a fully populated
result. The decoded object is validated by ``AnalysisPayload``, a lenient
mirror of the response schema whose fields fall back to ``ANALYSIS_DEFAULTS``
whenever they are missing or fail validation.
"""

import json
import logging
import re
from typing import Annotated, Any, Dict, List, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .models import AnalysisResult, Credibility, FileRating

LOG = logging.getLogger(__name__)

PARSE_FAILURE_FEEDBACK = "Error parsing AI response. Please try again."

JSON_FENCE = re.compile(r"```json\s*\n?([\s\S]*?)\n?\s*```", re.IGNORECASE)
BARE_FENCE = re.compile(r"```[ \t]*\n([\s\S]*?)\n?\s*```")

# Default-fill table, keyed by wire (camelCase) names.
ANALYSIS_DEFAULTS: Dict[str, Any] = {
    "confidenceScore": 50,
    "textSnippet": "No text available.",
    "scores": {
        "product": 0,
        "process": 0,
        "aiEfficiency": 0,
        "overall": 0,
    },
    "rubricBreakdown": [],
    "aiInsights": {
        "summary": "Analysis failed.",
        "efficiencyBand": "Unknown.",
        "promptQuality": "Unknown.",
    },
    "codebaseVerification": {
        "githubStructure": "Analysis failed.",
        "scriptQuality": "Analysis failed.",
        "readmeCredibility": "Unknown.",
        "overallCredibility": "Low",
        "fileAnalyses": [],
    },
    "reportAnalysis": {
        "structureQuality": "Analysis failed.",
        "visualEvidence": "Analysis failed.",
        "criteriaMet": [],
        "criteriaMissed": [],
        "keyInferences": "Analysis failed.",
        "additionalEffort": "Unknown.",
    },
    "feedback": "Analysis could not be completed successfully.",
}

RUBRIC_ITEM_DEFAULTS = {"criteria": "Unnamed criterion", "comment": ""}
FILE_ANALYSIS_DEFAULTS = {"fileName": "Unknown file", "critique": "No critique provided.", "rating": "Fair"}

CREDIBILITY_VALUES = ("High", "Medium", "Low", "Unverified")
RATING_VALUES = ("Excellent", "Good", "Fair", "Poor")


# --- JSON extraction ---


def extract_json_text(text: Optional[str]) -> str:
    """
    Locate the JSON payload inside raw engine output.

    Tries, in order: a ```json fenced block, a bare fenced block, the span from
    the first ``{`` to the last ``}``. Otherwise the stripped text itself is
    returned (``"{}"`` when empty) so that prose fails to parse.
    """
    text = text or ""
    match = JSON_FENCE.search(text)
    if match:
        return match.group(1).strip()
    match = BARE_FENCE.search(text)
    if match:
        return match.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text.strip() or "{}"


def _array_span(text: str) -> Optional[str]:
    """The first ``[`` .. last ``]`` span, when an array opens before any object."""
    start = text.find("[")
    end = text.rfind("]")
    brace = text.find("{")
    if start == -1 or end < start or (brace != -1 and brace < start):
        return None
    return text[start:end + 1]


def _loads(candidate: str) -> Any:
    try:
        return json.loads(candidate)
    except RecursionError as e:
        raise ValueError("JSON is nested too deeply to decode") from e


def parse_json(text: Optional[str]) -> Any:
    """
    Extract and decode JSON (object or array) from raw engine output.

    An array that opens before any object is tried first, so a bare list of
    objects is not mistaken for its first element.

    Raises:
        ValueError: If no candidate decodes
    """
    candidates = []
    array = _array_span(text or "")
    if array is not None:
        candidates.append(array)
    candidates.append(extract_json_text(text))

    error: Optional[ValueError] = None
    for candidate in candidates:
        try:
            return _loads(candidate)
        except ValueError as e:
            error = e
    raise error


def parse_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Like ``parse_json`` but only accepts a JSON object."""
    data = _loads(extract_json_text(text))
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


# --- Lenient payload models ---


def _clamp_percent(value: float) -> int:
    return int(round(min(max(value, 0.0), 100.0)))


def _non_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("blank text")
    return value


Percent = Annotated[float, Field(allow_inf_nan=False), AfterValidator(_clamp_percent)]
Text = Annotated[str, AfterValidator(_non_blank)]


def _match_choice(value: Any, allowed: tuple) -> Any:
    if isinstance(value, str):
        for option in allowed:
            if value.strip().lower() == option.lower():
                return option
    return value


def _only_dicts(value: Any) -> Any:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    return value


class LenientModel(BaseModel):
    """Wire model whose fields fall back to their declared default when invalid."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, coerce_numbers_to_str=True)

    @field_validator("*", mode="wrap")
    @classmethod
    def default_on_error(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError as e:
            LOG.debug("Defaulting %s.%s: %s", cls.__name__, info.field_name, e.errors()[0]["msg"])
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class ScoresPayload(LenientModel):
    product: Percent = ANALYSIS_DEFAULTS["scores"]["product"]
    process: Percent = ANALYSIS_DEFAULTS["scores"]["process"]
    ai_efficiency: Percent = ANALYSIS_DEFAULTS["scores"]["aiEfficiency"]
    overall: Percent = ANALYSIS_DEFAULTS["scores"]["overall"]


class RubricItemPayload(LenientModel):
    criteria: Text = RUBRIC_ITEM_DEFAULTS["criteria"]
    score: float = Field(default=0.0, allow_inf_nan=False)
    max_score: Optional[float] = Field(default=None, alias="max", allow_inf_nan=False)
    comment: Text = RUBRIC_ITEM_DEFAULTS["comment"]

    @model_validator(mode="after")
    def clamp_score(self) -> "RubricItemPayload":
        self.score = max(self.score, 0.0)
        if self.max_score is None or self.max_score < 0:
            self.max_score = self.score
        self.score = min(self.score, self.max_score)
        return self


class AIInsightsPayload(LenientModel):
    summary: Text = ANALYSIS_DEFAULTS["aiInsights"]["summary"]
    efficiency_band: Text = ANALYSIS_DEFAULTS["aiInsights"]["efficiencyBand"]
    prompt_quality: Text = ANALYSIS_DEFAULTS["aiInsights"]["promptQuality"]


class FileAnalysisPayload(LenientModel):
    file_name: Text = FILE_ANALYSIS_DEFAULTS["fileName"]
    critique: Text = FILE_ANALYSIS_DEFAULTS["critique"]
    rating: FileRating = FILE_ANALYSIS_DEFAULTS["rating"]

    @field_validator("rating", mode="before")
    @classmethod
    def normalize_rating(cls, value: Any) -> Any:
        return _match_choice(value, RATING_VALUES)


class CodebaseVerificationPayload(LenientModel):
    github_structure: Text = ANALYSIS_DEFAULTS["codebaseVerification"]["githubStructure"]
    script_quality: Text = ANALYSIS_DEFAULTS["codebaseVerification"]["scriptQuality"]
    readme_credibility: Text = ANALYSIS_DEFAULTS["codebaseVerification"]["readmeCredibility"]
    overall_credibility: Credibility = ANALYSIS_DEFAULTS["codebaseVerification"]["overallCredibility"]
    file_analyses: List[FileAnalysisPayload] = Field(default_factory=list)

    @field_validator("overall_credibility", mode="before")
    @classmethod
    def normalize_credibility(cls, value: Any) -> Any:
        return _match_choice(value, CREDIBILITY_VALUES)

    @field_validator("file_analyses", mode="before")
    @classmethod
    def drop_non_objects(cls, value: Any) -> Any:
        return _only_dicts(value)


class ReportAnalysisPayload(LenientModel):
    structure_quality: Text = ANALYSIS_DEFAULTS["reportAnalysis"]["structureQuality"]
    visual_evidence: Text = ANALYSIS_DEFAULTS["reportAnalysis"]["visualEvidence"]
    criteria_met: List[str] = Field(default_factory=list)
    criteria_missed: List[str] = Field(default_factory=list)
    key_inferences: Text = ANALYSIS_DEFAULTS["reportAnalysis"]["keyInferences"]
    additional_effort: Text = ANALYSIS_DEFAULTS["reportAnalysis"]["additionalEffort"]

    @field_validator("criteria_met", "criteria_missed", mode="before")
    @classmethod
    def keep_plain_items(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            item for item in value
            if isinstance(item, (str, int, float)) and not isinstance(item, bool) and str(item).strip()
        ]


class AnalysisPayload(LenientModel):
    """Lenient form of AnalysisResponse; validating it applies the default-fill table."""
    confidence_score: Percent = ANALYSIS_DEFAULTS["confidenceScore"]
    text_snippet: Text = ANALYSIS_DEFAULTS["textSnippet"]
    scores: ScoresPayload = Field(default_factory=ScoresPayload)
    rubric_breakdown: List[RubricItemPayload] = Field(default_factory=list)
    ai_insights: AIInsightsPayload = Field(default_factory=AIInsightsPayload)
    codebase_verification: CodebaseVerificationPayload = Field(default_factory=CodebaseVerificationPayload)
    report_analysis: ReportAnalysisPayload = Field(default_factory=ReportAnalysisPayload)
    feedback: Text = ANALYSIS_DEFAULTS["feedback"]

    @field_validator("rubric_breakdown", mode="before")
    @classmethod
    def drop_non_objects(cls, value: Any) -> Any:
        return _only_dicts(value)


def fill_defaults(data: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a decoded response leniently and return it in wire form, defaults filled."""
    return AnalysisPayload.model_validate(data).model_dump(by_alias=True)


def normalize_analysis(raw_text: Optional[str], student_name: str) -> AnalysisResult:
    """
    Turn raw engine output into a complete AnalysisResult. Never raises.

    Args:
        raw_text: Whatever text the engine returned
        student_name: Taken from the submission; any name in the response is ignored

    Returns:
        AnalysisResult with every field populated
    """
    try:
        data = parse_json_object(raw_text)
    except ValueError as e:
        LOG.warning("Could not parse structured response for %s: %s", student_name, e)
        data = {"feedback": PARSE_FAILURE_FEEDBACK}

    filled = fill_defaults(data)
    filled["studentName"] = student_name
    return AnalysisResult.model_validate(filled)
