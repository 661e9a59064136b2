"""Pydantic models for assignments, submissions and analysis results.

Field names are snake_case in Python. The wire form (the JSON exchanged with the
reasoning engine and the YAML written by the CLIs) uses camelCase aliases.
"""

import base64
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Credibility = Literal["High", "Medium", "Low", "Unverified"]
FileRating = Literal["Excellent", "Good", "Fair", "Poor"]
GroupConfidence = Literal["High", "Medium", "Low"]


class WireModel(BaseModel):
    """Base model accepting either snake_case names or camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_yaml_dict(self) -> dict:
        """Convert to dictionary suitable for YAML serialization."""
        return self.model_dump(by_alias=True, mode="json")


# --- Inputs ---


class FileAttachment(WireModel):
    """Uploaded file carried as base64, optionally with a data-URI header."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str = Field(description="Original file name")
    data: str = Field(description="Base64 payload, optionally prefixed with data:<mime>;base64,")
    mime_type: str = Field(description="MIME type of the decoded payload")

    def payload(self) -> str:
        """Return the base64 payload with any data-URI header removed."""
        if self.data.startswith("data:") and "," in self.data:
            return self.data.split(",", 1)[1]
        return self.data

    def to_bytes(self) -> bytes:
        return base64.b64decode(self.payload())


class AssignmentConfig(WireModel):
    """Instructor-side assignment definition. Not modified during an analysis."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str = Field(default="", description="Assignment title")
    description: str = Field(default="", description="Assignment description")
    learning_outcomes: List[str] = Field(default_factory=list, description="Ordered learning outcomes")
    class_context: str = Field(default="Intermediate", description="Class level, e.g. Beginner or Advanced")
    additional_criteria: str = Field(
        default="",
        description="Free-text grading philosophy, rubric or instructor remarks"
    )
    assignment_file: Optional[FileAttachment] = Field(default=None, description="Assignment brief document")


class StudentSubmission(WireModel):
    """A student's project submission."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    student_name: str
    repo_url: str = ""
    report_text: str = ""
    report_file: Optional[FileAttachment] = None
    report_link: Optional[str] = None
    prompt_log: str = ""
    prompt_log_file: Optional[FileAttachment] = None
    prompt_log_link: Optional[str] = None

    def has_report(self) -> bool:
        """True when at least one report source (text, file or link) is present."""
        return bool(self.report_text.strip() or self.report_file or (self.report_link or "").strip())


# --- Analysis result ---


class Scores(WireModel):
    product: int = Field(ge=0, le=100)
    process: int = Field(ge=0, le=100)
    ai_efficiency: int = Field(ge=0, le=100)
    overall: int = Field(ge=0, le=100)


class RubricItem(WireModel):
    """One rubric line scored by the engine."""
    criteria: str
    score: float = Field(ge=0)
    max_score: float = Field(alias="max", ge=0)
    comment: str

    @model_validator(mode="after")
    def check_score_within_max(self) -> "RubricItem":
        if self.score > self.max_score:
            raise ValueError(f"score {self.score} exceeds max {self.max_score}")
        return self


class AIInsights(WireModel):
    summary: str
    efficiency_band: str = Field(description='e.g. "Strategic Collaborator" or "Over-reliant"')
    prompt_quality: str


class FileAnalysis(WireModel):
    file_name: str
    critique: str
    rating: FileRating


class CodebaseVerification(WireModel):
    github_structure: str = Field(description="Comment on folder structure/organization")
    script_quality: str = Field(description="Feedback on code style, comments, complexity")
    readme_credibility: str = Field(description="Does the README look real or AI-generated?")
    overall_credibility: Credibility
    file_analyses: List[FileAnalysis] = Field(default_factory=list)


class ReportAnalysis(WireModel):
    structure_quality: str = Field(description="Report flow and professionalism")
    visual_evidence: str = Field(description="What screenshots and diagrams actually prove")
    criteria_met: List[str] = Field(default_factory=list)
    criteria_missed: List[str] = Field(default_factory=list)
    key_inferences: str = Field(description="Inferences about the student's understanding")
    additional_effort: str = Field(description="Work beyond the brief")


class AnalysisResponse(WireModel):
    """The structure the reasoning engine is asked to return."""
    confidence_score: int = Field(ge=0, le=100, description="Evidence completeness, see confidence bands")
    text_snippet: str = Field(description="About 300 words extracted from the report")
    scores: Scores
    rubric_breakdown: List[RubricItem] = Field(default_factory=list)
    ai_insights: AIInsights
    codebase_verification: CodebaseVerification
    report_analysis: ReportAnalysis
    feedback: str = Field(description="Direct academic feedback to the student")


class AnalysisResult(AnalysisResponse):
    """Complete, fully populated analysis of one submission."""
    student_name: str


# --- Integrity ---


class PlagiarismGroup(WireModel):
    """Students whose submissions look suspiciously alike."""
    students: List[str] = Field(min_length=2)
    reason: str
    confidence: GroupConfidence


class PlagiarismReport(WireModel):
    """The structure the reasoning engine is asked to return for a collusion check."""
    groups: List[PlagiarismGroup] = Field(default_factory=list)


class LearningOutcomes(WireModel):
    """The structure the reasoning engine is asked to return for outcome generation."""
    outcomes: List[str] = Field(default_factory=list)
