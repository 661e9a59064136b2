"""Prompt compilation: assignment, submission and evidence into ordered content parts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from project_grader.evidence.attachments import attachment_parts, normalize_link
from project_grader.libs.content import ContentPart, TextPart
from .confidence import render_confidence_instructions
from .models import AssignmentConfig, StudentSubmission

SUBMISSION_TEXT_LIMIT = 2000

ASSIGNMENT_FILE_MARKER = "[SYSTEM] The above is the Assignment Brief document ({name})."
REPORT_FILE_MARKER = (
    "[SYSTEM] The above is the Student's Project Report file ({name}). Read this thoroughly. "
    "Analyze the text structure, arguments, AND any images/diagrams present in it."
)
PROMPT_LOG_FILE_MARKER = (
    "[SYSTEM] The above is the Student's AI Prompt/Chat Logs ({name}). "
    "Read this to evaluate their AI efficiency."
)
REPORT_LINK_INSTRUCTION = (
    "[SYSTEM] The Student's Project Report is hosted externally at: {link}\n"
    "You MUST use the search tool to open this link and read the report in full "
    "(text, structure, images and diagrams) before grading."
)
PROMPT_LOG_LINK_INSTRUCTION = (
    "[SYSTEM] The Student's AI Prompt/Chat Logs are hosted externally at: {link}\n"
    "You MUST use the search tool to open this link and read the logs to evaluate their AI efficiency."
)

REPOSITORY_SECTION_START = "=== GITHUB REPOSITORY ANALYSIS ==="
REPOSITORY_SECTION_END = "=== END GITHUB REPOSITORY ANALYSIS ==="

OUTPUT_SCHEMA = """{
  "confidenceScore": <integer 0-100>,
  "textSnippet": "<about 300 words quoted from the student's report>",
  "scores": {"product": <0-100>, "process": <0-100>, "aiEfficiency": <0-100>, "overall": <0-100>},
  "rubricBreakdown": [{"criteria": "<name>", "score": <number, never above max>, "max": <number>, "comment": "<why>"}],
  "aiInsights": {"summary": "<how AI was used>", "efficiencyBand": "<e.g. Strategic Collaborator, Over-reliant>", "promptQuality": "<High|Medium|Low>"},
  "codebaseVerification": {
    "githubStructure": "<folder structure and organization>",
    "scriptQuality": "<code style, comments, complexity>",
    "readmeCredibility": "<does the README look real or AI-generated>",
    "overallCredibility": "<High|Medium|Low|Unverified>",
    "fileAnalyses": [{"fileName": "<file>", "critique": "<specific critique>", "rating": "<Excellent|Good|Fair|Poor>"}]
  },
  "reportAnalysis": {
    "structureQuality": "<flow and professionalism>",
    "visualEvidence": "<what the screenshots/diagrams prove>",
    "criteriaMet": ["<requirement, with evidence>"],
    "criteriaMissed": ["<requirement missing or vague>"],
    "keyInferences": "<does the student understand the work>",
    "additionalEffort": "<work beyond the brief>"
  },
  "feedback": "<direct, academic feedback to the student>"
}"""


@dataclass
class CompiledPrompt:
    """Ordered content parts plus whether the search tool must be enabled."""

    parts: List[ContentPart] = field(default_factory=list)
    use_search: bool = False

    def text(self) -> str:
        """All text parts joined, for logging and tests."""
        return "\n".join(p.text for p in self.parts if isinstance(p, TextPart))


def _excerpt(text: str, limit: int = SUBMISSION_TEXT_LIMIT) -> str:
    text = (text or "").strip()
    if not text:
        return "(not provided)"
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _bullets(items: List[str]) -> str:
    if not items:
        return "- (none specified)"
    return "\n".join(f"- {item}" for item in items)


def build_grading_protocol(assignment: AssignmentConfig, submission: StudentSubmission) -> str:
    """The instruction block: persona, protocol, confidence bands, data and output schema."""
    return f"""You are a STRICT, DETAIL-ORIENTED Computer Science Professor.
Your job is to grade the student's submission rigorously against the specific learning outcomes and rubric.

DO NOT act as a peer reviewer or a friendly coach. Act as an academic evaluator.
DO NOT assume the student did the work just because they used a heading. VERIFY THE CONTENT.

ASSIGNMENT CONFIG:
Title: {assignment.title}
Context: {assignment.class_context}
Description: {_excerpt(assignment.description)}

LEARNING OUTCOMES (Must be demonstrated in the work):
{_bullets(assignment.learning_outcomes)}

INSTRUCTOR RUBRIC & REMARKS (The Source of Truth):
"{assignment.additional_criteria}"

GRADING PROTOCOL:
1. Strict Adherence: If the instructor provided a rubric with point values, follow it precisely. Never award more than the maximum for a criterion.
2. Content Verification: Check every claim in the report against the repository evidence above. If the student claims "I implemented OAuth", look for the actual code, diagrams or a specific explanation of challenges. Vague or generic claims get MARKED DOWN for lack of depth.
3. Tone Calibration: Adhere to the strictness implied in the instructor's remarks. If they dislike AI copying, be very harsh on the AI efficiency score when the prompt logs show lazy copying.
4. Process over Product: Unless stated otherwise, value the reasoning in the report. A perfect app with a generated report is a low grade. A buggy app with a brilliant post-mortem is a higher grade.

{render_confidence_instructions()}

STUDENT SUBMISSION DATA:
Name: {submission.student_name}
GitHub URL: {submission.repo_url or "(not provided)"}

Report Text (if not in file):
"{_excerpt(submission.report_text)}"

Prompt Log Text (if not in file):
"{_excerpt(submission.prompt_log)}"

TASK:
Generate a detailed grading analysis.
- textSnippet: copy roughly 300 words verbatim from the student's report; it is used to compare submissions.
- codebaseVerification.fileAnalyses: one entry per source file shown in the repository analysis.
- DO NOT HALLUCINATE: if some evidence could not be read, say so and lower confidenceScore.

Return ONLY a JSON object with exactly this structure:
{OUTPUT_SCHEMA}"""


def compile_analysis_prompt(
    assignment: AssignmentConfig,
    submission: StudentSubmission,
    evidence: str,
) -> CompiledPrompt:
    """
    Assemble the content parts for one submission analysis.

    Args:
        assignment: Instructor assignment configuration
        submission: The student's submission
        evidence: Repository evidence bundle (or diagnostic text)

    Returns:
        CompiledPrompt whose ``use_search`` is set when a link must be opened by the engine
    """
    prompt = CompiledPrompt()

    if assignment.assignment_file is not None:
        prompt.parts.extend(attachment_parts(assignment.assignment_file, ASSIGNMENT_FILE_MARKER))

    report_link = normalize_link(submission.report_link)
    if submission.report_file is not None:
        prompt.parts.extend(attachment_parts(submission.report_file, REPORT_FILE_MARKER))
    elif report_link:
        prompt.parts.append(TextPart(REPORT_LINK_INSTRUCTION.format(link=report_link)))
        prompt.use_search = True

    prompt_log_link = normalize_link(submission.prompt_log_link)
    if submission.prompt_log_file is not None:
        prompt.parts.extend(attachment_parts(submission.prompt_log_file, PROMPT_LOG_FILE_MARKER))
    elif prompt_log_link:
        prompt.parts.append(TextPart(PROMPT_LOG_LINK_INSTRUCTION.format(link=prompt_log_link)))
        prompt.use_search = True

    prompt.parts.append(TextPart(f"{REPOSITORY_SECTION_START}\n{evidence}\n{REPOSITORY_SECTION_END}"))
    prompt.parts.append(TextPart(build_grading_protocol(assignment, submission)))
    return prompt
