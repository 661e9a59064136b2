"""Class-wide grading assistant: free-form instructor questions over all results."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Sequence

from project_grader.libs.config_loader import ConfigType
from project_grader.libs.content import TextPart
from project_grader.libs.llm import InferenceClient, create_client
from .confidence import classify_confidence
from .models import AnalysisResult, AssignmentConfig

LOG = logging.getLogger(__name__)

NO_KEY_REPLY = "I need a valid API key to answer questions about your class. Please configure one and try again."
EMPTY_QUESTION_REPLY = "Please ask a question about your students, class trends, or how to use the dashboard."
ERROR_REPLY = "Sorry, I ran into a problem answering that. Please try again."
FEEDBACK_EXCERPT_CHARS = 300


def summarize_result(result: AnalysisResult) -> Dict[str, Any]:
    """The per-student facts the assistant gets to see."""
    return {
        "name": result.student_name,
        "scores": result.scores.to_yaml_dict(),
        "confidence": f"{result.confidence_score} ({classify_confidence(result.confidence_score).value})",
        "credibility": result.codebase_verification.overall_credibility,
        "aiEfficiencyBand": result.ai_insights.efficiency_band,
        "criteriaMissed": result.report_analysis.criteria_missed,
        "keyInferences": result.report_analysis.key_inferences,
        "feedback": result.feedback[:FEEDBACK_EXCERPT_CHARS],
    }


def build_class_context(results: Sequence[AnalysisResult], assignment: AssignmentConfig) -> str:
    students = [summarize_result(r) for r in results]
    if results:
        average = sum(r.scores.overall for r in results) / len(results)
        average_line = f"Class average (overall): {average:.1f}/100 across {len(results)} submissions"
    else:
        average_line = "No submissions have been analyzed yet."
    outcomes = "\n".join(f"- {o}" for o in assignment.learning_outcomes) or "- (none specified)"
    return (
        f"ASSIGNMENT: {assignment.title or 'the assignment'} ({assignment.class_context})\n"
        f"LEARNING OUTCOMES:\n{outcomes}\n\n"
        f"{average_line}\n\n"
        f"STUDENT RESULTS:\n{json.dumps(students, indent=2, ensure_ascii=False)}"
    )


def build_assistant_prompt(message: str, context: str) -> str:
    return f"""You are the Grading Assistant for a university instructor.
You have the full analysis data for the class below. Answer the instructor's question
concisely in markdown. Cite students by name and quote scores exactly as given.
If the data does not contain the answer, say so rather than guessing.
You can also explain how to use the grading dashboard: analyze a submission,
review the rubric breakdown, compare confidence bands (80+ High, 50-79 Medium, under 50 Low),
and run the plagiarism check across the class.

{context}

INSTRUCTOR QUESTION:
{message}"""


class GradingAssistant:
    """Answer instructor questions about the analyzed class."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None,
                 client: Optional[InferenceClient] = None):
        self.configs = configs
        self.client = client if client is not None else create_client(configs, model=model)

    async def chat_async(
        self,
        message: str,
        results: Sequence[AnalysisResult],
        assignment: AssignmentConfig,
    ) -> str:
        """Return a markdown answer; never raises."""
        if not message or not message.strip():
            return EMPTY_QUESTION_REPLY
        if self.client is None:
            return NO_KEY_REPLY

        prompt = build_assistant_prompt(message.strip(), build_class_context(results, assignment))
        try:
            reply = await self.client.generate([TextPart(prompt)])
        except Exception as e:  # pylint: disable=broad-except
            LOG.error("Grading assistant failed: %s", e)
            return ERROR_REPLY
        return reply.strip() or ERROR_REPLY

    def chat(
        self,
        message: str,
        results: Sequence[AnalysisResult],
        assignment: AssignmentConfig,
    ) -> str:
        """Synchronous wrapper for chat_async."""
        return asyncio.run(self.chat_async(message, results, assignment))
