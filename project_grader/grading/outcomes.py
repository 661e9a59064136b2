"""Learning-outcome generation from an assignment description."""

import asyncio
import logging
from typing import List, Optional

from project_grader.evidence.attachments import to_binary_part
from project_grader.libs.config_loader import ConfigType
from project_grader.libs.content import ContentPart, TextPart
from project_grader.libs.llm import InferenceClient, create_client
from .models import FileAttachment, LearningOutcomes
from .normalizer import parse_json

LOG = logging.getLogger(__name__)

MOCK_OUTCOMES = ["Understand core concepts", "Implement basic features", "Debug effectively"]
FAILED_OUTCOMES = ["Analysis Failed: Default Outcome 1", "Analysis Failed: Default Outcome 2"]


def build_outcomes_prompt(description: str, has_file: bool) -> str:
    source = "Given the assignment description"
    if has_file:
        source += " (and the attached document)"
    return (
        f"{source}, generate a list of 3-5 short, specific learning outcomes.\n\n"
        f"Assignment Text: \"{description}\"\n\n"
        "Return ONLY a JSON object of the form {\"outcomes\": [\"<outcome>\", ...]}."
    )


def parse_outcomes(raw_text: Optional[str]) -> List[str]:
    """Accept either a bare JSON array or {"outcomes": [...]}; non-strings are dropped."""
    data = parse_json(raw_text)
    if isinstance(data, dict):
        data = data.get("outcomes", [])
    if not isinstance(data, list):
        raise ValueError("expected a list of outcomes")
    return [item.strip() for item in data if isinstance(item, str) and item.strip()]


class OutcomeGenerator:
    """Suggest learning outcomes for an assignment."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None,
                 client: Optional[InferenceClient] = None):
        self.configs = configs
        self.client = client if client is not None else create_client(configs, model=model)

    async def generate_learning_outcomes_async(
        self,
        description: str,
        assignment_file: Optional[FileAttachment] = None,
    ) -> List[str]:
        if self.client is None:
            return list(MOCK_OUTCOMES)

        parts: List[ContentPart] = []
        if assignment_file is not None:
            parts.append(to_binary_part(assignment_file))
        parts.append(TextPart(build_outcomes_prompt(description, assignment_file is not None)))

        try:
            raw_text = await self.client.generate(parts, response_schema=LearningOutcomes)
            return parse_outcomes(raw_text)
        except Exception as e:  # pylint: disable=broad-except
            LOG.error("Learning outcome generation failed: %s", e)
            return list(FAILED_OUTCOMES)

    def generate_learning_outcomes(
        self,
        description: str,
        assignment_file: Optional[FileAttachment] = None,
    ) -> List[str]:
        """Synchronous wrapper for generate_learning_outcomes_async."""
        return asyncio.run(self.generate_learning_outcomes_async(description, assignment_file))
