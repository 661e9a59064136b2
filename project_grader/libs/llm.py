"""LLM utilities: model construction and the inference client used by the grading pipeline."""

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type, Union

from pydantic import BaseModel
from pydantic_ai import Agent, BinaryContent, NativeOutput, StructuredDict, WebSearchTool
from pydantic_ai.models import Model

from project_grader.libs.config_loader import ConfigType, get_config
from project_grader.libs.content import ContentPart, InlineBinaryPart, TextPart


# Fix up logging level for httpx to WARNING to reduce noise
logging.getLogger("httpx").setLevel(logging.WARNING)

LOG = logging.getLogger(__name__)

DEFAULT_PROVIDER = "google"
DEFAULT_MODELS = {
    "google": "gemini-2.5-flash",
    "openai": "gpt-4o-mini",
}


class InferenceError(RuntimeError):
    """The reasoning engine could not be reached or returned an unusable response."""


class InferenceClient(Protocol):
    """Anything that can turn compiled content parts into raw response text."""

    async def generate(
        self,
        parts: Sequence[ContentPart],
        *,
        use_search: bool = False,
        response_schema: Optional[Type[BaseModel]] = None,
    ) -> str:
        ...


def get_api_key(configs: ConfigType) -> Optional[str]:
    """Return the configured credential, or None when it is absent or blank."""
    api_key = get_config("llm.api_key", configs, default=None)
    if api_key is None or not str(api_key).strip():
        return None
    return str(api_key).strip()


def build_model(configs: ConfigType, model: Optional[str] = None) -> Model:
    """
    Build the pydantic-ai model for the configured provider.

    Args:
        configs: Configuration dictionary (required)
        model: Model name (overrides config value)

    Returns:
        A pydantic-ai Model bound to the configured API key

    Raises:
        ValueError: If no API key is configured or the provider is unknown
    """
    api_key = get_api_key(configs)
    if api_key is None:
        raise ValueError("llm.api_key is not set")

    provider = str(get_config("llm.provider", configs, default=DEFAULT_PROVIDER)).strip().lower()
    model_name = model or get_config("llm.model", configs, default=None) or DEFAULT_MODELS.get(provider)

    if provider == "google":
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))

    if provider == "openai":
        from pydantic_ai.models.openai import OpenAIResponsesModel
        from pydantic_ai.providers.openai import OpenAIProvider

        return OpenAIResponsesModel(model_name, provider=OpenAIProvider(api_key=api_key))

    raise ValueError(f"Unknown llm.provider {provider!r}; expected 'google' or 'openai'")


def create_agent(model: Union[Model, str],
                 settings_dict: Optional[Dict[str, Any]] = None,
                 system_prompt: Optional[str] = None,
                 output_type: Any = str,
                 use_search: bool = False) -> Agent:
    """
    Create a pydantic-ai Agent for a single inference call.

    Args:
        model: pydantic-ai model (or model name understood by pydantic-ai)
        settings_dict: Pydantic AI model settings
        system_prompt: System prompt for the agent (optional)
        output_type: Output type passed through to the agent
        use_search: Enable the provider's builtin web search tool

    Returns:
        Configured Agent
    """
    kwargs: Dict[str, Any] = {
        "model": model,
        "output_type": output_type,
        "model_settings": settings_dict or None,
        "retries": 0,
    }
    if system_prompt:
        kwargs["system_prompt"] = system_prompt
    if use_search:
        kwargs["builtin_tools"] = [WebSearchTool()]
    return Agent(**kwargs)


def to_user_content(parts: Sequence[ContentPart]) -> List[Any]:
    """Convert compiled content parts into a pydantic-ai user prompt."""
    content: List[Any] = []
    for part in parts:
        if isinstance(part, TextPart):
            content.append(part.text)
        elif isinstance(part, InlineBinaryPart):
            content.append(BinaryContent(data=part.to_bytes(), media_type=part.mime_type))
        else:
            raise TypeError(f"Unsupported content part: {part!r}")
    return content


class PydanticAIClient:
    """Inference client backed by a pydantic-ai Agent.

    Structured (schema-constrained) output and the web search tool are never
    requested together: when search is active the response is plain text and
    must be decoded by the caller.
    """

    def __init__(self, model: Union[Model, str],
                 settings: Optional[Dict[str, Any]] = None,
                 system_prompt: Optional[str] = None):
        self.model = model
        self.settings = settings
        self.system_prompt = system_prompt

    async def generate(
        self,
        parts: Sequence[ContentPart],
        *,
        use_search: bool = False,
        response_schema: Optional[Type[BaseModel]] = None,
    ) -> str:
        if use_search and response_schema is not None:
            raise ValueError("Structured output cannot be combined with the search tool")

        output_type: Any = str
        if response_schema is not None:
            output_type = NativeOutput(StructuredDict(
                response_schema.model_json_schema(),
                name=response_schema.__name__,
            ))

        agent = create_agent(
            self.model,
            settings_dict=self.settings,
            system_prompt=self.system_prompt,
            output_type=output_type,
            use_search=use_search,
        )

        try:
            result = await agent.run(to_user_content(parts))
        except Exception as e:
            raise InferenceError(f"Inference call failed: {e}") from e

        output = result.output
        if isinstance(output, str):
            return output
        return json.dumps(output, ensure_ascii=False)


def create_client(configs: ConfigType, model: Optional[str] = None) -> Optional[PydanticAIClient]:
    """
    Create the inference client described by the configuration.

    Returns:
        A PydanticAIClient, or None when no API key is configured (mock mode)
    """
    if get_api_key(configs) is None:
        LOG.warning("llm.api_key not configured; using mock results")
        return None
    settings = get_config("llm.settings", configs, default={}) or {}
    return PydanticAIClient(build_model(configs, model=model), settings=settings)
