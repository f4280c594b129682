"""
Payload Builder
===============
Renders the fixed prompt template into the exact request body for the
model call.

Contract:
    - ``test_source`` and ``normalized_dom`` must be non-empty, otherwise
      MissingContentError aborts the run (nothing useful to send upstream).
    - Every placeholder in the template is filled. Missing run metadata is
      rendered as "Unknown", never left as a marker.
    - Substitution is single-pass: text inserted for one placeholder (a test
      file that happens to contain ``{{DOM_CONTENT}}``, say) is never
      re-scanned for further placeholders.
    - The builder is pure: prompt text and model parameters come in through
      an immutable PromptConfig, not module globals.

Error location formatting:
    KnownLocation   → "Line: 7, Column: 5"
    UnknownLocation → "unknown" (the template tells the model to infer it)
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Optional

from autoheal.core import config
from autoheal.core.constants import UNKNOWN, UNKNOWN_LOCATION
from autoheal.core.errors import MissingContentError
from autoheal.llm.prompts import PLACEHOLDERS, SYSTEM_PROMPT, USER_PROMPT_TEMPLATE
from autoheal.models.failure_context import (
    ErrorLocation,
    FailureContext,
    KnownLocation,
    UnknownLocation,
)
from autoheal.models.prompt_payload import ModelParameters, PayloadMetrics, PromptPayload

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_]+)\}\}")


def template_placeholders(template: str) -> set[str]:
    return set(_PLACEHOLDER_RE.findall(template))


# ---------------------------------------------------------------------------
# Configuration values
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PromptConfig:
    """Immutable prompt text and model parameters."""
    system_prompt: str = SYSTEM_PROMPT
    user_template: str = USER_PROMPT_TEMPLATE
    model_parameters: ModelParameters = field(
        default_factory=lambda: ModelParameters(
            model=config.OPENAI_MODEL,
            max_output_tokens=config.OPENAI_MAX_TOKENS,
            temperature=config.OPENAI_TEMPERATURE,
        )
    )

    def __post_init__(self) -> None:
        unknown = template_placeholders(self.user_template) - set(PLACEHOLDERS)
        if unknown:
            raise ValueError(
                f"User template uses placeholders the builder cannot fill: {sorted(unknown)}"
            )


@dataclass(frozen=True)
class RunMetadata:
    repository: Optional[str] = None
    workflow_name: Optional[str] = None
    failure_url: Optional[str] = None

    @classmethod
    def from_environment(cls) -> "RunMetadata":
        """Build from GitHub Actions variables loaded by core.config."""
        failure_url = config.GITHUB_SERVER_URL
        if failure_url and config.GITHUB_REPOSITORY and config.GITHUB_RUN_ID:
            failure_url = (
                f"{failure_url.rstrip('/')}/{config.GITHUB_REPOSITORY}"
                f"/actions/runs/{config.GITHUB_RUN_ID}"
            )
        return cls(
            repository=config.GITHUB_REPOSITORY,
            workflow_name=config.GITHUB_WORKFLOW,
            failure_url=failure_url,
        )


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------
def format_error_location(location: ErrorLocation) -> str:
    if isinstance(location, KnownLocation):
        return f"Line: {location.line}, Column: {location.column}"
    if isinstance(location, UnknownLocation):
        return UNKNOWN_LOCATION
    raise TypeError(f"Unsupported error location: {type(location).__name__}")


def _or_unknown(value: Optional[str]) -> str:
    if value is None or not str(value).strip():
        return UNKNOWN
    return str(value)


def render_template(template: str, values: Mapping[str, str]) -> str:
    """
    Fill every ``{{NAME}}`` marker in one pass.

    Raises KeyError if the template names a placeholder with no value.
    """
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------
class PayloadBuilder:
    """
    Builds PromptPayloads from a failure's source, DOM and context.

    Parameters
    ----------
    prompt_config : PromptConfig or None
        Prompt text and model parameters (defaults from core.config).
    """

    def __init__(self, prompt_config: Optional[PromptConfig] = None) -> None:
        self.prompt_config = prompt_config or PromptConfig()

    def build(
        self,
        test_source: str,
        normalized_dom: str,
        context: FailureContext,
        run_metadata: Optional[RunMetadata] = None,
    ) -> PromptPayload:
        if not test_source or not test_source.strip():
            raise MissingContentError(
                f"Test source is empty for {context.test_file!r}"
            )
        if not normalized_dom or not normalized_dom.strip():
            raise MissingContentError(
                f"Normalized DOM is empty for test {context.test_name!r}"
            )

        metadata = run_metadata or RunMetadata()
        values = {
            "TEST_NAME": _or_unknown(context.test_name),
            "TEST_FILE": _or_unknown(context.test_file),
            "TEST_CONTENT": test_source,
            "DOM_CONTENT": normalized_dom,
            "ERROR_MESSAGE": _or_unknown(context.error_message),
            "ERROR_LOCATION": format_error_location(context.error_location),
            "REPOSITORY": _or_unknown(metadata.repository),
            "WORKFLOW_NAME": _or_unknown(metadata.workflow_name),
            "FAILURE_URL": _or_unknown(metadata.failure_url),
        }

        user_content = render_template(self.prompt_config.user_template, values)
        return PromptPayload(
            system_instructions=self.prompt_config.system_prompt,
            user_content=user_content,
            model_parameters=self.prompt_config.model_parameters,
        )


def compute_metrics(test_source: str, normalized_dom: str, payload: PromptPayload) -> PayloadMetrics:
    return PayloadMetrics(
        test_lines=len(test_source.split("\n")),
        dom_chars=len(normalized_dom),
        payload_chars=len(json.dumps(payload.to_request_body())),
    )
