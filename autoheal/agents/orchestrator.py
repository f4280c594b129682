"""
Orchestrator
============
Sequences the fix pipeline for one failing test:

    read context → read test source → read / clean DOM → build payload
        → (model call) → parse + validate reply → apply fix

Artifacts (written into ``output_dir`` as soon as their step completes):
    openai_payload.json   — request body for the model call
    ai-fix.json           — validated {analysis, fix} from the model reply
    fix-summary.json      — {timestamp, fix, result, backup} after applying

Each stage is also callable on its own, which is how the CI workflow and
the CLI drive it: the model call happens in between, out of process.

Failure policy:
    Every stage fails fast with a HealingError. Either the whole pipeline
    completes (file mutated, backup on disk) or nothing is mutated.
"""
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from autoheal.agents.fix_applier import FixApplier
from autoheal.core import config
from autoheal.core.constants import FIX_DATA_FILENAME, FIX_SUMMARY_FILENAME, PAYLOAD_FILENAME
from autoheal.core.errors import (
    MissingContentError,
    ModelRequestError,
    NoStructuredContentError,
    TargetFileNotFoundError,
)
from autoheal.llm.client import LLMClient
from autoheal.llm.payload_builder import PayloadBuilder, PromptConfig, RunMetadata, compute_metrics
from autoheal.models.failure_context import FailureContext
from autoheal.models.fix_record import AnalysisResponse, FixSummary
from autoheal.models.prompt_payload import PayloadMetrics, PromptPayload
from autoheal.parser.context_reader import extract_test_name, read_failure_context
from autoheal.parser.fix_parser import parse_fix_response, validate_fix_response
from autoheal.services.dom_cleaner import clean_dom_file, is_cleaned_artifact
from autoheal.services.results_writer import ResultsWriter, read_json_artifact

logger = logging.getLogger(__name__)


@dataclass
class PreparedRun:
    """Everything known about a failure once its payload has been built."""
    test_name: str
    context: FailureContext
    dom_path: str
    test_source: str
    normalized_dom: str
    payload: PromptPayload
    metrics: PayloadMetrics
    payload_path: str


def _read_required(path: str, what: str) -> str:
    if not os.path.isfile(path):
        raise MissingContentError(f"{what} not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise MissingContentError(f"{what} is not valid UTF-8: {path}: {e}") from e
    if not content.strip():
        raise MissingContentError(f"{what} is empty: {path}")
    return content


def read_response_file(path: str) -> str:
    """Read a raw model reply saved by the workflow."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise NoStructuredContentError(f"Model response is not valid UTF-8: {path}: {e}") from e


class Orchestrator:
    """
    Drives one failing test through the fix pipeline.

    Parameters
    ----------
    output_dir : str or None
        Where JSON artifacts are written (default: AUTOHEAL_OUTPUT_DIR).
    workspace : str or None
        Root for test / fix file paths (default: AUTOHEAL_WORKSPACE).
    prompt_config : PromptConfig or None
        Prompt text and model parameters for the payload builder.
    applier : FixApplier or None
        Fix applier (auto-created for ``workspace`` if not provided).
    client : LLMClient or None
        Model client, only needed for ``request`` (created lazily).
    """

    def __init__(
        self,
        output_dir: Optional[str] = None,
        workspace: Optional[str] = None,
        prompt_config: Optional[PromptConfig] = None,
        applier: Optional[FixApplier] = None,
        client: Optional[LLMClient] = None,
    ) -> None:
        self.workspace = workspace if workspace is not None else config.WORKSPACE
        self.writer = ResultsWriter(output_dir if output_dir is not None else config.OUTPUT_DIR)
        self.builder = PayloadBuilder(prompt_config)
        self.applier = applier or FixApplier(self.workspace)
        self.client = client

    # -------------------------------------------------------------------
    # Stage 1: payload
    # -------------------------------------------------------------------
    def prepare(self, dom_path: str, run_metadata: Optional[RunMetadata] = None) -> PreparedRun:
        """
        Build and persist the model request for the failure captured at
        ``dom_path`` (raw ``<name>.html`` or cleaned ``<name>-clean.html``).
        """
        logger.info("Building AI payload...")
        test_name = extract_test_name(dom_path)
        logger.info("Test: %s", test_name)

        context = read_failure_context(dom_path)

        try:
            test_path = self.applier.resolve(context.test_file)
        except TargetFileNotFoundError as e:
            raise MissingContentError(f"Test file cannot be read: {e}") from e
        test_source = _read_required(test_path, "Test file")

        if not os.path.isfile(dom_path):
            raise MissingContentError(f"DOM file not found: {dom_path}")
        if not is_cleaned_artifact(dom_path):
            dom_path = clean_dom_file(dom_path).cleaned_path
        normalized_dom = _read_required(dom_path, "DOM file")

        payload = self.builder.build(
            test_source, normalized_dom, context, run_metadata or RunMetadata.from_environment()
        )
        payload_path = self.writer.write(PAYLOAD_FILENAME, payload.to_request_body())

        metrics = compute_metrics(test_source, normalized_dom, payload)
        logger.info(
            "Metrics: test_lines=%d dom_chars=%d payload_chars=%d",
            metrics.test_lines, metrics.dom_chars, metrics.payload_chars,
        )

        return PreparedRun(
            test_name=test_name,
            context=context,
            dom_path=dom_path,
            test_source=test_source,
            normalized_dom=normalized_dom,
            payload=payload,
            metrics=metrics,
            payload_path=payload_path,
        )

    # -------------------------------------------------------------------
    # Stage 2: model call (optional, usually done by the workflow)
    # -------------------------------------------------------------------
    def request(self, request_body: dict) -> str:
        if self.client is None:
            self.client = LLMClient()
        return self.client.complete(request_body)

    def request_from_file(self, payload_path: str) -> str:
        try:
            request_body = read_json_artifact(payload_path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ModelRequestError(f"Payload is not valid JSON: {payload_path}: {e}") from e
        if not isinstance(request_body, dict):
            raise ModelRequestError(f"Payload must be a JSON object: {payload_path}")
        return self.request(request_body)

    # -------------------------------------------------------------------
    # Stage 3: parse + validate
    # -------------------------------------------------------------------
    def process_response(self, raw_text: str) -> AnalysisResponse:
        """
        Validate the model reply, preflight it against the live file, and
        persist the trusted fix data.
        """
        response = parse_fix_response(raw_text)
        logger.info("Analysis: %s", response.analysis)
        logger.info("Fix: %s:%d", response.fix.file, response.fix.line)
        logger.info("Reason: %s", response.fix.reason)

        self.applier.check(response.fix)
        logger.info("Fix validation passed")

        self.writer.write(FIX_DATA_FILENAME, response.to_json_dict())
        return response

    def process_response_file(self, response_path: str) -> AnalysisResponse:
        return self.process_response(read_response_file(response_path))

    # -------------------------------------------------------------------
    # Stage 4: apply / revert
    # -------------------------------------------------------------------
    def apply(self, response: AnalysisResponse) -> FixSummary:
        fix = response.fix
        logger.info("Target file: %s", fix.file)
        logger.info("Location: line %d, column %d", fix.line, fix.column)
        logger.info("Old code: %s", fix.old_code)
        logger.info("New code: %s", fix.new_code)

        result = self.applier.apply(fix)
        summary = FixSummary(
            timestamp=datetime.now(timezone.utc).isoformat(),
            fix=fix,
            result=result,
            backup=result.backup_path,
        )
        self.writer.write(FIX_SUMMARY_FILENAME, summary.to_json_dict())
        return summary

    def apply_fix_file(self, fix_data_path: str) -> FixSummary:
        """Apply fix data from disk; it is re-validated, not trusted as-is."""
        try:
            data = read_json_artifact(fix_data_path)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise NoStructuredContentError(f"Fix data is not valid JSON: {fix_data_path}: {e}") from e
        return self.apply(validate_fix_response(data))

    def revert(self, file_path: str) -> bool:
        return self.applier.revert(file_path)

    # -------------------------------------------------------------------
    # Full pipeline
    # -------------------------------------------------------------------
    def run(
        self,
        dom_path: str,
        raw_response: str,
        run_metadata: Optional[RunMetadata] = None,
    ) -> FixSummary:
        """Run every in-process stage for one failure and an already-obtained reply."""
        self.prepare(dom_path, run_metadata)
        response = self.process_response(raw_response)
        return self.apply(response)
