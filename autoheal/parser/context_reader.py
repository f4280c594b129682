"""
Context Reader
==============
Loads the failure-context record the test runner writes next to each DOM
snapshot.

Naming convention (same directory):
    <testName>.html           raw DOM snapshot
    <testName>-clean.html     cleaned DOM snapshot
    <testName>.context.json   failure context record

The DOM file name only encodes the test *name*. The context record carries
the test *path* (``testFile``), which is what the pipeline edits, since
several suites may contain tests with the same name.
"""
import json
import logging
import os

from pydantic import ValidationError

from autoheal.core.constants import CLEAN_DOM_SUFFIX, CONTEXT_SUFFIX, RAW_DOM_SUFFIX
from autoheal.core.errors import ContextNotFoundError, ContextParseError
from autoheal.models.failure_context import FailureContext

logger = logging.getLogger(__name__)


def extract_test_name(dom_path: str) -> str:
    """``cypress/failures/adds a todo-clean.html`` → ``adds a todo``."""
    name = os.path.basename(dom_path)
    for suffix in (CLEAN_DOM_SUFFIX, RAW_DOM_SUFFIX):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def context_path_for(dom_path: str) -> str:
    return os.path.join(
        os.path.dirname(dom_path), extract_test_name(dom_path) + CONTEXT_SUFFIX
    )


def read_failure_context(dom_path: str) -> FailureContext:
    """
    Load and validate the context record belonging to ``dom_path``.

    Raises
    ------
    ContextNotFoundError
        The sibling record does not exist.
    ContextParseError
        The record is not valid JSON or does not have the expected shape.
    """
    path = context_path_for(dom_path)
    if not os.path.isfile(path):
        raise ContextNotFoundError(f"Failure context not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ContextParseError(f"Failure context is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise ContextParseError(
            f"Failure context must be a JSON object, got {type(data).__name__}: {path}"
        )

    try:
        context = FailureContext.model_validate(data)
    except ValidationError as e:
        raise ContextParseError(f"Failure context has an invalid shape: {path}: {e}") from e

    logger.debug("Loaded failure context for %r from %s", context.test_name, path)
    return context
