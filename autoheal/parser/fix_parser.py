"""
Fix Parser
==========
Turns the model's raw text reply into a validated AnalysisResponse.

This is the trust boundary: nothing the model says is acted upon before
it passes every check below.

Extraction:
    The model may wrap its JSON in prose or ``` fences. ``find_json_object``
    scans for the first balanced ``{...}`` span, tracking JSON string
    literals and escapes so braces inside ``oldCode`` / ``newCode`` values
    do not end the span early. The first balanced span that decodes to a
    JSON object wins.

Validation:
    analysis        non-empty string
    fix             object with all six fields
    fix.file        non-empty string
    fix.line        integer >= 1 (booleans rejected)
    fix.column      integer >= 1 (booleans rejected)
    fix.oldCode     non-empty string
    fix.newCode     string (empty allowed: deletes oldCode)
    fix.reason      non-empty string

Every violation raises SchemaViolationError naming the offending field.
Validation is pure: no file is touched here.
"""
import json
import logging
from typing import Any, Iterator, Optional

from autoheal.core.constants import REQUIRED_FIX_FIELDS
from autoheal.core.errors import NoStructuredContentError, SchemaViolationError
from autoheal.models.fix_record import AnalysisResponse, FixRecord

logger = logging.getLogger(__name__)

_INTEGER_FIELDS = ("line", "column")
_NON_EMPTY_STRING_FIELDS = ("file", "oldCode", "reason")


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
def _balanced_span_end(text: str, start: int) -> Optional[int]:
    """
    Return the index one past the ``}`` closing the ``{`` at ``start``,
    or None if the braces never balance.
    """
    depth = 0
    in_string = False
    escaped = False

    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1

    return None


def iter_balanced_spans(text: str) -> Iterator[str]:
    """Yield every balanced ``{...}`` candidate, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        end = _balanced_span_end(text, start)
        if end is not None:
            yield text[start:end]
        start = text.find("{", start + 1)


def find_json_object(text: str) -> dict:
    """
    Locate and decode the first balanced JSON object in free text.

    Raises
    ------
    NoStructuredContentError
        No balanced span decodes to a JSON object.
    """
    if not text or "{" not in text:
        raise NoStructuredContentError("No JSON object found in model response")

    for candidate in iter_balanced_spans(text):
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    raise NoStructuredContentError(
        "Model response contains braces but no decodable JSON object"
    )


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------
def _type_name(value: Any) -> str:
    return "null" if value is None else type(value).__name__


def validate_fix_fields(fix: Any) -> FixRecord:
    if not isinstance(fix, dict):
        raise SchemaViolationError("fix", f"must be an object, got {_type_name(fix)}")

    for name in REQUIRED_FIX_FIELDS:
        if name not in fix:
            raise SchemaViolationError(f"fix.{name}", "missing required field")

    for name in _INTEGER_FIELDS:
        value = fix[name]
        if isinstance(value, bool) or not isinstance(value, int):
            raise SchemaViolationError(
                f"fix.{name}", f"must be an integer, got {_type_name(value)}"
            )
        if value < 1:
            raise SchemaViolationError(f"fix.{name}", f"must be >= 1, got {value}")

    for name in REQUIRED_FIX_FIELDS:
        if name in _INTEGER_FIELDS:
            continue
        value = fix[name]
        if not isinstance(value, str):
            raise SchemaViolationError(
                f"fix.{name}", f"must be a string, got {_type_name(value)}"
            )
        if name in _NON_EMPTY_STRING_FIELDS and not value:
            raise SchemaViolationError(f"fix.{name}", "must not be empty")

    return FixRecord.model_validate({name: fix[name] for name in REQUIRED_FIX_FIELDS})


def validate_fix_response(data: Any) -> AnalysisResponse:
    """Validate an already-decoded reply against the fix schema."""
    if not isinstance(data, dict):
        raise SchemaViolationError("response", f"must be an object, got {_type_name(data)}")

    analysis = data.get("analysis")
    if not isinstance(analysis, str) or not analysis.strip():
        raise SchemaViolationError("analysis", "missing or not a non-empty string")

    if "fix" not in data:
        raise SchemaViolationError("fix", "missing required field")

    fix = validate_fix_fields(data["fix"])
    return AnalysisResponse(analysis=analysis, fix=fix)


def parse_fix_response(raw_text: str) -> AnalysisResponse:
    """Extract and validate the structured fix from a raw model reply."""
    data = find_json_object(raw_text)
    response = validate_fix_response(data)
    logger.info("Model response parsed: %s:%d", response.fix.file, response.fix.line)
    logger.debug("Analysis: %s", response.analysis)
    return response
