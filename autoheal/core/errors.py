"""
Healing Errors
==============
Exception taxonomy for the fix pipeline.

Every error carries the pipeline ``stage`` it belongs to so the CLI can
print a diagnostic naming the stage and the offending value before exiting
non-zero. Stages fail fast: nothing downstream runs once one of these is
raised, and no file is mutated unless every apply-time precondition passed.

Stages:
    context  — sibling failure-context record missing or malformed
    payload  — required prompt content absent
    request  — model provider call failed (optional client only)
    parse    — model reply untrustworthy
    apply    — apply-time precondition or backup failure
"""


class HealingError(Exception):
    """Base class for every fix pipeline failure."""
    stage = "pipeline"


# ---------------------------------------------------------------------------
# Context stage
# ---------------------------------------------------------------------------
class ContextError(HealingError):
    stage = "context"


class ContextNotFoundError(ContextError):
    pass


class ContextParseError(ContextError):
    pass


# ---------------------------------------------------------------------------
# Payload stage
# ---------------------------------------------------------------------------
class MissingContentError(HealingError):
    stage = "payload"


# ---------------------------------------------------------------------------
# Request stage
# ---------------------------------------------------------------------------
class ModelRequestError(HealingError):
    stage = "request"


# ---------------------------------------------------------------------------
# Parse stage (trust boundary)
# ---------------------------------------------------------------------------
class ResponseError(HealingError):
    stage = "parse"


class NoStructuredContentError(ResponseError):
    pass


class SchemaViolationError(ResponseError):
    """Raised when a decoded reply does not match the fix schema.

    ``field`` names the offending field, e.g. ``"analysis"`` or ``"fix.line"``.
    """

    def __init__(self, field: str, problem: str) -> None:
        self.field = field
        self.problem = problem
        super().__init__(f"{field}: {problem}")


# ---------------------------------------------------------------------------
# Apply stage
# ---------------------------------------------------------------------------
class FixApplyError(HealingError):
    stage = "apply"


class TargetFileNotFoundError(FixApplyError, FileNotFoundError):
    pass


class LineOutOfRangeError(FixApplyError):
    pass


class CodeMismatchError(FixApplyError):
    pass


class BackupFailureError(FixApplyError):
    pass
