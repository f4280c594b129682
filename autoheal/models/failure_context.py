"""
Failure Context Model
=====================
Pydantic model for the sibling context record the test runner writes next
to each failure DOM snapshot.

JSON shape (camelCase keys, as written by the Cypress hook):
    {
        "testName":  "adds a new todo",
        "testFile":  "tests/e2e/new-todo.spec.js",
        "specFile":  "new-todo.spec.js",
        "timestamp": "2024-05-01T12:00:00.000Z",
        "error": {"message": "...", "stack": "...", "line": 7, "column": 8}
    }

Fields:
    test_name   — identifier of the failing test case
    test_file   — path of the source file to edit (source of truth for the target)
    spec_file   — containing suite (informational only)
    timestamp   — capture time, kept as the runner wrote it
    error       — optional error details; line/column may be missing when the
                  runner could not parse the stack trace

The record is read-only to the pipeline (frozen).
"""
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class KnownLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["known"] = "known"
    line: int
    column: int


class UnknownLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["unknown"] = "unknown"


ErrorLocation = Union[KnownLocation, UnknownLocation]


class ErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str = ""
    stack: str = ""
    line: Optional[int] = None
    column: Optional[int] = None

    def location(self) -> ErrorLocation:
        """Collapse the nullable line/column pair into a tagged location."""
        if (
            isinstance(self.line, int) and self.line >= 1
            and isinstance(self.column, int) and self.column >= 1
        ):
            return KnownLocation(line=self.line, column=self.column)
        return UnknownLocation()


class FailureContext(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    test_name: str = Field(alias="testName")
    test_file: str = Field(alias="testFile")
    spec_file: str = Field(alias="specFile")
    timestamp: str
    error: Optional[ErrorInfo] = None

    @property
    def error_location(self) -> ErrorLocation:
        if self.error is None:
            return UnknownLocation()
        return self.error.location()

    @property
    def error_message(self) -> str:
        return self.error.message if self.error else ""
