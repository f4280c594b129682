"""
Fix Record Models
=================
Pydantic models for the model's proposed edit and what applying it produced.

FixRecord fields (JSON keys in camelCase, as the model is asked to reply):
    file      — target path, non-empty
    line      — 1-based line number
    column    — 1-based column number (advisory, never checked against the file)
    oldCode   — exact substring expected on ``line``
    newCode   — replacement substring (may be empty to delete ``oldCode``)
    reason    — human-readable justification, surfaced but never interpreted

A FixRecord is only *appliable* if the file exists, ``line`` is within the
file and the line contains ``oldCode``. Those checks run in FixApplier right
before mutation, not here.
"""
from pydantic import BaseModel, ConfigDict, Field


class FixRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file: str = Field(min_length=1)
    line: int = Field(ge=1)
    column: int = Field(ge=1)
    old_code: str = Field(alias="oldCode", min_length=1)
    new_code: str = Field(alias="newCode")
    reason: str = Field(min_length=1)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


class AnalysisResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    analysis: str = Field(min_length=1)
    fix: FixRecord

    def to_json_dict(self) -> dict:
        return {"analysis": self.analysis, "fix": self.fix.to_json_dict()}


class BackupRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    original_path: str = Field(alias="originalPath")
    backup_path: str = Field(alias="backupPath")


class ApplyResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file: str
    line: int
    old_line: str = Field(alias="oldLine")
    new_line: str = Field(alias="newLine")
    success: bool = True
    backup_path: str = Field(default="", alias="backupPath")


class FixSummary(BaseModel):
    """Durable record of one applied fix (written to fix-summary.json)."""
    timestamp: str
    fix: FixRecord
    result: ApplyResult
    backup: str

    def to_json_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "fix": self.fix.to_json_dict(),
            "result": self.result.model_dump(by_alias=True),
            "backup": self.backup,
        }
