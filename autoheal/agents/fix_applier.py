"""
Fix Applier
===========
Applies a validated FixRecord to the live test file, one line at a time.

Preconditions (checked in order, re-checked right before every write):
    1. Target file exists                  → TargetFileNotFoundError
    2. 1 <= line <= line count             → LineOutOfRangeError
    3. Target line contains oldCode        → CodeMismatchError

Side effects (in order):
    1. Copy the file to ``<file>.backup``  → BackupFailureError aborts before any write
    2. Replace the FIRST occurrence of oldCode on that line only
    3. Write the full content to a temp file and swap it in, so a failed
       write leaves the original intact

Line handling:
    Files are split on "\\n" only and read/written without newline
    translation, so CRLF endings and every untouched line survive
    byte-for-byte.

Scope:
    Exact-substring, line-scoped matching. A plausible-but-wrong oldCode
    cannot rewrite an occurrence on some other line of the file.

The FixApplier does NOT:
    - Parse the target language
    - Edit more than one line or one file
    - Delete backups (they stay until a revert consumes them, and after)
"""
import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from typing import Optional

from autoheal.core.constants import BACKUP_SUFFIX
from autoheal.core.errors import (
    BackupFailureError,
    CodeMismatchError,
    FixApplyError,
    LineOutOfRangeError,
    TargetFileNotFoundError,
)
from autoheal.models.fix_record import ApplyResult, BackupRecord, FixRecord

logger = logging.getLogger(__name__)


def backup_path_for(file_path: str) -> str:
    return f"{file_path}{BACKUP_SUFFIX}"


def create_backup(file_path: str) -> BackupRecord:
    """
    Copy ``file_path`` to its backup location, replacing any older backup.

    Raises
    ------
    BackupFailureError
        The copy could not be made. Callers must not mutate the file.
    """
    backup_path = backup_path_for(file_path)
    try:
        shutil.copy2(file_path, backup_path)
    except OSError as e:
        raise BackupFailureError(f"Could not create backup {backup_path}: {e}") from e

    logger.info("Backup created: %s", backup_path)
    return BackupRecord(original_path=file_path, backup_path=backup_path)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: str, content: str) -> None:
    """Write to a sibling temp file, then swap it over ``path``."""
    fd, tmp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=os.path.dirname(path) or "."
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


@dataclass
class _CheckedTarget:
    path: str
    lines: list[str]
    index: int


class FixApplier:
    """
    Verifies and applies single-line fixes.

    Parameters
    ----------
    workspace : str or None
        Root that relative fix paths resolve against. When set, fixes that
        resolve outside it are rejected as missing targets. None resolves
        against the current directory without confinement.
    """

    def __init__(self, workspace: Optional[str] = None) -> None:
        self.workspace = workspace

    # -------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------
    def resolve(self, file_path: str) -> str:
        if self.workspace is None:
            return file_path

        root = os.path.abspath(self.workspace)
        resolved = os.path.normpath(os.path.join(root, file_path))
        if os.path.commonpath([root, resolved]) != root:
            raise TargetFileNotFoundError(
                f"Target file is outside the workspace {root}: {file_path}"
            )
        return resolved

    def check(self, fix: FixRecord) -> None:
        """Run the three preconditions without touching the file."""
        self._check(fix)

    def apply(self, fix: FixRecord) -> ApplyResult:
        """
        Apply ``fix`` to its target file.

        Returns
        -------
        ApplyResult
            Old and new line text plus the backup location.
        """
        logger.info("Applying fix to %s:%d:%d", fix.file, fix.line, fix.column)
        logger.info("Reason: %s", fix.reason)

        target = self._check(fix)
        old_line = target.lines[target.index]
        new_line = old_line.replace(fix.old_code, fix.new_code, 1)

        backup = create_backup(target.path)

        target.lines[target.index] = new_line
        try:
            _write_text(target.path, "\n".join(target.lines))
        except OSError as e:
            raise FixApplyError(
                f"Failed to write {target.path} (backup at {backup.backup_path}): {e}"
            ) from e

        logger.info("Old: %s", old_line.strip())
        logger.info("New: %s", new_line.strip())

        return ApplyResult(
            file=fix.file,
            line=fix.line,
            old_line=old_line,
            new_line=new_line,
            success=True,
            backup_path=backup.backup_path,
        )

    def revert(self, file_path: str) -> bool:
        """
        Restore ``file_path`` from its most recent backup.

        Returns False (and logs) instead of raising when there is nothing to
        restore; callers decide whether that is fatal.
        """
        try:
            path = self.resolve(file_path)
        except TargetFileNotFoundError as e:
            logger.error("Cannot revert: %s", e)
            return False
        backup_path = backup_path_for(path)

        if not os.path.isfile(backup_path):
            logger.error("No backup found for: %s", path)
            return False

        try:
            shutil.copyfile(backup_path, path)
        except OSError as e:
            logger.error("Failed to restore %s from %s: %s", path, backup_path, e)
            return False

        logger.info("Reverted fix using backup: %s", backup_path)
        return True

    # -------------------------------------------------------------------
    # Internal Helpers
    # -------------------------------------------------------------------
    def _check(self, fix: FixRecord) -> _CheckedTarget:
        path = self.resolve(fix.file)
        if not os.path.isfile(path):
            raise TargetFileNotFoundError(f"Target file does not exist: {fix.file}")

        try:
            lines = _read_text(path).split("\n")
        except (OSError, UnicodeDecodeError) as e:
            raise FixApplyError(f"Could not read {fix.file}: {e}") from e

        if fix.line < 1 or fix.line > len(lines):
            raise LineOutOfRangeError(
                f"Line {fix.line} does not exist in file {fix.file} ({len(lines)} lines)"
            )

        index = fix.line - 1
        if fix.old_code not in lines[index]:
            raise CodeMismatchError(
                f"Expected code {fix.old_code!r} not found on line {fix.line} of {fix.file}"
            )

        return _CheckedTarget(path=path, lines=lines, index=index)
