"""
DOM Cleaner
===========
Shrinks a captured failure DOM snapshot before it is used as prompt evidence.

Output shape (always, even for malformed input):
    <html><head><title>{title}</title></head><body>{body}</body></html>

Rules:
    - Every <script> and <style> element is removed, wherever it sits.
    - Only the <title> text and the serialized children of <body> survive.
    - Missing title / body → empty string in their slot, never an exception.
    - Deterministic and idempotent: cleaning a cleaned document is a no-op.

``clean_dom`` is a pure transform. ``clean_failures_directory`` is the batch
helper the CI step runs over the runner's failures directory; it writes each
result next to the original as ``<name>-clean.html``.
"""
import html
import logging
import os
from dataclasses import dataclass

from bs4 import BeautifulSoup

from autoheal.core.constants import CLEAN_DOM_SUFFIX, RAW_DOM_SUFFIX
from autoheal.core.errors import MissingContentError

logger = logging.getLogger(__name__)

_STRIPPED_TAGS = ["script", "style"]


def clean_dom(html_content: str) -> str:
    """Reduce raw markup to its title and script/style-free body."""
    soup = BeautifulSoup(html_content or "", "html.parser")
    for element in soup.find_all(_STRIPPED_TAGS):
        element.decompose()

    title_tag = soup.find("title")
    title = title_tag.get_text() if title_tag else ""

    body_tag = soup.find("body")
    body = body_tag.decode_contents() if body_tag else ""

    return (
        f"<html><head><title>{html.escape(title, quote=False)}</title></head>"
        f"<body>{body}</body></html>"
    )


def cleaned_name_for(filename: str) -> str:
    """``login.html`` → ``login-clean.html``."""
    if filename.endswith(RAW_DOM_SUFFIX):
        filename = filename[: -len(RAW_DOM_SUFFIX)]
    return filename + CLEAN_DOM_SUFFIX


def is_cleaned_artifact(path: str) -> bool:
    return path.endswith(CLEAN_DOM_SUFFIX)


@dataclass
class CleanedArtifact:
    source_path: str
    cleaned_path: str
    original_chars: int
    cleaned_chars: int


def clean_dom_file(path: str) -> CleanedArtifact:
    """
    Clean one snapshot and write the result next to it.

    Raises MissingContentError if the snapshot is not UTF-8 text, since it
    cannot be used as prompt evidence.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except UnicodeDecodeError as e:
        raise MissingContentError(f"DOM snapshot is not valid UTF-8: {path}: {e}") from e

    cleaned = clean_dom(content)
    cleaned_path = os.path.join(os.path.dirname(path), cleaned_name_for(os.path.basename(path)))
    with open(cleaned_path, "w", encoding="utf-8") as f:
        f.write(cleaned)

    logger.info(
        "Cleaned %s -> %s: %d -> %d chars",
        os.path.basename(path), os.path.basename(cleaned_path), len(content), len(cleaned),
    )
    return CleanedArtifact(
        source_path=path,
        cleaned_path=cleaned_path,
        original_chars=len(content),
        cleaned_chars=len(cleaned),
    )


def clean_failures_directory(failures_dir: str) -> list[CleanedArtifact]:
    """
    Clean every raw ``*.html`` snapshot in ``failures_dir``.

    Already-cleaned outputs are skipped so re-running the step does not
    produce ``-clean-clean.html`` files. A missing directory means there
    were no failures and yields an empty list.
    """
    if not os.path.isdir(failures_dir):
        logger.info("No failures directory found at %s", failures_dir)
        return []

    results: list[CleanedArtifact] = []
    for name in sorted(os.listdir(failures_dir)):
        if not name.endswith(RAW_DOM_SUFFIX) or is_cleaned_artifact(name):
            continue
        results.append(clean_dom_file(os.path.join(failures_dir, name)))

    logger.info("Processed %d file(s)", len(results))
    return results
