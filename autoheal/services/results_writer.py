"""
Results Writer
==============
Serializes pipeline artifacts (request payload, validated fix, fix summary)
to pretty-printed JSON so later CI steps, and humans, can pick them up.

Artifacts are written as soon as the step producing them completes, so a
failure in a later step never destroys the evidence of an earlier one.
"""
import json
import logging
import os
from typing import Any

logger = logging.getLogger(__name__)


class ResultsWriter:
    """
    Writes JSON artifacts into a single output directory.
    """

    def __init__(self, output_dir: str = ".") -> None:
        self.output_dir = output_dir

    def path_for(self, filename: str) -> str:
        return os.path.join(self.output_dir, filename)

    def write(self, filename: str, data: Any) -> str:
        """
        Write ``data`` as JSON to ``output_dir/filename`` and return the path.
        """
        return write_json_artifact(self.path_for(filename), data)


def write_json_artifact(path: str, data: Any) -> str:
    abs_output = os.path.abspath(path)
    parent = os.path.dirname(abs_output)
    if parent:
        os.makedirs(parent, exist_ok=True)

    with open(abs_output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")

    logger.info("Saved %s", abs_output)
    return abs_output


def read_json_artifact(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
