"""Workflow outputs for GitHub Actions."""

from __future__ import annotations

import json
import os
import uuid
from collections.abc import Mapping
from pathlib import Path

from pychangesets.commands import NoOpResult, PublishResult, RunResult, VersionResult


def result_outputs(result: RunResult) -> dict[str, str]:
    """Translate a run result into step outputs.

    Keys follow the changesets action: ``hasChangesets``, ``published``,
    ``publishedPackages`` and ``pullRequestNumber``.
    """
    outputs = {"hasChangesets": "false", "published": "false", "publishedPackages": "[]"}

    if isinstance(result, NoOpResult):
        outputs["hasChangesets"] = json.dumps(result.has_changesets)
    elif isinstance(result, VersionResult):
        outputs["hasChangesets"] = "true"
        if result.pull_request_number is not None:
            outputs["pullRequestNumber"] = str(result.pull_request_number)
    elif isinstance(result, PublishResult) and result.published:
        outputs["published"] = "true"
        outputs["publishedPackages"] = json.dumps(
            [{"name": p.name, "version": p.version} for p in result.packages]
        )
    return outputs


def write_outputs(outputs: Mapping[str, str], path: Path | None = None) -> bool:
    """Append outputs to the ``$GITHUB_OUTPUT`` file.

    Values are written with heredoc delimiters so they may span lines.

    Args:
        outputs: Output names and values.
        path: Output file. Defaults to ``$GITHUB_OUTPUT``.

    Returns:
        False if there is no output file to write to.
    """
    if path is None:
        env_path = os.environ.get("GITHUB_OUTPUT")
        if not env_path:
            return False
        path = Path(env_path)

    with path.open("a", encoding="utf-8") as f:
        for name, value in outputs.items():
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True
