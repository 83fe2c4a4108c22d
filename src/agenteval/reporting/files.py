"""JSON persistence for traces and evaluation reports.

Artifacts are written whole (overwriting any existing file) as indented
UTF-8 JSON. Loading a trace is lenient about the steps themselves but
requires the document to be a JSON array.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from agenteval.agent.models import TraceStep
from agenteval.exceptions import ArtifactError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from agenteval.evaluation.models import EvaluationReport

logger = logging.getLogger(__name__)


def _write_json(data: Any, path: str | Path) -> Path:
    target = Path(path)
    try:
        target.write_text(
            json.dumps(data, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )
    except OSError as exc:
        raise ArtifactError(f"Cannot write {target}: {exc}") from exc
    return target


def _read_json(path: str | Path) -> Any:
    source = Path(path)
    try:
        text = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise ArtifactError(f"Cannot read {source}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ArtifactError(f"{source} is not valid JSON: {exc}") from exc


def save_trace(steps: Iterable[TraceStep], path: str | Path) -> Path:
    """Write a trace as a JSON array of serialized steps."""
    payload = [step.to_dict() for step in steps]
    target = _write_json(payload, path)
    logger.info("Trace saved to %s (%d steps)", target, len(payload))
    return target


def load_trace(path: str | Path) -> tuple[TraceStep, ...]:
    """Read a trace written by save_trace, or produced elsewhere.

    Raises:
        ArtifactError: If the file is unreadable, not JSON, or not an array.
    """
    data = _read_json(path)
    if not isinstance(data, list):
        raise ArtifactError(
            f"{path} does not contain a trace (expected a JSON array, "
            f"got {type(data).__name__})"
        )
    steps = []
    for index, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            logger.warning("Skipping trace entry %d: not an object", index)
            continue
        steps.append(TraceStep.from_dict(item))
    return tuple(steps)


def save_report(report: EvaluationReport, path: str | Path) -> Path:
    target = _write_json(report.to_dict(), path)
    logger.info("JSON report saved to %s", target)
    return target


def load_report_dict(path: str | Path) -> dict[str, Any]:
    """Read a saved report back as a plain dict.

    Raises:
        ArtifactError: If the file is unreadable or not a JSON object.
    """
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ArtifactError(f"{path} does not contain a report object")
    return data
