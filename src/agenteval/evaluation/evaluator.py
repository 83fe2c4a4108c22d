"""Trace evaluation against an expected workflow.

Five independent, pure checks each produce a CheckResult and feed one
0-100 score; the overall score is their unweighted mean. No check raises:
empty, truncated or malformed traces score as failures with a message.
Rendering is left to consumers of the returned EvaluationReport.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from agenteval.agent.models import TraceStep
from agenteval.evaluation.models import (
    CheckResult,
    EvaluationReport,
    EvaluationScores,
    ExpectedWorkflowSpec,
)
from agenteval.toolkit.definitions import FINAL_REPORT_TOOL

logger = logging.getLogger(__name__)

CALL_API_TOOL = "callApi"

_USER_ID_RE = re.compile(r"/users/(-?\d+)")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def extract_user_id(url: Any) -> int | None:
    """Return the signed integer id after ``/users/`` in ``url``, if any."""
    if not isinstance(url, str):
        return None
    match = _USER_ID_RE.search(url)
    if match is None:
        return None
    return int(match.group(1))


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _api_calls(trace: tuple[TraceStep, ...]) -> list[TraceStep]:
    return [step for step in trace if step.action == CALL_API_TOOL]


def _status(step: TraceStep) -> Any:
    return _mapping(step.result).get("status")


def _schema_valid(step: TraceStep) -> bool:
    return _mapping(step.result).get("schemaValid") is True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _fmt(value: Any) -> str:
    """Render a trace value for messages (JSON-style booleans, integral floats as ints)."""
    if value is None:
        return "missing"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _invalid_id_steps(
    trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec
) -> list[tuple[TraceStep, int]]:
    """callApi steps whose URL id is one of the spec's invalid test ids."""
    invalid = set(spec.invalid_test_ids)
    matches = []
    for step in _api_calls(trace):
        user_id = extract_user_id(_mapping(step.args).get("url"))
        if user_id is not None and user_id in invalid:
            matches.append((step, user_id))
    return matches


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_workflow(
    trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec
) -> CheckResult:
    """Every required tool was used, and a final report exists if required."""
    if not trace:
        return CheckResult(
            passed=False, message="No steps in trace", errors=("Trace is empty",)
        )

    errors: list[str] = []
    used = {step.action for step in trace}
    missing = [tool for tool in spec.required_tools if tool not in used]
    if missing:
        errors.append(f"Missing required tools: {', '.join(missing)}")

    if spec.must_have_final_report and FINAL_REPORT_TOOL not in used:
        errors.append("Agent did not submit final_report")

    if errors:
        return CheckResult(False, "Workflow issues found", tuple(errors))
    return CheckResult(
        True, f"Workflow complete: {len(trace)} steps, all required tools used"
    )


def check_tool_usage(
    trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec
) -> CheckResult:
    """Every step used a recognized tool; every callApi carried method and url."""
    errors: list[str] = []
    valid_tools = set(spec.required_tools) | {FINAL_REPORT_TOOL}

    for step in trace:
        if step.action not in valid_tools:
            errors.append(f"Step {step.step}: Unknown tool '{step.action}'")
        if step.action == CALL_API_TOOL:
            args = _mapping(step.args)
            if not args.get("method") or not args.get("url"):
                errors.append(f"Step {step.step}: callApi missing method or url")

    if errors:
        return CheckResult(
            False, f"Found {len(errors)} tool usage error(s)", tuple(errors)
        )
    return CheckResult(True, "All tools used correctly")


def check_schemas(trace: tuple[TraceStep, ...]) -> CheckResult:
    """Every callApi response was schema-valid; at least one call was made."""
    calls = _api_calls(trace)
    if not calls:
        return CheckResult(False, "No API calls found")

    errors = [
        f"Step {step.step}: Invalid schema for "
        f"{_mapping(step.args).get('url') or 'unknown'} (status {_fmt(_status(step))})"
        for step in calls
        if not _schema_valid(step)
    ]
    valid = len(calls) - len(errors)
    return CheckResult(
        passed=not errors,
        message=f"{valid}/{len(calls)} API responses have valid schemas",
        errors=tuple(errors),
    )


def check_failure_handling(
    trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec
) -> CheckResult:
    """Calls for invalid ids got a schema-valid 404; at least one such call."""
    matches = _invalid_id_steps(trace, spec)
    if not matches:
        return CheckResult(False, "No error test cases found")

    errors: list[str] = []
    for step, user_id in matches:
        if not (_status(step) == 404 and _schema_valid(step)):
            result = _mapping(step.result)
            errors.append(
                f"Step {step.step}: Invalid ID {user_id} not handled correctly "
                f"(status: {_fmt(result.get('status'))}, "
                f"schema valid: {_fmt(result.get('schemaValid', False))})"
            )
    handled = len(matches) - len(errors)
    return CheckResult(
        passed=not errors,
        message=f"{handled}/{len(matches)} error cases handled correctly",
        errors=tuple(errors),
    )


def check_final_report(trace: tuple[TraceStep, ...]) -> CheckResult:
    """The first final_report's counts agree with the recorded callApi steps."""
    final_step = next(
        (step for step in trace if step.action == FINAL_REPORT_TOOL), None
    )
    if final_step is None:
        return CheckResult(
            False, "No final_report submitted", ("Agent did not call final_report",)
        )

    report = _mapping(final_step.result)
    calls = _api_calls(trace)
    actual = {
        "totalTests": (len(calls), "actual API calls"),
        "successCount": (sum(1 for s in calls if _status(s) == 200), "actual successes"),
        "errorCount": (sum(1 for s in calls if _status(s) == 404), "actual errors"),
    }

    errors: list[str] = []
    for key, (expected, label) in actual.items():
        reported = report.get(key)
        if not (_is_number(reported) and reported == expected):
            errors.append(
                f"Report {key} ({_fmt(reported)}) doesn't match {label} ({expected})"
            )

    if errors:
        return CheckResult(False, "Final report has inconsistencies", tuple(errors))
    return CheckResult(
        True,
        f"Final report matches trace: {_fmt(report.get('totalTests'))} tests, "
        f"{_fmt(report.get('successCount'))} success, "
        f"{_fmt(report.get('errorCount'))} errors",
    )


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------


def tool_accuracy(trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec) -> float:
    if not trace:
        return 0.0
    valid_tools = set(spec.required_tools) | {FINAL_REPORT_TOOL}
    recognized = sum(1 for step in trace if step.action in valid_tools)
    return recognized / len(trace) * 100


def schema_pass_rate(trace: tuple[TraceStep, ...]) -> float:
    calls = _api_calls(trace)
    if not calls:
        return 0.0
    return sum(1 for step in calls if _schema_valid(step)) / len(calls) * 100


def failure_handling_rate(
    trace: tuple[TraceStep, ...], spec: ExpectedWorkflowSpec
) -> float:
    matches = _invalid_id_steps(trace, spec)
    if not matches:
        return 0.0
    handled = sum(
        1 for step, _ in matches if _status(step) == 404 and _schema_valid(step)
    )
    return handled / len(matches) * 100


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _coerce_trace(trace: Iterable[TraceStep | Mapping[str, Any]]) -> tuple[TraceStep, ...]:
    steps = []
    for item in trace:
        if isinstance(item, TraceStep):
            steps.append(item)
        elif isinstance(item, Mapping):
            steps.append(TraceStep.from_dict(dict(item)))
        else:
            logger.warning("Ignoring non-step trace entry of type %s", type(item).__name__)
    return tuple(steps)


def evaluate_trace(
    trace: Iterable[TraceStep | Mapping[str, Any]],
    spec: ExpectedWorkflowSpec | None = None,
    *,
    clock: Callable[[], datetime] | None = None,
) -> EvaluationReport:
    """Score a trace against an expected workflow.

    Args:
        trace: Recorded steps. Serialized step dicts are accepted too.
        spec: Contract to score against. Defaults to ExpectedWorkflowSpec().
        clock: Source of the report timestamp (defaults to UTC now).

    Returns:
        EvaluationReport with the five check results, scores and the trace.
    """
    spec = spec or ExpectedWorkflowSpec()
    steps = _coerce_trace(trace)

    workflow = check_workflow(steps, spec)
    tool_usage = check_tool_usage(steps, spec)
    schema_validation = check_schemas(steps)
    error_handling = check_failure_handling(steps, spec)
    final_report = check_final_report(steps)

    scores = EvaluationScores(
        step_accuracy=100.0 if workflow.passed else 50.0,
        tool_accuracy=tool_accuracy(steps, spec),
        schema_pass_rate=schema_pass_rate(steps),
        failure_handling=failure_handling_rate(steps, spec),
        final_correctness=100.0 if final_report.passed else 0.0,
    )

    report = EvaluationReport(
        total_steps=len(steps),
        timestamp=(clock or _utc_now)().isoformat(),
        scores=scores,
        agent_completed=final_report.passed,
        workflow=workflow,
        tool_usage=tool_usage,
        schema_validation=schema_validation,
        error_handling=error_handling,
        final_report=final_report,
        trace=steps,
    )
    logger.info(
        "Evaluated %d steps: overall %.1f%% (completed=%s)",
        report.total_steps,
        report.overall_score,
        report.agent_completed,
    )
    return report


class WorkflowEvaluator:
    """Evaluator bound to one ExpectedWorkflowSpec.

    Stateless apart from the spec, so one instance may evaluate many traces,
    including concurrently.
    """

    def __init__(
        self,
        spec: ExpectedWorkflowSpec | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._spec = spec or ExpectedWorkflowSpec()
        self._clock = clock

    @property
    def spec(self) -> ExpectedWorkflowSpec:
        return self._spec

    def evaluate(
        self, trace: Iterable[TraceStep | Mapping[str, Any]]
    ) -> EvaluationReport:
        return evaluate_trace(trace, self._spec, clock=self._clock)
