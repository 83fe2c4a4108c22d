"""Trace evaluation: expected-workflow contract, checks and report."""

from agenteval.evaluation.evaluator import (
    WorkflowEvaluator,
    check_failure_handling,
    check_final_report,
    check_schemas,
    check_tool_usage,
    check_workflow,
    evaluate_trace,
    extract_user_id,
)
from agenteval.evaluation.models import (
    CheckResult,
    EvaluationReport,
    EvaluationScores,
    ExpectedWorkflowSpec,
)

__all__ = [
    "WorkflowEvaluator",
    "evaluate_trace",
    "check_workflow",
    "check_tool_usage",
    "check_schemas",
    "check_failure_handling",
    "check_final_report",
    "extract_user_id",
    "ExpectedWorkflowSpec",
    "CheckResult",
    "EvaluationScores",
    "EvaluationReport",
]
