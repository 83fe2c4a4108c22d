"""Evaluation contract and report models.

ExpectedWorkflowSpec is caller-supplied configuration (pydantic, accepts
camelCase keys from JSON files). CheckResult, EvaluationScores and
EvaluationReport are frozen result records.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from agenteval.agent.models import TraceStep

DETAIL_KEYS: tuple[str, ...] = (
    "workflow",
    "toolUsage",
    "schemaValidation",
    "errorHandling",
    "finalReport",
)


class ExpectedWorkflowSpec(BaseModel):
    """Declarative contract a trace is scored against.

    ``expected_api_calls`` and ``valid_status_codes`` are informational and
    do not feed any score.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    required_tools: tuple[str, ...] = ("generateTestIds", "callApi")
    expected_api_calls: int = 5
    valid_status_codes: tuple[int, ...] = (200, 404)
    invalid_test_ids: tuple[int, ...] = (-1, 999)
    must_have_final_report: bool = True


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one evaluation check."""

    passed: bool
    message: str
    errors: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "message": self.message,
            "errors": list(self.errors),
        }


@dataclass(frozen=True)
class EvaluationScores:
    """The five metric scores (0-100) and their unweighted mean."""

    step_accuracy: float
    tool_accuracy: float
    schema_pass_rate: float
    failure_handling: float
    final_correctness: float

    @property
    def overall_score(self) -> float:
        return (
            self.step_accuracy
            + self.tool_accuracy
            + self.schema_pass_rate
            + self.failure_handling
            + self.final_correctness
        ) / 5

    def as_dict(self) -> dict[str, float]:
        return {
            "stepAccuracy": self.step_accuracy,
            "toolAccuracy": self.tool_accuracy,
            "schemaPassRate": self.schema_pass_rate,
            "failureHandling": self.failure_handling,
            "finalCorrectness": self.final_correctness,
            "overallScore": self.overall_score,
        }


@dataclass(frozen=True)
class EvaluationReport:
    """Result of evaluating one trace. Never mutated after construction."""

    total_steps: int
    timestamp: str
    scores: EvaluationScores
    agent_completed: bool
    workflow: CheckResult
    tool_usage: CheckResult
    schema_validation: CheckResult
    error_handling: CheckResult
    final_report: CheckResult
    trace: tuple[TraceStep, ...] = ()

    @property
    def overall_score(self) -> float:
        return self.scores.overall_score

    @property
    def details(self) -> dict[str, CheckResult]:
        """Check results keyed by their serialized names."""
        return dict(
            zip(
                DETAIL_KEYS,
                (
                    self.workflow,
                    self.tool_usage,
                    self.schema_validation,
                    self.error_handling,
                    self.final_report,
                ),
            )
        )

    def to_dict(self, *, include_trace: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {
            "summary": {
                "totalSteps": self.total_steps,
                "timestamp": self.timestamp,
                "scores": self.scores.as_dict(),
                "agentCompleted": self.agent_completed,
            },
            "details": {key: check.to_dict() for key, check in self.details.items()},
        }
        if include_trace:
            out["trace"] = [step.to_dict() for step in self.trace]
        return out
