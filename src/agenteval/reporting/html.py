"""Self-contained HTML rendering of an EvaluationReport."""

from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from typing import TYPE_CHECKING

from agenteval.exceptions import ArtifactError

if TYPE_CHECKING:
    from agenteval.evaluation.models import CheckResult, EvaluationReport

logger = logging.getLogger(__name__)

GOOD_COLOR = "#10b981"
WARN_COLOR = "#f59e0b"
BAD_COLOR = "#ef4444"

_SCORE_LABELS: tuple[tuple[str, str], ...] = (
    ("stepAccuracy", "Step Accuracy"),
    ("toolAccuracy", "Tool Accuracy"),
    ("schemaPassRate", "Schema Pass Rate"),
    ("failureHandling", "Failure Handling"),
    ("finalCorrectness", "Final Correctness"),
)

_SECTION_TITLES: tuple[tuple[str, str], ...] = (
    ("workflow", "Workflow Validation"),
    ("toolUsage", "Tool Usage"),
    ("schemaValidation", "Schema Validation"),
    ("errorHandling", "Error Handling"),
    ("finalReport", "Final Report"),
)

_STYLE = """
* { margin: 0; padding: 0; box-sizing: border-box; }
body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
       background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
       padding: 2rem; line-height: 1.6; }
.container { max-width: 1200px; margin: 0 auto; }
.header, .score-card, .details { background: white; border-radius: 12px;
       box-shadow: 0 4px 6px rgba(0,0,0,0.1); }
.header { padding: 2rem; margin-bottom: 2rem; }
h1 { color: #1f2937; margin-bottom: 0.5rem; font-size: 2rem; }
.subtitle { color: #6b7280; font-size: 1.1rem; margin-bottom: 1rem; }
.timestamp { color: #9ca3af; font-size: 0.875rem; }
.completion-badge { display: inline-block; padding: 0.5rem 1rem; border-radius: 999px;
       font-size: 0.875rem; font-weight: 600; margin-top: 0.5rem; }
.badge-success { background: #d1fae5; color: #065f46; }
.badge-warning { background: #fef3c7; color: #92400e; }
.scores { display: grid; grid-template-columns: repeat(auto-fit, minmax(200px, 1fr));
       gap: 1rem; margin-bottom: 2rem; }
.score-card { padding: 1.5rem; }
.score-card.overall { background: #1f2937; color: white; }
.score-label { color: #6b7280; font-size: 0.75rem; text-transform: uppercase;
       letter-spacing: 0.05em; margin-bottom: 0.5rem; font-weight: 600; }
.score-value { font-size: 2.5rem; font-weight: 700; }
.score-bar { height: 6px; background: #e5e7eb; border-radius: 3px; margin-top: 0.75rem; }
.score-fill { height: 100%; border-radius: 3px; background: #667eea; }
.details { padding: 2rem; }
.detail-section { border-bottom: 1px solid #e5e7eb; padding: 1rem 0; }
.detail-title { display: flex; justify-content: space-between; font-weight: 600;
       color: #1f2937; margin-bottom: 0.5rem; }
.status { padding: 0.25rem 0.75rem; border-radius: 999px; font-size: 0.75rem; }
.status-pass { background: #d1fae5; color: #065f46; }
.status-fail { background: #fee2e2; color: #991b1b; }
.error-list { list-style: none; margin-top: 0.5rem; }
.error-item { background: #fef2f2; color: #991b1b; padding: 0.5rem 0.75rem;
       border-left: 3px solid #ef4444; margin-bottom: 0.25rem; font-size: 0.875rem; }
"""


def score_color(score: float) -> str:
    """Card color for a 0-100 score: green >= 90, amber >= 70, red otherwise."""
    if score >= 90:
        return GOOD_COLOR
    if score >= 70:
        return WARN_COLOR
    return BAD_COLOR


def _bar_width(score: float) -> float:
    return max(0.0, min(100.0, score))


def _score_card(label: str, score: float) -> str:
    color = score_color(score)
    return (
        '<div class="score-card">'
        f'<div class="score-label">{escape(label)}</div>'
        f'<div class="score-value" style="color: {color}">{score:.0f}%</div>'
        '<div class="score-bar">'
        f'<div class="score-fill" style="width: {_bar_width(score):.1f}%; '
        f'background: {color}"></div></div></div>'
    )


def _detail_section(index: int, title: str, check: CheckResult) -> str:
    status_class = "status-pass" if check.passed else "status-fail"
    status_text = "PASS" if check.passed else "FAIL"
    errors = ""
    if check.errors:
        items = "".join(
            f'<li class="error-item">{escape(err)}</li>' for err in check.errors
        )
        errors = f'<ul class="error-list">{items}</ul>'
    return (
        '<div class="detail-section">'
        f'<div class="detail-title"><span>{index}. {escape(title)}</span>'
        f'<span class="status {status_class}">{status_text}</span></div>'
        f"<p>{escape(check.message)}</p>{errors}</div>"
    )


def render_html(report: EvaluationReport) -> str:
    """Render a report as a standalone HTML page. All report text is escaped."""
    scores = report.scores.as_dict()
    details = report.details

    cards = [_score_card(label, scores[key]) for key, label in _SCORE_LABELS]
    overall = report.overall_score
    cards.append(
        '<div class="score-card overall">'
        '<div class="score-label">Overall Score</div>'
        f'<div class="score-value">{overall:.1f}%</div>'
        '<div class="score-bar">'
        f'<div class="score-fill" style="width: {_bar_width(overall):.1f}%"></div>'
        "</div></div>"
    )
    sections = [
        _detail_section(i, title, details[key])
        for i, (key, title) in enumerate(_SECTION_TITLES, start=1)
    ]

    if report.agent_completed:
        badge = '<span class="completion-badge badge-success">Agent Completed</span>'
    else:
        badge = '<span class="completion-badge badge-warning">Agent Incomplete</span>'

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>AgentEval Report</title>
  <style>{_STYLE}</style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>AgentEval Report</h1>
      <p class="subtitle">LLM-Powered Agent Evaluation</p>
      <p class="timestamp">Generated: {escape(report.timestamp)}</p>
      <p class="timestamp">Total Steps: {report.total_steps}</p>
      {badge}
    </div>
    <div class="scores">
      {"".join(cards)}
    </div>
    <div class="details">
      <h2>Evaluation Details</h2>
      {"".join(sections)}
    </div>
  </div>
</body>
</html>
"""


def save_html_report(report: EvaluationReport, path: str | Path) -> Path:
    target = Path(path)
    try:
        target.write_text(render_html(report), encoding="utf-8")
    except OSError as exc:
        raise ArtifactError(f"Cannot write {target}: {exc}") from exc
    logger.info("HTML report saved to %s", target)
    return target
