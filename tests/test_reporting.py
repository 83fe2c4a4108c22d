"""Tests for trace/report persistence and HTML rendering."""

from __future__ import annotations

import json

import pytest

from agenteval.evaluation import evaluate_trace
from agenteval.exceptions import ArtifactError
from agenteval.reporting import (
    load_report_dict,
    load_trace,
    render_html,
    save_html_report,
    save_report,
    save_trace,
    score_color,
)

from canned import scenario_a_trace, step


class TestTraceFiles:
    def test_save_writes_json_array(self, tmp_path):
        path = save_trace(scenario_a_trace(), tmp_path / "trace.json")
        data = json.loads(path.read_text(encoding="utf-8"))

        assert isinstance(data, list)
        assert len(data) == 4
        assert set(data[0]) == {"step", "turn", "llmMessage", "action", "args", "result"}
        assert data[1]["result"]["schemaValid"] is True

    def test_round_trip_preserves_steps(self, tmp_path):
        trace = scenario_a_trace()
        path = save_trace(trace, tmp_path / "trace.json")
        assert load_trace(path) == trace

    def test_overwrites_existing_file(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text("old contents")
        save_trace((), path)
        assert json.loads(path.read_text()) == []

    def test_load_external_trace_leniently(self, tmp_path):
        path = tmp_path / "external.json"
        path.write_text(
            json.dumps(
                [
                    {"step": 1, "action": "callApi", "args": {"url": "http://x/users/1"}},
                    "not a step",
                    {"action": "final_report", "result": {"totalTests": 1}},
                ]
            )
        )
        steps = load_trace(path)
        assert [s.action for s in steps] == ["callApi", "final_report"]
        assert steps[0].result is None
        assert steps[1].step == 0

    def test_load_rejects_non_array(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text(json.dumps({"steps": []}))
        with pytest.raises(ArtifactError, match="expected a JSON array"):
            load_trace(path)

    def test_load_rejects_invalid_json(self, tmp_path):
        path = tmp_path / "trace.json"
        path.write_text("[{")
        with pytest.raises(ArtifactError, match="not valid JSON"):
            load_trace(path)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ArtifactError):
            load_trace(tmp_path / "missing.json")


class TestReportFiles:
    def test_save_and_load(self, tmp_path):
        report = evaluate_trace(scenario_a_trace())
        path = save_report(report, tmp_path / "report.json")
        data = load_report_dict(path)

        assert data == json.loads(json.dumps(report.to_dict()))
        assert data["summary"]["scores"]["overallScore"] == 100.0

    def test_load_rejects_array(self, tmp_path):
        path = tmp_path / "report.json"
        path.write_text("[]")
        with pytest.raises(ArtifactError):
            load_report_dict(path)


class TestHtml:
    def test_score_colors(self):
        assert score_color(100) == "#10b981"
        assert score_color(90) == "#10b981"
        assert score_color(89.9) == "#f59e0b"
        assert score_color(70) == "#f59e0b"
        assert score_color(69.9) == "#ef4444"
        assert score_color(0) == "#ef4444"

    def test_complete_page(self):
        html = render_html(evaluate_trace(scenario_a_trace()))

        assert html.startswith("<!DOCTYPE html>")
        assert html.rstrip().endswith("</html>")
        assert "Agent Completed" in html
        for title in (
            "Workflow Validation",
            "Tool Usage",
            "Schema Validation",
            "Error Handling",
            "Final Report",
            "Overall Score",
        ):
            assert title in html
        assert "100.0%" in html

    def test_incomplete_badge_and_errors(self):
        html = render_html(evaluate_trace(()))
        assert "Agent Incomplete" in html
        assert "Trace is empty" in html
        assert "status-fail" in html

    def test_text_is_escaped(self):
        trace = (step(1, "<script>alert(1)</script>"),)
        html = render_html(evaluate_trace(trace))
        assert "<script>alert(1)</script>" not in html
        assert "&lt;script&gt;" in html

    def test_save_html(self, tmp_path):
        path = save_html_report(evaluate_trace(scenario_a_trace()), tmp_path / "report.html")
        assert "AgentEval Report" in path.read_text(encoding="utf-8")
