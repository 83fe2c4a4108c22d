"""CLI tests for agenteval -- all commands via Click's CliRunner.

The model gateway is replaced by an OpenAIClient on an httpx.MockTransport
and the endpoint by the in-process mock, so no network is touched.
"""

from __future__ import annotations

import json

import httpx
import pytest
from click.testing import CliRunner

from agenteval.cli import cli
from agenteval.llm import OpenAIClient
from agenteval.reporting import save_trace

from canned import happy_path_responses, scenario_a_trace, text_response


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workdir(tmp_path, clean_env):
    """Empty working directory with no .env and no agenteval variables."""
    clean_env.chdir(tmp_path)
    return tmp_path


def _scripted_client(responses: list[dict]) -> OpenAIClient:
    """OpenAIClient that answers successive requests with ``responses``."""
    replies = iter(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=next(replies))

    return OpenAIClient(
        api_key="test-key",
        base_url="http://llm.test",
        max_retries=1,
        transport=httpx.MockTransport(handler),
    )


def _patch_gateway(monkeypatch, module: str, client: OpenAIClient) -> None:
    monkeypatch.setattr(f"agenteval.cli.commands.{module}.build_llm_client", lambda settings: client)


class TestIds:
    def test_plain(self, runner, workdir):
        result = runner.invoke(cli, ["ids"])
        assert result.exit_code == 0
        assert "1, 50, 100, -1, 999" in result.output

    def test_json(self, runner, workdir):
        result = runner.invoke(cli, ["ids", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.output) == [1, 50, 100, -1, 999]

    def test_log_level_option(self, runner, workdir):
        result = runner.invoke(cli, ["--log-level", "debug", "ids"])
        assert result.exit_code == 0


class TestEvaluate:
    def test_writes_reports(self, runner, workdir):
        trace_path = save_trace(scenario_a_trace(), workdir / "trace.json")
        result = runner.invoke(cli, ["evaluate", str(trace_path), "-o", str(workdir / "out")])

        assert result.exit_code == 0, result.output
        report = json.loads((workdir / "out" / "report.json").read_text())
        assert report["summary"]["scores"]["overallScore"] == 100.0
        assert (workdir / "out" / "report.html").exists()
        assert "PASS" in result.output
        assert "Agent completed" in result.output

    def test_failing_checks_still_exit_zero(self, runner, workdir):
        trace_path = save_trace((), workdir / "trace.json")
        result = runner.invoke(cli, ["evaluate", str(trace_path)])

        assert result.exit_code == 0
        assert "FAIL" in result.output
        assert (workdir / "report.json").exists()

    def test_custom_spec(self, runner, workdir):
        trace_path = save_trace(scenario_a_trace()[1:], workdir / "trace.json")
        spec_path = workdir / "spec.json"
        spec_path.write_text(json.dumps({"requiredTools": ["callApi"]}))

        result = runner.invoke(cli, ["evaluate", str(trace_path), "--spec", str(spec_path)])

        assert result.exit_code == 0
        report = json.loads((workdir / "report.json").read_text())
        assert report["details"]["workflow"]["passed"] is True

    def test_invalid_spec(self, runner, workdir):
        trace_path = save_trace(scenario_a_trace(), workdir / "trace.json")
        spec_path = workdir / "spec.json"
        spec_path.write_text(json.dumps({"expectedApiCalls": "lots"}))

        result = runner.invoke(cli, ["evaluate", str(trace_path), "--spec", str(spec_path)])
        assert result.exit_code == 1
        assert "Invalid workflow spec" in result.output

    def test_rejects_non_trace(self, runner, workdir):
        path = workdir / "trace.json"
        path.write_text(json.dumps({"not": "a trace"}))

        result = runner.invoke(cli, ["evaluate", str(path)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_missing_file(self, runner, workdir):
        result = runner.invoke(cli, ["evaluate", str(workdir / "nope.json")])
        assert result.exit_code != 0


class TestRun:
    def test_full_pipeline(self, runner, workdir, monkeypatch):
        _patch_gateway(monkeypatch, "run", _scripted_client(happy_path_responses()))

        result = runner.invoke(cli, ["run", "--mock"])

        assert result.exit_code == 0, result.output
        trace = json.loads((workdir / "trace.json").read_text())
        assert [s["action"] for s in trace] == (
            ["generateTestIds"] + ["callApi"] * 5 + ["final_report"]
        )
        report = json.loads((workdir / "report.json").read_text())
        assert report["summary"]["agentCompleted"] is True
        assert report["summary"]["scores"]["overallScore"] == 100.0
        assert (workdir / "report.html").exists()
        assert "Agent completed" in result.output

    def test_max_steps_limits_run(self, runner, workdir, monkeypatch):
        _patch_gateway(monkeypatch, "run", _scripted_client(happy_path_responses()))

        result = runner.invoke(cli, ["run", "--mock", "--max-steps", "1"])

        assert result.exit_code == 0, result.output
        trace = json.loads((workdir / "trace.json").read_text())
        assert [s["action"] for s in trace] == ["generateTestIds"]
        assert "max_steps_exceeded" in result.output

    def test_max_steps_from_environment(self, runner, workdir, monkeypatch):
        _patch_gateway(monkeypatch, "run", _scripted_client(happy_path_responses()))
        monkeypatch.setenv("AGENTEVAL_MAX_STEPS", "2")

        result = runner.invoke(cli, ["run", "--mock"])

        assert result.exit_code == 0
        trace = json.loads((workdir / "trace.json").read_text())
        assert len(trace) == 6

    def test_missing_credentials(self, runner, workdir):
        result = runner.invoke(cli, ["run", "--mock"])
        assert result.exit_code == 1
        assert "credentials" in result.output
        assert not (workdir / "trace.json").exists()

    def test_invalid_config(self, runner, workdir, monkeypatch):
        monkeypatch.setenv("AGENTEVAL_MAX_STEPS", "zero")
        result = runner.invoke(cli, ["run", "--mock"])
        assert result.exit_code == 1
        assert "AGENTEVAL_MAX_STEPS" in result.output

    def test_rejects_zero_max_steps(self, runner, workdir):
        result = runner.invoke(cli, ["run", "--max-steps", "0"])
        assert result.exit_code == 2


class TestCheckConnection:
    def test_ok(self, runner, workdir, monkeypatch):
        _patch_gateway(monkeypatch, "check", _scripted_client([text_response("OK")]))
        result = runner.invoke(cli, ["check-connection"])
        assert result.exit_code == 0
        assert "Connection OK" in result.output

    def test_no_valid_reply(self, runner, workdir, monkeypatch):
        _patch_gateway(
            monkeypatch, "check", _scripted_client([text_response("", finish_reason="length")])
        )
        result = runner.invoke(cli, ["check-connection"])
        assert result.exit_code == 1
        assert "No valid reply" in result.output

    def test_missing_credentials(self, runner, workdir):
        result = runner.invoke(cli, ["check-connection"])
        assert result.exit_code == 1
        assert "Error" in result.output
