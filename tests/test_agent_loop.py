"""Integration tests for the agent loop.

Tests cover the full run lifecycle: tool batches, final-report completion,
early stops, max-step exhaustion, aborts on dispatch and gateway errors,
callbacks, and the HTTP client path.

All tests use mock LLM callables or a mock transport -- no real API calls.
"""

from __future__ import annotations

import json

import httpx
import pytest

from agenteval.agent import (
    ERROR_ACTION,
    AgentConfig,
    AgentLoop,
    AgentState,
    StopReason,
    run_agent,
)
from agenteval.config import AgentEvalConfig, EndpointSettings, EvaluationSettings
from agenteval.evaluation import evaluate_trace
from agenteval.exceptions import ConfigError
from agenteval.llm import OpenAIClient
from agenteval.toolkit import ToolCatalog

from canned import (
    BASE_URL,
    happy_path_responses,
    make_mock_llm,
    text_response,
    tool_call,
    tool_calls_response,
)


def _loop(catalog, responses, **config) -> tuple[AgentLoop, object]:
    llm = make_mock_llm(responses)
    return AgentLoop(catalog, AgentConfig(**config), llm_callable=llm), llm


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------


class TestHappyPath:
    def test_completes_with_final_report(self, catalog):
        loop, llm = _loop(catalog, happy_path_responses())
        result = loop.run()

        assert result.state == AgentState.COMPLETED
        assert result.completed
        assert result.stop_reason is None
        assert result.turns == 3
        assert len(llm.calls) == 3
        assert loop.state == AgentState.COMPLETED

    def test_trace_steps_in_execution_order(self, catalog):
        loop, _ = _loop(catalog, happy_path_responses())
        steps = loop.run().steps

        assert [s.step for s in steps] == list(range(1, 8))
        assert [s.action for s in steps] == (
            ["generateTestIds"] + ["callApi"] * 5 + ["final_report"]
        )
        assert [s.turn for s in steps] == [1, 2, 2, 2, 2, 2, 3]
        assert steps[0].result == [1, 50, 100, -1, 999]
        assert steps[1].result["status"] == 200
        assert steps[4].result["status"] == 404
        assert steps[-1].result["totalTests"] == 5

    def test_trace_scores_perfectly(self, catalog):
        loop, _ = _loop(catalog, happy_path_responses())
        report = evaluate_trace(loop.run().steps)
        assert report.overall_score == pytest.approx(100.0)
        assert report.agent_completed

    def test_final_report_property(self, catalog):
        loop, _ = _loop(catalog, happy_path_responses())
        assert loop.run().final_report["successCount"] == 3

    def test_usage_accumulates(self, catalog):
        loop, _ = _loop(catalog, happy_path_responses())
        assert loop.run().usage.total_tokens == 360


def _report_turn(total, success, errors) -> list[dict]:
    """One turn calling ids 1 and 999, then a report with the given counts."""
    return [
        tool_calls_response(
            tool_call("callApi", {"method": "GET", "url": f"{BASE_URL}/users/1"}),
            tool_call("callApi", {"method": "GET", "url": f"{BASE_URL}/users/999"}),
            tool_call(
                "final_report",
                {
                    "summary": "s",
                    "totalTests": total,
                    "successCount": success,
                    "errorCount": errors,
                },
            ),
        )
    ]


class TestReportCounts:
    def test_string_counts_recorded_verbatim_and_scored_as_mismatch(self, catalog):
        loop, _ = _loop(catalog, _report_turn("2", "1", "1"))
        result = loop.run()

        assert result.state == AgentState.COMPLETED
        assert result.final_report["successCount"] == "1"
        report = evaluate_trace(result.steps)
        assert not report.final_report.passed
        assert len(report.final_report.errors) == 3

    def test_fractional_count_is_recorded_not_aborted(self, catalog):
        loop, _ = _loop(catalog, _report_turn(2.5, 1, 1))
        result = loop.run()

        assert result.state == AgentState.COMPLETED
        assert result.stop_reason is None
        assert result.steps[-1].action == "final_report"
        assert result.steps[-1].result["totalTests"] == 2.5
        report = evaluate_trace(result.steps)
        assert report.final_report.errors == (
            "Report totalTests (2.5) doesn't match actual API calls (2)",
        )


class TestConversation:
    def test_first_call_has_system_prompt_and_tools(self, catalog):
        loop, llm = _loop(catalog, happy_path_responses(), base_url="http://api.test:8080")
        loop.run("Check the users API")

        first = llm.calls[0]
        assert first["messages"][0]["role"] == "system"
        assert "http://api.test:8080" in first["messages"][0]["content"]
        assert first["messages"][1] == {"role": "user", "content": "Check the users API"}
        assert [t["function"]["name"] for t in first["tools"]] == [
            "generateTestIds",
            "callApi",
            "validateSchema",
            "final_report",
        ]

    def test_custom_system_prompt(self, catalog):
        loop, llm = _loop(catalog, happy_path_responses(), system_prompt="Be brief.")
        loop.run()
        assert llm.calls[0]["messages"][0]["content"] == "Be brief."

    def test_tool_results_fed_back(self, catalog):
        responses = happy_path_responses()
        loop, llm = _loop(catalog, responses)
        loop.run()

        second = llm.calls[1]["messages"]
        assistant, tool_msg = second[2], second[3]
        call_id = responses[0]["choices"][0]["message"]["tool_calls"][0]["id"]
        assert assistant["role"] == "assistant"
        assert assistant["tool_calls"][0]["id"] == call_id
        assert tool_msg["role"] == "tool"
        assert tool_msg["tool_call_id"] == call_id
        assert json.loads(tool_msg["content"]) == [1, 50, 100, -1, 999]

    def test_history_returned(self, catalog):
        loop, _ = _loop(catalog, happy_path_responses())
        result = loop.run()
        # system, user, then 3 assistant turns with 1 + 5 + 1 tool results
        assert len(result.messages) == 2 + 3 + 7


# ---------------------------------------------------------------------------
# Early termination
# ---------------------------------------------------------------------------


class TestStopsEarly:
    def test_stop_without_final_report(self, catalog):
        loop, _ = _loop(
            catalog,
            [tool_calls_response(tool_call("generateTestIds")), text_response("All done")],
        )
        result = loop.run()

        assert result.state == AgentState.STOPPED_EARLY
        assert result.stop_reason == StopReason.NO_FINAL_REPORT
        assert [s.action for s in result.steps] == ["generateTestIds"]

    def test_unexpected_finish_reason(self, catalog):
        loop, _ = _loop(catalog, [text_response("truncated", finish_reason="length")])
        result = loop.run()

        assert result.stop_reason == StopReason.UNEXPECTED_FINISH_REASON
        assert result.steps == ()

    def test_max_steps_exceeded(self, catalog):
        loop, llm = _loop(
            catalog, [tool_calls_response(tool_call("generateTestIds"))], max_steps=3
        )
        result = loop.run()

        assert result.state == AgentState.STOPPED_EARLY
        assert result.stop_reason == StopReason.MAX_STEPS_EXCEEDED
        assert result.turns == 3
        assert len(llm.calls) == 3
        assert len(result.steps) == 3

    def test_batch_runs_past_final_report(self, catalog):
        batch = tool_calls_response(
            tool_call(
                "final_report",
                {"summary": "s", "totalTests": 0, "successCount": 0, "errorCount": 0},
            ),
            tool_call("callApi", {"method": "GET", "url": f"{BASE_URL}/users/1"}),
        )
        loop, llm = _loop(catalog, [batch])
        result = loop.run()

        assert result.state == AgentState.COMPLETED
        assert [s.action for s in result.steps] == ["final_report", "callApi"]
        assert len(llm.calls) == 1


# ---------------------------------------------------------------------------
# Aborts
# ---------------------------------------------------------------------------


class TestAborts:
    def test_unknown_tool_aborts(self, catalog):
        loop, _ = _loop(
            catalog,
            [
                tool_calls_response(
                    tool_call("generateTestIds"), tool_call("deleteUser", {"id": 1})
                )
            ],
        )
        result = loop.run()

        assert result.state == AgentState.STOPPED_EARLY
        assert result.stop_reason == StopReason.EXECUTION_ERROR
        assert [s.action for s in result.steps] == ["generateTestIds", ERROR_ACTION]
        assert "Unknown tool: deleteUser" in result.steps[-1].result["error"]

    def test_malformed_arguments_abort(self, catalog):
        loop, _ = _loop(catalog, [tool_calls_response(tool_call("callApi", "{not json"))])
        result = loop.run()

        assert result.stop_reason == StopReason.EXECUTION_ERROR
        assert result.steps[-1].action == ERROR_ACTION
        assert "ToolArgumentError" in result.steps[-1].result["error"]

    def test_non_object_arguments_abort(self, catalog):
        loop, _ = _loop(catalog, [tool_calls_response(tool_call("callApi", "[1, 2]"))])
        assert loop.run().stop_reason == StopReason.EXECUTION_ERROR

    def test_missing_required_argument_aborts(self, catalog):
        loop, _ = _loop(
            catalog, [tool_calls_response(tool_call("callApi", {"method": "GET"}))]
        )
        result = loop.run()
        assert result.stop_reason == StopReason.EXECUTION_ERROR
        assert "callApi" in result.steps[-1].result["error"]

    def test_llm_exception_aborts(self, catalog):
        def failing_llm(messages=None, tools=None, **kwargs):
            raise RuntimeError("gateway down")

        result = AgentLoop(catalog, llm_callable=failing_llm).run()

        assert result.state == AgentState.STOPPED_EARLY
        assert result.stop_reason == StopReason.EXECUTION_ERROR
        assert len(result.steps) == 1
        assert result.steps[0].result == {"error": "RuntimeError: gateway down"}

    def test_malformed_llm_response_aborts(self, catalog):
        loop, _ = _loop(catalog, [{"unexpected": True}])
        result = loop.run()
        assert result.stop_reason == StopReason.EXECUTION_ERROR
        assert "LLMResponseError" in result.steps[0].result["error"]

    def test_network_failure_does_not_abort(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with ToolCatalog(transport=httpx.MockTransport(handler)) as catalog:
            loop, _ = _loop(catalog, happy_path_responses())
            result = loop.run()

        assert result.state == AgentState.COMPLETED
        api_results = [s.result for s in result.steps if s.action == "callApi"]
        assert all(r["status"] == 0 and r["schemaValid"] is False for r in api_results)

    def test_aborted_trace_is_still_scorable(self, catalog):
        loop, _ = _loop(catalog, [tool_calls_response(tool_call("nope"))])
        report = evaluate_trace(loop.run().steps)
        assert not report.agent_completed
        assert 0 <= report.overall_score < 50


# ---------------------------------------------------------------------------
# Construction, callbacks, client path
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_requires_llm(self, catalog):
        with pytest.raises(ConfigError):
            AgentLoop(catalog)

    def test_config_from_process_config(self):
        config = AgentEvalConfig(
            endpoint=EndpointSettings(base_url="http://svc:9000"),
            evaluation=EvaluationSettings(max_steps=7),
        )
        agent_config = AgentConfig.from_config(config, model="m")
        assert agent_config.max_steps == 7
        assert agent_config.base_url == "http://svc:9000"
        assert agent_config.max_tokens == 2000
        assert agent_config.model == "m"

    def test_run_agent_returns_trace(self, catalog):
        steps = run_agent(catalog, llm_callable=make_mock_llm(happy_path_responses()))
        assert isinstance(steps, tuple)
        assert len(steps) == 7


class TestCallbacks:
    def test_on_step_sees_every_step(self, catalog):
        seen = []
        loop, _ = _loop(catalog, happy_path_responses(), on_step=seen.append)
        result = loop.run()
        assert seen == list(result.steps)

    def test_on_response_sees_every_turn(self, catalog):
        seen = []
        loop, _ = _loop(catalog, happy_path_responses(), on_response=seen.append)
        loop.run()
        assert [r.finish_reason for r in seen] == ["tool_calls"] * 3

    def test_callback_errors_are_ignored(self, catalog):
        def broken(_step):
            raise ValueError("display failed")

        loop, _ = _loop(catalog, happy_path_responses(), on_step=broken)
        assert loop.run().state == AgentState.COMPLETED


class TestClientPath:
    def test_runs_through_http_client(self, catalog):
        responses = iter(happy_path_responses())
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json=next(responses))

        client = OpenAIClient(
            api_key="k",
            base_url="http://llm.test",
            max_retries=1,
            transport=httpx.MockTransport(handler),
        )
        config = AgentConfig(model="gpt-4o-mini", temperature=1.0, max_tokens=2000)
        with client:
            result = AgentLoop(catalog, config, client=client).run()

        assert result.state == AgentState.COMPLETED
        assert len(bodies) == 3
        assert bodies[0]["model"] == "gpt-4o-mini"
        assert bodies[0]["max_completion_tokens"] == 2000
        assert bodies[0]["tool_choice"] == "auto"
        assert len(bodies[0]["tools"]) == 4
        # Full history is resent on every turn
        assert len(bodies[2]["messages"]) > len(bodies[1]["messages"]) > len(bodies[0]["messages"])
