"""Core agent loop for exercising the users endpoint.

Provides the AgentLoop class that runs a tool-calling loop: send the
conversation and the tool catalog to the model, execute the tools it
requests in order, feed the results back, and repeat until the model
submits a final report, stops, fails, or max_steps turns are used.

Every executed tool call lands in a TraceRecorder. The run always returns
whatever trace was captured; an aborted run is a normal, scorable outcome.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from agenteval.agent.config import AgentConfig
from agenteval.agent.models import AgentRunResult, AgentState, StopReason
from agenteval.agent.trace import TraceRecorder
from agenteval.exceptions import ConfigError, ToolArgumentError
from agenteval.llm.protocols import parse_response
from agenteval.prompts import DEFAULT_TASK_PROMPT, build_system_prompt
from agenteval.protocols import FINISH_STOP, Message, TokenUsage
from agenteval.toolkit.definitions import FINAL_REPORT_TOOL

if TYPE_CHECKING:
    from collections.abc import Callable

    from agenteval.agent.models import TraceStep
    from agenteval.llm.protocols import LLMClient
    from agenteval.protocols import ModelResponse, ToolInvocation
    from agenteval.toolkit.executor import ToolCatalog

logger = logging.getLogger(__name__)


class AgentLoop:
    """Bounded ask-model / execute-tools state machine.

    The loop starts RUNNING with a system message (task, endpoint contract,
    workflow) and the caller's prompt. Each turn blocks on one model call.
    Tool calls within a turn run sequentially in the order the model issued
    them; whether ``final_report`` was called is checked once the whole
    batch has run.

    Usage::

        with ToolCatalog() as catalog:
            loop = AgentLoop(catalog, AgentConfig(max_steps=10), client=client)
            result = loop.run("Test the user API endpoint")
            print(result.state, len(result.steps))
    """

    def __init__(
        self,
        catalog: ToolCatalog,
        config: AgentConfig | None = None,
        *,
        client: LLMClient | None = None,
        llm_callable: Callable[..., dict] | None = None,
    ) -> None:
        """Create a loop bound to a tool catalog and a model gateway.

        Args:
            catalog: Tools the model may call.
            config: Run configuration. Defaults to AgentConfig().
            client: LLMClient used for model calls.
            llm_callable: Alternative to ``client``: any callable accepting
                ``messages=`` and ``tools=`` and returning an OpenAI-format
                response dict. Takes precedence over ``client``.

        Raises:
            ConfigError: If neither ``client`` nor ``llm_callable`` is given.
        """
        if client is None and llm_callable is None:
            raise ConfigError(
                "No LLM configured. Provide client= or llm_callable= to AgentLoop."
            )
        self._catalog = catalog
        self._config = config or AgentConfig()
        self._client = client
        self._llm = llm_callable
        self._state = AgentState.RUNNING
        self._stop_reason: StopReason | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> AgentState:
        """State reached by the most recent run."""
        return self._state

    @property
    def stop_reason(self) -> StopReason | None:
        return self._stop_reason

    def run(self, prompt: str = DEFAULT_TASK_PROMPT) -> AgentRunResult:
        """Execute the agent loop.

        Args:
            prompt: Free-text task for the user message.

        Returns:
            AgentRunResult with the trace, end state and conversation.
        """
        recorder = TraceRecorder()
        system_prompt = self._config.system_prompt or build_system_prompt(
            self._config.base_url
        )
        messages: list[Message] = [Message.system(system_prompt), Message.user(prompt)]
        tools = self._catalog.to_openai()
        usage = TokenUsage()
        turns = 0

        self._state = AgentState.RUNNING
        self._stop_reason = None
        logger.info(
            "Starting agent run (max %d turns, tools: %s)",
            self._config.max_steps,
            ", ".join(self._catalog.available_tools()),
        )

        while self._state == AgentState.RUNNING and turns < self._config.max_steps:
            turns += 1
            logger.debug("Turn %d", turns)

            try:
                response = self._call_model(messages, tools)
            except Exception as exc:
                self._abort(recorder, exc, turns)
                break

            if response.usage is not None:
                usage = usage + response.usage
            messages.append(response.message)
            self._notify(self._config.on_response, response)

            if response.wants_tools:
                try:
                    final_seen = self._execute_batch(response, recorder, messages, turns)
                except Exception as exc:
                    self._abort(recorder, exc, turns)
                    break
                if final_seen:
                    self._finish(AgentState.COMPLETED)
                    logger.info("Final report received after %d turns", turns)
            elif response.finish_reason == FINISH_STOP:
                logger.warning(
                    "Agent finished without final_report: %.200s",
                    response.message.content or "",
                )
                self._finish(AgentState.STOPPED_EARLY, StopReason.NO_FINAL_REPORT)
            else:
                logger.warning("Unexpected finish reason: %s", response.finish_reason)
                self._finish(
                    AgentState.STOPPED_EARLY, StopReason.UNEXPECTED_FINISH_REASON
                )

        if self._state == AgentState.RUNNING:
            logger.warning("Reached maximum steps (%d)", self._config.max_steps)
            self._finish(AgentState.STOPPED_EARLY, StopReason.MAX_STEPS_EXCEEDED)

        logger.info(
            "Agent run ended: %s (%s), %d actions performed",
            self._state.value,
            self._stop_reason.value if self._stop_reason else "-",
            len(recorder),
        )
        return AgentRunResult(
            steps=recorder.steps,
            state=self._state,
            stop_reason=self._stop_reason,
            turns=turns,
            messages=tuple(messages),
            usage=usage,
        )

    # ------------------------------------------------------------------
    # Internal methods
    # ------------------------------------------------------------------

    def _finish(self, state: AgentState, reason: StopReason | None = None) -> None:
        self._state = state
        self._stop_reason = reason

    def _abort(self, recorder: TraceRecorder, exc: Exception, turn: int) -> None:
        description = f"{type(exc).__name__}: {exc}"
        logger.error("Error in turn %d: %s", turn, description)
        step = recorder.record_error(description, turn=turn)
        self._notify(self._config.on_step, step)
        self._finish(AgentState.STOPPED_EARLY, StopReason.EXECUTION_ERROR)

    def _call_model(self, messages: list[Message], tools: list[dict]) -> ModelResponse:
        """Send the full history plus the catalog and parse the reply.

        Dispatches to ``llm_callable`` if set, otherwise to the client.

        Raises:
            ModelGatewayError: On transport or response-format failures.
        """
        wire = [m.to_dict() for m in messages]
        if self._llm is not None:
            return parse_response(self._llm(messages=wire, tools=tools))

        kwargs: dict[str, Any] = {"tools": tools}
        if self._config.model:
            kwargs["model"] = self._config.model
        if self._config.temperature is not None:
            kwargs["temperature"] = self._config.temperature
        if self._config.max_tokens is not None:
            kwargs["max_tokens"] = self._config.max_tokens
        if self._config.extra_llm_kwargs:
            kwargs.update(self._config.extra_llm_kwargs)
        return parse_response(self._client.chat(wire, **kwargs))

    def _execute_batch(
        self,
        response: ModelResponse,
        recorder: TraceRecorder,
        messages: list[Message],
        turn: int,
    ) -> bool:
        """Run every requested tool call in order.

        Returns:
            True if one of the calls was ``final_report``.

        Raises:
            ToolError: On unknown tools or invalid arguments. Steps already
                recorded in this batch are kept.
        """
        final_seen = False
        logger.info("LLM requested %d tool call(s)", len(response.message.tool_calls))
        for invocation in response.message.tool_calls:
            args = self._parse_arguments(invocation)
            logger.info("  -> %s(%.100s)", invocation.name, json.dumps(args))

            result = self._catalog.execute(invocation.name, args)
            step = recorder.record(
                response.message, invocation.name, args, result, turn=turn
            )
            messages.append(
                Message.tool_result(invocation, json.dumps(result, default=str))
            )
            self._notify(self._config.on_step, step)

            if invocation.name == FINAL_REPORT_TOOL:
                final_seen = True
        return final_seen

    @staticmethod
    def _parse_arguments(invocation: ToolInvocation) -> dict[str, Any]:
        """Decode the model's JSON argument string into an object.

        Raises:
            ToolArgumentError: If the string is not a JSON object.
        """
        raw = invocation.arguments.strip() or "{}"
        try:
            args = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ToolArgumentError(invocation.name, f"malformed JSON ({exc})") from exc
        if not isinstance(args, dict):
            raise ToolArgumentError(
                invocation.name, f"expected a JSON object, got {type(args).__name__}"
            )
        return args

    @staticmethod
    def _notify(callback: Callable | None, payload: Any) -> None:
        if callback is None:
            return
        try:
            callback(payload)
        except Exception:
            logger.debug("Agent callback error", exc_info=True)


def run_agent(
    catalog: ToolCatalog,
    prompt: str = DEFAULT_TASK_PROMPT,
    *,
    config: AgentConfig | None = None,
    client: LLMClient | None = None,
    llm_callable: Callable[..., dict] | None = None,
) -> tuple[TraceStep, ...]:
    """Run the agent once and return only its trace."""
    loop = AgentLoop(catalog, config, client=client, llm_callable=llm_callable)
    return loop.run(prompt).steps
