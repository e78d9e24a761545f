"""Two-phase tool-calling loop.

Each query makes at most two model requests. The first forces the model
to pick from the loaded tools; every proposed call is then dispatched in
order, and the second request, made without tools, turns the results
into the final answer. Tool failures become error results for the model
to reason about instead of aborting the query.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from .conversation import (
    Conversation,
    ConversationTurn,
    FunctionCallPart,
    FunctionResponsePart,
    ProposedCall,
    Role,
)
from .mcp.client import ToolResult
from .providers.base import BaseProvider, ToolConfig
from .tools.registry import ToolRegistryCache

_log = logging.getLogger(__name__)

NO_RESPONSE = "No response generated."
NO_FINAL_RESPONSE = "No final response generated."


class ToolCaller(Protocol):
    def call_tool(self, name: str, arguments: Optional[dict[str, Any]] = None) -> Any:
        ...


@dataclass(frozen=True)
class CallOutcome:
    """Result of dispatching one proposed call.

    Exactly one of ``result`` and ``error`` is set.
    """

    name: str
    result: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_part(self) -> FunctionResponsePart:
        if self.ok:
            return FunctionResponsePart(name=self.name, response={"result": self.result})
        return FunctionResponsePart(name=self.name, response={"error": self.error})


@dataclass(frozen=True)
class QueryResult:
    """Everything one query produced."""

    answer: str
    conversation: Conversation
    outcomes: tuple[CallOutcome, ...] = ()
    model_requests: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


def result_text(result: Any) -> tuple[str, bool]:
    """Return (text, is_error) for a tool result.

    Accepts a ToolResult or the raw ``{"content": [...]}`` mapping.
    """
    if isinstance(result, dict):
        result = ToolResult.from_raw(result)
    if isinstance(result, ToolResult):
        return result.text(), result.is_error
    if isinstance(result, str):
        return result, False
    return "", False


class CallOrchestrator:
    """Drive a query through propose, execute, and finalize."""

    def __init__(
        self,
        endpoint: BaseProvider,
        executor: ToolCaller,
        registry: ToolRegistryCache,
        on_call: Optional[Callable[[ProposedCall], None]] = None,
        on_outcome: Optional[Callable[[CallOutcome], None]] = None,
    ):
        self.endpoint = endpoint
        self.executor = executor
        self.registry = registry
        self._on_call = on_call
        self._on_outcome = on_outcome

    def tool_config(self) -> Optional[ToolConfig]:
        """Forced-call config over every loaded tool.

        None when the registry is empty, since a call cannot be forced
        from an empty allowed set.
        """
        names = self.registry.allowed_names()
        if not names:
            return None
        return ToolConfig(
            force_call=True,
            allowed_names=names,
            declarations=self.registry.declarations,
        )

    def process(self, query: str) -> str:
        """Answer one query and return the final text."""
        return self.run(query).answer

    def run(self, query: str) -> QueryResult:
        """Answer one query and return the answer with its conversation.

        Raises:
            ModelRequestError: If either model request fails.
        """
        conversation = Conversation.start(query)

        _log.debug("Available tools: %s", list(self.registry.allowed_names()))
        reply = self.endpoint.generate(conversation, self.tool_config())
        _log.debug("Function calls: %s", reply.proposed_calls)

        if not reply.proposed_calls:
            return QueryResult(
                answer=reply.text or NO_RESPONSE,
                conversation=conversation,
                model_requests=1,
                input_tokens=reply.input_tokens,
                output_tokens=reply.output_tokens,
            )

        conversation = conversation.append(ConversationTurn(
            role=Role.MODEL,
            parts=tuple(FunctionCallPart.from_call(c) for c in reply.proposed_calls),
        ))

        outcomes = self.execute_calls(reply.proposed_calls)
        conversation = conversation.append(ConversationTurn(
            role=Role.USER,
            parts=tuple(outcome.to_part() for outcome in outcomes),
        ))

        final = self.endpoint.generate(conversation)
        return QueryResult(
            answer=final.text or NO_FINAL_RESPONSE,
            conversation=conversation,
            outcomes=outcomes,
            model_requests=2,
            input_tokens=reply.input_tokens + final.input_tokens,
            output_tokens=reply.output_tokens + final.output_tokens,
        )

    def execute_calls(self, calls: tuple[ProposedCall, ...]) -> tuple[CallOutcome, ...]:
        """Dispatch calls one at a time, in order, one outcome per call."""
        return tuple(self._dispatch(call) for call in calls)

    def _dispatch(self, call: ProposedCall) -> CallOutcome:
        # Names outside the registry still go to the executor, which
        # reports them as failures.
        if not self.registry.has_tool(call.name):
            _log.warning("Model proposed unknown tool %r", call.name)

        _log.info("Calling tool: %s with args: %s", call.name, call.args)
        if self._on_call:
            self._on_call(call)

        try:
            result = self.executor.call_tool(call.name, dict(call.args))
            text, is_error = result_text(result)
            if is_error:
                outcome = CallOutcome(name=call.name, error=f"Error calling tool: {text}")
            else:
                outcome = CallOutcome(name=call.name, result=text)
        except Exception as e:
            _log.error("Error calling tool %s: %s", call.name, e)
            outcome = CallOutcome(name=call.name, error=f"Error calling tool: {e}")

        if self._on_outcome:
            self._on_outcome(outcome)
        return outcome
