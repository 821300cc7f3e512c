from docs_agent.agent.kinds import ToolKind
from docs_agent.agent.registry import ToolRegistry
from docs_agent.agent.tools import Tool, ToolInvocation
from docs_agent.config import AgentConfig
from docs_agent.obs.tracing import TraceBuffer
from docs_agent.types import DocumentContext, ParsedRequest, ToolResult


class EchoTool(Tool):
    kind = ToolKind.GENERAL
    description = "uppercase"

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        return ToolResult.ok({"text": invocation.request.parameter_tail.upper()})


def test_tool_observer_captures_latency_and_payload(provider) -> None:
    registry = ToolRegistry()
    tool = EchoTool()
    registry.register("echo", tool)
    invocation = ToolInvocation(
        request=ParsedRequest(raw_text="/echo hello", command="echo", parameter_tail="hello"),
        context=DocumentContext(),
        provider=provider,
        config=AgentConfig(),
    )

    observed = []
    registry.set_observer(observed.append)
    result = registry.execute(tool, invocation)
    registry.set_observer(None)

    assert result.text == "HELLO"
    assert len(observed) == 1
    assert observed[0].name == "general"
    assert observed[0].input_payload == {"command": "echo", "parameter_tail": "hello"}
    assert observed[0].output_preview == "HELLO"
    assert observed[0].latency_ms >= 0.0


def test_trace_buffer_summary(provider) -> None:
    registry = ToolRegistry()
    tool = EchoTool()
    registry.register("echo", tool)
    buffer = TraceBuffer(maxlen=2)
    registry.set_observer(buffer)
    invocation = ToolInvocation(
        request=ParsedRequest(raw_text="x", command="echo", parameter_tail="x"),
        context=DocumentContext(),
        provider=provider,
        config=AgentConfig(),
    )

    assert buffer.summary()["total_calls"] == 0
    for _ in range(3):
        registry.execute(tool, invocation)

    assert len(buffer.list_recent()) == 2
    assert buffer.summary()["total_calls"] == 2
    assert buffer.summary()["avg_latency_ms"] >= 0.0


def test_trace_buffer_zero_limit_returns_nothing(provider) -> None:
    registry = ToolRegistry()
    tool = EchoTool()
    registry.register("echo", tool)
    buffer = TraceBuffer()
    registry.set_observer(buffer)
    invocation = ToolInvocation(
        request=ParsedRequest(raw_text="x", command="echo", parameter_tail="x"),
        context=DocumentContext(),
        provider=provider,
        config=AgentConfig(),
    )
    registry.execute(tool, invocation)

    assert buffer.list_recent(0) == []
    assert buffer.list_recent(-3) == []
    assert len(buffer.list_recent(1)) == 1
