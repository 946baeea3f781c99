import json

import pytest

from multisource.core.types import FinalAnswer, ToolCall
from multisource.llm.services.orchestrator import AgentOrchestrator, parse_decision
from multisource.mcp.registry import ToolRegistry
from multisource.tests.fakes import (
    BrokenLLM,
    EchoTool,
    FailingTool,
    LoopingLLM,
    ScriptedLLM,
    answer_response,
    tool_call_response,
)


@pytest.fixture
def echo_tool() -> EchoTool:
    return EchoTool()


@pytest.fixture
def echo_registry(echo_tool) -> ToolRegistry:
    registry = ToolRegistry()
    registry.register(echo_tool)
    registry.register(FailingTool())
    registry.freeze()
    return registry


@pytest.mark.asyncio
async def test_direct_answer_needs_no_tools(echo_registry, echo_tool):
    llm = ScriptedLLM(answer_response("Paris"))
    orchestrator = AgentOrchestrator(llm, echo_registry)

    result = await orchestrator.run("Capital of France?")

    assert result.answer == "Paris"
    assert result.success is True
    assert result.steps == ()
    assert result.error is None
    assert echo_tool.calls == []
    call = llm.calls[0]
    assert call["tool_choice"] == "auto"
    assert [tool["function"]["name"] for tool in call["tools"]] == ["echo", "failing"]
    assert [message.role for message in call["messages"]] == ["system", "user"]
    assert call["messages"][1].content == "Capital of France?"


@pytest.mark.asyncio
async def test_tool_result_is_fed_back_before_answer(echo_registry, echo_tool):
    llm = ScriptedLLM(
        tool_call_response("echo", {"text": "hello"}, call_id="call-7"),
        answer_response("The tool said hello"),
    )
    orchestrator = AgentOrchestrator(llm, echo_registry)

    result = await orchestrator.run("Say hello via the tool")

    assert result.success is True
    assert result.answer == "The tool said hello"
    assert echo_tool.calls == ["hello"]
    (step,) = result.steps
    assert step.tool_name == "echo"
    assert dict(step.tool_input) == {"text": "hello"}
    assert json.loads(step.observation) == {"echo": "hello"}

    second_messages = llm.calls[1]["messages"]
    assert [message.role for message in second_messages] == ["system", "user", "assistant", "tool"]
    assert second_messages[2].tool_calls[0]["id"] == "call-7"
    assert second_messages[3].tool_call_id == "call-7"
    assert second_messages[3].content == step.observation


@pytest.mark.asyncio
async def test_tool_failure_becomes_observation(echo_registry):
    llm = ScriptedLLM(
        tool_call_response("failing", {"text": "x"}),
        answer_response("The source is unavailable"),
    )

    result = await AgentOrchestrator(llm, echo_registry).run("Use the failing tool")

    assert result.success is True
    assert result.steps[0].observation == "Error: boom"
    assert result.answer == "The source is unavailable"


@pytest.mark.asyncio
async def test_unknown_tool_becomes_observation(echo_registry):
    llm = ScriptedLLM(
        tool_call_response("teleport", {"where": "moon"}),
        answer_response("I cannot do that"),
    )

    result = await AgentOrchestrator(llm, echo_registry).run("Teleport me")

    assert result.success is True
    assert result.steps[0].tool_name == "teleport"
    assert result.steps[0].observation == "Error: Unknown tool: teleport"


@pytest.mark.asyncio
async def test_invalid_tool_input_becomes_observation(echo_registry, echo_tool):
    llm = ScriptedLLM(
        tool_call_response("echo", {"wrong": 1}),
        answer_response("done"),
    )

    result = await AgentOrchestrator(llm, echo_registry).run("Echo badly")

    assert result.steps[0].observation == "Error: Invalid input for echo: text"
    assert echo_tool.calls == []


@pytest.mark.asyncio
async def test_unparsable_arguments_become_observation(echo_registry, echo_tool):
    llm = ScriptedLLM(
        tool_call_response("echo", "{not json"),
        answer_response("done"),
    )

    result = await AgentOrchestrator(llm, echo_registry).run("Echo garbage")

    step = result.steps[0]
    assert step.observation.startswith("Error: Invalid tool arguments")
    assert dict(step.tool_input) == {}
    assert echo_tool.calls == []
    assert result.success is True


@pytest.mark.asyncio
async def test_iteration_cap_stops_the_loop(echo_registry, echo_tool):
    llm = LoopingLLM("echo", {"text": "again"})
    orchestrator = AgentOrchestrator(llm, echo_registry)

    result = await orchestrator.run("Loop forever")

    assert orchestrator.max_iterations == 10
    assert llm.calls == 10
    assert len(result.steps) == 10
    assert len(echo_tool.calls) == 10
    assert result.success is False
    assert result.answer == "Não consegui chegar a uma resposta final após 10 iterações."


@pytest.mark.asyncio
async def test_iteration_cap_keeps_last_assistant_text(echo_registry):
    llm = LoopingLLM("echo", {"text": "again"}, content="Still looking...")

    result = await AgentOrchestrator(llm, echo_registry, max_iterations=3).run("Loop")

    assert llm.calls == 3
    assert len(result.steps) == 3
    assert result.answer == "Still looking..."
    assert result.success is False


@pytest.mark.asyncio
async def test_llm_failure_yields_failed_result(echo_registry):
    result = await AgentOrchestrator(BrokenLLM(), echo_registry).run("Anything")

    assert result.success is False
    assert result.answer.startswith("Desculpe")
    assert "llm down" in result.answer
    assert result.error == "llm down"
    assert result.steps == ()


@pytest.mark.asyncio
async def test_failure_message_follows_locale(echo_registry):
    result = await AgentOrchestrator(BrokenLLM(), echo_registry, locale="en").run("Anything")

    assert result.answer.startswith("Sorry")


def test_system_prompt_names_agent_and_language(echo_registry):
    orchestrator = AgentOrchestrator(ScriptedLLM(), echo_registry, agent_name="Atlas", locale="en")

    prompt = orchestrator.system_prompt()

    assert prompt.startswith("You are Atlas")
    assert "in English" in prompt


def test_parse_decision_variants():
    assert parse_decision({"content": "hi"}) == FinalAnswer(text="hi")
    assert parse_decision({"content": None, "tool_calls": []}) == FinalAnswer(text="")

    (call,) = parse_decision(
        {
            "tool_calls": [
                {"id": "c1", "function": {"name": "echo", "arguments": '{"text": "a"} trailing'}}
            ]
        }
    )
    assert call == ToolCall(name="echo", arguments={"text": "a"}, call_id="c1")

    (listed,) = parse_decision(
        {"tool_calls": [{"id": "c2", "function": {"name": "echo", "arguments": "[1, 2]"}}]}
    )
    assert listed.arguments_error == "Tool arguments must be a JSON object"


@pytest.mark.asyncio
async def test_unreadable_document_does_not_end_the_loop(registry, documents_dir):
    (documents_dir / "latin1.txt").write_bytes("café economia".encode("latin-1"))
    llm = ScriptedLLM(
        tool_call_response("document_search", {"filename": "latin1.txt"}),
        answer_response("That document could not be read"),
    )

    result = await AgentOrchestrator(llm, registry).run("What is in latin1.txt?")

    assert result.success is True
    assert result.answer == "That document could not be read"
    assert len(llm.calls) == 2
    assert result.steps[0].observation.startswith("Error: Could not read document latin1.txt")


class CrashingTool(EchoTool):
    name = "crashing"
    description = "Raises an unexpected exception."

    async def run(self, params):
        raise KeyError("missing field")


@pytest.mark.asyncio
async def test_unexpected_tool_exception_becomes_observation():
    registry = ToolRegistry()
    registry.register(CrashingTool())
    llm = ScriptedLLM(
        tool_call_response("crashing", {"text": "x"}),
        answer_response("Recovered"),
    )

    result = await AgentOrchestrator(llm, registry).run("Crash the tool")

    assert result.success is True
    assert result.answer == "Recovered"
    assert result.steps[0].observation == "Error: KeyError: 'missing field'"
