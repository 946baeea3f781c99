import pytest

from multisource.core.exceptions import (
    DuplicateToolError,
    InvalidToolInputError,
    ToolRegistryError,
    UnknownToolError,
)
from multisource.mcp.registry import ToolRegistry
from multisource.tests.fakes import EchoTool, FailingTool


def test_register_keeps_registration_order():
    registry = ToolRegistry()
    registry.register(FailingTool())
    registry.register(EchoTool())

    assert [tool.name for tool in registry.list_tools()] == ["failing", "echo"]
    assert registry.tool_names == ["failing", "echo"]
    assert "echo" in registry
    assert len(registry) == 2


def test_duplicate_registration_is_rejected():
    registry = ToolRegistry()
    registry.register(EchoTool())

    with pytest.raises(DuplicateToolError):
        registry.register(EchoTool())


def test_unknown_tool_lookup_fails():
    with pytest.raises(UnknownToolError, match="missing"):
        ToolRegistry().get("missing")


def test_frozen_registry_is_read_only():
    registry = ToolRegistry()
    registry.register(EchoTool())
    registry.freeze()

    with pytest.raises(ToolRegistryError):
        registry.register(FailingTool())
    assert registry.frozen
    assert registry.tool_names == ["echo"]


def test_tools_schema_uses_function_calling_format():
    registry = ToolRegistry()
    registry.register(EchoTool())

    (entry,) = registry.get_tools_schema()

    assert entry["type"] == "function"
    assert entry["function"]["name"] == "echo"
    assert entry["function"]["description"] == "Echo the given text."
    assert entry["function"]["parameters"]["properties"]["text"]["type"] == "string"
    assert entry["function"]["parameters"]["required"] == ["text"]


@pytest.mark.asyncio
async def test_invoke_validates_input():
    tool = EchoTool()

    assert await tool.invoke({"text": "hi"}) == {"echo": "hi"}
    with pytest.raises(InvalidToolInputError, match="text"):
        await tool.invoke({})


def test_built_registry_has_the_three_data_source_tools(registry):
    assert registry.tool_names == ["sqlite_query", "document_search", "bash_command"]
    assert registry.frozen
