import json

import pytest
from fastmcp import Client
from fastmcp.exceptions import ToolError

from multisource.mcp.server import mcp


@pytest.fixture(autouse=True)
def use_test_registry(monkeypatch, registry):
    monkeypatch.setattr("multisource.mcp.server.get_tool_registry", lambda: registry)


@pytest.mark.asyncio
async def test_tools_are_published():
    async with Client(mcp) as client:
        tools = await client.list_tools()

    assert {tool.name for tool in tools} == {"sqlite_query", "document_search", "bash_command"}


@pytest.mark.asyncio
async def test_call_document_search_over_mcp():
    async with Client(mcp) as client:
        result = await client.call_tool(
            "document_search", {"filename": "economy_books.txt", "search_term": "marx"}
        )

    payload = json.loads(result.content[0].text)
    assert payload["match_count"] == 1
    assert payload["matches"][0]["line_number"] == 4


@pytest.mark.asyncio
async def test_tool_errors_are_reported_to_client():
    async with Client(mcp) as client:
        with pytest.raises(ToolError, match="not found"):
            await client.call_tool("sqlite_query", {"source_name": "nope.db", "query": "SELECT 1"})
