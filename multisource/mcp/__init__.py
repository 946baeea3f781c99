"""Agent tools, their registry and the MCP server publishing them."""
