"""Multi-source LLM agent: tool-calling decision loop plus a bounded query history."""
