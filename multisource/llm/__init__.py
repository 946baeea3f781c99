"""FastAPI service, LLM client and agent services."""
