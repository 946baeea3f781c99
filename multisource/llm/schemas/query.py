"""Pydantic schemas for agent query endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=1000, description="Question for the agent")
    context: str | None = Field(None, description="Optional free-form context")
    session_id: str | None = None


class AgentStepModel(BaseModel):
    tool_name: str
    tool_input: dict[str, Any]
    observation: str


class QueryResponse(BaseModel):
    answer: str
    steps: list[AgentStepModel]
    success: bool
    duration_ms: int
    history_id: str
    timestamp: datetime
    error: str | None = None


class SqliteStats(BaseModel):
    count: int = 0
    databases: list[str] = Field(default_factory=list)


class DocumentStats(BaseModel):
    count: int = 0
    files: list[str] = Field(default_factory=list)


class BashStats(BaseModel):
    enabled: bool = False


class DataSourceStats(BaseModel):
    sqlite: SqliteStats
    documents: DocumentStats
    bash: BashStats
