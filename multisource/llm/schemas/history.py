"""Pydantic schemas for the conversation history log."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ExportFormat = Literal["json", "txt", "md"]


class HistoryEntry(BaseModel):
    """One recorded query/response pair. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: str = Field(..., description="ISO-8601 creation time")
    query: str
    response: str
    success: bool
    duration_ms: int = Field(
        ..., ge=0, validation_alias=AliasChoices("duration_ms", "duration")
    )


class KeywordCount(BaseModel):
    word: str
    count: int


class HistoryStats(BaseModel):
    total: int
    successful: int
    failed: int
    success_rate: str
    today_count: int
    top_keywords: list[KeywordCount]
    oldest_entry_timestamp: str | None
    newest_entry_timestamp: str | None


class ExportRequest(BaseModel):
    format: ExportFormat = "json"


class ExportResponse(BaseModel):
    file_path: str
    message: str


class RemoveResponse(BaseModel):
    message: str
    removed_entry: HistoryEntry
