"""Conversation history endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query

from ...core.exceptions import ExportError
from ...core.logging_config import get_logger
from ..schemas.history import (
    ExportRequest,
    ExportResponse,
    HistoryEntry,
    HistoryStats,
    RemoveResponse,
)
from ..services.history_store import HistoryStore, get_history_store

router = APIRouter(prefix="/history", tags=["history"])
logger = get_logger(__name__)


@router.get("", response_model=list[HistoryEntry])
async def get_history(
    limit: int | None = Query(None, description="Maximum number of entries to return"),
    store: HistoryStore = Depends(get_history_store),
) -> list[HistoryEntry]:
    return store.get_history(limit)


@router.get("/search", response_model=list[HistoryEntry])
async def search_history(
    term: str = Query("", description="Term to look for in questions and answers"),
    store: HistoryStore = Depends(get_history_store),
) -> list[HistoryEntry]:
    if not term.strip():
        raise HTTPException(status_code=400, detail="Search term is required")
    return store.search(term)


@router.get("/stats", response_model=HistoryStats)
async def history_stats(store: HistoryStore = Depends(get_history_store)) -> HistoryStats:
    return store.stats()


@router.post("/export", response_model=ExportResponse)
async def export_history(
    request: ExportRequest,
    store: HistoryStore = Depends(get_history_store),
) -> ExportResponse:
    try:
        path = await store.export(request.format)
    except ExportError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return ExportResponse(file_path=str(path), message="History exported successfully")


@router.delete("")
async def clear_history(store: HistoryStore = Depends(get_history_store)) -> dict[str, str]:
    await store.clear()
    return {"message": "History cleared successfully"}


@router.get("/{entry_id}", response_model=HistoryEntry)
async def get_entry(entry_id: str, store: HistoryStore = Depends(get_history_store)) -> HistoryEntry:
    entry = store.get_by_id(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    return entry


@router.delete("/{entry_id}", response_model=RemoveResponse)
async def remove_entry(
    entry_id: str, store: HistoryStore = Depends(get_history_store)
) -> RemoveResponse:
    removed = await store.remove(entry_id)
    if removed is None:
        raise HTTPException(status_code=404, detail="Entry not found")
    logger.info("history_entry_removed", entry_id=entry_id)
    return RemoveResponse(message="Entry removed successfully", removed_entry=removed)
