"""Read-only SQL queries over SQLite files in the configured data directory."""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ...core.exceptions import QueryExecutionError, SourceNotFoundError
from ...core.logging_config import get_logger
from ..base import Tool
from .utils import list_files, resolve_under

logger = get_logger(__name__)

DATABASE_SUFFIXES = (".db",)


class SqliteQueryInput(BaseModel):
    source_name: str = Field(
        ..., min_length=1, description="SQLite database file name, e.g. `music.db`"
    )
    query: str = Field(..., min_length=1, description="Read-only SQL statement to execute")


class SqliteQueryTool(Tool):
    name = "sqlite_query"
    description = (
        "Execute a read-only SQL query on a SQLite database in the data/sqlite folder. "
        "Provide `source_name` (the database file) and `query`. "
        'Example: {"source_name": "music.db", "query": "SELECT * FROM artists LIMIT 5"}'
    )
    input_model = SqliteQueryInput

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def run(self, params: SqliteQueryInput) -> dict[str, Any]:
        path = self._resolve(params.source_name)
        rows = await asyncio.to_thread(self._fetch_rows, path, params.query)
        logger.info(
            "sqlite_query_executed",
            source=params.source_name,
            row_count=len(rows),
        )
        return {
            "source_name": params.source_name,
            "query": params.query,
            "rows": rows,
            "row_count": len(rows),
        }

    def list_databases(self) -> list[str]:
        return list_files(self.root, DATABASE_SUFFIXES)

    async def get_tables(self, source_name: str) -> list[str]:
        path = self._resolve(source_name)
        rows = await asyncio.to_thread(
            self._fetch_rows, path, "SELECT name FROM sqlite_master WHERE type='table'"
        )
        return [row["name"] for row in rows]

    def stats(self) -> dict[str, Any]:
        databases = self.list_databases()
        return {"count": len(databases), "databases": databases}

    def _resolve(self, source_name: str) -> Path:
        path = resolve_under(self.root, source_name)
        if path is None or not path.is_file():
            raise SourceNotFoundError(f"Database {source_name} not found in {self.root}")
        return path

    @staticmethod
    def _fetch_rows(path: Path, query: str) -> list[dict[str, Any]]:
        try:
            connection = sqlite3.connect(f"{path.as_uri()}?mode=ro", uri=True)
        except sqlite3.Error as exc:
            raise QueryExecutionError(f"Failed to open database: {exc}") from exc

        with closing(connection):
            connection.row_factory = sqlite3.Row
            try:
                cursor = connection.execute(query)
                return [dict(row) for row in cursor.fetchall()]
            except sqlite3.Error as exc:
                raise QueryExecutionError(f"Query failed: {exc}") from exc
