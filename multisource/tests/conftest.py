import sqlite3
from pathlib import Path

import pytest

from multisource.core.config import AgentSettings
from multisource.llm.services.history_store import HistoryStore
from multisource.mcp.server import build_tool_registry

ECONOMY_TEXT = "\n".join(
    [
        "Classic economics reading list",
        "The Wealth of Nations by Adam Smith",
        "Published in 1776",
        "Das Kapital by Karl Marx",
        "The General Theory by Keynes",
        "Smith also wrote The Theory of Moral Sentiments",
    ]
)


@pytest.fixture
def sqlite_dir(tmp_path: Path) -> Path:
    root = tmp_path / "sqlite"
    root.mkdir()
    with sqlite3.connect(root / "music.db") as connection:
        connection.execute("CREATE TABLE artists (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        connection.executemany(
            "INSERT INTO artists (name) VALUES (?)",
            [("Caetano Veloso",), ("Gilberto Gil",), ("Elis Regina",)],
        )
    connection.close()
    return root


@pytest.fixture
def documents_dir(tmp_path: Path) -> Path:
    root = tmp_path / "documents"
    root.mkdir()
    (root / "economy_books.txt").write_text(ECONOMY_TEXT, encoding="utf-8")
    (root / "a.txt").write_text("a\nbx\nc\nd\ne\nf", encoding="utf-8")
    (root / "image.png").write_bytes(b"\x89PNG")
    return root


@pytest.fixture
def settings(tmp_path: Path, sqlite_dir: Path, documents_dir: Path) -> AgentSettings:
    return AgentSettings(
        _env_file=None,
        openai_api_key="sk-test-key",
        log_file="",
        sqlite_path=sqlite_dir,
        documents_path=documents_dir,
        history_file=tmp_path / "history" / "conversation_history.json",
        export_dir=tmp_path / "exports",
        max_history_entries=5,
        enable_bash_commands=True,
    )


@pytest.fixture
def registry(settings: AgentSettings):
    return build_tool_registry(settings)


@pytest.fixture
def history_store(settings: AgentSettings) -> HistoryStore:
    return HistoryStore(
        settings.history_file,
        max_entries=settings.max_history_entries,
        export_dir=settings.export_dir,
        stop_words=settings.history_stop_words,
    )
