"""Bounded, persisted log of completed queries."""

from __future__ import annotations

import asyncio
import json
import os
import uuid
from collections import Counter
from datetime import date, datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from ...core.config import DEFAULT_STOP_WORDS, get_settings
from ...core.exceptions import ExportError, PersistenceError
from ...core.logging_config import get_logger
from ...core.messages import format_local_datetime, get_string
from ..schemas.history import ExportFormat, HistoryEntry, HistoryStats, KeywordCount

logger = get_logger(__name__)

_ENTRIES_ADAPTER = TypeAdapter(list[HistoryEntry])

MIN_KEYWORD_LENGTH = 4
TOP_KEYWORDS = 5


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class HistoryStore:
    """Most-recent-first log capped at ``max_entries``.

    The list is replaced rather than mutated in place, so readers always see
    a consistent snapshot without locking. Writes to ``history_file`` are
    serialised through ``_persist_lock`` and always reflect the newest state.
    """

    def __init__(
        self,
        history_file: Path,
        *,
        max_entries: int = 50,
        export_dir: Path | None = None,
        stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
        locale: str = "pt-BR",
    ) -> None:
        self._history_file = Path(history_file)
        self._max_entries = max_entries
        self._export_dir = Path(export_dir) if export_dir else self._history_file.parent
        self._stop_words = frozenset(word.lower() for word in stop_words)
        self._locale = locale
        self._persist_lock = asyncio.Lock()
        self._entries: list[HistoryEntry] = self._load()

    # ── Mutations ────────────────────────────────────────────────────

    async def add_entry(
        self,
        query: str,
        response: str,
        timestamp: datetime,
        duration_ms: int,
        success: bool,
    ) -> str:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        entry = HistoryEntry(
            id=uuid.uuid4().hex,
            timestamp=timestamp.astimezone(timezone.utc).isoformat(),
            query=query.strip(),
            response=response.strip(),
            success=success,
            duration_ms=max(0, int(duration_ms)),
        )
        self._entries = [entry, *self._entries][: self._max_entries]
        await self._persist()
        return entry.id

    async def remove(self, entry_id: str) -> HistoryEntry | None:
        removed = self.get_by_id(entry_id)
        if removed is None:
            return None
        self._entries = [entry for entry in self._entries if entry.id != entry_id]
        await self._persist()
        return removed

    async def clear(self) -> None:
        self._entries = []
        await self._persist()
        logger.info("history_cleared")

    # ── Reads ────────────────────────────────────────────────────────

    def get_history(self, limit: int | None = None) -> list[HistoryEntry]:
        entries = self._entries
        if limit is not None and limit > 0:
            return entries[:limit]
        return list(entries)

    def search(self, term: str) -> list[HistoryEntry]:
        needle = term.lower()
        return [
            entry
            for entry in self._entries
            if needle in entry.query.lower() or needle in entry.response.lower()
        ]

    def get_by_id(self, entry_id: str) -> HistoryEntry | None:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def stats(self) -> HistoryStats:
        entries = self._entries
        total = len(entries)
        successful = sum(1 for entry in entries if entry.success)
        today = date.today()
        today_count = sum(
            1 for entry in entries if _parse_timestamp(entry.timestamp).astimezone().date() == today
        )

        return HistoryStats(
            total=total,
            successful=successful,
            failed=total - successful,
            success_rate=f"{successful / total * 100:.1f}" if total else "0",
            today_count=today_count,
            top_keywords=self._top_keywords(entries),
            oldest_entry_timestamp=entries[-1].timestamp if entries else None,
            newest_entry_timestamp=entries[0].timestamp if entries else None,
        )

    def _top_keywords(self, entries: list[HistoryEntry]) -> list[KeywordCount]:
        counts: Counter[str] = Counter()
        for entry in entries:
            counts.update(
                word
                for word in entry.query.lower().split()
                if len(word) >= MIN_KEYWORD_LENGTH and word not in self._stop_words
            )
        # most_common keeps first-seen order among equal counts
        return [KeywordCount(word=word, count=count) for word, count in counts.most_common(TOP_KEYWORDS)]

    # ── Export ───────────────────────────────────────────────────────

    async def export(self, fmt: ExportFormat = "json") -> Path:
        """Write the current log to a new timestamped file and return its path."""

        renderers = {"json": self._render_json, "txt": self._render_txt, "md": self._render_md}
        if fmt not in renderers:
            raise ExportError(f"Unsupported export format: {fmt}")

        now = datetime.now(tz=timezone.utc)
        stamp = now.isoformat(timespec="milliseconds").replace(":", "-").replace(".", "-")
        export_path = self._export_dir / f"conversation_history_{stamp}.{fmt}"
        content = renderers[fmt](self._entries, now)

        try:
            await asyncio.to_thread(self._write_text, export_path, content)
        except OSError as exc:
            logger.error("history_export_failed", path=str(export_path), error=str(exc))
            raise ExportError(f"Could not write export file {export_path}: {exc}") from exc

        logger.info("history_exported", path=str(export_path), format=fmt, entries=len(self._entries))
        return export_path

    @staticmethod
    def _render_json(entries: list[HistoryEntry], _: datetime) -> str:
        return json.dumps(
            [entry.model_dump() for entry in entries], indent=2, ensure_ascii=False
        )

    def _render_txt(self, entries: list[HistoryEntry], _: datetime) -> str:
        question = get_string("question", self._locale)
        answer = get_string("answer", self._locale)
        blocks = []
        for entry in entries:
            when = format_local_datetime(_parse_timestamp(entry.timestamp), self._locale)
            glyph = "✅" if entry.success else "❌"
            blocks.append(
                f"[{when}] {glyph}\n{question}: {entry.query}\n{answer}: {entry.response}\n"
                f"{'=' * 80}\n"
            )
        return "\n".join(blocks)

    def _render_md(self, entries: list[HistoryEntry], exported_at: datetime) -> str:
        question = get_string("question", self._locale)
        answer = get_string("answer", self._locale)
        lines = [
            get_string("export_title", self._locale),
            get_string(
                "exported_at", self._locale, date=format_local_datetime(exported_at, self._locale)
            ),
            get_string("total_entries", self._locale, total=len(entries)) + "\n",
        ]
        for entry in entries:
            when = format_local_datetime(_parse_timestamp(entry.timestamp), self._locale)
            glyph = "✅" if entry.success else "❌"
            lines.append(
                f"## {glyph} {when}\n\n**{question}:** {entry.query}\n\n"
                f"**{answer}:** {entry.response}\n\n---\n"
            )
        return "\n".join(lines)

    # ── Persistence ──────────────────────────────────────────────────

    def _load(self) -> list[HistoryEntry]:
        if not self._history_file.exists():
            logger.debug("history_file_missing", path=str(self._history_file))
            return []

        try:
            raw = self._history_file.read_text(encoding="utf-8")
            entries = _ENTRIES_ADAPTER.validate_json(raw)
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("history_load_failed", path=str(self._history_file), error=str(exc))
            return []

        logger.debug("history_loaded", entries=len(entries))
        return entries[: self._max_entries]

    async def _persist(self) -> None:
        """Write the newest snapshot; failures are logged, never raised."""

        async with self._persist_lock:
            snapshot = self._entries
            try:
                await asyncio.to_thread(self._write_snapshot, snapshot)
            except PersistenceError as exc:
                logger.error("history_persist_failed", path=str(self._history_file), error=str(exc))
                return
        logger.debug("history_persisted", entries=len(snapshot))

    def _write_snapshot(self, entries: list[HistoryEntry]) -> None:
        payload = _ENTRIES_ADAPTER.dump_json(entries, indent=2).decode("utf-8")
        temp_path = self._history_file.with_name(f"{self._history_file.name}.tmp")
        try:
            self._history_file.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(payload, encoding="utf-8")
            os.replace(temp_path, self._history_file)
        except OSError as exc:
            raise PersistenceError(str(exc)) from exc

    @staticmethod
    def _write_text(path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@lru_cache
def get_history_store() -> HistoryStore:
    settings = get_settings()
    return HistoryStore(
        settings.history_file,
        max_entries=settings.max_history_entries,
        export_dir=settings.export_dir,
        stop_words=settings.history_stop_words,
        locale=settings.response_locale,
    )
