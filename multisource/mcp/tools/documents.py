"""Full-text access and windowed term search over plain-text documents."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from ...core.exceptions import DocumentNotFoundError, DocumentReadError
from ...core.logging_config import get_logger
from ..base import Tool
from .utils import list_files, resolve_under

logger = get_logger(__name__)

DOCUMENT_SUFFIXES = (".txt", ".md")
CONTEXT_LINES = 2


class DocumentSearchInput(BaseModel):
    filename: str = Field(..., min_length=1, description="Document file name, e.g. `economy_books.txt`")
    search_term: str | None = Field(
        None, description="Case-insensitive term to look for; omit to get the full text"
    )


def find_matches(content: str, search_term: str) -> list[dict[str, Any]]:
    """Return one record per line containing ``search_term``, with surrounding context.

    Line numbers in the result are 1-based; the context window spans up to
    ``CONTEXT_LINES`` lines on either side of the match, clipped to the document.
    """

    lines = content.split("\n")
    needle = search_term.lower()
    last_index = len(lines) - 1
    matches: list[dict[str, Any]] = []

    for index, line in enumerate(lines):
        if needle not in line.lower():
            continue
        start = max(0, index - CONTEXT_LINES)
        end = min(last_index, index + CONTEXT_LINES)
        matches.append(
            {
                "line_number": index + 1,
                "line": line,
                "context": "\n".join(lines[start : end + 1]),
                "start_line": start + 1,
                "end_line": end + 1,
            }
        )
    return matches


class DocumentSearchTool(Tool):
    name = "document_search"
    description = (
        "Search and retrieve information from text documents in the data/documents folder. "
        "Provide `filename` and an optional `search_term`. Without a search term the full "
        'document content is returned. Example: {"filename": "economy_books.txt", '
        '"search_term": "Adam Smith"}'
    )
    input_model = DocumentSearchInput

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def run(self, params: DocumentSearchInput) -> dict[str, Any]:
        path = resolve_under(self.root, params.filename)
        if path is None or not path.is_file():
            raise DocumentNotFoundError(f"Document {params.filename} not found in {self.root}")

        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentReadError(f"Could not read document {params.filename}: {exc}") from exc

        if not params.search_term:
            return {"filename": params.filename, "content": content, "length": len(content)}

        matches = find_matches(content, params.search_term)
        logger.info(
            "document_search_completed",
            filename=params.filename,
            search_term=params.search_term,
            match_count=len(matches),
        )
        return {
            "filename": params.filename,
            "search_term": params.search_term,
            "match_count": len(matches),
            "matches": matches,
        }

    def list_documents(self) -> list[str]:
        return list_files(self.root, DOCUMENT_SUFFIXES)

    def stats(self) -> dict[str, Any]:
        documents = self.list_documents()
        return {"count": len(documents), "files": documents}
