"""Shared helpers for tool implementations."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def resolve_under(root: Path, name: str) -> Path | None:
    """Resolve ``name`` inside ``root``; paths escaping the root resolve to None."""

    base = root.resolve()
    candidate = (base / name).resolve()
    if candidate == base or base not in candidate.parents:
        return None
    return candidate


def list_files(root: Path, suffixes: tuple[str, ...]) -> list[str]:
    """File names directly under ``root`` with one of ``suffixes``, sorted."""

    if not root.is_dir():
        return []
    return sorted(
        path.name for path in root.iterdir() if path.is_file() and path.suffix in suffixes
    )


def to_observation(result: Any) -> str:
    """Serialise a tool result as the text the LLM sees."""

    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, indent=2, default=str)
