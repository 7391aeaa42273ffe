"""Structure summary — aggregate counts over a repository tree."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from repo_analyzer.domain.entities import CodeStructure, EntryKind, TreeEntry
from repo_analyzer.services.file_filter import IMPORTANT_DIRS, detect_language

MAX_IMPORTANT_DIRS = 10

_IMPORTANT_ROOTS: frozenset[str] = frozenset(IMPORTANT_DIRS) | {"app", "config", "server"}


def build_code_structure(entries: Iterable[TreeEntry]) -> CodeStructure:
    """Reduce the tree to file/byte totals, a directory set and language counts."""
    directories: set[str] = set()
    files: set[str] = set()
    languages: Counter[str] = Counter()
    total_bytes = 0

    for entry in entries:
        if entry.kind is EntryKind.DIRECTORY:
            directories.add(entry.path)
            continue
        files.add(entry.path)
        total_bytes += entry.byte_size
        lang = detect_language(entry.path)
        if lang:
            languages[lang] += 1

    return CodeStructure(
        total_files=len(files),
        total_bytes=total_bytes,
        directories=frozenset(directories),
        files=frozenset(files),
        language_counts=dict(languages),
    )


def important_directories(
    directories: Iterable[str], limit: int = MAX_IMPORTANT_DIRS
) -> list[str]:
    """Return up to *limit* directories rooted at a well-known top-level name."""
    picked = [
        d for d in sorted(directories) if d.split("/", maxsplit=1)[0].lower() in _IMPORTANT_ROOTS
    ]
    return picked[:limit]
