"""File importance scoring — rank tree entries for inclusion in the prompt.

Every file gets an integer score and a :class:`FileCategory`.  Entry points
and build manifests rank highest, then source files in well-known
directories, boosted by language and penalised by nesting depth.  Anything
under a vendored dependency directory is excluded outright.
"""

from __future__ import annotations

from typing import Iterable

from repo_analyzer.domain.entities import FileCategory, ScoredFile, TreeEntry
from repo_analyzer.services.file_filter import (
    CONFIG_NAMES,
    ENTRY_POINT_NAMES,
    EXTENSION_BOOST,
    IMPORTANT_DIRS,
    detect_language,
    directory_segments,
    extension,
    filename,
    is_code_file,
    is_test_file,
    is_vendored,
)

MAX_SCORE = 100
ENTRY_SCORE = 100
CONFIG_SCORE = 90
TEST_SCORE = 40
MIN_CODE_SCORE = 10

_MAX_DEPTH = 4
_DEPTH_PENALTY = 5


def _directory_score(path: str) -> int:
    """Score of the longest important-directory name present in *path*."""
    segments = {part.lower() for part in directory_segments(path)}
    matches = [name for name in IMPORTANT_DIRS if name in segments]
    if not matches:
        return 0
    best = max(matches, key=lambda name: (len(name), IMPORTANT_DIRS[name]))
    return IMPORTANT_DIRS[best]


def score_file(path: str) -> tuple[int, FileCategory]:
    """Return ``(score, category)`` for a single file path.

    A score of ``0`` means the file must not be sent to the model.
    """
    if is_vendored(path):
        return 0, FileCategory.SOURCE

    name = filename(path).lower()
    if name in ENTRY_POINT_NAMES:
        return ENTRY_SCORE, FileCategory.ENTRY
    if name in CONFIG_NAMES:
        return CONFIG_SCORE, FileCategory.CONFIG

    score = _directory_score(path)

    if is_test_file(path):
        return max(score, TEST_SCORE), FileCategory.TEST

    score += EXTENSION_BOOST.get(extension(path), 0)

    depth = path.count("/")
    if depth > _MAX_DEPTH:
        score -= (depth - _MAX_DEPTH) * _DEPTH_PENALTY

    if score < MIN_CODE_SCORE and is_code_file(path):
        score = MIN_CODE_SCORE

    return max(0, min(score, MAX_SCORE)), FileCategory.SOURCE


def score_tree(entries: Iterable[TreeEntry]) -> list[ScoredFile]:
    """Score every candidate file in tree order.

    Directories are skipped.  Only recognised code files and files matching
    the entry-point or manifest names are candidates; anything scoring ``0``
    is dropped.  The returned list keeps the original tree order.
    """
    scored: list[ScoredFile] = []
    for entry in entries:
        if not entry.is_file:
            continue

        score, category = score_file(entry.path)
        if score <= 0:
            continue
        if category not in (FileCategory.ENTRY, FileCategory.CONFIG) and not is_code_file(
            entry.path
        ):
            continue

        scored.append(
            ScoredFile(
                path=entry.path,
                score=score,
                category=category,
                language=detect_language(entry.path),
            )
        )
    return scored


def rank(scored: Iterable[ScoredFile]) -> list[ScoredFile]:
    """Sort by descending score; equal scores keep their original order."""
    return sorted(scored, key=lambda sf: sf.score, reverse=True)
