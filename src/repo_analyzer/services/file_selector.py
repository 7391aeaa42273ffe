"""Budgeted file selection — fetch the highest-scoring files within limits.

Fetches run through a small window of concurrent tasks, but results are
consumed strictly in score order, so the outcome is identical to fetching
one file at a time: a lower-scored file can never take a budget slot from a
higher-scored one.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Mapping

from repo_analyzer.domain.entities import FileBlob, FileContent, ScoredFile
from repo_analyzer.domain.exceptions import RepoAnalyzerError
from repo_analyzer.services.file_scorer import rank

logger = logging.getLogger(__name__)

FetchFn = Callable[[str], Awaitable[FileBlob]]

_BINARY_RATIO = 0.1
_ALLOWED_CONTROL = frozenset("\t\n\r")


@dataclass(frozen=True, slots=True)
class SelectionBudget:
    """Limits on how much repository content may reach the prompt."""

    max_files: int = 15
    max_total_bytes: int = 500_000
    max_file_bytes: int = 100_000


def is_binary_content(text: str) -> bool:
    """Heuristic: a NUL byte, or more than 10 % non-printable control chars."""
    if not text:
        return False
    if "\x00" in text:
        return True
    non_printable = sum(1 for ch in text if ch < " " and ch not in _ALLOWED_CONTROL)
    return non_printable / len(text) > _BINARY_RATIO


async def _load(candidate: ScoredFile, fetch: FetchFn) -> FileContent | None:
    """Fetch and decode one candidate; ``None`` means skip it."""
    try:
        blob = await fetch(candidate.path)
    except RepoAnalyzerError as exc:
        logger.debug("Skipping %s, fetch failed: %s", candidate.path, exc)
        return None

    try:
        text = blob.data.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug("%s is not valid UTF-8, skipping", candidate.path)
        return None

    if is_binary_content(text):
        logger.debug("%s looks binary, skipping", candidate.path)
        return None

    return FileContent(
        path=candidate.path,
        content=text,
        byte_size=len(blob.data),
        language=candidate.language,
    )


async def select_files(
    candidates: Iterable[ScoredFile],
    sizes: Mapping[str, int],
    fetch: FetchFn,
    budget: SelectionBudget | None = None,
    *,
    concurrency: int = 4,
) -> list[FileContent]:
    """Return fetched file contents in descending-score order.

    Parameters
    ----------
    candidates:
        Scored files, all with a positive score, in tree order.
    sizes:
        ``{path: byte_size}`` from the tree, used to skip oversized files
        before fetching them.
    fetch:
        Coroutine function returning the raw bytes of a path.
    budget:
        File-count and byte limits; defaults to :class:`SelectionBudget`.
    concurrency:
        Number of fetches allowed in flight ahead of the one being consumed.
    """
    budget = budget or SelectionBudget()

    eligible: list[ScoredFile] = []
    for candidate in rank(candidates):
        if sizes.get(candidate.path, 0) > budget.max_file_bytes:
            logger.debug("%s exceeds the per-file cap, skipping", candidate.path)
            continue
        eligible.append(candidate)

    queue = iter(eligible)
    pending: deque[asyncio.Task[FileContent | None]] = deque()

    def _fill() -> None:
        while len(pending) < max(1, concurrency):
            candidate = next(queue, None)
            if candidate is None:
                return
            pending.append(asyncio.ensure_future(_load(candidate, fetch)))

    selected: list[FileContent] = []
    total = 0
    try:
        _fill()
        while pending and len(selected) < budget.max_files:
            item = await pending.popleft()
            _fill()
            if item is None:
                continue
            if item.byte_size > budget.max_file_bytes:
                logger.debug("%s exceeds the per-file cap, skipping", item.path)
                continue
            if total + item.byte_size > budget.max_total_bytes:
                logger.info("Byte budget reached at %s", item.path)
                break
            selected.append(item)
            total += item.byte_size
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    logger.info("Selected %d file(s), %d bytes", len(selected), total)
    return selected
