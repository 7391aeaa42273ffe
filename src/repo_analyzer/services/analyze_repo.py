"""Analyze-repository use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the two ports (:class:`RepoFetcher` and :class:`LlmGateway`) and the pure
service modules.  The interface layer injects concrete adapters at runtime.

Pipeline: tree discovery → structure summary + importance scoring →
budgeted selection → prompt → completion → finding extraction → summary.
"""

from __future__ import annotations

import asyncio
import logging

from repo_analyzer.domain.entities import AnalysisResult, FileBlob, RepoTree
from repo_analyzer.domain.exceptions import AnalysisTimeoutError
from repo_analyzer.domain.ports.llm_gateway import LlmGateway
from repo_analyzer.domain.ports.repo_fetcher import RepoFetcher
from repo_analyzer.domain.value_objects import RepoCoordinates
from repo_analyzer.services.analysis_summary import build_summary
from repo_analyzer.services.file_scorer import score_tree
from repo_analyzer.services.file_selector import SelectionBudget, select_files
from repo_analyzer.services.finding_extractor import extract_findings
from repo_analyzer.services.prompt_builder import (
    MAX_FILE_CHARS,
    MAX_README_CHARS,
    build_prompt,
)
from repo_analyzer.services.structure import build_code_structure

logger = logging.getLogger(__name__)


class AnalyzeRepoUseCase:
    """Orchestrates the full repo → findings pipeline.

    Parameters
    ----------
    repo_fetcher:
        Adapter that can fetch metadata, tree and file content.
    llm_gateway:
        Adapter that can send prompts to an LLM.
    budget:
        File-count and byte limits for content selection.
    fetch_concurrency:
        Number of file fetches allowed in flight at once.
    max_prompt_file_chars:
        Per-file character cap applied when rendering the prompt.
    max_readme_chars:
        README character cap applied when rendering the prompt.
    timeout:
        Optional deadline, in seconds, for a whole run.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        llm_gateway: LlmGateway,
        budget: SelectionBudget | None = None,
        fetch_concurrency: int = 4,
        max_prompt_file_chars: int = MAX_FILE_CHARS,
        max_readme_chars: int = MAX_README_CHARS,
        timeout: float | None = None,
    ) -> None:
        self._fetcher = repo_fetcher
        self._llm = llm_gateway
        self._budget = budget or SelectionBudget()
        self._concurrency = fetch_concurrency
        self._max_file_chars = max_prompt_file_chars
        self._max_readme_chars = max_readme_chars
        self._timeout = timeout

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(
        self, repository: str | RepoCoordinates, token: str | None = None
    ) -> AnalysisResult:
        """Run the full pipeline and return the structured result.

        Cancelling the calling task aborts every outstanding network call.
        When a deadline is configured and expires, :class:`AnalysisTimeoutError`
        is raised; no partial result is ever returned.
        """
        coords = (
            repository
            if isinstance(repository, RepoCoordinates)
            else RepoCoordinates.from_string(repository)
        )
        if self._timeout is None:
            return await self._run(coords, token)
        try:
            return await asyncio.wait_for(self._run(coords, token), self._timeout)
        except asyncio.TimeoutError as exc:
            raise AnalysisTimeoutError(
                f"Analysis of {coords.full_name} exceeded {self._timeout:g}s."
            ) from exc

    # ── Pipeline ────────────────────────────────────────────────────────

    async def _run(self, coords: RepoCoordinates, token: str | None) -> AnalysisResult:
        logger.info("Analysing %s", coords.full_name)

        # 1. Metadata first (need default_branch), then tree + README in parallel
        metadata = await self._fetcher.fetch_metadata(coords, token=token)
        readme_task = asyncio.ensure_future(self._fetcher.fetch_readme(coords, token=token))
        try:
            tree = await self._discover_tree(coords, metadata.default_branch, token)
        except BaseException:
            readme_task.cancel()
            await asyncio.gather(readme_task, return_exceptions=True)
            raise
        readme = await readme_task

        # 2. Structure summary and importance scoring
        structure = build_code_structure(tree.entries)
        candidates = score_tree(tree.entries)
        logger.info(
            "%s: %d files, %d candidates",
            coords.full_name,
            structure.total_files,
            len(candidates),
        )

        # 3. Budgeted selection
        async def _fetch(path: str) -> FileBlob:
            return await self._fetcher.fetch_file_content(coords, path, token=token)

        sizes = {entry.path: entry.byte_size for entry in tree.entries if entry.is_file}
        files = await select_files(
            candidates, sizes, _fetch, self._budget, concurrency=self._concurrency
        )

        # 4. Prompt + completion
        prompt = build_prompt(
            metadata,
            structure,
            readme,
            files,
            max_file_chars=self._max_file_chars,
            max_readme_chars=self._max_readme_chars,
        )
        completion = await self._llm.complete(prompt.system, prompt.user)
        logger.info("Completion used %d tokens", completion.tokens_used)

        # 5. Findings + summary
        findings = extract_findings(completion.text)
        summary = build_summary(findings)
        logger.info(
            "%s: %d findings, score %d",
            coords.full_name,
            summary.total_findings,
            summary.overall_score,
        )

        return AnalysisResult(
            raw_text=completion.text,
            summary=summary,
            findings=tuple(findings),
            tokens_used=completion.tokens_used,
        )

    async def _discover_tree(
        self, coords: RepoCoordinates, branch: str, token: str | None
    ) -> RepoTree:
        """List the full tree of *branch*; a truncated listing is still used."""
        tree = await self._fetcher.fetch_tree(coords, branch, token=token)
        if tree.truncated:
            logger.warning(
                "Tree for %s was truncated by the provider; analysing %d entries",
                coords.full_name,
                len(tree.entries),
            )
        return tree
