"""Tests for the analyze-repository pipeline."""

from __future__ import annotations

import asyncio

import pytest

from repo_analyzer.domain.entities import Severity
from repo_analyzer.domain.exceptions import (
    AnalysisTimeoutError,
    EmptyRepositoryError,
    InvalidRepositoryError,
    MalformedCompletionError,
    RepositoryNotFoundError,
)
from repo_analyzer.domain.value_objects import RepoCoordinates
from repo_analyzer.services.analyze_repo import AnalyzeRepoUseCase
from repo_analyzer.services.file_selector import SelectionBudget


class TestAnalyzeRepoUseCase:
    @pytest.mark.asyncio
    async def test_end_to_end(self, fetcher, llm, sample_completion):
        use_case = AnalyzeRepoUseCase(fetcher, llm)

        result = await use_case.execute("acme/demo")

        assert result.raw_text == sample_completion
        assert result.tokens_used == 1234
        assert [f.title for f in result.findings] == [
            "SQL injection in user lookup",
            "Unchecked error from Close",
            "Inconsistent receiver names",
        ]
        assert result.summary.total_findings == 3
        assert result.summary.overall_score == 100 - 10 - 5 - 3
        assert result.summary.counts_by_severity[Severity.HIGH] == 1

    @pytest.mark.asyncio
    async def test_prompt_contents(self, fetcher, llm):
        await AnalyzeRepoUseCase(fetcher, llm).execute("https://github.com/acme/demo")

        [(system, user)] = llm.calls
        assert "## ISSUES" in system
        assert "# Repository Analysis: acme/demo" in user
        assert "- **Description**: Demo service" in user
        assert "A demo service." in user
        assert "### cmd/server/main.go" in user
        assert "vendor/lib/x.go" not in user
        assert "docs/logo.png" not in user

    @pytest.mark.asyncio
    async def test_files_fetched_in_score_order(self, fetcher, llm):
        await AnalyzeRepoUseCase(fetcher, llm, fetch_concurrency=1).execute("acme/demo")

        assert fetcher.fetched == [
            "cmd/server/main.go",
            "internal/models/user.go",
            "go.mod",
            "internal/models/user_test.go",
        ]

    @pytest.mark.asyncio
    async def test_token_reaches_every_call(self, fetcher, llm):
        await AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo", token="ghp_abc")

        assert fetcher.tokens
        assert set(fetcher.tokens) == {"ghp_abc"}

    @pytest.mark.asyncio
    async def test_accepts_coordinates(self, fetcher, llm):
        result = await AnalyzeRepoUseCase(fetcher, llm).execute(
            RepoCoordinates(owner="acme", repo="demo")
        )
        assert result.summary.total_findings == 3

    @pytest.mark.asyncio
    async def test_budget_limits_files(self, fetcher, llm):
        use_case = AnalyzeRepoUseCase(fetcher, llm, budget=SelectionBudget(max_files=1))

        await use_case.execute("acme/demo")

        user = llm.calls[0][1]
        assert "### cmd/server/main.go" in user
        assert "### internal/models/user.go" not in user

    @pytest.mark.asyncio
    async def test_missing_readme_and_unreadable_files(
        self, make_fetcher, sample_entries, llm
    ):
        fetcher = make_fetcher(
            sample_entries, {"cmd/server/main.go": b"package main\n"}, readme=None
        )

        result = await AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo")

        user = llm.calls[0][1]
        assert "## README" not in user
        assert "### cmd/server/main.go" in user
        assert "### go.mod" not in user
        assert result.summary.total_findings == 3

    @pytest.mark.asyncio
    async def test_truncated_tree_is_still_analysed(
        self, make_fetcher, sample_entries, sample_files, llm, caplog
    ):
        fetcher = make_fetcher(sample_entries, sample_files, truncated=True)

        with caplog.at_level("WARNING"):
            result = await AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo")

        assert result.summary.total_findings == 3
        assert "truncated" in caplog.text

    @pytest.mark.asyncio
    async def test_empty_completion(self, fetcher, make_llm):
        with pytest.raises(MalformedCompletionError):
            await AnalyzeRepoUseCase(fetcher, make_llm(text="  ")).execute("acme/demo")

    @pytest.mark.asyncio
    async def test_completion_without_markers(self, fetcher, make_llm):
        llm = make_llm(text="Looks fine.\n\n- Missing error handling in main\n")

        result = await AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo")

        assert result.summary.total_findings == 1
        assert result.findings[0].severity is Severity.MEDIUM

    @pytest.mark.asyncio
    async def test_invalid_repository(self, fetcher, llm):
        with pytest.raises(InvalidRepositoryError):
            await AnalyzeRepoUseCase(fetcher, llm).execute("not a repo")
        assert fetcher.tokens == []

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, fetcher, llm):
        async def not_found(coords, *, token=None):
            raise RepositoryNotFoundError("Repository not found: acme/demo")

        fetcher.fetch_metadata = not_found

        with pytest.raises(RepositoryNotFoundError):
            await AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo")
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_tree_failure_cancels_readme_fetch(self, fetcher, llm):
        cancelled: list[str] = []

        async def hanging_readme(coords, *, token=None):
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append("readme")
                raise

        async def empty_tree(coords, branch, *, token=None):
            await asyncio.sleep(0)
            raise EmptyRepositoryError("Repository is empty.")

        fetcher.fetch_readme = hanging_readme
        fetcher.fetch_tree = empty_tree

        with pytest.raises(EmptyRepositoryError):
            await asyncio.wait_for(
                AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo"), timeout=1
            )
        assert cancelled == ["readme"]
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_deadline(self, fetcher, llm):
        async def slow_complete(system_prompt, user_prompt):
            await asyncio.sleep(5)

        llm.complete = slow_complete
        use_case = AnalyzeRepoUseCase(fetcher, llm, timeout=0.05)

        with pytest.raises(AnalysisTimeoutError):
            await use_case.execute("acme/demo")

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, fetcher, llm):
        started = asyncio.Event()

        async def hang(system_prompt, user_prompt):
            started.set()
            await asyncio.Event().wait()

        llm.complete = hang
        task = asyncio.ensure_future(AnalyzeRepoUseCase(fetcher, llm).execute("acme/demo"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
