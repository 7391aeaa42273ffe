"""Shared test fixtures."""

from __future__ import annotations

import pytest

from repo_analyzer.domain.entities import (
    Completion,
    EntryKind,
    FileBlob,
    RepoMetadata,
    RepoTree,
    TreeEntry,
)
from repo_analyzer.domain.exceptions import ContentFetchError
from repo_analyzer.domain.value_objects import RepoCoordinates

SAMPLE_COMPLETION = """\
## OVERVIEW

A small Go web service with a flat layout.

## ISSUES

[HIGH/security] SQL injection in user lookup
File: internal/models/user.go:42
Description: The query is built with fmt.Sprintf from request input.
Suggestion: Use parameterized queries.

[MEDIUM/bug] Unchecked error from Close
File: cmd/server/main.go
Description: The deferred Close error is discarded.
Suggestion: Log the error returned by Close.

[LOW/style] Inconsistent receiver names
Description: Methods on Server use both s and srv.

## SUMMARY

HIGH: 1, MEDIUM: 1, LOW: 1

## RECOMMENDATIONS

- Parameterize all SQL.
"""


def blob(path: str, size: int = 100) -> TreeEntry:
    return TreeEntry(path=path, kind=EntryKind.FILE, byte_size=size, identifier=f"sha-{path}")


def directory(path: str) -> TreeEntry:
    return TreeEntry(path=path, kind=EntryKind.DIRECTORY, identifier=f"sha-{path}")


class FakeRepoFetcher:
    """In-memory RepoFetcher serving a fixed tree and file contents."""

    def __init__(
        self,
        entries: list[TreeEntry],
        files: dict[str, bytes],
        *,
        readme: str | None = "# Demo\n\nA demo service.",
        truncated: bool = False,
    ) -> None:
        self.entries = entries
        self.files = files
        self.readme = readme
        self.truncated = truncated
        self.fetched: list[str] = []
        self.tokens: list[str | None] = []

    async def fetch_metadata(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> RepoMetadata:
        self.tokens.append(token)
        return RepoMetadata(
            owner=coords.owner,
            repo=coords.repo,
            default_branch="main",
            description="Demo service",
            primary_language="Go",
        )

    async def fetch_tree(
        self, coords: RepoCoordinates, branch: str, *, token: str | None = None
    ) -> RepoTree:
        self.tokens.append(token)
        return RepoTree(entries=tuple(self.entries), truncated=self.truncated)

    async def fetch_file_content(
        self, coords: RepoCoordinates, path: str, *, token: str | None = None
    ) -> FileBlob:
        self.tokens.append(token)
        self.fetched.append(path)
        if path not in self.files:
            raise ContentFetchError(f"missing {path}")
        return FileBlob(data=self.files[path])

    async def fetch_readme(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> str | None:
        self.tokens.append(token)
        return self.readme


class FakeLlm:
    """LlmGateway returning a canned completion and recording prompts."""

    def __init__(self, text: str = SAMPLE_COMPLETION, tokens_used: int = 1234) -> None:
        self.text = text
        self.tokens_used = tokens_used
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        self.calls.append((system_prompt, user_prompt))
        return Completion(text=self.text, tokens_used=self.tokens_used)


@pytest.fixture
def sample_completion() -> str:
    return SAMPLE_COMPLETION


@pytest.fixture
def sample_entries() -> list[TreeEntry]:
    return [
        directory("cmd"),
        directory("cmd/server"),
        directory("internal"),
        directory("internal/models"),
        directory("vendor"),
        blob("cmd/server/main.go", 120),
        blob("go.mod", 40),
        blob("internal/models/user.go", 200),
        blob("internal/models/user_test.go", 150),
        blob("vendor/lib/x.go", 80),
        blob("docs/logo.png", 5_000),
        blob("README.md", 30),
    ]


@pytest.fixture
def sample_files() -> dict[str, bytes]:
    return {
        "cmd/server/main.go": b"package main\n\nfunc main() {}\n",
        "go.mod": b"module example.com/demo\n",
        "internal/models/user.go": b"package models\n\ntype User struct{}\n",
        "internal/models/user_test.go": b"package models\n",
        "vendor/lib/x.go": b"package lib\n",
    }


@pytest.fixture
def fetcher(sample_entries: list[TreeEntry], sample_files: dict[str, bytes]) -> FakeRepoFetcher:
    return FakeRepoFetcher(sample_entries, sample_files)


@pytest.fixture
def llm() -> FakeLlm:
    return FakeLlm()


@pytest.fixture
def make_llm() -> type[FakeLlm]:
    return FakeLlm


@pytest.fixture
def make_fetcher() -> type[FakeRepoFetcher]:
    return FakeRepoFetcher
