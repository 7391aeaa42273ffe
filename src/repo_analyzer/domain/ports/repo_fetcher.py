"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_analyzer.domain.entities import FileBlob, RepoMetadata, RepoTree
from repo_analyzer.domain.value_objects import RepoCoordinates


class RepoFetcher(Protocol):
    """Abstract contract for fetching repository data.

    Every call takes the caller's access credential; ``None`` means the
    adapter falls back to its own default (or anonymous access).
    """

    async def fetch_metadata(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> RepoMetadata:
        """Return high-level repository metadata, including the default branch."""
        ...

    async def fetch_tree(
        self, coords: RepoCoordinates, branch: str, *, token: str | None = None
    ) -> RepoTree:
        """Return the flat recursive tree for the given branch."""
        ...

    async def fetch_file_content(
        self, coords: RepoCoordinates, path: str, *, token: str | None = None
    ) -> FileBlob:
        """Return the decoded bytes of a single file."""
        ...

    async def fetch_readme(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> str | None:
        """Return the README text, or ``None`` when the repository has none."""
        ...
