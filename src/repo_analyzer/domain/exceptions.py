"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class RepoAnalyzerError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidRepositoryError(RepoAnalyzerError):
    """The supplied repository reference is not ``owner/repo`` or a GitHub URL."""


class InvalidGitHubTokenError(RepoAnalyzerError):
    """The supplied access token does not look like a GitHub token."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class GitHubApiError(RepoAnalyzerError):
    """The GitHub API answered with an unexpected status or was unreachable."""


class RepositoryNotFoundError(GitHubApiError):
    """The repository does not exist or is not accessible (404)."""


class RepositoryAccessDeniedError(GitHubApiError):
    """Access to the repository was denied (403)."""


class GitHubAuthenticationError(GitHubApiError):
    """The access token was rejected (401)."""


class EmptyRepositoryError(GitHubApiError):
    """The repository exists but has no commits (409)."""


class GitHubRateLimitError(GitHubApiError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""


class ContentFetchError(RepoAnalyzerError):
    """A single file could not be fetched or decoded.

    Recovered locally by the file selector; never surfaced to the caller.
    """


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmError(RepoAnalyzerError):
    """Any error originating from the LLM provider."""


class MalformedCompletionError(LlmError):
    """The provider answered, but with no choices or empty text."""


# ── Pipeline control ────────────────────────────────────────────────────────


class AnalysisTimeoutError(RepoAnalyzerError):
    """The analysis run exceeded its overall deadline and was aborted."""
