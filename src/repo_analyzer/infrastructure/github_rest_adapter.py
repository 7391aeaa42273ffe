"""GitHub REST API adapter — implements the RepoFetcher port."""

from __future__ import annotations

import base64
import binascii
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from repo_analyzer.domain.entities import (
    EntryKind,
    FileBlob,
    RateLimitStatus,
    RepoMetadata,
    RepoTree,
    TreeEntry,
)
from repo_analyzer.domain.exceptions import (
    ContentFetchError,
    EmptyRepositoryError,
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubRateLimitError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)
from repo_analyzer.domain.value_objects import RepoCoordinates

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
_USER_AGENT = "repo-analyzer/1.0"
_RAW_ACCEPT = "application/vnd.github.raw"

_KIND_BY_TYPE: dict[str, EntryKind] = {
    "blob": EntryKind.FILE,
    "tree": EntryKind.DIRECTORY,
}


class GitHubRestAdapter:
    """Concrete RepoFetcher backed by the GitHub v3 REST API.

    *token* is the fallback credential used when a call does not supply one.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        base_url: str = DEFAULT_API_BASE,
    ) -> None:
        self._client = client
        self._token = token
        self._base_url = base_url.rstrip("/")

    async def fetch_metadata(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> RepoMetadata:
        """GET /repos/{owner}/{repo} → RepoMetadata."""
        resp = await self._api_get(f"/repos/{coords.owner}/{coords.repo}", token=token)
        data = resp.json()
        return RepoMetadata(
            owner=coords.owner,
            repo=coords.repo,
            default_branch=data.get("default_branch") or "main",
            description=data.get("description"),
            primary_language=data.get("language"),
        )

    async def fetch_tree(
        self, coords: RepoCoordinates, branch: str, *, token: str | None = None
    ) -> RepoTree:
        """GET /repos/{owner}/{repo}/git/trees/{branch}?recursive=1 → RepoTree."""
        resp = await self._api_get(
            f"/repos/{coords.owner}/{coords.repo}/git/trees/{quote(branch, safe='')}",
            params={"recursive": "1"},
            token=token,
        )
        data = resp.json()

        entries: list[TreeEntry] = []
        for item in data.get("tree", []):
            kind = _KIND_BY_TYPE.get(item.get("type", ""))
            if kind is None:
                # Submodule commits and other non-file nodes.
                continue
            entries.append(
                TreeEntry(
                    path=item["path"],
                    kind=kind,
                    byte_size=item.get("size", 0) or 0,
                    identifier=item.get("sha", ""),
                )
            )

        return RepoTree(entries=tuple(entries), truncated=bool(data.get("truncated")))

    async def fetch_file_content(
        self, coords: RepoCoordinates, path: str, *, token: str | None = None
    ) -> FileBlob:
        """GET /repos/{owner}/{repo}/contents/{path} → decoded bytes."""
        try:
            resp = await self._api_get(
                f"/repos/{coords.owner}/{coords.repo}/contents/{quote(path)}",
                token=token,
            )
        except GitHubApiError as exc:
            raise ContentFetchError(f"Could not fetch {path}: {exc}") from exc

        data = resp.json()
        if not isinstance(data, dict):
            raise ContentFetchError(f"{path} is a directory, not a file.")
        return decode_content(path, data.get("content") or "", data.get("encoding") or "")

    async def fetch_readme(
        self, coords: RepoCoordinates, *, token: str | None = None
    ) -> str | None:
        """GET /repos/{owner}/{repo}/readme (raw) → text, or ``None`` if absent."""
        try:
            resp = await self._api_get(
                f"/repos/{coords.owner}/{coords.repo}/readme",
                token=token,
                accept=_RAW_ACCEPT,
            )
        except RepositoryNotFoundError:
            return None
        return resp.text

    async def fetch_rate_limit(self, *, token: str | None = None) -> RateLimitStatus:
        """GET /rate_limit → remaining core quota for the credential."""
        resp = await self._api_get("/rate_limit", token=token)
        core = resp.json().get("resources", {}).get("core", {})
        return RateLimitStatus(
            remaining=int(core.get("remaining", 0)),
            limit=int(core.get("limit", 0)),
            reset_at=datetime.fromtimestamp(int(core.get("reset", 0)), tz=timezone.utc),
        )

    # ── HTTP plumbing ───────────────────────────────────────────────────

    def _headers(self, token: str | None, accept: str) -> dict[str, str]:
        headers = {"Accept": accept, "User-Agent": _USER_AGENT}
        credential = token or self._token
        if credential:
            headers["Authorization"] = f"Bearer {credential}"
        return headers

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
        *,
        token: str | None = None,
        accept: str = "application/vnd.github.v3+json",
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.get(
                url, headers=self._headers(token, accept), params=params
            )
        except httpx.HTTPError as exc:
            raise GitHubApiError(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return resp

        detail = _error_message(resp)

        if resp.status_code == 401:
            raise GitHubAuthenticationError(
                "GitHub authentication failed: invalid or expired token."
            )

        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                "Repository not found or not accessible with the supplied token."
            )

        if resp.status_code == 403:
            if resp.headers.get("x-ratelimit-remaining", "") == "0":
                raise GitHubRateLimitError(
                    f"GitHub API rate limit exceeded. Resets at {_reset_time(resp)}."
                )
            raise RepositoryAccessDeniedError(
                f"Access denied: {detail}" if detail else "Access denied."
            )

        if resp.status_code == 409:
            raise EmptyRepositoryError(detail or "Repository is empty.")

        if resp.status_code == 429:
            raise GitHubRateLimitError("GitHub API rate limit exceeded (HTTP 429).")

        raise GitHubApiError(
            f"GitHub API error ({resp.status_code}): {detail or 'no details'}"
        )


# ── Helpers ─────────────────────────────────────────────────────────────────


def decode_content(path: str, content: str, encoding: str) -> FileBlob:
    """Decode a contents-API payload.

    Base64 payloads arrive wrapped at 60 columns; the newlines are stripped
    before decoding.
    """
    if encoding != "base64":
        return FileBlob(data=content.encode("utf-8"), encoding=encoding or "utf-8")
    cleaned = content.replace("\n", "").replace("\r", "")
    try:
        data = base64.b64decode(cleaned, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ContentFetchError(f"Invalid base64 payload for {path}: {exc}") from exc
    return FileBlob(data=data, encoding="base64")


def _error_message(resp: httpx.Response) -> str:
    """Extract the ``message`` field of a GitHub error body, if any."""
    try:
        body: Any = resp.json()
    except ValueError:
        return resp.text.strip()
    if isinstance(body, dict):
        return str(body.get("message", "")).strip()
    return ""


def _reset_time(resp: httpx.Response) -> str:
    reset_raw = resp.headers.get("x-ratelimit-reset", "")
    try:
        return datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
            "%Y-%m-%d %H:%M:%S UTC"
        )
    except (ValueError, OSError):
        return reset_raw or "unknown"
