"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from repo_analyzer.domain.exceptions import InvalidRepositoryError

_GITHUB_URL_RE = re.compile(
    r"^https?://github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)
_OWNER_REPO_RE = re.compile(r"^(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+)$")


@dataclass(frozen=True, slots=True)
class RepoCoordinates:
    """Validated repository coordinates.

    Accepts either the short ``owner/repo`` form or a full URL like
    ``https://github.com/psf/requests``.  Rejects anything else.
    """

    owner: str
    repo: str

    @classmethod
    def from_string(cls, value: str) -> RepoCoordinates:
        """Parse and validate a raw repository reference."""
        value = value.strip()
        match = _OWNER_REPO_RE.match(value) or _GITHUB_URL_RE.match(value)
        if not match:
            raise InvalidRepositoryError(
                f"Invalid repository: '{value}'. "
                "Expected owner/repo or https://github.com/<owner>/<repo>"
            )
        return cls(owner=match["owner"], repo=match["repo"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def looks_like_github_token(token: str) -> bool:
    """Return *True* if *token* has the shape of a GitHub personal access token.

    ``ghp_`` is the classic token prefix, ``github_pat_`` the fine-grained one.
    The length check binds to the fine-grained branch only: any ``ghp_``
    token passes on its prefix alone.
    """
    return token.startswith("ghp_") or (
        token.startswith("github_pat_") and len(token) > 30
    )
