"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EntryKind(str, Enum):
    """Kind of node in a repository tree."""

    FILE = "file"
    DIRECTORY = "directory"


class FileCategory(str, Enum):
    """Classification bucket assigned by the importance scorer."""

    ENTRY = "entry"
    CONFIG = "config"
    SOURCE = "source"
    TEST = "test"


class Severity(str, Enum):
    """Severity vocabulary requested from the model."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


class IssueCategory(str, Enum):
    """Finding category vocabulary requested from the model."""

    BUG = "bug"
    SECURITY = "security"
    PERFORMANCE = "performance"
    QUALITY = "quality"
    STYLE = "style"


# ── Repository data ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single node from the recursive tree listing."""

    path: str
    kind: EntryKind
    byte_size: int = 0
    identifier: str = ""

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


@dataclass(frozen=True, slots=True)
class RepoTree:
    """The flat tree of a repository snapshot.

    ``truncated`` is set when the provider could not list every entry; the
    listing is still usable, just incomplete.
    """

    entries: tuple[TreeEntry, ...]
    truncated: bool = False


@dataclass(frozen=True, slots=True)
class RepoMetadata:
    """High-level metadata about a GitHub repository."""

    owner: str
    repo: str
    default_branch: str
    description: str | None = None
    primary_language: str | None = None


@dataclass(frozen=True, slots=True)
class RateLimitStatus:
    """Remaining core API quota for the current credential."""

    remaining: int
    limit: int
    reset_at: datetime


@dataclass(frozen=True, slots=True)
class FileBlob:
    """Raw file payload as returned by the content provider."""

    data: bytes
    encoding: str = "utf-8"


@dataclass(frozen=True, slots=True)
class CodeStructure:
    """Aggregate counts over a repository tree."""

    total_files: int
    total_bytes: int
    directories: frozenset[str]
    files: frozenset[str]
    language_counts: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScoredFile:
    """A candidate file annotated with its importance score."""

    path: str
    score: int
    category: FileCategory
    language: str | None = None


@dataclass(frozen=True, slots=True)
class FileContent:
    """A fetched, decoded text file selected for the prompt."""

    path: str
    content: str
    byte_size: int
    language: str | None = None


# ── Analysis output ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Completion:
    """Raw completion text plus the provider-reported token usage."""

    text: str
    tokens_used: int = 0


@dataclass(frozen=True, slots=True)
class Finding:
    """One structured problem report extracted from the analysis text."""

    severity: Severity
    category: IssueCategory
    title: str
    file: str | None = None
    line: int | None = None
    description: str | None = None
    suggestion: str | None = None


@dataclass(frozen=True, slots=True)
class AnalysisSummary:
    """Deterministic aggregate over a list of findings."""

    total_findings: int
    counts_by_severity: Mapping[Severity, int]
    counts_by_category: Mapping[IssueCategory, int]
    overall_score: int
    top_findings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """The final structured output returned to the caller."""

    raw_text: str
    summary: AnalysisSummary
    findings: tuple[Finding, ...]
    tokens_used: int
