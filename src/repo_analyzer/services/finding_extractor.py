"""Finding extraction — turn the model's prose into structured findings.

Two strategies:

* **Structured markers** (primary).  The system prompt asks for entries of
  the form ``[SEVERITY/category] Title`` followed by ``File:``,
  ``Description:`` and ``Suggestion:`` lines inside an ``ISSUES`` section.
* **Heuristics** (fallback).  Used only when the primary strategy finds
  nothing: emphasis-wrapped severity keywords and bullet points that talk
  about bugs, errors or missing things.

Both are best-effort grammars over natural language; neither raises on
unrecognised text.  Only an empty response is an error.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

from repo_analyzer.domain.entities import Finding, IssueCategory, Severity
from repo_analyzer.domain.exceptions import MalformedCompletionError

logger = logging.getLogger(__name__)

MAX_TITLE_CHARS = 100

# ── Structured-marker grammar ───────────────────────────────────────────────

_SECTION_HEADER_RE = re.compile(
    r"^[ \t]*(?:"
    r"(?P<hashes>#{1,6})[ \t]*(?:\d+\.[ \t]*)?\**[ \t]*ISSUES\b[^\n]*"
    r"|\*\*[ \t]*(?:\d+\.[ \t]*)?ISSUES\b[^\n]*"
    r"|(?:\d+\.[ \t]*)?ISSUES[ \t]*:?[ \t]*"
    r")$",
    re.IGNORECASE | re.MULTILINE,
)
_HEADING_RE = re.compile(r"^[ \t]*(?P<hashes>#{1,6})[ \t]", re.MULTILINE)

_MARKER_RE = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]+)?(?:[-*][ \t]+)?(?:\d+\.[ \t]+)?(?P<bold>\*\*)?"
    r"\[(?P<severity>HIGH|MEDIUM|LOW|INFO)/(?P<category>bug|security|performance|quality|style)\]"
    r"[ \t]*(?P<title>[^\n]*)$",
    re.IGNORECASE | re.MULTILINE,
)

# Emphasis is stripped only when it wraps the label: "**File**:" or "**File:**".
_FIELD_RE = re.compile(
    r"^[ \t]*(?:[-*][ \t]+)?(?P<open>\*\*)?(?P<label>File|Description|Suggestion)"
    r"(?(open)(?:\*\*[ \t]*:|:\*\*)|[ \t]*:)[ \t]*(?P<value>.*)$",
    re.IGNORECASE,
)
_FENCE_RE = re.compile(r"^[ \t]*(?P<fence>```|~~~)")
_LINE_NUMBER_RE = re.compile(r"^\s*(\d+)")
_NO_FILE_VALUES = frozenset({"", "n/a", "na", "none", "unknown", "-"})

# ── Heuristic grammar ───────────────────────────────────────────────────────


def _emphasised(keywords: str) -> re.Pattern[str]:
    # Matches "**Critical**: text" and "**Critical:** text".
    return re.compile(
        rf"\*{{1,2}}(?:{keywords})(?::\*{{1,2}}|\*{{1,2}}[ \t]*:)[ \t]*(?P<text>\S[^\n]*)",
        re.IGNORECASE,
    )


_SEVERITY_KEYWORD_PATTERNS: list[tuple[re.Pattern[str], Severity]] = [
    (_emphasised("critical|high severity|high risk|severe"), Severity.HIGH),
    (_emphasised("warning|medium severity|medium risk|moderate"), Severity.MEDIUM),
    (_emphasised("minor|low severity|low risk|suggestion"), Severity.LOW),
]

_BULLET_RE = re.compile(r"^[ \t]*[-*][ \t]+(?P<text>[^\n]*\S)[ \t]*$", re.MULTILINE)
_PROBLEM_RE = re.compile(
    r"bug|issue|error|vulnerabilit|problem|missing|should|needs", re.IGNORECASE
)

_HIGH_TERMS = ("security", "vulnerability", "injection", "critical")
_MEDIUM_TERMS = ("bug", "error", "crash", "fail")
_SECURITY_TERMS = ("security", "auth", "injection", "xss")
_PERFORMANCE_TERMS = ("performance", "slow", "memory", "n+1")
_BUG_TERMS = ("bug", "error")


# ── Public API ──────────────────────────────────────────────────────────────


def extract_findings(text: str) -> list[Finding]:
    """Parse *text* into findings, falling back to heuristics when needed.

    Raises :class:`MalformedCompletionError` for blank input, which points
    at an upstream problem rather than a clean repository.
    """
    if not text or not text.strip():
        raise MalformedCompletionError("Completion text is empty.")

    findings = parse_structured(text)
    if findings:
        return findings

    findings = parse_heuristic(text)
    logger.warning(
        "No structured findings in completion; heuristic parser found %d",
        len(findings),
    )
    return findings


def parse_structured(text: str) -> list[Finding]:
    """Extract ``[SEVERITY/category] Title`` entries from the ISSUES section."""
    section = _issues_section(text)
    markers = list(_MARKER_RE.finditer(section))

    findings: list[Finding] = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].start() if i + 1 < len(markers) else len(section)
        body = section[marker.end() : end]

        title = marker["title"].strip()
        if marker["bold"]:
            title = title.replace("**", "", 1).strip()
        fields = _parse_fields(body)
        description = fields.get("description")
        suggestion = fields.get("suggestion")

        if not title or not (description or suggestion):
            continue

        file, line = _parse_location(fields.get("file", ""))
        findings.append(
            Finding(
                severity=Severity(marker["severity"].upper()),
                category=IssueCategory(marker["category"].lower()),
                title=title,
                file=file,
                line=line,
                description=description,
                suggestion=suggestion,
            )
        )
    return findings


def parse_heuristic(text: str) -> list[Finding]:
    """Keyword-driven extraction for responses that ignore the marker format."""
    findings: list[Finding] = []

    for pattern, severity in _SEVERITY_KEYWORD_PATTERNS:
        for match in pattern.finditer(text):
            body = match["text"].strip()
            findings.append(
                Finding(
                    severity=severity,
                    category=IssueCategory.QUALITY,
                    title=_truncate(body, MAX_TITLE_CHARS),
                    description=body,
                )
            )

    for match in _BULLET_RE.finditer(text):
        body = match["text"].strip()
        if not _PROBLEM_RE.search(body):
            continue
        lowered = body.lower()
        findings.append(
            Finding(
                severity=_classify_severity(lowered),
                category=_classify_category(lowered),
                title=_truncate(body, MAX_TITLE_CHARS),
                description=body,
            )
        )

    return findings


# ── Helpers ─────────────────────────────────────────────────────────────────


def _scan_lines(text: str) -> Iterator[tuple[int, str, bool]]:
    """Yield ``(offset, line, fenced)`` for every line of *text*.

    Lines inside a fenced code block, and the fence delimiters themselves,
    are reported as fenced.
    """
    offset = 0
    fence: str | None = None
    for line in text.splitlines(keepends=True):
        match = _FENCE_RE.match(line)
        if fence is None:
            if match:
                fence = match["fence"]
            yield offset, line, match is not None
        else:
            if match and match["fence"] == fence:
                fence = None
            yield offset, line, True
        offset += len(line)


def _issues_section(text: str) -> str:
    """Return the ISSUES section holding the markers, or the whole text.

    ``#`` headings are tried before bold or bare ``Issues`` lines.  A
    candidate section without a single marker is passed over, and when no
    candidate qualifies the whole text is searched.
    """
    lines = [(offset, line) for offset, line, fenced in _scan_lines(text) if not fenced]

    candidates: list[tuple[int, int]] = []
    for index, (_, line) in enumerate(lines):
        header = _SECTION_HEADER_RE.match(line.rstrip("\r\n"))
        if header is not None:
            level = len(header["hashes"]) if header["hashes"] else 0
            candidates.append((index, level))
    candidates.sort(key=lambda c: c[1] == 0)

    for index, level in candidates:
        offset, line = lines[index]
        start = offset + len(line)
        end = len(text)
        for next_offset, next_line in lines[index + 1 :]:
            heading = _HEADING_RE.match(next_line)
            if (
                heading
                and len(heading["hashes"]) <= (level or 2)
                and not _MARKER_RE.match(next_line)
            ):
                end = next_offset
                break
        section = text[start:end]
        if _MARKER_RE.search(section):
            return section
    return text


def _parse_fields(body: str) -> dict[str, str]:
    """Collect ``File:``, ``Description:`` and ``Suggestion:`` values from a body.

    A description runs until the next label; a suggestion also stops at the
    first blank line.  The first occurrence of each label wins.  Inside a
    fenced code block lines are kept verbatim: no labels, no blank-line stop.
    """
    fields: dict[str, str] = {}
    current: str | None = None
    buffer: list[str] = []

    def _flush() -> None:
        if current is not None:
            value = "\n".join(buffer).strip()
            if value:
                fields.setdefault(current, value)

    for _, raw, fenced in _scan_lines(body):
        line = raw.rstrip("\r\n")
        if fenced:
            if current is not None:
                buffer.append(line)
            continue
        match = _FIELD_RE.match(line)
        if match:
            _flush()
            label = match["label"].lower()
            if label == "file":
                fields.setdefault("file", match["value"].strip())
                current, buffer = None, []
            else:
                current, buffer = label, [match["value"]]
            continue
        if current == "suggestion" and not line.strip():
            _flush()
            current, buffer = None, []
            continue
        if current is not None:
            buffer.append(line)
    _flush()
    return fields


def _parse_location(value: str) -> tuple[str | None, int | None]:
    """Split ``path/to/file.ext:123`` into path and optional line number."""
    value = value.strip().strip("`*").strip()
    path, _, rest = value.partition(":")
    path = path.strip().strip("`").strip()
    if path.lower() in _NO_FILE_VALUES:
        return None, None

    line: int | None = None
    match = _LINE_NUMBER_RE.match(rest)
    if match and int(match.group(1)) >= 1:
        line = int(match.group(1))
    return path, line


def _classify_severity(lowered: str) -> Severity:
    if any(term in lowered for term in _HIGH_TERMS):
        return Severity.HIGH
    if any(term in lowered for term in _MEDIUM_TERMS):
        return Severity.MEDIUM
    return Severity.LOW


def _classify_category(lowered: str) -> IssueCategory:
    if any(term in lowered for term in _SECURITY_TERMS):
        return IssueCategory.SECURITY
    if any(term in lowered for term in _PERFORMANCE_TERMS):
        return IssueCategory.PERFORMANCE
    if any(term in lowered for term in _BUG_TERMS):
        return IssueCategory.BUG
    return IssueCategory.QUALITY


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
