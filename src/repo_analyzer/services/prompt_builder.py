"""Prompt builder — renders repository context into the two-part LLM prompt.

This is the final transformation before text is sent to the model.  The
system instruction fixes the output format the finding extractor parses;
the user content carries the repository itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from repo_analyzer.domain.entities import CodeStructure, FileContent, RepoMetadata
from repo_analyzer.services.structure import important_directories

MAX_FILE_CHARS = 15_000
MAX_README_CHARS = 2_000

README_TRUNCATION_MARKER = "\n... (truncated)"
FILE_TRUNCATION_MARKER = "\n// ... (file truncated for analysis)"

SYSTEM_PROMPT = """\
You are an expert code reviewer and software architect. Your task is to \
analyze code repositories and identify:

1. **Bugs & Errors**: Logic errors, potential crashes, unhandled edge cases, null pointer issues
2. **Security Vulnerabilities**: SQL injection, XSS, authentication flaws, secrets exposure, input validation issues
3. **Performance Issues**: N+1 queries, memory leaks, inefficient algorithms, unnecessary allocations
4. **Code Quality**: Poor error handling, missing validation, code smells, anti-patterns
5. **Best Practice Violations**: Naming conventions, code organization, documentation gaps

For each issue found, provide:
- Severity: HIGH, MEDIUM, LOW, or INFO
- Category: bug, security, performance, quality, or style
- File and line number if identifiable
- Clear description of the problem
- Specific suggestion for fixing it

Format your response with a structured ISSUES section using this exact format:

## ISSUES

[HIGH/security] Title of the issue
File: path/to/file.go:123
Description: Detailed description of what's wrong
Suggestion: How to fix it

[MEDIUM/bug] Another issue title
File: path/to/file.go:45
Description: What's the problem
Suggestion: How to fix it

Also provide:
- An OVERVIEW section with general assessment
- A SUMMARY section with counts by severity
- A RECOMMENDATIONS section with top priorities

Be thorough but focus on real, actionable issues rather than style nitpicks.
"""

_ANALYSIS_REQUEST = """\
---

## Analysis Request

Please analyze this codebase thoroughly and provide:

1. **OVERVIEW**: General assessment of code quality, architecture, and patterns used
2. **ISSUES**: Specific bugs, security vulnerabilities, and problems found (use the format specified)
3. **SUMMARY**: Count of issues by severity (HIGH/MEDIUM/LOW/INFO)
4. **RECOMMENDATIONS**: Top 3-5 priority improvements

Focus on actionable, specific issues with file paths and line numbers where possible.
"""

_LANGUAGE_TAGS: dict[str, str] = {
    "Go": "go",
    "Python": "python",
    "JavaScript": "javascript",
    "TypeScript": "typescript",
    "React": "jsx",
    "React TypeScript": "tsx",
    "Rust": "rust",
    "Java": "java",
    "C": "c",
    "C++": "cpp",
    "Ruby": "ruby",
    "PHP": "php",
    "SQL": "sql",
    "Shell": "bash",
    "YAML": "yaml",
    "JSON": "json",
}


@dataclass(frozen=True, slots=True)
class Prompt:
    """System instruction plus user content, ready for the completion client."""

    system: str
    user: str


def language_tag(language: str | None) -> str:
    """Return the fenced-code-block tag for *language* (empty if unknown)."""
    if not language:
        return ""
    return _LANGUAGE_TAGS.get(language, "")


def truncate(text: str, limit: int, marker: str) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def _render_header(metadata: RepoMetadata) -> list[str]:
    lines = [
        f"# Repository Analysis: {metadata.owner}/{metadata.repo}",
        "",
        "## Repository Information",
        f"- **Name**: {metadata.repo}",
        f"- **Primary Language**: {metadata.primary_language or 'unknown'}",
    ]
    if metadata.description:
        lines.append(f"- **Description**: {metadata.description}")
    lines.append("")
    return lines


def _render_structure(structure: CodeStructure) -> list[str]:
    lines = [
        "## Project Structure",
        f"- **Total Files**: {structure.total_files}",
        f"- **Total Size**: {structure.total_bytes} bytes",
    ]
    if structure.language_counts:
        lines.append("- **Languages**:")
        for lang, count in sorted(
            structure.language_counts.items(), key=lambda item: (-item[1], item[0])
        ):
            lines.append(f"  - {lang}: {count} files")
    dirs = important_directories(structure.directories)
    if dirs:
        lines.append(f"- **Key Directories**: {', '.join(dirs)}")
    lines.append("")
    return lines


def _render_file(file: FileContent, max_chars: int) -> list[str]:
    return [
        f"### {file.path}",
        f"**Language**: {file.language or 'unknown'} | **Size**: {file.byte_size} bytes",
        f"```{language_tag(file.language)}",
        truncate(file.content, max_chars, FILE_TRUNCATION_MARKER),
        "```",
        "",
    ]


def build_user_prompt(
    metadata: RepoMetadata,
    structure: CodeStructure | None,
    readme: str | None,
    files: Sequence[FileContent],
    *,
    max_file_chars: int = MAX_FILE_CHARS,
    max_readme_chars: int = MAX_README_CHARS,
) -> str:
    """Render the user content block.

    Sections, in order: repository header, structure summary, README excerpt,
    one fenced block per selected file, and the closing analysis request.
    """
    lines = _render_header(metadata)

    if structure is not None:
        lines.extend(_render_structure(structure))

    if readme:
        lines.extend(
            [
                "## README",
                "```",
                truncate(readme, max_readme_chars, README_TRUNCATION_MARKER),
                "```",
                "",
            ]
        )

    if files:
        lines.extend(
            [
                "## Source Code Files",
                "",
                "Analyze the following source code files for bugs, security issues, "
                "and improvements:",
                "",
            ]
        )
        for file in files:
            lines.extend(_render_file(file, max_file_chars))

    return "\n".join(lines) + "\n" + _ANALYSIS_REQUEST


def build_prompt(
    metadata: RepoMetadata,
    structure: CodeStructure | None,
    readme: str | None,
    files: Sequence[FileContent],
    *,
    max_file_chars: int = MAX_FILE_CHARS,
    max_readme_chars: int = MAX_README_CHARS,
) -> Prompt:
    """Return the fixed system instruction paired with the rendered user content."""
    return Prompt(
        system=SYSTEM_PROMPT,
        user=build_user_prompt(
            metadata,
            structure,
            readme,
            files,
            max_file_chars=max_file_chars,
            max_readme_chars=max_readme_chars,
        ),
    )
