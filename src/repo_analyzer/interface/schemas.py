"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, SecretStr, field_validator

from repo_analyzer.domain.entities import AnalysisResult, Finding


class AnalyzeRequest(BaseModel):
    """Request body for ``POST /analyze``."""

    repository: str
    github_token: SecretStr | None = None

    @field_validator("repository")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "repository must not be empty."
            raise ValueError(msg)
        return stripped


class FindingSchema(BaseModel):
    severity: str
    category: str
    title: str
    file: str | None = None
    line: int | None = None
    description: str | None = None
    suggestion: str | None = None

    @classmethod
    def from_finding(cls, finding: Finding) -> FindingSchema:
        return cls(
            severity=finding.severity.value,
            category=finding.category.value,
            title=finding.title,
            file=finding.file,
            line=finding.line,
            description=finding.description,
            suggestion=finding.suggestion,
        )


class SummarySchema(BaseModel):
    total_findings: int
    counts_by_severity: dict[str, int]
    counts_by_category: dict[str, int]
    overall_score: int
    top_findings: list[str]


class AnalyzeResponse(BaseModel):
    """Successful response from ``POST /analyze``."""

    raw_analysis: str
    summary: SummarySchema
    findings: list[FindingSchema]
    tokens_used: int

    @classmethod
    def from_result(cls, result: AnalysisResult) -> AnalyzeResponse:
        summary = result.summary
        return cls(
            raw_analysis=result.raw_text,
            summary=SummarySchema(
                total_findings=summary.total_findings,
                counts_by_severity={k.value: v for k, v in summary.counts_by_severity.items()},
                counts_by_category={k.value: v for k, v in summary.counts_by_category.items()},
                overall_score=summary.overall_score,
                top_findings=list(summary.top_findings),
            ),
            findings=[FindingSchema.from_finding(f) for f in result.findings],
            tokens_used=result.tokens_used,
        )


class RateLimitResponse(BaseModel):
    """Response from ``GET /rate-limit``."""

    remaining: int
    limit: int
    reset_at: datetime


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
