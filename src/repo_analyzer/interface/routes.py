"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from repo_analyzer.domain.exceptions import InvalidGitHubTokenError
from repo_analyzer.domain.value_objects import looks_like_github_token
from repo_analyzer.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_analyzer.interface.dependencies import get_github_adapter, get_use_case
from repo_analyzer.interface.schemas import AnalyzeRequest, AnalyzeResponse, RateLimitResponse
from repo_analyzer.services.analyze_repo import AnalyzeRepoUseCase

router = APIRouter()


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"description": "Malformed GitHub token"},
        401: {"description": "GitHub rejected the token"},
        403: {"description": "Repository is private"},
        404: {"description": "Repository not found"},
        422: {"description": "Invalid repository reference or empty repository"},
        429: {"description": "GitHub API rate limit exceeded"},
        502: {"description": "LLM provider error"},
        504: {"description": "Analysis deadline exceeded"},
    },
)
async def analyze(
    body: AnalyzeRequest,
    use_case: AnalyzeRepoUseCase = Depends(get_use_case),
) -> AnalyzeResponse:
    """Analyse a GitHub repository and return structured findings."""
    token = body.github_token.get_secret_value().strip() if body.github_token else None
    if token and not looks_like_github_token(token):
        raise InvalidGitHubTokenError("Invalid GitHub token format.")

    result = await use_case.execute(body.repository, token=token or None)
    return AnalyzeResponse.from_result(result)


@router.get("/rate-limit", response_model=RateLimitResponse)
async def rate_limit(
    adapter: GitHubRestAdapter = Depends(get_github_adapter),
) -> RateLimitResponse:
    """Report the remaining GitHub API quota of the configured token."""
    status = await adapter.fetch_rate_limit()
    return RateLimitResponse(
        remaining=status.remaining, limit=status.limit, reset_at=status.reset_at
    )
