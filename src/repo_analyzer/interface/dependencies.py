"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx

from repo_analyzer.infrastructure.config import get_settings
from repo_analyzer.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_analyzer.infrastructure.openai_adapter import OpenAIAdapter
from repo_analyzer.services.analyze_repo import AnalyzeRepoUseCase
from repo_analyzer.services.file_selector import SelectionBudget

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.github_timeout_seconds))
    _openai_adapter = OpenAIAdapter(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_model,
        base_url=settings.openai_base_url,
        timeout=settings.llm_timeout_seconds,
    )


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None


def get_github_adapter() -> GitHubRestAdapter:
    """Build a GitHub adapter over the shared HTTP client."""
    settings = get_settings()
    assert _http_client is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    return GitHubRestAdapter(
        client=_http_client, token=token, base_url=settings.github_api_base_url
    )


def get_use_case() -> AnalyzeRepoUseCase:
    """Build the use-case with injected adapters."""
    settings = get_settings()
    assert _openai_adapter is not None, "startup() was not called"

    return AnalyzeRepoUseCase(
        repo_fetcher=get_github_adapter(),
        llm_gateway=_openai_adapter,
        budget=SelectionBudget(
            max_files=settings.max_files,
            max_total_bytes=settings.max_total_bytes,
            max_file_bytes=settings.max_file_bytes,
        ),
        fetch_concurrency=settings.fetch_concurrency,
        max_prompt_file_chars=settings.max_prompt_file_chars,
        max_readme_chars=settings.max_readme_chars,
        timeout=settings.analysis_timeout_seconds,
    )
