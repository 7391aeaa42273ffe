"""Global exception handlers — map domain errors onto HTTP responses.

Every failure leaves the service as ``{"status": "error", "message": "..."}``
with a status code chosen from the exception's class.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from repo_analyzer.domain.exceptions import (
    AnalysisTimeoutError,
    ContentFetchError,
    EmptyRepositoryError,
    GitHubApiError,
    GitHubAuthenticationError,
    GitHubRateLimitError,
    InvalidGitHubTokenError,
    InvalidRepositoryError,
    LlmError,
    RepoAnalyzerError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)

logger = logging.getLogger(__name__)

# Looked up along the exception's MRO, so subclasses win over GitHubApiError.
STATUS_BY_ERROR: dict[type[RepoAnalyzerError], int] = {
    InvalidRepositoryError: 422,
    InvalidGitHubTokenError: 400,
    GitHubAuthenticationError: 401,
    RepositoryAccessDeniedError: 403,
    RepositoryNotFoundError: 404,
    EmptyRepositoryError: 422,
    GitHubRateLimitError: 429,
    GitHubApiError: 502,
    LlmError: 502,
    AnalysisTimeoutError: 504,
    ContentFetchError: 500,
}

_UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again later."


def status_for(exc: RepoAnalyzerError) -> int:
    """Return the HTTP status for *exc*, defaulting to 500."""
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def _error_json(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RepoAnalyzerError)
    status_code = status_for(exc)
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logger.log(
        level,
        "%s %s -> %d %s: %s",
        request.method,
        request.url.path,
        status_code,
        type(exc).__name__,
        exc,
    )
    return _error_json(status_code, str(exc))


async def _validation_error(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RequestValidationError)
    parts = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{where}: {err.get('msg', 'invalid value')}")
    return _error_json(422, "; ".join(parts))


async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_json(500, _UNEXPECTED_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    """Attach the domain, validation and catch-all handlers to *app*."""
    app.add_exception_handler(RepoAnalyzerError, _domain_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unexpected_error)
