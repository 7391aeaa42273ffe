"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from repo_analyzer.interface.dependencies import shutdown, startup
from repo_analyzer.interface.error_handlers import register_error_handlers
from repo_analyzer.interface.routes import router


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage startup / shutdown of shared resources."""
    await startup()
    yield
    await shutdown()


def create_app(*, manage_resources: bool = True) -> FastAPI:
    """Build and wire the FastAPI application.

    Pass ``manage_resources=False`` to skip creating the shared HTTP and LLM
    clients, e.g. when every dependency is overridden.
    """
    app = FastAPI(
        title="GitHub Repo Analyzer",
        version="1.0.0",
        description=(
            "Takes a GitHub repository and returns an LLM code review as "
            "structured, severity-tagged findings with an overall score."
        ),
        lifespan=_lifespan if manage_resources else None,
    )

    register_error_handlers(app)
    app.include_router(router)

    # ── Health check (simple liveness probe) ────────────────────────────

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
