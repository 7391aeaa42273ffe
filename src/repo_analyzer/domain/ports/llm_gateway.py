"""Port: LLM gateway — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_analyzer.domain.entities import Completion


class LlmGateway(Protocol):
    """Abstract contract for interacting with a large-language model."""

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        """Send a system + user prompt pair and return text plus token usage."""
        ...
