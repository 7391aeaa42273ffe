"""OpenAI adapter — implements the LlmGateway port.

Works against any OpenAI-compatible chat-completions endpoint (set
``base_url`` for providers such as Perplexity).
"""

from __future__ import annotations

import logging

from openai import APITimeoutError, AsyncOpenAI, AuthenticationError, RateLimitError

from repo_analyzer.domain.entities import Completion
from repo_analyzer.domain.exceptions import LlmError, MalformedCompletionError

logger = logging.getLogger(__name__)


class OpenAIAdapter:
    """Concrete ``LlmGateway`` backed by the chat-completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        *,
        base_url: str | None = None,
        timeout: float = 120.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=2
        )
        self._model = model

    async def complete(self, system_prompt: str, user_prompt: str) -> Completion:
        """Send a system + user prompt and return the completion text and usage."""
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.2,
            )
        except AuthenticationError as exc:
            raise LlmError(
                "Invalid LLM API key. "
                "Set a valid key in the OPENAI_API_KEY environment variable."
            ) from exc
        except RateLimitError as exc:
            detail = str(exc)
            logger.error("LLM RateLimitError: %s", detail)
            raise LlmError(f"LLM rate limit / quota error: {detail}") from exc
        except APITimeoutError as exc:
            raise LlmError("LLM request timed out.") from exc
        except Exception as exc:
            raise LlmError(f"LLM call failed: {exc}") from exc

        if not response.choices:
            raise MalformedCompletionError("LLM returned no choices.")

        content = response.choices[0].message.content
        if not content or not content.strip():
            raise MalformedCompletionError("LLM returned an empty response.")

        tokens = response.usage.total_tokens if response.usage else 0
        return Completion(text=content, tokens_used=tokens)

    async def close(self) -> None:
        """Release underlying HTTP resources."""
        await self._client.close()
