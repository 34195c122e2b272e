"""Unified LLM client: OpenAI-compatible chat endpoint first, Anthropic as fallback."""

import logging

import anthropic
from openai import AsyncOpenAI

from tripcost.config import Settings, settings as default_settings
from tripcost.exceptions import LLMUnavailable

logger = logging.getLogger(__name__)


class LLMClient:
    """Async chat completions with an OpenAI-compatible primary and Anthropic fallback."""

    def __init__(
        self,
        settings: Settings | None = None,
        openai_client: AsyncOpenAI | None = None,
        anthropic_client: anthropic.AsyncAnthropic | None = None,
    ):
        self.settings = settings or default_settings
        self._openai = openai_client
        self._anthropic = anthropic_client

        if self._openai is None and self.settings.llm_api_key:
            self._openai = AsyncOpenAI(
                api_key=self.settings.llm_api_key,
                base_url=self.settings.llm_base_url,
                timeout=self.settings.llm_timeout,
            )
        if self._anthropic is None and self.settings.anthropic_api_key:
            self._anthropic = anthropic.AsyncAnthropic(
                api_key=self.settings.anthropic_api_key,
                timeout=self.settings.llm_timeout,
            )

    @property
    def is_configured(self) -> bool:
        return self._openai is not None or self._anthropic is not None

    async def complete(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 1000,
        temperature: float = 0,
    ) -> str:
        """Get a completion from the first provider that answers.

        Args:
            system: System prompt
            user: User message
            max_tokens: Max output tokens
            temperature: Sampling temperature

        Returns:
            Raw text response from the LLM.

        Raises:
            LLMUnavailable if no provider is configured or all of them fail.
        """
        if not self.is_configured:
            raise LLMUnavailable("No LLM provider configured (set LLM_API_KEY or ANTHROPIC_API_KEY)")

        errors = []

        if self._openai:
            try:
                response = await self._openai.chat.completions.create(
                    model=self.settings.llm_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                )
                content = response.choices[0].message.content
                if content:
                    return content.strip()
                errors.append("OpenAI-compatible: empty response")
            except Exception as e:
                errors.append(f"OpenAI-compatible: {e}")
                logger.warning(f"OpenAI-compatible provider failed, trying Anthropic: {e}")

        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=self.settings.anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                )
                return response.content[0].text.strip()
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic also failed: {e}")

        raise LLMUnavailable(f"All LLM providers failed: {'; '.join(errors)}")

    async def close(self):
        if self._openai:
            await self._openai.close()
        if self._anthropic:
            await self._anthropic.close()
