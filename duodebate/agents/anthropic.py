"""Anthropic Claude agent using anthropic SDK with native async."""

import asyncio
import logging
import os
import time

import anthropic as anthropic_sdk

from config.config_loader import AgentConfig
from duodebate.agents.base import Agent, AgentError

logger = logging.getLogger(__name__)


class AnthropicAgent(Agent):
    """Anthropic Claude agent via anthropic SDK."""

    def __init__(self, config: AgentConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AgentError(config.label, f"Missing API key: {config.api_key_env}")
        self._client = anthropic_sdk.AsyncAnthropic(api_key=api_key)

    def name(self) -> str:
        return self._config.label

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        start = time.monotonic()
        kwargs = {}
        if system_prompt:
            kwargs["system"] = system_prompt
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    messages=[{"role": "user", "content": user_prompt}],
                    **kwargs,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise AgentError(self._config.label, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise AgentError(self._config.label, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.content:
            raise AgentError(self._config.label, "Empty response content")

        text_blocks = [b.text for b in response.content if b.type == "text"]
        if not text_blocks:
            raise AgentError(self._config.label, "No text blocks in response")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info(
            "Anthropic %s (%s): %.2fs, %s tokens",
            self._config.role,
            self._config.model,
            latency,
            token_count,
        )
        return "\n".join(text_blocks)
