"""OpenAI agent using openai SDK with native async.

Also serves OpenAI-compatible endpoints when base_url is set.
"""

import asyncio
import logging
import os
import time

from openai import AsyncOpenAI

from config.config_loader import AgentConfig
from duodebate.agents.base import Agent, AgentError

logger = logging.getLogger(__name__)


class OpenAIAgent(Agent):
    """OpenAI chat completions agent."""

    def __init__(self, config: AgentConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AgentError(config.label, f"Missing API key: {config.api_key_env}")
        if config.base_url:
            self._client = AsyncOpenAI(api_key=api_key, base_url=config.base_url)
        else:
            self._client = AsyncOpenAI(api_key=api_key)

    def name(self) -> str:
        return self._config.label

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.model,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise AgentError(self._config.label, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise AgentError(self._config.label, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise AgentError(self._config.label, "Empty response content")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.total_tokens

        logger.info(
            "OpenAI %s (%s): %.2fs, %s tokens",
            self._config.role,
            self._config.model,
            latency,
            token_count,
        )
        return choice.message.content
