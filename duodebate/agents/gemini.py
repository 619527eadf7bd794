"""Gemini agent using google-genai SDK with native async."""

import asyncio
import logging
import os
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import AgentConfig
from duodebate.agents.base import Agent, AgentError

logger = logging.getLogger(__name__)


class GeminiAgent(Agent):
    """Google Gemini agent via google-genai SDK."""

    def __init__(self, config: AgentConfig) -> None:
        self._config = config
        api_key = os.environ.get(config.api_key_env, "").strip()
        if not api_key:
            raise AgentError(config.label, f"Missing API key: {config.api_key_env}")
        self._client = genai.Client(api_key=api_key)

    def name(self) -> str:
        return self._config.label

    def model_string(self) -> str:
        return self._config.model

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=user_prompt,
                    config=genai_types.GenerateContentConfig(
                        system_instruction=system_prompt or None,
                        max_output_tokens=self._config.max_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise AgentError(self._config.label, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise AgentError(self._config.label, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.text:
            raise AgentError(self._config.label, "Empty response text")

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info(
            "Gemini %s (%s): %.2fs, %s tokens",
            self._config.role,
            self._config.model,
            latency,
            token_count,
        )
        return response.text
