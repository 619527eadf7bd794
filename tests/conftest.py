"""Shared pytest fixtures."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from config.config_loader import AgentConfig, AppConfig, DefaultsConfig, PromptsConfig
from duodebate.agents.base import Agent
from duodebate.models import DebateSession
from duodebate.orchestrator import DebateOrchestrator


def proposer_reply(
    draft: str = "A draft.",
    status: str = "ONGOING",
    response: str | None = None,
    sources: list[str] | None = None,
) -> str:
    data: dict = {"draft": draft, "status": status}
    if response is not None:
        data["response"] = response
    if sources is not None:
        data["sources"] = sources
    return json.dumps(data)


def challenger_reply(
    critique: str = "Needs work.",
    questions: list[str] | None = None,
    suggestions: list[str] | None = None,
) -> str:
    data: dict = {"critique": critique}
    if questions is not None:
        data["questions"] = questions
    if suggestions is not None:
        data["suggestions"] = suggestions
    return json.dumps(data)


class MockAgent(Agent):
    """Test double Agent replaying scripted replies."""

    def __init__(self, agent_name: str = "mock", replies: list | None = None) -> None:
        self._name = agent_name
        # Shadow the class method with an AsyncMock at the instance level.
        # ABC check passes because complete is defined in the class body below.
        if replies is None:
            self.complete = AsyncMock(return_value=proposer_reply())  # type: ignore[assignment]
        else:
            self.complete = AsyncMock(side_effect=list(replies))  # type: ignore[assignment]

    def name(self) -> str:
        return self._name

    def model_string(self) -> str:
        return "mock-model"

    async def complete(self, system_prompt: str, user_prompt: str) -> str:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return proposer_reply()


@pytest.fixture
def sample_agent_config() -> AgentConfig:
    return AgentConfig(
        role="proposer",
        sdk="openai",
        model="gpt-test",
        api_key_env="TEST_API_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        proposer_system="You are the PROPOSER.",
        challenger_system="You are the CHALLENGER.",
    )


@pytest.fixture
def sample_app_config(tmp_path: Path, sample_prompts_config: PromptsConfig) -> AppConfig:
    proposer = AgentConfig(
        role="proposer",
        sdk="openai",
        model="gpt-test",
        api_key_env="TEST_OPENAI_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )
    challenger = AgentConfig(
        role="challenger",
        sdk="gemini",
        model="gemini-test",
        api_key_env="TEST_GEMINI_KEY",
        timeout_sec=30,
        max_tokens=1024,
    )
    return AppConfig(
        defaults=DefaultsConfig(output_dir=tmp_path / "output"),
        agents={"proposer": proposer, "challenger": challenger},
        prompts=sample_prompts_config,
        available_agents={"proposer", "challenger"},
    )


@pytest.fixture
def empty_session() -> DebateSession:
    return DebateSession(prompt="Write a haiku", max_iterations=3)


@pytest.fixture
def make_orchestrator(sample_prompts_config: PromptsConfig):
    """Build an orchestrator from scripted PROPOSER and CHALLENGER replies."""

    def _make(
        proposer_replies: list | None = None,
        challenger_replies: list | None = None,
    ) -> tuple[DebateOrchestrator, MockAgent, MockAgent]:
        proposer = MockAgent("openai", proposer_replies)
        if challenger_replies is None:
            challenger = MockAgent("gemini")
            challenger.complete = AsyncMock(return_value=challenger_reply())  # type: ignore[assignment]
        else:
            challenger = MockAgent("gemini", challenger_replies)
        return DebateOrchestrator(proposer, challenger, sample_prompts_config), proposer, challenger

    return _make
