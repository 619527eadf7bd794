"""Load settings.yaml and system prompt files into typed dataclasses."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"

REQUIRED_ROLES = ("proposer", "challenger")

DEFAULT_INITIAL = (
    "Create an initial draft for the following request:\n\n{prompt}\n\n"
    "Remember to respond in JSON format with 'draft', 'response', and 'status' fields."
)
DEFAULT_REFINE = (
    "Original request: {prompt}\n\n"
    "The CHALLENGER provided this feedback:\n{feedback}\n\n"
    "Please refine your draft based on this feedback. "
    "Respond in JSON format with 'draft', 'response', and 'status' fields."
)
DEFAULT_CHALLENGE = (
    "Original request: {prompt}\n\n"
    "Current draft:\n{draft}\n\n"
    "Please provide constructive criticism and suggestions for improvement. "
    "Respond in JSON format with 'critique', 'questions', and 'suggestions' fields."
)


@dataclass
class AgentConfig:
    role: str
    sdk: str
    model: str
    api_key_env: str
    timeout_sec: int
    max_tokens: int
    base_url: str | None = None
    label: str = ""

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.sdk


@dataclass
class PromptsConfig:
    proposer_system: str
    challenger_system: str
    initial: str = DEFAULT_INITIAL
    refine: str = DEFAULT_REFINE
    challenge: str = DEFAULT_CHALLENGE


@dataclass
class DefaultsConfig:
    max_iterations: int = 10
    max_iterations_limit: int = 20
    run_timeout_sec: int = 600
    stream_queue_size: int = 32
    sink_timeout_sec: float = 30.0
    output_dir: Path = Path("./output")


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    agents: dict[str, AgentConfig]
    prompts: PromptsConfig
    available_agents: set[str] = field(default_factory=set)


def _read_prompt_file(base_dir: Path, relative: str) -> str:
    path = base_dir / relative
    if not path.exists():
        raise FileNotFoundError(f"Prompt file not found: {path}")
    return path.read_text(encoding="utf-8").strip()


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    System prompt file paths are resolved relative to the settings file.

    Raises FileNotFoundError if the settings file or a prompt file is missing,
    ValueError if the file is empty, the prompts section lacks a system prompt
    file, or the proposer or challenger agent is not configured.
    Missing API keys are only logged; callers check available_agents.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"Settings file is empty or not a mapping: {settings_path}")

    defaults_raw = raw.get("defaults") or {}
    defaults = DefaultsConfig(
        max_iterations=int(defaults_raw.get("max_iterations", 10)),
        max_iterations_limit=int(defaults_raw.get("max_iterations_limit", 20)),
        run_timeout_sec=int(defaults_raw.get("run_timeout_sec", 600)),
        stream_queue_size=int(defaults_raw.get("stream_queue_size", 32)),
        sink_timeout_sec=float(defaults_raw.get("sink_timeout_sec", 30.0)),
        output_dir=Path(defaults_raw.get("output_dir", "./output")),
    )

    base_dir = settings_path.parent
    prompts_raw = raw.get("prompts") or {}
    missing_files = [
        key for key in ("proposer_system_file", "challenger_system_file") if key not in prompts_raw
    ]
    if missing_files:
        raise ValueError(f"Missing prompts configuration for: {', '.join(missing_files)}")
    prompts = PromptsConfig(
        proposer_system=_read_prompt_file(base_dir, prompts_raw["proposer_system_file"]),
        challenger_system=_read_prompt_file(base_dir, prompts_raw["challenger_system_file"]),
        initial=prompts_raw.get("initial", DEFAULT_INITIAL),
        refine=prompts_raw.get("refine", DEFAULT_REFINE),
        challenge=prompts_raw.get("challenge", DEFAULT_CHALLENGE),
    )

    agents_raw = raw.get("agents") or {}
    missing = [role for role in REQUIRED_ROLES if role not in agents_raw]
    if missing:
        raise ValueError(f"Missing agent configuration for: {', '.join(missing)}")

    agents: dict[str, AgentConfig] = {}
    available_agents: set[str] = set()

    for role, agent_raw in agents_raw.items():
        agent_cfg = AgentConfig(
            role=role,
            sdk=agent_raw["sdk"],
            model=agent_raw["model"],
            api_key_env=agent_raw["api_key_env"],
            timeout_sec=int(agent_raw["timeout_sec"]),
            max_tokens=int(agent_raw["max_tokens"]),
            base_url=agent_raw.get("base_url"),
            label=str(agent_raw.get("label", "")),
        )
        agents[role] = agent_cfg

        api_key = os.environ.get(agent_raw["api_key_env"], "").strip()
        if api_key:
            available_agents.add(role)
            logger.info("Agent available: %s (%s)", role, agent_cfg.model)
        else:
            logger.info(
                "Agent unavailable (no API key): %s, set %s in .env",
                role,
                agent_raw["api_key_env"],
            )

    return AppConfig(
        defaults=defaults,
        agents=agents,
        prompts=prompts,
        available_agents=available_agents,
    )
