"""Dataclasses and enums for the DuoDebate pipeline. No I/O, no deps."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    PROPOSER = "PROPOSER"
    CHALLENGER = "CHALLENGER"


class DebateStatus(str, Enum):
    ONGOING = "ONGOING"
    READY = "READY"
    MAX_ITERATIONS = "MAX_ITERATIONS"
    ERROR = "ERROR"


class EventType(str, Enum):
    DEBATE_START = "DEBATE_START"
    ITERATION_START = "ITERATION_START"
    PROPOSER_RESPONSE = "PROPOSER_RESPONSE"
    CHALLENGER_RESPONSE = "CHALLENGER_RESPONSE"
    DEBATE_COMPLETE = "DEBATE_COMPLETE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Turn:
    role: Role
    content: str
    iteration: int         # 1-indexed
    agent_label: str       # "openai", "gemini", ...
    status: DebateStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "iteration": self.iteration,
            "model": self.agent_label,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DebateSession:
    prompt: str
    max_iterations: int
    transcript: tuple[Turn, ...] = ()
    sources: tuple[str, ...] = ()
    current_draft: str = ""
    pending_feedback: str = ""
    status: DebateStatus = DebateStatus.ONGOING

    @property
    def halted(self) -> bool:
        return self.status is not DebateStatus.ONGOING


@dataclass(frozen=True)
class DebateResult:
    prompt: str
    transcript: tuple[Turn, ...]
    final_status: DebateStatus   # READY or MAX_ITERATIONS
    total_iterations: int
    final_draft: str
    sources: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "transcript": [turn.to_dict() for turn in self.transcript],
            "finalStatus": self.final_status.value,
            "totalIterations": self.total_iterations,
            "finalDraft": self.final_draft,
            "sources": list(self.sources),
        }


@dataclass(frozen=True)
class DebateEvent:
    type: EventType
    turn: Turn | None = None
    error: str | None = None
    result: DebateResult | None = None
    iteration: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type.value,
            "message": self.turn.to_dict() if self.turn else None,
            "error": self.error,
            "finalResponse": self.result.to_dict() if self.result else None,
        }
        if self.iteration is not None:
            data["iteration"] = self.iteration
        return data
