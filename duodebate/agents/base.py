"""Abstract base for the completion services behind each debate role."""

from abc import ABC, abstractmethod


class AgentError(Exception):
    """Raised when an agent's completion call fails."""

    def __init__(self, agent_name: str, message: str) -> None:
        self.agent_name = agent_name
        super().__init__(f"[{agent_name}] {message}")


class Agent(ABC):
    """A single completion service bound to one debate role."""

    @abstractmethod
    def name(self) -> str:
        """Return the short agent label (e.g. 'openai', 'gemini')."""
        ...

    @abstractmethod
    def model_string(self) -> str:
        """Return the actual model identifier string."""
        ...

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send a system prompt plus a turn-specific user prompt.

        Args:
            system_prompt: Fixed role instructions loaded at startup.
            user_prompt: The prompt for this turn.

        Returns:
            The raw reply text.

        Raises:
            AgentError: On API failure, timeout, or empty reply.
        """
        ...
