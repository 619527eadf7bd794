"""Agent health checks: ping the PROPOSER and CHALLENGER before a debate."""

import asyncio
import logging

from duodebate.agents.base import Agent

logger = logging.getLogger(__name__)

_PING_SYSTEM = "You are a connectivity check."
_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


async def _check_one(role: str, agent: Agent) -> tuple[str, bool, str]:
    """Ping a single agent. Returns (role, ok, error_message)."""
    try:
        await asyncio.wait_for(
            agent.complete(_PING_SYSTEM, _PING_PROMPT),
            timeout=_TIMEOUT_SEC,
        )
        return role, True, ""
    except Exception as exc:
        logger.debug("Health check failed for %s: %s", role, exc)
        return role, False, str(exc) or type(exc).__name__


async def run_health_checks(
    agents: dict[str, Agent],
) -> dict[str, tuple[bool, str]]:
    """Ping all agents in parallel.

    Returns:
        Dict mapping role -> (ok, error_message).
        error_message is "" when ok is True.
    """
    results = await asyncio.gather(*(_check_one(r, a) for r, a in agents.items()))
    return {role: (ok, err) for role, ok, err in results}
