"""Debate orchestration: PROPOSER/CHALLENGER turn loop and termination policy.

Each turn is a pure fold over an immutable DebateSession
(apply_proposer_reply / apply_challenger_reply); DebateOrchestrator only
invokes agents, threads the session through the folds and emits events.
"""

import logging
from dataclasses import replace

from config.config_loader import PromptsConfig
from duodebate.agents.base import Agent, AgentError
from duodebate.extraction import ExtractionError, extract_record
from duodebate.models import (
    DebateEvent,
    DebateResult,
    DebateSession,
    DebateStatus,
    EventType,
    Role,
    Turn,
)
from duodebate.prompts import build_challenger_prompt, build_proposer_prompt
from duodebate.sinks import BufferingSink, EventSink, SinkError

logger = logging.getLogger(__name__)

DEFAULT_PROPOSER_MESSAGE = "Initial draft created"

# Statuses a PROPOSER may report; anything else is treated as ONGOING.
_REPORTABLE_STATUSES = {
    DebateStatus.ONGOING.value: DebateStatus.ONGOING,
    DebateStatus.READY.value: DebateStatus.READY,
    DebateStatus.MAX_ITERATIONS.value: DebateStatus.MAX_ITERATIONS,
}


def _parse_reported_status(raw_status: str) -> DebateStatus:
    status = _REPORTABLE_STATUSES.get(raw_status.strip().upper())
    if status is None:
        logger.warning("Unknown PROPOSER status %r, treating as ONGOING", raw_status)
        return DebateStatus.ONGOING
    return status


def _merge_sources(existing: tuple[str, ...], new: list[str] | None) -> tuple[str, ...]:
    if not new:
        return existing
    merged = list(existing)
    for source in new:
        if source and source not in merged:
            merged.append(source)
            logger.info("Added source: %s", source)
    return tuple(merged)


def _format_feedback(
    critique: str,
    questions: list[str] | None,
    suggestions: list[str] | None,
) -> str:
    parts = [critique]
    if questions:
        parts.append("\n\nQuestions:")
        parts.extend(f"\n- {q}" for q in questions)
    if suggestions:
        parts.append("\n\nSuggestions:")
        parts.extend(f"\n- {s}" for s in suggestions)
    return "".join(parts)


def _fail_turn(
    session: DebateSession,
    role: Role,
    iteration: int,
    agent_label: str,
    exc: Exception,
) -> DebateSession:
    logger.error("Error processing %s response: %s", role.value, exc)
    turn = Turn(
        role=role,
        content=f"Error processing response: {exc}",
        iteration=iteration + 1,
        agent_label=agent_label,
        status=DebateStatus.ERROR,
    )
    return replace(
        session,
        transcript=session.transcript + (turn,),
        status=DebateStatus.ERROR,
    )


def apply_proposer_reply(
    session: DebateSession,
    iteration: int,
    reply: str | AgentError,
    agent_label: str,
) -> DebateSession:
    """Fold one PROPOSER reply into the session.

    Args:
        session: Session before the turn.
        iteration: 0-indexed iteration number.
        reply: Raw agent text, or the AgentError the call failed with.
        agent_label: Label recorded on the turn.

    Returns:
        The session with one PROPOSER turn appended. Status becomes READY
        when the PROPOSER reports it, ERROR when the reply is unusable.
    """
    if isinstance(reply, AgentError):
        return _fail_turn(session, Role.PROPOSER, iteration, agent_label, reply)

    try:
        record = extract_record(reply)
        draft = record.require_text("draft")
        message = record.optional_text("response", DEFAULT_PROPOSER_MESSAGE)
        reported = _parse_reported_status(record.require_text("status"))
    except ExtractionError as exc:
        return _fail_turn(session, Role.PROPOSER, iteration, agent_label, exc)

    sources = _merge_sources(session.sources, record.text_list("sources"))

    # The first turn has nothing to comment on, so it shows the draft itself.
    content = draft if iteration == 0 else message
    turn = Turn(
        role=Role.PROPOSER,
        content=content,
        iteration=iteration + 1,
        agent_label=agent_label,
        status=reported,
    )

    logger.info(
        "PROPOSER (iteration %d): status=%s, draft_length=%d, sources_count=%d",
        iteration + 1,
        reported.value,
        len(draft),
        len(sources),
    )
    logger.debug("PROPOSER response: %s", message)

    return replace(
        session,
        transcript=session.transcript + (turn,),
        sources=sources,
        current_draft=draft,
        status=DebateStatus.READY if reported is DebateStatus.READY else DebateStatus.ONGOING,
    )


def apply_challenger_reply(
    session: DebateSession,
    iteration: int,
    reply: str | AgentError,
    agent_label: str,
) -> DebateSession:
    """Fold one CHALLENGER reply into the session; its text becomes pending feedback."""
    if isinstance(reply, AgentError):
        return _fail_turn(session, Role.CHALLENGER, iteration, agent_label, reply)

    try:
        record = extract_record(reply)
        critique = record.require_text("critique")
    except ExtractionError as exc:
        return _fail_turn(session, Role.CHALLENGER, iteration, agent_label, exc)

    feedback = _format_feedback(
        critique,
        record.text_list("questions"),
        record.text_list("suggestions"),
    )
    turn = Turn(
        role=Role.CHALLENGER,
        content=feedback,
        iteration=iteration + 1,
        agent_label=agent_label,
        status=DebateStatus.ONGOING,
    )

    logger.info("CHALLENGER (iteration %d): provided critique and suggestions", iteration + 1)
    logger.debug("CHALLENGER critique:\n%s", feedback)

    return replace(
        session,
        transcript=session.transcript + (turn,),
        pending_feedback=feedback,
    )


def build_result(session: DebateSession) -> DebateResult:
    """Freeze a session into its externally reported result.

    ERROR is reported as MAX_ITERATIONS; the ERROR turn stays in the transcript.
    """
    final_status = (
        DebateStatus.READY if session.status is DebateStatus.READY else DebateStatus.MAX_ITERATIONS
    )
    return DebateResult(
        prompt=session.prompt,
        transcript=session.transcript,
        final_status=final_status,
        total_iterations=len(session.transcript) // 2,
        final_draft=session.current_draft,
        sources=session.sources,
    )


def event_for_turn(turn: Turn) -> DebateEvent:
    if turn.status is DebateStatus.ERROR:
        return DebateEvent(type=EventType.ERROR, turn=turn, error=turn.content)
    if turn.role is Role.PROPOSER:
        return DebateEvent(type=EventType.PROPOSER_RESPONSE, turn=turn)
    return DebateEvent(type=EventType.CHALLENGER_RESPONSE, turn=turn)


def _log_summary(result: DebateResult) -> None:
    logger.info(
        "Debate completed: status=%s, iterations=%d, draft_length=%d, sources=%d",
        result.final_status.value,
        result.total_iterations,
        len(result.final_draft),
        len(result.sources),
    )
    logger.debug("Final draft:\n%s", result.final_draft)


async def _invoke(agent: Agent, system_prompt: str, user_prompt: str) -> str | AgentError:
    """Call an agent once. Never raises except on cancellation.

    Returns the raw reply text, or AgentError on failure.
    """
    try:
        return await agent.complete(system_prompt, user_prompt)
    except AgentError as exc:
        logger.warning("Agent %s failed: %s", agent.name(), exc)
        return exc
    except Exception as exc:
        logger.warning("Agent %s unexpected failure: %s", agent.name(), exc)
        return AgentError(agent.name(), f"Unexpected error: {exc}")


class DebateOrchestrator:
    """Drives one PROPOSER and one CHALLENGER through the debate loop.

    Holds no per-run state, so a single instance can serve any number of
    concurrent runs.
    """

    def __init__(self, proposer: Agent, challenger: Agent, prompts: PromptsConfig) -> None:
        self._proposer = proposer
        self._challenger = challenger
        self._prompts = prompts

    async def _proposer_turn(self, session: DebateSession, iteration: int) -> DebateSession:
        user_prompt = build_proposer_prompt(
            self._prompts, session.prompt, session.pending_feedback, iteration
        )
        reply = await _invoke(self._proposer, self._prompts.proposer_system, user_prompt)
        if isinstance(reply, str):
            logger.debug("PROPOSER raw response: %s", reply)
        return apply_proposer_reply(session, iteration, reply, self._proposer.name())

    async def _challenger_turn(self, session: DebateSession, iteration: int) -> DebateSession:
        user_prompt = build_challenger_prompt(self._prompts, session.prompt, session.current_draft)
        reply = await _invoke(self._challenger, self._prompts.challenger_system, user_prompt)
        if isinstance(reply, str):
            logger.debug("CHALLENGER raw response: %s", reply)
        return apply_challenger_reply(session, iteration, reply, self._challenger.name())

    async def run(
        self,
        prompt: str,
        max_iterations: int,
        sink: EventSink | None = None,
    ) -> DebateResult:
        """Run a full debate, pushing progress events to sink.

        Args:
            prompt: The validated, non-blank task prompt.
            max_iterations: Iteration budget, 1..20 (validated by the caller).
            sink: Event consumer; a BufferingSink when omitted.

        Returns:
            DebateResult. Agent and parsing failures end the debate early
            but are reported in the transcript, never raised. A sink
            failure stops the loop and no further events are sent.
        """
        if sink is None:
            sink = BufferingSink()

        logger.info("Starting debate (max %d iterations): %s", max_iterations, prompt)
        session = DebateSession(prompt=prompt, max_iterations=max_iterations)
        event = DebateEvent(type=EventType.DEBATE_START)

        try:
            await sink.accept(event)

            for i in range(max_iterations):
                logger.info("=== Iteration %d ===", i + 1)
                event = DebateEvent(type=EventType.ITERATION_START, iteration=i + 1)
                await sink.accept(event)

                session = await self._proposer_turn(session, i)
                event = event_for_turn(session.transcript[-1])
                await sink.accept(event)
                if session.halted:
                    if session.status is DebateStatus.READY:
                        logger.info("PROPOSER marked draft as READY")
                    break

                session = await self._challenger_turn(session, i)
                event = event_for_turn(session.transcript[-1])
                await sink.accept(event)
                if session.halted:
                    break
        except SinkError as exc:
            logger.error(
                "Failed to deliver %s event after %d turns, aborting debate: %s",
                event.type.value,
                len(session.transcript),
                exc,
            )
            if session.status is not DebateStatus.READY:
                session = replace(session, status=DebateStatus.ERROR)
            result = build_result(session)
            _log_summary(result)
            return result

        result = build_result(session)
        _log_summary(result)
        try:
            await sink.accept(DebateEvent(type=EventType.DEBATE_COMPLETE, result=result))
        except SinkError as exc:
            logger.error("Failed to deliver completion event: %s", exc)
        return result

    async def run_debate(self, prompt: str, max_iterations: int) -> DebateResult:
        """Synchronous access pattern: run to completion and return the result."""
        return await self.run(prompt, max_iterations, BufferingSink())

    async def run_debate_streaming(
        self,
        prompt: str,
        max_iterations: int,
        sink: EventSink,
    ) -> None:
        """Streaming access pattern: events go to sink as they happen."""
        await self.run(prompt, max_iterations, sink)
