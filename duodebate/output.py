"""Rich console output and markdown file save for debate results."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.text import Text

from duodebate.models import DebateEvent, DebateResult, DebateStatus, EventType, Role, Turn

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_ROLE_STYLES = {
    Role.PROPOSER: "cyan",
    Role.CHALLENGER: "magenta",
}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def print_turn(turn: Turn) -> None:
    """Print a single turn as a panel."""
    style = "red" if turn.status is DebateStatus.ERROR else _ROLE_STYLES[turn.role]
    console.print(
        Panel(
            Markdown(turn.content),
            title=f"[bold]{turn.role.value}[/bold] ({turn.agent_label})",
            subtitle=f"iteration {turn.iteration} | {turn.status.value}",
            border_style=style,
        )
    )


def print_event(event: DebateEvent) -> None:
    """Render one streamed event to the console."""
    if event.type is EventType.DEBATE_START:
        console.print(Rule("[bold cyan]Debate started[/bold cyan]"))
    elif event.type is EventType.ITERATION_START:
        console.print(Text(f"Iteration {event.iteration}", style="dim"))
    elif event.turn is not None:
        print_turn(event.turn)
    elif event.type is EventType.ERROR:
        console.print(f"[bold red]Error:[/bold red] {event.error}")
    elif event.type is EventType.DEBATE_COMPLETE and event.result is not None:
        print_result(event.result, include_transcript=False)


def print_result(result: DebateResult, include_transcript: bool = True) -> None:
    """Print the transcript (optionally) and the final draft."""
    if include_transcript:
        console.print(Rule("[bold cyan]Transcript[/bold cyan]"))
        for turn in result.transcript:
            print_turn(turn)

    console.print(Rule("[bold green]Final Draft[/bold green]"))
    console.print(
        Text(
            f"Status: {result.final_status.value} | "
            f"Iterations: {result.total_iterations} | "
            f"Sources: {len(result.sources)}",
            style="dim",
        )
    )
    console.print(Markdown(result.final_draft or "_(no draft produced)_"))
    for source in result.sources:
        console.print(f"[dim]- {source}[/dim]")


def save_to_file(result: DebateResult, output_dir: Path) -> Path:
    """Save the full debate transcript as a markdown file.

    Args:
        result: The completed DebateResult.
        output_dir: Directory to save the file in.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(result.prompt)}.md"

    agents = sorted({(t.role.value, t.agent_label) for t in result.transcript})
    agents_str = ", ".join(f"{label} ({role})" for role, label in agents) or "none"

    lines: list[str] = [
        f"# DuoDebate: {result.prompt[:80]}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Agents:** {agents_str}",
        f"**Status:** {result.final_status.value}",
        f"**Iterations:** {result.total_iterations}",
        "",
        "---",
        "",
        "## Transcript",
        "",
    ]

    for turn in result.transcript:
        lines.append(f"### Iteration {turn.iteration}: {turn.role.value.title()} ({turn.agent_label})")
        lines.append("")
        lines.append(turn.content)
        lines.append("")
        lines.append(f"*Status: {turn.status.value}*")
        lines.append("")

    lines += ["## Final Draft", "", result.final_draft, ""]

    if result.sources:
        lines += ["## Sources", ""]
        lines += [f"- {source}" for source in result.sources]
        lines.append("")

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Debate saved to: %s", filepath)
    return filepath
