"""Click CLI: config loading, agent wiring, and sync or streaming debate runs."""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AgentConfig, AppConfig, REQUIRED_ROLES, load_config
from duodebate.agents.anthropic import AnthropicAgent
from duodebate.agents.base import Agent, AgentError
from duodebate.agents.gemini import GeminiAgent
from duodebate.agents.openai_agent import OpenAIAgent
from duodebate.healthcheck import run_health_checks
from duodebate.models import DebateResult, EventType
from duodebate.orchestrator import DebateOrchestrator
from duodebate.output import print_event, print_result, save_to_file
from duodebate.sinks import CallbackSink, stream_debate

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)
# Errors and status chatter; stdout stays machine-readable under --json.
err_console = Console(stderr=True, legacy_windows=False)

MAX_ITERATIONS_BOUND = 20

AGENT_CLASSES: dict[str, type[Agent]] = {
    "openai": OpenAIAgent,
    "gemini": GeminiAgent,
    "anthropic": AnthropicAgent,
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                rich_tracebacks=True,
                show_path=False,
            )
        ],
    )


def _build_agent(agent_cfg: AgentConfig) -> Agent:
    """Instantiate the agent class for agent_cfg.sdk.

    Raises:
        AgentError: If the sdk is unknown or the agent cannot be created.
    """
    agent_cls = AGENT_CLASSES.get(agent_cfg.sdk)
    if agent_cls is None:
        raise AgentError(agent_cfg.label, f"Unknown sdk '{agent_cfg.sdk}'")
    return agent_cls(agent_cfg)


def _build_agents(config: AppConfig) -> dict[str, Agent]:
    """Build the PROPOSER and CHALLENGER agents. Exits if either is unavailable."""
    missing = [role for role in REQUIRED_ROLES if role not in config.available_agents]
    if missing:
        envs = ", ".join(config.agents[role].api_key_env for role in missing)
        err_console.print(f"[bold red]Error:[/bold red] No API key for {', '.join(missing)}. Set {envs} in .env.")
        sys.exit(1)

    agents: dict[str, Agent] = {}
    for role in REQUIRED_ROLES:
        try:
            agents[role] = _build_agent(config.agents[role])
        except AgentError as exc:
            err_console.print(f"[bold red]Error:[/bold red] Cannot create {role} agent: {exc}")
            sys.exit(1)
    return agents


def _check_agents(agents: dict[str, Agent], out: Console = console) -> None:
    """Ping both agents and exit if either fails; a debate needs both."""
    out.print("\n[bold]Checking agents...[/bold]", highlight=False)
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(agents))

    failed = False
    for role in REQUIRED_ROLES:
        ok, err = results[role]
        label = f"{role} ({agents[role].name()})"
        if ok:
            out.print(f"  [green]OK  [/green] {label}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            out.print(f"  [red]FAIL[/red] {label}: {short_err}")
            failed = True

    if failed:
        err_console.print("\n[bold red]Error:[/bold red] Both agents must be reachable to run a debate.")
        sys.exit(1)
    out.print()


def _resolve_prompt(prompt: str | None, prompt_file: str | None) -> str:
    if prompt_file:
        text = Path(prompt_file).read_text(encoding="utf-8")
    else:
        text = prompt or ""
    return text.strip()


async def _run_sync(
    orchestrator: DebateOrchestrator,
    prompt: str,
    iterations: int,
    as_json: bool,
) -> DebateResult:
    if as_json:
        return await orchestrator.run_debate(prompt, iterations)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Running debate (up to {iterations} iterations)...", total=None)
        result = await orchestrator.run_debate(prompt, iterations)

    print_result(result)
    return result


async def _run_stream(
    orchestrator: DebateOrchestrator,
    prompt: str,
    iterations: int,
    as_json: bool,
    queue_size: int,
    put_timeout_sec: float,
) -> DebateResult | None:
    if not as_json:
        return await orchestrator.run(prompt, iterations, CallbackSink(print_event))

    result: DebateResult | None = None
    async for event in stream_debate(
        orchestrator,
        prompt,
        iterations,
        queue_size=queue_size,
        put_timeout_sec=put_timeout_sec,
    ):
        click.echo(json.dumps(event.to_dict()))
        if event.type is EventType.DEBATE_COMPLETE:
            result = event.result
    return result


@click.command()
@click.argument("prompt", required=False)
@click.option("--file", "prompt_file", type=click.Path(exists=True), help="Read the task prompt from a file")
@click.option("--iterations", type=click.IntRange(1, MAX_ITERATIONS_BOUND), default=None,
              help="Maximum PROPOSER/CHALLENGER iterations, 1-20 (default: from config)")
@click.option("--stream", "use_stream", is_flag=True, default=False,
              help="Print each turn as soon as it happens")
@click.option("--json", "as_json", is_flag=True, default=False,
              help="Emit JSON (one event per line with --stream) instead of rich output")
@click.option("--output", "output_path", default=None, help="Output directory (default: from config)")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    prompt: str | None,
    prompt_file: str | None,
    iterations: int | None,
    use_stream: bool,
    as_json: bool,
    output_path: str | None,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """DuoDebate -- a PROPOSER drafts, a CHALLENGER critiques, until READY.

    \b
    Examples:
      duodebate "Write a haiku about autumn" --iterations 3
      duodebate --file task.md --stream
      duodebate "Summarise the CAP theorem" --stream --json
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    task_prompt = _resolve_prompt(prompt, prompt_file)
    if not task_prompt:
        err_console.print("[bold red]Error:[/bold red] Provide a non-blank PROMPT argument or --file.")
        sys.exit(1)

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ValueError) as exc:
        err_console.print(f"[bold red]Config error:[/bold red] {exc}")
        sys.exit(1)

    effective_iterations = iterations if iterations is not None else config.defaults.max_iterations
    if effective_iterations > config.defaults.max_iterations_limit:
        err_console.print(
            f"[bold red]Error:[/bold red] --iterations must not exceed {config.defaults.max_iterations_limit}."
        )
        sys.exit(1)
    effective_output = Path(output_path) if output_path else config.defaults.output_dir

    agents = _build_agents(config)
    if not skip_health_check:
        _check_agents(agents, err_console if as_json else console)

    orchestrator = DebateOrchestrator(
        proposer=agents["proposer"],
        challenger=agents["challenger"],
        prompts=config.prompts,
    )

    if not as_json:
        console.print(
            f"\n[bold cyan]DuoDebate[/bold cyan] - "
            f"{agents['proposer'].name()} proposes, {agents['challenger'].name()} challenges, "
            f"up to {effective_iterations} iterations"
        )
        console.print(f"Prompt: [italic]{task_prompt[:80]}{'...' if len(task_prompt) > 80 else ''}[/italic]\n")

    if use_stream:
        run = _run_stream(
            orchestrator,
            task_prompt,
            effective_iterations,
            as_json,
            queue_size=config.defaults.stream_queue_size,
            put_timeout_sec=config.defaults.sink_timeout_sec,
        )
    else:
        run = _run_sync(orchestrator, task_prompt, effective_iterations, as_json)

    try:
        result = asyncio.run(asyncio.wait_for(run, timeout=config.defaults.run_timeout_sec))
    except TimeoutError:
        err_console.print(
            f"[bold red]Error:[/bold red] Debate exceeded {config.defaults.run_timeout_sec}s and was cancelled."
        )
        sys.exit(1)

    if result is None:
        err_console.print("[bold red]Error:[/bold red] Debate ended without a result.")
        sys.exit(1)

    if as_json and not use_stream:
        click.echo(json.dumps(result.to_dict(), indent=2))

    saved_path = save_to_file(result, effective_output)
    if not as_json:
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")


if __name__ == "__main__":
    main()
