"""CLI commands for the learning plan service.

Commands:
- serve: Run the Web API with uvicorn
- generate: Generate a plan for a profile JSON file
- parse: Parse a saved LLM response offline
- fallback: Print the template plan for a profile
- config: Show effective configuration (secrets masked)
"""

import json
import socket
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from learnplan.config import load_app_config
from learnplan.core.fallback_plan import generate_fallback_plan
from learnplan.core.models import LearningPlan, StudentProfile
from learnplan.core.plan_generator import PlanGenerator, validate_profile
from learnplan.core.plan_parser import parse_plan_response
from learnplan.errors import ValidationError
from learnplan.llm.client import LLMClient, LLMConfig
from learnplan.search.client import ResourceSearchClient
from learnplan.utils.logging import configure_logging

app = typer.Typer(
    name="learnplan",
    help="Personalized 7-day learning plans for neurodiverse students.",
    no_args_is_help=True,
)

console = Console()


def _load_profile_or_exit(profile_file: Path) -> StudentProfile:
    """Read a profile JSON file, or exit with a helpful error."""
    try:
        data = json.loads(profile_file.read_text(encoding="utf-8"))
    except FileNotFoundError:
        console.print(f"[red]✗ Profile file not found: {profile_file}[/red]")
        raise typer.Exit(code=1)
    except json.JSONDecodeError as e:
        console.print(f"[red]✗ Invalid JSON in {profile_file}: {e}[/red]")
        raise typer.Exit(code=1)

    if not isinstance(data, dict):
        console.print("[red]✗ Profile file must contain a JSON object[/red]")
        raise typer.Exit(code=1)

    try:
        validate_profile(data)
    except ValidationError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        raise typer.Exit(code=1)
    return StudentProfile.from_dict(data)


def _print_plan(plan: LearningPlan, as_json: bool) -> None:
    if as_json:
        console.print_json(json.dumps(plan.to_dict()))
        return

    console.print(f"\n[bold]Plan for {plan.student_name or 'student'}[/bold] [dim]({plan.source})[/dim]\n")
    if plan.student_profile:
        console.print(plan.student_profile)
        console.print()

    for day in plan.daily_plans:
        table = Table(title=day.title, show_lines=False, title_justify="left")
        table.add_column("Time", style="cyan", no_wrap=True)
        table.add_column("Subject", style="bold")
        table.add_column("Activity")
        table.add_column("Approach", style="dim")
        for block in day.time_blocks:
            table.add_row(block.time, block.subject, block.activity, block.approach)
        console.print(table)
        if day.notes:
            console.print(f"  [dim]notes:[/dim] {day.notes}")
        console.print()

    if plan.accommodations:
        console.print("[bold]Accommodations[/bold]")
        for item in plan.accommodations:
            console.print(f"  • {item}")
    if plan.resources:
        console.print("\n[bold]Resources[/bold]")
        for resource in plan.resources:
            console.print(f"  • {resource.title} [dim]({resource.type.value}, {resource.url})[/dim]")


def _port_available(host: str, port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_available_port(host: str, start_port: int, attempts: int) -> int | None:
    """First free port in ``start_port .. start_port + attempts - 1``."""
    for port in range(start_port, start_port + attempts):
        if _port_available(host, port):
            return port
    return None


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default from PORT/config)"),
    log_level: str = typer.Option("INFO", "--log-level", help="Log level"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """Run the Web API server.

    If the port is taken, the next ones are tried (up to the configured
    number of attempts).
    """
    import uvicorn

    from learnplan.web.api import create_app

    configure_logging(level=log_level, json_logs=json_logs)
    config = load_app_config()
    bind_host = host or config.server.host
    start_port = port or config.server.port

    chosen = find_available_port(bind_host, start_port, config.server.port_attempts)
    if chosen is None:
        console.print(
            f"[red]✗ No free port in {start_port}-{start_port + config.server.port_attempts - 1}[/red]"
        )
        raise typer.Exit(code=1)
    if chosen != start_port:
        console.print(f"[yellow]⚠ Port {start_port} is in use, using {chosen}[/yellow]")

    console.print(f"[green]✓ Serving on http://{bind_host}:{chosen}[/green]")
    uvicorn.run(create_app(config), host=bind_host, port=chosen, log_level=log_level.lower())


@app.command()
def generate(
    profile_file: Path = typer.Argument(..., help="Student profile JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
    offline: bool = typer.Option(False, "--offline", help="Skip the LLM and use the template plan"),
) -> None:
    """Generate a 7-day plan for a student profile."""
    profile = _load_profile_or_exit(profile_file)
    config = load_app_config()

    llm_client = None
    if config.llm.configured and not offline:
        llm_client = LLMClient(LLMConfig.from_settings(config.llm))
    elif not offline:
        console.print("[yellow]⚠ GROQ_API_KEY not set, using the template plan[/yellow]")

    search_client = ResourceSearchClient(config.search)
    try:
        generator = PlanGenerator(
            llm_client=llm_client,
            search_client=search_client,
            mock_mode=config.mock_mode or offline,
        )
        plan = generator.generate(profile)
    finally:
        search_client.close()
        if llm_client is not None:
            llm_client.close()

    _print_plan(plan, as_json)


@app.command()
def parse(
    raw_file: Path = typer.Argument(..., help="Saved LLM response text"),
    profile_file: Path | None = typer.Option(
        None, "--profile", help="Profile JSON used for the plan header"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
) -> None:
    """Parse an LLM response into a structured plan (no network)."""
    if not raw_file.exists():
        console.print(f"[red]✗ File not found: {raw_file}[/red]")
        raise typer.Exit(code=1)

    profile = _load_profile_or_exit(profile_file) if profile_file else StudentProfile()
    plan = parse_plan_response(raw_file.read_text(encoding="utf-8"), profile)

    if not plan.daily_plans or plan.source == "unparsed":
        console.print("[yellow]⚠ No days could be extracted from the response[/yellow]")
    _print_plan(plan, as_json)


@app.command()
def fallback(
    profile_file: Path = typer.Argument(..., help="Student profile JSON file"),
    as_json: bool = typer.Option(False, "--json", help="Print the plan as JSON"),
) -> None:
    """Print the template plan for a student profile."""
    profile = _load_profile_or_exit(profile_file)
    _print_plan(generate_fallback_plan(profile), as_json)


@app.command(name="config")
def show_config() -> None:
    """Show effective configuration (API keys masked)."""
    config = load_app_config()
    console.print_json(json.dumps(config.to_dict(mask_secrets=True)))


if __name__ == "__main__":
    app()
