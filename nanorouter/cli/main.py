"""CLI commands for nanorouter."""

import json
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nanorouter import __logo__, __version__
from nanorouter.config.loader import get_config_path, load_config, save_config
from nanorouter.config.schema import RouterConfig
from nanorouter.errors import ConfigurationInvalid
from nanorouter.router.models import TIER_ORDER, RoutingProfile, RoutingRequest, Tier
from nanorouter.router.sticky import StickyRouter

console = Console()

app = typer.Typer(name="nanorouter", help=f"{__logo__} nanorouter - prompt tier routing")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} nanorouter v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    logs: bool = typer.Option(False, "--logs/--no-logs", help="Show nanorouter runtime logs"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Prompt tier routing engine."""
    if logs:
        logger.enable("nanorouter")
    else:
        logger.disable("nanorouter")


def _load(config_path: Optional[Path]) -> RouterConfig:
    try:
        return load_config(config_path)
    except ConfigurationInvalid as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _parse_tier(value: str) -> Tier:
    try:
        return Tier(value.lower())
    except ValueError:
        choices = ", ".join(t.value for t in TIER_ORDER)
        console.print(f"[red]Unknown tier '{value}'. Choose one of: {choices}[/red]")
        raise typer.Exit(1)


def _format_confidence(confidence: float) -> str:
    """Format confidence with color."""
    if confidence >= 0.78:
        return f"[magenta]{confidence:.1%}[/magenta]"
    elif confidence >= 0.55:
        return f"[yellow]{confidence:.1%}[/yellow]"
    return f"[green]{confidence:.1%}[/green]"


@app.command()
def route(
    prompt: str = typer.Argument(..., help="Prompt to route"),
    system: Optional[str] = typer.Option(None, "--system", "-s", help="System prompt"),
    session: Optional[str] = typer.Option(None, "--session", help="Session ID for pinning"),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Force a specific target"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="eco, balanced or performance"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    as_json: bool = typer.Option(False, "--json", help="Print the decision record as JSON"),
):
    """Route one prompt and show the decision."""
    config = _load(config_path)
    if profile:
        try:
            config = config.model_copy(update={"active_profile": RoutingProfile(profile.lower())})
        except ValueError:
            console.print(f"[red]Unknown profile '{profile}'. Choose one of: eco, balanced, performance[/red]")
            raise typer.Exit(1)

    router = StickyRouter(config)
    result = router.intercept(
        RoutingRequest(prompt=prompt, system_prompt=system, session_id=session, override_target=target)
    )
    decision = result.decision

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return

    body = "\n".join(
        [
            f"[bold]Target:[/bold]     [green]{decision.target}[/green]",
            f"[bold]Tier:[/bold]       [cyan]{decision.tier.value.upper()}[/cyan]",
            f"[bold]Confidence:[/bold] {_format_confidence(decision.confidence)}",
            f"[bold]Profile:[/bold]    {decision.profile.value}",
            f"[bold]Fallbacks:[/bold]  {', '.join(decision.fallbacks) or '-'}",
        ]
    )
    console.print(Panel(body, title=f"{__logo__} Routing Decision", expand=False))
    console.print(f"[dim]Reason:[/dim] {escape(decision.reason)}", highlight=False)
    if decision.cost is not None:
        savings = decision.cost.estimated_savings
        console.print(
            f"[dim]Cost vs {decision.cost.baseline_target}:[/dim] "
            f"{'+' if savings >= 0 else ''}${savings:.2f}/M tokens"
        )
    console.print(f"[dim]Processed in {result.processing_ms:.2f}ms[/dim]")


@app.command()
def analyze(
    prompt: str = typer.Argument(..., help="Prompt to analyze"),
    system: Optional[str] = typer.Option(None, "--system", "-s", help="System prompt"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    as_json: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
):
    """Show the per-dimension score breakdown for a prompt."""
    config = _load(config_path)
    router = StickyRouter(config)
    analysis = router.analyzer.analyze(prompt, system)

    if as_json:
        typer.echo(json.dumps(analysis.to_dict(), indent=2, ensure_ascii=False))
        return

    table = Table(title=f"{__logo__} Dimension Scores")
    table.add_column("Dimension", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Activation", justify="right", style="yellow")
    table.add_column("Contribution", justify="right", style="green")
    table.add_column("Evidence", style="dim")

    for dim in analysis.dimensions:
        table.add_row(
            dim.name,
            f"{dim.weight:.2f}",
            f"{dim.activation:.2f}",
            f"{dim.contribution:.3f}",
            ", ".join(dim.evidence)[:60],
        )

    console.print(table)
    console.print(f"[bold]Raw score:[/bold] {analysis.raw_score:.4f}")
    console.print(f"[bold]Confidence:[/bold] {_format_confidence(analysis.confidence)}")
    console.print(f"[bold]Tier:[/bold] [cyan]{analysis.tier.value.upper()}[/cyan]")
    if analysis.escalated:
        console.print(f"[magenta]{analysis.override}[/magenta]")


@app.command()
def fallback(
    tier: str = typer.Argument(..., help="Tier to start from"),
    failed: Optional[list[str]] = typer.Option(None, "--failed", "-f", help="Target that already failed (repeatable)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
):
    """Find the next usable target after failures."""
    config = _load(config_path)
    start = _parse_tier(tier)
    router = StickyRouter(config)

    target = router.dispatcher.get_fallback(start, set(failed or []))
    if target is None:
        console.print("[red]No fallback available: every target has failed[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Next target: [bold]{target}[/bold]")


@app.command()
def init(
    path: Optional[Path] = typer.Argument(None, help="Where to write the configuration"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
):
    """Write the default configuration."""
    path = path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists at {path}[/yellow]")
        console.print("[dim]Use --force to overwrite[/dim]")
        raise typer.Exit(1)

    written = save_config(RouterConfig(), path)
    console.print(f"[green]✓[/green] Created config at {written}")


@app.command()
def diagnostics(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
):
    """Show configuration and runtime diagnostics."""
    config = _load(config_path)
    info = StickyRouter(config).diagnostics()

    console.print(f"{__logo__} nanorouter diagnostics\n")
    console.print(f"  Config version: {info['config_version']}")
    console.print(f"  Active profile: {info['active_profile']}")
    console.print(f"  Session pinning: {'[green]on[/green]' if info['session_pinning'] else '[dim]off[/dim]'}")
    console.print(f"  Auto-escalation: {'[green]on[/green]' if info['auto_escalation'] else '[dim]off[/dim]'}")
    console.print(f"  Dimensions: {info['dimensions']} (weight sum {info['weight_sum']})")
    console.print()

    table = Table(title="Tier Targets")
    table.add_column("Tier", style="cyan")
    table.add_column("Primary", style="green")
    table.add_column("Fallbacks", justify="right", style="yellow")
    for tier_name, tier_info in info["tiers"].items():
        table.add_row(tier_name.upper(), tier_info["primary"], str(tier_info["fallbacks"]))
    console.print(table)


if __name__ == "__main__":
    app()
