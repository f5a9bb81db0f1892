"""Rich-based display functions for Inbox Threat Scorer."""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .constants import LEVEL_DANGER, LEVEL_SAFE, LEVEL_WARNING
from .models import Verdict
from .providers import ProviderConfig

console = Console()


def _level_color(level: str) -> str:
    """Return a Rich color name for a verdict level."""
    if level == LEVEL_DANGER:
        return "red"
    if level == LEVEL_WARNING:
        return "yellow"
    if level == LEVEL_SAFE:
        return "green"
    return "dim"


def display_verdict(verdict: Verdict, title: str = "Threat Verdict") -> None:
    """Display a verdict summary followed by its findings."""
    color = _level_color(verdict.level)

    lines = [
        f"[bold]Level:[/bold] [{color}]{verdict.level.upper()}[/{color}]",
        f"[bold]Detail:[/bold] {verdict.detail}",
    ]
    if verdict.model_assisted:
        lines.append(f"[bold]Confidence:[/bold] {verdict.confidence:.2f} (model-assisted)")
    else:
        lines.append("[bold]Source:[/bold] local heuristics")
    if verdict.raw_response is not None:
        lines.append("[dim]Model output could not be parsed; see --verbose for details.[/dim]")

    console.print(Panel("\n".join(lines), title=title, border_style=color))

    if not verdict.findings:
        return

    table = Table(title="Findings")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Item")
    table.add_column("Reason")
    table.add_column("Indicators")

    for finding in verdict.findings:
        table.add_row(
            str(finding.index + 1),
            finding.subject_or_href,
            finding.reason,
            ", ".join(finding.indicators),
        )

    console.print(table)


def display_providers(statuses: list[tuple[ProviderConfig, bool, str]]) -> None:
    """Display provider readiness as a table."""
    table = Table(title="AI Providers")
    table.add_column("Key")
    table.add_column("Name")
    table.add_column("Model")
    table.add_column("Status")

    for config, ready, reason in statuses:
        color = "green" if ready else "yellow"
        table.add_row(config.key, config.name, config.default_model, f"[{color}]{reason}[/{color}]")

    console.print(table)
