"""CLI entry point for Inbox Threat Scorer."""

from __future__ import annotations

import asyncio
import json
import logging

import click
from rich.logging import RichHandler

from .auth import check_auth, get_gmail_service
from .constants import DEFAULT_PROVIDER, MAX_THREADS, THREAD_WINDOW_DAYS
from .display import console, display_providers, display_verdict
from .export import export_verdict
from .hybrid import SubmitPrompt
from .models import LinkRecord, Verdict
from .providers import (
    PROVIDERS,
    ProviderNotReady,
    check_provider_ready,
    get_provider,
    make_submit_prompt,
)
from .scanner import scan_inbox, scan_links, scan_message


_PROVIDER_OPTIONS = [
    click.option(
        "--provider",
        default=DEFAULT_PROVIDER,
        envvar="THREAT_SCORER_PROVIDER",
        type=click.Choice(sorted(PROVIDERS), case_sensitive=False),
        show_default=True,
        help="AI provider used for model-assisted scoring.",
    ),
    click.option("--api-key", default="", envvar="THREAT_SCORER_API_KEY", help="Provider API key."),
    click.option("--model", default=None, envvar="THREAT_SCORER_MODEL", help="Override the provider's default model."),
    click.option("--offline", is_flag=True, help="Skip the AI provider and use local heuristics only."),
    click.option("--json", "as_json", is_flag=True, help="Print the verdict as JSON."),
]


def provider_options(func):
    """Attach the shared remote-classifier options to a scan command."""
    for option in reversed(_PROVIDER_OPTIONS):
        func = option(func)
    return func


def _submit_prompt(provider: str, api_key: str, model: str | None, offline: bool) -> SubmitPrompt | None:
    if offline:
        return None
    try:
        return make_submit_prompt(get_provider(provider), api_key=api_key, model=model)
    except ProviderNotReady as e:
        console.print(f"[yellow]{e} Using local heuristics only.[/yellow]")
        return None


def _load_links(path: str) -> list[LinkRecord]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.ClickException(f"Could not read links from {path}: {e}") from e

    if not isinstance(data, list):
        raise click.ClickException("Links file must contain a JSON list of {href, text} objects.")
    return [
        LinkRecord(href=str(item.get("href", "")), text=str(item.get("text", "")))
        for item in data
        if isinstance(item, dict)
    ]


def _show(verdict: Verdict, as_json: bool) -> None:
    if as_json:
        console.print_json(data=verdict.to_dict())
    else:
        display_verdict(verdict)
    if verdict.raw_response is not None:
        logging.getLogger(__name__).debug("Unparsed model output: %s", verdict.raw_response)


@click.group()
@click.version_option(version="0.1.0", prog_name="inbox-threat-scorer")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Inbox Threat Scorer - explainable phishing checks for Gmail links and senders."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@cli.command(name="scan-inbox")
@click.option("--days", default=THREAD_WINDOW_DAYS, type=int, show_default=True, help="Only consider threads this recent.")
@click.option("--max-threads", default=MAX_THREADS, type=int, show_default=True, help="Maximum threads to score.")
@provider_options
def scan_inbox_cmd(
    days: int,
    max_threads: int,
    provider: str,
    api_key: str,
    model: str | None,
    offline: bool,
    as_json: bool,
) -> None:
    """Score recent inbox senders and subjects for brand spoofing."""
    try:
        service = get_gmail_service()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    submit = _submit_prompt(provider, api_key, model, offline)
    verdict = asyncio.run(scan_inbox(service, submit, days=days, max_threads=max_threads))
    _show(verdict, as_json)


@cli.command(name="scan-message")
@click.argument("message_id")
@provider_options
def scan_message_cmd(
    message_id: str,
    provider: str,
    api_key: str,
    model: str | None,
    offline: bool,
    as_json: bool,
) -> None:
    """Score the links in a single Gmail message."""
    try:
        service = get_gmail_service()
    except FileNotFoundError as e:
        raise click.ClickException(str(e)) from e

    submit = _submit_prompt(provider, api_key, model, offline)
    verdict = asyncio.run(scan_message(service, message_id, submit))
    _show(verdict, as_json)


@cli.command(name="scan-links")
@click.argument("links_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--context", default="", help="Short description of the email, passed to the model.")
@provider_options
def scan_links_cmd(
    links_file: str,
    context: str,
    provider: str,
    api_key: str,
    model: str | None,
    offline: bool,
    as_json: bool,
) -> None:
    """Score links from a JSON file of {href, text} objects."""
    links = _load_links(links_file)
    submit = _submit_prompt(provider, api_key, model, offline)
    verdict = asyncio.run(scan_links(links, submit, context=context))
    _show(verdict, as_json)


@cli.command(name="export")
@click.option("--source", required=True, type=click.Path(exists=True, dir_okay=False), help="JSON file of links to score.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["csv", "json"]),
    default="json",
    help="Output format.",
)
@click.option("-o", "--output", required=True, help="Output file path.")
def export_cmd(source: str, fmt: str, output: str) -> None:
    """Score a links file with local heuristics and export the verdict."""
    links = _load_links(source)
    verdict = asyncio.run(scan_links(links))
    export_verdict(verdict, format=fmt, output_path=output)
    console.print(f"Results saved to {output}")


@cli.command()
def auth() -> None:
    """Test Gmail authentication."""
    address = check_auth()
    if address is None:
        raise click.ClickException("Authentication failed. Run with --verbose for details.")
    console.print(f"Authenticated as {address}")


@cli.command()
@click.option("--api-key", default="", envvar="THREAT_SCORER_API_KEY", help="Provider API key.")
def providers(api_key: str) -> None:
    """List AI providers and whether they are ready to use."""

    async def _check_all():
        return [(c, *await check_provider_ready(c, api_key)) for c in PROVIDERS.values()]

    display_providers(asyncio.run(_check_all()))
