"""Scan orchestration - extracts threads or links, then classifies them."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

from tenacity import retry, retry_if_result, stop_after_attempt, wait_fixed

from .brand_analyzer import analyze_threads
from .constants import (
    EXTRACTION_RETRY_DELAY,
    LEVEL_NEUTRAL,
    MAX_LINKS,
    MAX_THREADS,
    THREAD_WINDOW_DAYS,
)
from .display import console
from .gmail_client import fetch_inbox_threads, fetch_message_links
from .hybrid import SubmitPrompt, classify_links_hybrid, classify_threads_hybrid
from .link_analyzer import analyze_links
from .models import LinkRecord, ThreadRecord, Verdict

logger = logging.getLogger(__name__)

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def parse_thread_timestamp(raw: str | None) -> datetime | None:
    """Parse epoch milliseconds, an RFC 2822 Date header or an ISO timestamp."""
    if not raw:
        return None
    raw = raw.strip()

    if raw.isdigit():
        try:
            return datetime.fromtimestamp(int(raw) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def filter_recent_threads(
    threads: list[ThreadRecord],
    days: int = THREAD_WINDOW_DAYS,
    limit: int = MAX_THREADS,
    now: datetime | None = None,
) -> list[ThreadRecord]:
    """Keep threads from the last ``days`` days, newest first, at most ``limit``.

    Threads without a parseable timestamp are treated as infinitely old.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)

    dated = [(parse_thread_timestamp(t.timestamp_raw) or _EPOCH, t) for t in threads]
    recent = [pair for pair in dated if pair[0] >= cutoff]
    recent.sort(key=lambda pair: pair[0], reverse=True)
    return [t for _, t in recent[:limit]]


def fetch_with_retry(fetch: Callable[[], list]) -> list:
    """Call an extraction function, retrying once after a short delay if it returns nothing."""

    @retry(
        retry=retry_if_result(lambda result: not result),
        wait=wait_fixed(EXTRACTION_RETRY_DELAY),
        stop=stop_after_attempt(2),
        retry_error_callback=lambda state: state.outcome.result(),
    )
    def _fetch() -> list:
        return fetch()

    return _fetch() or []


async def scan_threads(
    threads: list[ThreadRecord],
    submit_prompt: SubmitPrompt | None = None,
    days: int = THREAD_WINDOW_DAYS,
) -> Verdict:
    """Classify already extracted threads; heuristics only when no provider is given."""
    if not threads:
        return Verdict(level=LEVEL_NEUTRAL, detail="No recent threads found to analyze")
    if submit_prompt is None:
        return analyze_threads(threads)
    return await classify_threads_hybrid(threads, submit_prompt, days=days)


async def scan_links(
    links: list[LinkRecord],
    submit_prompt: SubmitPrompt | None = None,
    context: str = "",
) -> Verdict:
    """Classify already extracted links; heuristics only when no provider is given."""
    if not links:
        return Verdict(level=LEVEL_NEUTRAL, detail="No links found to analyze")
    if submit_prompt is None:
        return analyze_links(links)
    return await classify_links_hybrid(links, submit_prompt, context=context)


async def scan_inbox(
    service,
    submit_prompt: SubmitPrompt | None = None,
    days: int = THREAD_WINDOW_DAYS,
    max_threads: int = MAX_THREADS,
) -> Verdict:
    """Run a full inbox scan: fetch recent threads, filter, classify."""
    console.print("[bold]Step 1/2:[/bold] Fetching recent inbox threads...")
    threads = fetch_with_retry(
        lambda: fetch_inbox_threads(service, max_threads=max_threads, days=days)
    )
    threads = filter_recent_threads(threads, days=days, limit=max_threads)
    console.print(f"  Found [bold]{len(threads)}[/bold] threads from the last {days} days")

    console.print("[bold]Step 2/2:[/bold] Scoring senders and subjects...")
    return await scan_threads(threads, submit_prompt, days=days)


async def scan_message(
    service,
    message_id: str,
    submit_prompt: SubmitPrompt | None = None,
    limit: int = MAX_LINKS,
) -> Verdict:
    """Fetch a single message and score the links in its body."""
    console.print(f"[bold]Step 1/2:[/bold] Extracting links from message {message_id}...")
    subject, links = fetch_message_links(service, message_id, limit=limit)
    console.print(f"  Found [bold]{len(links)}[/bold] links")

    console.print("[bold]Step 2/2:[/bold] Scoring links...")
    return await scan_links(links, submit_prompt, context=subject)
