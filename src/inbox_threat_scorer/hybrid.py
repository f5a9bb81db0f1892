"""Remote-first classification with deterministic local fallback.

A scan makes at most one remote call.  When it succeeds and the output
parses, the model's verdict is returned as-is; any failure (exception,
timeout, unparseable text) falls back to the local heuristic analyzer for
the same items, whose verdict is returned unmodified.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Awaitable, Callable, Sequence

from .brand_analyzer import analyze_threads
from .constants import LEVEL_NEUTRAL, REMOTE_TIMEOUT, THREAD_WINDOW_DAYS
from .link_analyzer import analyze_links
from .models import LinkRecord, ParseFailure, ThreadRecord, Verdict
from .normalizer import normalize_response
from .prompts import build_link_prompt, build_thread_prompt

logger = logging.getLogger(__name__)

SubmitPrompt = Callable[[str], Awaitable[str]]


async def _attempt_remote(prompt: str, submit_prompt: SubmitPrompt, timeout: float) -> str | None:
    """Make the single remote call; any failure means no result."""
    try:
        result = await asyncio.wait_for(submit_prompt(prompt), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Remote classifier timed out after %.1fs", timeout)
        return None
    except Exception as exc:
        logger.warning("Remote classifier failed: %s", exc)
        return None

    if not isinstance(result, str) or not result.strip():
        logger.warning("Remote classifier returned no text")
        return None
    return result


def _align_findings(verdict: Verdict, sources: Sequence[str]) -> Verdict:
    """Convert the model's 1-based item numbers to positions and fill in sources."""
    aligned = []
    for finding in verdict.findings:
        index = finding.index
        if 1 <= index <= len(sources):
            index -= 1
            if not finding.subject_or_href:
                finding = replace(finding, subject_or_href=sources[index])
        aligned.append(replace(finding, index=index))
    return replace(verdict, findings=aligned)


async def _classify(
    prompt: str,
    sources: Sequence[str],
    submit_prompt: SubmitPrompt,
    fallback: Callable[[], Verdict],
    timeout: float,
) -> Verdict:
    logger.debug("Submitting prompt (%d chars)", len(prompt))
    text = await _attempt_remote(prompt, submit_prompt, timeout)

    if text is None:
        logger.warning("Falling back to local heuristics")
        return fallback()

    normalized = normalize_response(text)
    if isinstance(normalized, ParseFailure):
        logger.warning("%s; falling back to local heuristics", normalized.message)
        verdict = fallback()
        verdict.raw_response = normalized.raw
        return verdict

    logger.debug("Using model verdict: %s", normalized.level)
    return _align_findings(normalized, sources)


async def classify_links_hybrid(
    links: list[LinkRecord],
    submit_prompt: SubmitPrompt,
    context: str = "",
    timeout: float = REMOTE_TIMEOUT,
) -> Verdict:
    """Classify links with the remote model, falling back to analyze_links."""
    if not links:
        return Verdict(level=LEVEL_NEUTRAL, detail="No links found to analyze")

    return await _classify(
        build_link_prompt(links, context),
        [link.href for link in links],
        submit_prompt,
        lambda: analyze_links(links),
        timeout,
    )


async def classify_threads_hybrid(
    threads: list[ThreadRecord],
    submit_prompt: SubmitPrompt,
    days: int = THREAD_WINDOW_DAYS,
    timeout: float = REMOTE_TIMEOUT,
) -> Verdict:
    """Classify inbox threads with the remote model, falling back to analyze_threads."""
    if not threads:
        return Verdict(level=LEVEL_NEUTRAL, detail="No recent threads found to analyze")

    return await _classify(
        build_thread_prompt(threads, days),
        [t.subject for t in threads],
        submit_prompt,
        lambda: analyze_threads(threads),
        timeout,
    )
