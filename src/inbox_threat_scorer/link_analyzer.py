"""Link deception analysis: compares visible link text with the real destination."""

from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from .constants import (
    AUTH_SUBDOMAIN_PATTERN,
    DETAIL_NO_SUSPICIOUS_LINKS,
    DETAIL_REASONS_SHOWN,
    INDICATOR_DESCRIPTIONS,
    KNOWN_BAD_HOSTS,
    LEVEL_DANGER,
    LEVEL_SAFE,
    LEVEL_WARNING,
    TAG_AUTH_SUBDOMAIN,
    TAG_INSECURE_HTTP,
    TAG_KNOWN_MALICIOUS,
    TAG_SHORTENER,
    TAG_TEXT_URL_MISMATCH,
    URL_LIKE_PATTERN,
    URL_SHORTENERS,
)
from .models import Finding, LinkRecord, Verdict
from .severity import has_strong_indicator

logger = logging.getLogger(__name__)

_URL_LIKE_RE = re.compile(URL_LIKE_PATTERN, re.IGNORECASE)
_AUTH_SUBDOMAIN_RE = re.compile(AUTH_SUBDOMAIN_PATTERN)


def _hostname(url: str) -> str:
    """Return the lower-cased host of an absolute URL, or '' if it has none."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return ""
    return host or ""


def _visible_host(text: str) -> str:
    """Host of the first URL-like token in visible link text, or ''."""
    match = _URL_LIKE_RE.search(text or "")
    if not match:
        return ""
    visible = match.group(0)
    if not visible.lower().startswith("http"):
        visible = "http://" + visible
    return _hostname(visible)


def link_indicators(link: LinkRecord) -> list[str]:
    """Compute the indicator tags for a single link."""
    href = link.href or ""
    host = _hostname(href)
    indicators: list[str] = []

    visible_host = _visible_host(link.text)
    if visible_host and host and visible_host != host:
        indicators.append(TAG_TEXT_URL_MISMATCH)

    # Without a parseable host the substring checks fall back to the raw href
    target = host or href.lower()
    if target and any(s in target for s in URL_SHORTENERS):
        indicators.append(TAG_SHORTENER)
    if target and any(b in target for b in KNOWN_BAD_HOSTS):
        indicators.append(TAG_KNOWN_MALICIOUS)

    if host and _AUTH_SUBDOMAIN_RE.search(host):
        indicators.append(TAG_AUTH_SUBDOMAIN)

    if href.lower().startswith("http://"):
        indicators.append(TAG_INSECURE_HTTP)

    return indicators


def link_level(findings: list[Finding]) -> str:
    """Aggregate link findings into a verdict level."""
    if len(findings) >= 2:
        return LEVEL_DANGER
    if len(findings) == 1:
        return LEVEL_DANGER if has_strong_indicator(findings[0]) else LEVEL_WARNING
    return LEVEL_SAFE


def analyze_links(links: list[LinkRecord]) -> Verdict:
    """Score a list of links for phishing indicators.

    Each link is checked independently; a link with at least one indicator
    becomes a Finding.  Two or more findings, or a single finding with a
    strong indicator, yield ``danger``.  An empty list is ``safe``.
    """
    findings: list[Finding] = []

    for index, link in enumerate(links):
        indicators = link_indicators(link)
        if not indicators:
            continue
        findings.append(
            Finding(
                index=index,
                subject_or_href=link.href,
                reason="; ".join(INDICATOR_DESCRIPTIONS[tag] for tag in indicators),
                indicators=indicators,
            )
        )

    level = link_level(findings)
    logger.debug("Analyzed %d links: %d findings, level=%s", len(links), len(findings), level)

    if level == LEVEL_SAFE:
        return Verdict(level=level, detail=DETAIL_NO_SUSPICIOUS_LINKS, findings=[])

    reasons = ", ".join(f.reason for f in findings[:DETAIL_REASONS_SHOWN])
    return Verdict(
        level=level,
        detail=f"{len(findings)} suspicious link(s): {reasons}",
        findings=findings,
    )
