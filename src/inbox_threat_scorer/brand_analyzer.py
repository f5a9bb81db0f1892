"""Sender/subject brand spoofing analysis (typosquatting and suspicious TLDs)."""

from __future__ import annotations

import logging
import math
import re

from .constants import (
    CONFUSABLES,
    DETAIL_CHECKS_OUT,
    KNOWN_BRANDS,
    LEVEL_DANGER,
    LEVEL_SAFE,
    LEVEL_WARNING,
    MIN_TOKEN_LENGTH,
    SUSPICIOUS_TLDS,
    TAG_SIMILAR_TO_PREFIX,
    TAG_SUSPICIOUS_TLD,
    TAG_TYPOSQUATTING,
    TYPO_DISTANCE_RATIO,
)
from .distance import levenshtein
from .models import Finding, ThreadRecord, Verdict
from .severity import has_strong_indicator

logger = logging.getLogger(__name__)

_DOMAIN_RE = re.compile(r"@([^\s>]+)")
_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def sender_domain(sender: str) -> str:
    """Extract the lower-cased domain of the first address in a From value."""
    m = _DOMAIN_RE.search((sender or "").lower())
    return m.group(1) if m else ""


def tokenize(sender: str, subject: str) -> list[str]:
    text = f"{sender or ''} {subject or ''}".lower()
    return [t for t in _TOKEN_SPLIT_RE.split(text) if t]


def fold_confusables(token: str) -> str:
    """Replace visually confusable sequences, e.g. 'rnicrosoft' -> 'microsoft'."""
    for lookalike, original in CONFUSABLES:
        token = token.replace(lookalike, original)
    return token


def typo_threshold(brand: str) -> int:
    return max(1, math.floor(len(brand) * TYPO_DISTANCE_RATIO))


def typosquat_distance(token: str, brand: str) -> int | None:
    """Return the edit distance when ``token`` looks like a typo of ``brand``.

    Returns None when the pair does not qualify.  An exact match never
    qualifies.
    """
    dist = levenshtein(token, brand)
    if dist == 0:
        return None
    threshold = typo_threshold(brand)
    if dist <= threshold:
        return dist
    folded = fold_confusables(token)
    if folded != token and levenshtein(folded, brand) <= threshold:
        return dist
    return None


def thread_findings(index: int, thread: ThreadRecord) -> list[Finding]:
    """Run the TLD and typosquatting checks over a single thread."""
    findings: list[Finding] = []
    domain = sender_domain(thread.sender)

    if domain:
        for tld in SUSPICIOUS_TLDS:
            if domain.endswith(tld):
                findings.append(
                    Finding(
                        index=index,
                        subject_or_href=thread.subject,
                        reason=f"Sender domain uses suspicious TLD ({tld})",
                        indicators=[TAG_SUSPICIOUS_TLD],
                    )
                )
                break

    for token in tokenize(thread.sender, thread.subject):
        if len(token) < MIN_TOKEN_LENGTH:
            continue
        for brand in KNOWN_BRANDS:
            if len(brand) < MIN_TOKEN_LENGTH:
                continue
            dist = typosquat_distance(token, brand)
            if dist is None:
                continue
            findings.append(
                Finding(
                    index=index,
                    subject_or_href=thread.subject,
                    reason=f'Possible typosquatting: "{token}" ≈ "{brand}" (distance {dist})',
                    indicators=[TAG_TYPOSQUATTING, f"{TAG_SIMILAR_TO_PREFIX}{brand}"],
                )
            )

    return findings


def analyze_threads(threads: list[ThreadRecord]) -> Verdict:
    """Score inbox threads for brand impersonation.

    Every current indicator is strong, so any finding yields ``danger``;
    the ``warning`` branch is kept for weaker checks.
    """
    findings: list[Finding] = []
    for index, thread in enumerate(threads):
        findings.extend(thread_findings(index, thread))

    logger.debug("Analyzed %d threads: %d findings", len(threads), len(findings))

    if not findings:
        return Verdict(level=LEVEL_SAFE, detail=DETAIL_CHECKS_OUT, findings=[])

    if any(has_strong_indicator(f) for f in findings):
        return Verdict(
            level=LEVEL_DANGER,
            detail=f"🚨 {len(findings)} suspicious item(s) detected",
            findings=findings,
        )
    return Verdict(
        level=LEVEL_WARNING,
        detail=f"⚠️ {len(findings)} potentially suspicious item(s) detected",
        findings=findings,
    )
