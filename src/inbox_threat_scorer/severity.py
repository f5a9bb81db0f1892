"""Indicator severity lookup shared by the link and brand analyzers."""

from .constants import INDICATOR_SEVERITY, SEVERITY_STRONG, SEVERITY_WEAK
from .models import Finding


def severity_of(tag: str) -> str:
    """Return 'strong' or 'weak' for an indicator tag.

    Unknown tags (including the per-brand ``similar-to-*`` tags) are weak.
    """
    return INDICATOR_SEVERITY.get(tag, SEVERITY_WEAK)


def is_strong(tag: str) -> bool:
    return severity_of(tag) == SEVERITY_STRONG


def has_strong_indicator(finding: Finding) -> bool:
    """True when any of the finding's tags alone justifies a danger verdict."""
    return any(is_strong(tag) for tag in finding.indicators)
