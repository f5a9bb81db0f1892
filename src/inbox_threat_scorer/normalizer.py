"""Parse free-form model output into the canonical Verdict shape."""

from __future__ import annotations

import json
import logging
import math

from .constants import DETAIL_CHECKS_OUT, LEVEL_DANGER, LEVEL_SAFE, LEVEL_WARNING
from .models import Finding, ParseFailure, Verdict

logger = logging.getLogger(__name__)

# Synonyms accepted for each canonical field, in order of preference
LEVEL_FIELDS = ("threat_level", "threatLevel", "level")
ITEM_FIELDS = ("suspicious_items", "suspicious_links", "items")
INDEX_FIELDS = ("index", "link_index")
SOURCE_FIELDS = ("href", "subject", "sender")
ASSESSMENT_FIELD = "overall_assessment"
CONFIDENCE_FIELD = "confidence"

_decoder = json.JSONDecoder()


def _first_embedded_object(text: str) -> dict | None:
    """Return the top-level JSON object that starts at the first ``{`` in ``text``.

    Objects nested inside a malformed outer block are never returned.
    """
    start = text.find("{")
    if start == -1:
        return None
    try:
        value, _ = _decoder.raw_decode(text, start)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def parse_ai_response(text: str) -> dict | ParseFailure:
    """Extract the structured object from model output.

    The model may wrap its JSON in commentary, so the first embedded object
    wins; otherwise the whole text is parsed.  Never raises.
    """
    if not isinstance(text, str):
        return ParseFailure(message="Could not parse AI response", raw=str(text))

    embedded = _first_embedded_object(text)
    if embedded is not None:
        return embedded

    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("No JSON object in model output (%d chars)", len(text))
        return ParseFailure(message="Could not parse AI response", raw=text)

    if not isinstance(value, dict):
        return ParseFailure(message="AI response is not a JSON object", raw=text)
    return value


def _first_present(data: dict, names: tuple[str, ...]):
    for name in names:
        value = data.get(name)
        if value is not None and value != "":
            return value
    return None


def _normalize_level(value) -> str:
    if value in (LEVEL_DANGER, LEVEL_WARNING):
        return value
    return LEVEL_SAFE


def _normalize_confidence(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(confidence):
        return None
    return min(max(confidence, 0.0), 1.0)


def _item_index(value, position: int) -> int:
    """Integral item number from the model, or ``position`` when unusable."""
    if isinstance(value, bool):
        return position
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else position
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return position
    return position


def _normalize_item(position: int, item) -> Finding:
    if not isinstance(item, dict):
        return Finding(index=position, subject_or_href="", reason=str(item))

    index = _item_index(_first_present(item, INDEX_FIELDS), position)

    indicators = item.get("indicators") or []
    if isinstance(indicators, str):
        indicators = [indicators]
    elif not isinstance(indicators, list):
        indicators = []

    source = _first_present(item, SOURCE_FIELDS)
    return Finding(
        index=index,
        subject_or_href=str(source) if source is not None else "",
        reason=str(item.get("reason") or ""),
        indicators=list(dict.fromkeys(str(tag) for tag in indicators)),
    )


def verdict_from_parsed(parsed: dict) -> Verdict:
    """Map a parsed model object onto a Verdict, applying field synonyms."""
    items = _first_present(parsed, ITEM_FIELDS)
    if not isinstance(items, list):
        items = []

    detail = parsed.get(ASSESSMENT_FIELD)
    if not detail:
        detail = f"Found {len(items)} suspicious item(s)" if items else DETAIL_CHECKS_OUT

    return Verdict(
        level=_normalize_level(_first_present(parsed, LEVEL_FIELDS)),
        detail=str(detail),
        findings=[_normalize_item(pos, item) for pos, item in enumerate(items, start=1)],
        confidence=_normalize_confidence(parsed.get(CONFIDENCE_FIELD)),
    )


def normalize_response(text: str) -> Verdict | ParseFailure:
    """Parse model output and normalize it; returns ParseFailure instead of raising."""
    parsed = parse_ai_response(text)
    if isinstance(parsed, ParseFailure):
        return parsed
    return verdict_from_parsed(parsed)
