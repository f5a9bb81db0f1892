"""Data models for Inbox Threat Scorer."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass
class LinkRecord:
    """One hyperlink as observed in rendered content."""

    href: str
    text: str = ""


@dataclass
class ThreadRecord:
    """One inbox entry."""

    sender: str  # Full From header value
    subject: str
    snippet: str = ""
    timestamp_raw: str | None = None  # Date header or epoch milliseconds
    unread: bool = False
    starred: bool = False


@dataclass
class Finding:
    """One flagged item within a scan."""

    index: int
    subject_or_href: str
    reason: str
    indicators: list[str] = field(default_factory=list)  # machine-readable tags


@dataclass
class Verdict:
    """Canonical scan result handed to the presentation layer."""

    level: str  # safe | warning | danger | neutral
    detail: str
    findings: list[Finding] = field(default_factory=list)
    confidence: float | None = None  # only set for model-assisted results
    raw_response: str | None = field(default=None, compare=False)

    @property
    def model_assisted(self) -> bool:
        return self.confidence is not None

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("raw_response")
        return data


@dataclass
class ParseFailure:
    """Tagged error result returned when remote text cannot be interpreted."""

    message: str
    raw: str
    error: bool = True
