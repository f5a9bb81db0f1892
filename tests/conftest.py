"""Shared fixtures for tests."""

from __future__ import annotations

import pytest

from inbox_threat_scorer.models import LinkRecord, ThreadRecord


@pytest.fixture
def phishing_links() -> list[LinkRecord]:
    return [
        LinkRecord(href="https://www.paypal.com/signin", text="Sign in to PayPal"),
        LinkRecord(href="https://bit.ly/3xYz", text="Verify your account"),
        LinkRecord(href="http://login-paypal.example.net/", text="https://www.paypal.com"),
    ]


@pytest.fixture
def safe_links() -> list[LinkRecord]:
    return [
        LinkRecord(href="https://example.com", text="example.com"),
        LinkRecord(href="https://www.example.com/docs", text="www.example.com"),
        LinkRecord(href="https://example.org/help", text="Help center"),
    ]


@pytest.fixture
def spoofed_thread() -> ThreadRecord:
    return ThreadRecord(
        sender="Microsoft Account Team <support@rnicrosoft-security.com>",
        subject="verify",
        snippet="Unusual sign-in activity",
        timestamp_raw=None,
        unread=True,
    )


@pytest.fixture
def legit_thread() -> ThreadRecord:
    return ThreadRecord(
        sender="PayPal <a@paypal.com>",
        subject="receipt",
        snippet="You sent a payment",
    )


@pytest.fixture
def model_response() -> str:
    return """Here is my analysis of the links.

{
  "threat_level": "danger",
  "confidence": 0.92,
  "suspicious_links": [
    {
      "link_index": 2,
      "reason": "Shortened URL hides the destination",
      "indicators": ["URL shortener"]
    }
  ],
  "overall_assessment": "One link hides its destination behind a shortener."
}

Let me know if you need anything else."""
