"""Tests for Gmail extraction helpers."""

import base64

from inbox_threat_scorer.gmail_client import (
    fetch_message_links,
    links_from_html,
    links_from_text,
    thread_from_response,
)


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).decode("ascii")


class _Request:
    def __init__(self, response):
        self._response = response

    def execute(self):
        return self._response


class _Messages:
    def __init__(self, message):
        self._message = message
        self.calls = []

    def get(self, **kwargs):
        self.calls.append(kwargs)
        return _Request(self._message)


class _Users:
    def __init__(self, messages):
        self._messages = messages

    def messages(self):
        return self._messages


class FakeService:
    def __init__(self, message):
        self.messages = _Messages(message)

    def users(self):
        return _Users(self.messages)


def test_thread_from_response_uses_latest_message():
    response = {
        "id": "t1",
        "messages": [
            {
                "labelIds": ["INBOX", "STARRED"],
                "snippet": "first",
                "internalDate": "1717900000000",
                "payload": {"headers": [{"name": "From", "value": "old@example.com"}]},
            },
            {
                "labelIds": ["INBOX", "UNREAD"],
                "snippet": "Please verify your account",
                "internalDate": "1718000000000",
                "payload": {
                    "headers": [
                        {"name": "From", "value": "Security <security@paypa1.com>"},
                        {"name": "Subject", "value": "Action required"},
                    ]
                },
            },
        ],
    }
    thread = thread_from_response(response)
    assert thread.sender == "Security <security@paypa1.com>"
    assert thread.subject == "Action required"
    assert thread.snippet == "Please verify your account"
    assert thread.timestamp_raw == "1718000000000"
    assert thread.unread is True
    assert thread.starred is True


def test_thread_from_response_without_messages():
    assert thread_from_response({"id": "t1"}) is None


def test_links_from_html():
    html = """
    <p>Hello</p>
    <a href="https://bit.ly/abc"> Click <b>here</b> </a>
    <a name="anchor">no href</a>
    <a href="https://example.com">example.com</a>
    """
    links = links_from_html(html)
    assert [(l.href, l.text) for l in links] == [
        ("https://bit.ly/abc", "Click here"),
        ("https://example.com", "example.com"),
    ]


def test_links_from_html_limit():
    html = "".join(f'<a href="https://example.com/{i}">{i}</a>' for i in range(10))
    assert len(links_from_html(html, limit=4)) == 4


def test_links_from_text():
    links = links_from_text("Go to https://example.com/reset now or http://bit.ly/x.")
    assert [l.href for l in links] == ["https://example.com/reset", "http://bit.ly/x"]
    assert links[0].text == links[0].href


def test_fetch_message_links_prefers_html_part():
    message = {
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": [{"name": "Subject", "value": "Your invoice"}],
            "parts": [
                {"mimeType": "text/plain", "body": {"data": _b64("See https://plain.example.com")}},
                {"mimeType": "text/html", "body": {"data": _b64('<a href="https://bit.ly/inv">View invoice</a>')}},
            ],
        }
    }
    service = FakeService(message)
    subject, links = fetch_message_links(service, "m1")
    assert subject == "Your invoice"
    assert [(l.href, l.text) for l in links] == [("https://bit.ly/inv", "View invoice")]
    assert service.messages.calls[0]["format"] == "full"


def test_fetch_message_links_plain_text_only():
    message = {
        "payload": {
            "mimeType": "text/plain",
            "headers": [],
            "body": {"data": _b64("Reset here: https://login-reset.example.net/x")},
        }
    }
    subject, links = fetch_message_links(FakeService(message), "m2")
    assert subject == ""
    assert [l.href for l in links] == ["https://login-reset.example.net/x"]
