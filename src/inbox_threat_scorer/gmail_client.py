"""Gmail API client functions that produce ThreadRecord and LinkRecord lists."""

from __future__ import annotations

import base64
import logging
import re
from typing import Callable

from bs4 import BeautifulSoup
from googleapiclient.errors import HttpError
from googleapiclient.http import BatchHttpRequest
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from inbox_threat_scorer.constants import (
    BATCH_SIZE,
    MAX_LINKS,
    MAX_THREADS,
    METADATA_HEADERS,
    THREAD_WINDOW_DAYS,
)
from inbox_threat_scorer.models import LinkRecord, ThreadRecord

logger = logging.getLogger(__name__)

_PLAIN_URL_RE = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)


def _is_retryable_http_error(exc: BaseException) -> bool:
    return isinstance(exc, HttpError) and exc.resp.status in (429, 500, 503)


_http_retry = retry(
    retry=retry_if_exception(_is_retryable_http_error),
    wait=wait_exponential(multiplier=1, min=1, max=60),
    stop=stop_after_attempt(5),
    reraise=True,
)


@_http_retry
def _execute(request) -> dict:
    return request.execute()


@_http_retry
def _execute_batch(batch: BatchHttpRequest) -> None:
    batch.execute()


def list_inbox_thread_ids(
    service,
    max_threads: int = MAX_THREADS,
    days: int = THREAD_WINDOW_DAYS,
) -> list[str]:
    """List the newest inbox thread IDs from the last ``days`` days."""
    resp = _execute(
        service.users().threads().list(
            userId="me",
            labelIds=["INBOX"],
            q=f"newer_than:{days}d",
            maxResults=max_threads,
            fields="threads/id",
        )
    )
    return [t["id"] for t in resp.get("threads", [])][:max_threads]


def thread_from_response(response: dict) -> ThreadRecord | None:
    """Build a ThreadRecord from a threads.get (metadata) response.

    The newest message of the thread supplies sender, subject and time;
    UNREAD/STARRED apply if any message carries the label.
    """
    messages = response.get("messages") or []
    if not messages:
        return None
    latest = messages[-1]

    headers = {}
    for h in latest.get("payload", {}).get("headers", []):
        headers[h["name"]] = h["value"]

    labels = {label for m in messages for label in m.get("labelIds", [])}
    return ThreadRecord(
        sender=headers.get("From", ""),
        subject=headers.get("Subject", ""),
        snippet=latest.get("snippet", ""),
        timestamp_raw=latest.get("internalDate") or headers.get("Date") or None,
        unread="UNREAD" in labels,
        starred="STARRED" in labels,
    )


def fetch_threads(
    service,
    thread_ids: list[str],
    callback: Callable[[int, int], None] | None = None,
) -> list[ThreadRecord]:
    """Fetch thread metadata in batches, preserving the order of ``thread_ids``."""
    by_id: dict[str, ThreadRecord] = {}
    total_batches = (len(thread_ids) + BATCH_SIZE - 1) // BATCH_SIZE

    for batch_num in range(total_batches):
        chunk = thread_ids[batch_num * BATCH_SIZE:(batch_num + 1) * BATCH_SIZE]
        batch = service.new_batch_http_request()

        def _make_callback(thread_id: str):
            def _cb(request_id, response, exception):
                if exception is not None:
                    logger.debug("Skipping thread %s: %s", thread_id, exception)
                    return
                record = thread_from_response(response)
                if record is not None:
                    by_id[thread_id] = record

            return _cb

        for thread_id in chunk:
            batch.add(
                service.users().threads().get(
                    userId="me",
                    id=thread_id,
                    format="metadata",
                    metadataHeaders=METADATA_HEADERS,
                ),
                callback=_make_callback(thread_id),
            )

        _execute_batch(batch)

        if callback:
            callback(batch_num + 1, total_batches)

    return [by_id[t] for t in thread_ids if t in by_id]


def fetch_inbox_threads(
    service,
    max_threads: int = MAX_THREADS,
    days: int = THREAD_WINDOW_DAYS,
) -> list[ThreadRecord]:
    """List and fetch recent inbox threads."""
    ids = list_inbox_thread_ids(service, max_threads=max_threads, days=days)
    logger.debug("Found %d inbox threads", len(ids))
    if not ids:
        return []
    return fetch_threads(service, ids)


def _decode_part(part: dict) -> str:
    data = part.get("body", {}).get("data")
    if not data:
        return ""
    return base64.urlsafe_b64decode(data).decode("utf-8", errors="ignore")


def _find_bodies(payload: dict) -> tuple[str, str]:
    """Return (html, plain) bodies from a message payload, walking nested parts."""
    html, plain = "", ""
    stack = [payload]
    while stack:
        part = stack.pop(0)
        mime = part.get("mimeType", "")
        if mime == "text/html" and not html:
            html = _decode_part(part)
        elif mime == "text/plain" and not plain:
            plain = _decode_part(part)
        stack.extend(part.get("parts", []))
    return html, plain


def links_from_html(html: str, limit: int = MAX_LINKS) -> list[LinkRecord]:
    """Extract (href, visible text) pairs from anchor tags."""
    soup = BeautifulSoup(html, "html.parser")
    return [
        LinkRecord(href=a["href"].strip(), text=a.get_text(" ", strip=True))
        for a in soup.find_all("a", href=True)[:limit]
    ]


def links_from_text(text: str, limit: int = MAX_LINKS) -> list[LinkRecord]:
    """Plain-text bodies have no anchor text; each URL is its own visible text."""
    urls = [url.rstrip(".,;:!?)") for url in _PLAIN_URL_RE.findall(text)]
    return [LinkRecord(href=url, text=url) for url in urls[:limit]]


def fetch_message_links(
    service,
    message_id: str,
    limit: int = MAX_LINKS,
) -> tuple[str, list[LinkRecord]]:
    """Fetch one message; return its subject and the links shown in its body."""
    message = _execute(
        service.users().messages().get(userId="me", id=message_id, format="full")
    )
    payload = message.get("payload", {})

    subject = ""
    for h in payload.get("headers", []):
        if h["name"] == "Subject":
            subject = h["value"]
            break

    html, plain = _find_bodies(payload)
    if html:
        return subject, links_from_html(html, limit=limit)
    return subject, links_from_text(plain, limit=limit)
