"""Tests for the remote-first, heuristic-fallback decision layer."""

import asyncio

import pytest

from inbox_threat_scorer.brand_analyzer import analyze_threads
from inbox_threat_scorer.hybrid import classify_links_hybrid, classify_threads_hybrid
from inbox_threat_scorer.link_analyzer import analyze_links


async def _rejecting(prompt: str) -> str:
    raise ConnectionError("provider down")


@pytest.mark.asyncio
async def test_rejecting_provider_falls_back_to_links(phishing_links):
    verdict = await classify_links_hybrid(phishing_links, _rejecting)
    assert verdict == analyze_links(phishing_links)
    assert verdict.confidence is None


@pytest.mark.asyncio
async def test_rejecting_provider_falls_back_to_threads(spoofed_thread, legit_thread):
    threads = [spoofed_thread, legit_thread]
    verdict = await classify_threads_hybrid(threads, _rejecting)
    assert verdict == analyze_threads(threads)


@pytest.mark.asyncio
async def test_timeout_falls_back(safe_links):
    async def slow(prompt: str) -> str:
        await asyncio.sleep(1)
        return '{"threat_level": "danger"}'

    verdict = await classify_links_hybrid(safe_links, slow, timeout=0.05)
    assert verdict == analyze_links(safe_links)


@pytest.mark.asyncio
async def test_remote_result_takes_precedence(safe_links, model_response):
    """The model's verdict wins even when the heuristics find nothing."""

    async def submit(prompt: str) -> str:
        return model_response

    verdict = await classify_links_hybrid(safe_links, submit)
    assert verdict.level == "danger"
    assert verdict.confidence == 0.92
    assert verdict.detail == "One link hides its destination behind a shortener."
    finding = verdict.findings[0]
    assert finding.index == 1
    assert finding.subject_or_href == safe_links[1].href


@pytest.mark.asyncio
async def test_unparseable_output_falls_back_and_keeps_raw(phishing_links):
    async def submit(prompt: str) -> str:
        return "Sorry, I cannot help with that."

    verdict = await classify_links_hybrid(phishing_links, submit)
    assert verdict == analyze_links(phishing_links)
    assert verdict.raw_response == "Sorry, I cannot help with that."


@pytest.mark.asyncio
async def test_blank_output_falls_back(legit_thread):
    async def submit(prompt: str) -> str:
        return "   "

    verdict = await classify_threads_hybrid([legit_thread], submit)
    assert verdict == analyze_threads([legit_thread])
    assert verdict.raw_response is None


@pytest.mark.asyncio
async def test_empty_input_is_neutral_without_remote_call():
    calls = []

    async def submit(prompt: str) -> str:
        calls.append(prompt)
        return "{}"

    assert (await classify_links_hybrid([], submit)).level == "neutral"
    assert (await classify_threads_hybrid([], submit)).level == "neutral"
    assert calls == []


@pytest.mark.asyncio
async def test_single_remote_call_with_itemized_prompt(spoofed_thread):
    prompts = []

    async def submit(prompt: str) -> str:
        prompts.append(prompt)
        return '{"threat_level": "danger", "confidence": 0.9, "suspicious_items": [{"index": 1, "reason": "typo", "indicators": ["typosquatting"]}]}'

    verdict = await classify_threads_hybrid([spoofed_thread], submit)
    assert len(prompts) == 1
    assert 'Item 1: Sender: "Microsoft Account Team <support@rnicrosoft-security.com>"' in prompts[0]
    assert '"suspicious_items"' in prompts[0]
    assert '"overall_assessment"' in prompts[0]
    assert verdict.findings[0].index == 0
    assert verdict.findings[0].subject_or_href == "verify"
    assert verdict.detail == "Found 1 suspicious item(s)"


@pytest.mark.asyncio
async def test_link_prompt_contains_schema_and_links(phishing_links):
    prompts = []

    async def submit(prompt: str) -> str:
        prompts.append(prompt)
        return '{"threat_level": "safe", "confidence": 0.8, "suspicious_links": []}'

    verdict = await classify_links_hybrid(phishing_links, submit, context="Urgent security alert")
    assert '"threat_level"' in prompts[0]
    assert '"suspicious_links"' in prompts[0]
    assert 'Link 2: text="Verify your account" href="https://bit.ly/3xYz"' in prompts[0]
    assert "Context: Urgent security alert" in prompts[0]
    assert verdict.level == "safe"
    assert verdict.confidence == 0.8


@pytest.mark.asyncio
async def test_malformed_outer_block_falls_back(phishing_links):
    text = '{"threat_level": "danger", "confidence": 0.9, "suspicious_links": [{"link_index": 1, "reason": "shortener"}],}'

    async def submit(prompt: str) -> str:
        return text

    verdict = await classify_links_hybrid(phishing_links, submit)
    assert verdict == analyze_links(phishing_links)
    assert verdict.confidence is None
    assert verdict.raw_response == text


@pytest.mark.asyncio
async def test_infinite_index_does_not_escape(phishing_links):
    async def submit(prompt: str) -> str:
        return '{"threat_level": "danger", "suspicious_links": [{"link_index": 1e999, "reason": "x"}]}'

    verdict = await classify_links_hybrid(phishing_links, submit)
    assert verdict.level == "danger"
    assert verdict.findings[0].index == 0
    assert verdict.findings[0].subject_or_href == phishing_links[0].href
