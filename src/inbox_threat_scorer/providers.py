"""Remote AI provider transport.

Provider settings are explicit ``ProviderConfig`` values; the scoring core
only ever sees the ``submit_prompt`` callable built from one of them.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import aiohttp

from .constants import (
    COMPLETION_MAX_TOKENS,
    COMPLETION_TEMPERATURE,
    PROVIDER_PROBE_TIMEOUT,
    REMOTE_TIMEOUT,
)

logger = logging.getLogger(__name__)

STYLE_OLLAMA = "ollama"
STYLE_OPENAI = "openai"
STYLE_ANTHROPIC = "anthropic"

ANTHROPIC_VERSION = "2023-06-01"


class ProviderError(Exception):
    """The provider answered with an HTTP error or an unexpected body."""


class ProviderNotReady(ProviderError):
    """The provider cannot be used as configured (e.g. missing API key)."""


@dataclass(frozen=True)
class ProviderConfig:
    key: str
    name: str
    endpoint: str
    default_model: str
    requires_api_key: bool
    test_endpoint: str
    style: str = STYLE_OPENAI


PROVIDERS: dict[str, ProviderConfig] = {
    "ollama": ProviderConfig(
        key="ollama",
        name="Ollama",
        endpoint="http://localhost:11434/api/generate",
        default_model="llama3.1",
        requires_api_key=False,
        test_endpoint="http://localhost:11434/api/tags",
        style=STYLE_OLLAMA,
    ),
    "groq": ProviderConfig(
        key="groq",
        name="Groq",
        endpoint="https://api.groq.com/openai/v1/chat/completions",
        default_model="llama-3.1-8b-instant",
        requires_api_key=True,
        test_endpoint="https://api.groq.com/openai/v1/models",
    ),
    "together": ProviderConfig(
        key="together",
        name="Together.ai",
        endpoint="https://api.together.xyz/v1/chat/completions",
        default_model="meta-llama/Llama-3-8b-chat-hf",
        requires_api_key=True,
        test_endpoint="https://api.together.xyz/v1/models",
    ),
    "openai": ProviderConfig(
        key="openai",
        name="OpenAI",
        endpoint="https://api.openai.com/v1/chat/completions",
        default_model="gpt-3.5-turbo",
        requires_api_key=True,
        test_endpoint="https://api.openai.com/v1/models",
    ),
    "anthropic": ProviderConfig(
        key="anthropic",
        name="Anthropic",
        endpoint="https://api.anthropic.com/v1/messages",
        default_model="claude-3-haiku-20240307",
        requires_api_key=True,
        test_endpoint="https://api.anthropic.com/v1/models",
        style=STYLE_ANTHROPIC,
    ),
}


def get_provider(key: str) -> ProviderConfig:
    """Look up a provider by key, raising ProviderNotReady for unknown names."""
    try:
        return PROVIDERS[key.lower()]
    except KeyError:
        raise ProviderNotReady(
            f"Unknown provider '{key}'. Choose one of: {', '.join(PROVIDERS)}"
        ) from None


def build_request(
    config: ProviderConfig,
    prompt: str,
    api_key: str = "",
    model: str | None = None,
) -> tuple[dict, dict]:
    """Return (headers, payload) for a single non-streaming completion."""
    model = model or config.default_model
    headers = {"Content-Type": "application/json"}

    if config.style == STYLE_OLLAMA:
        return headers, {"model": model, "prompt": prompt, "stream": False}

    messages = [{"role": "user", "content": prompt}]

    if config.style == STYLE_ANTHROPIC:
        headers["x-api-key"] = api_key
        headers["anthropic-version"] = ANTHROPIC_VERSION
        return headers, {"model": model, "messages": messages, "max_tokens": COMPLETION_MAX_TOKENS}

    headers["Authorization"] = f"Bearer {api_key}"
    return headers, {
        "model": model,
        "messages": messages,
        "temperature": COMPLETION_TEMPERATURE,
        "max_tokens": COMPLETION_MAX_TOKENS,
    }


def extract_completion(config: ProviderConfig, data: dict) -> str:
    """Pull the completion text out of a provider's JSON response."""
    try:
        if config.style == STYLE_OLLAMA:
            return data.get("response") or ""
        if config.style == STYLE_ANTHROPIC:
            return data["content"][0]["text"]
        return data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(f"{config.name} returned an unexpected response body") from e


def make_submit_prompt(
    config: ProviderConfig,
    api_key: str = "",
    model: str | None = None,
    timeout: float = REMOTE_TIMEOUT,
) -> Callable[[str], Awaitable[str]]:
    """Build the ``submit_prompt`` collaborator for one provider configuration."""
    if config.requires_api_key and not api_key:
        raise ProviderNotReady(f"{config.name} requires an API key.")

    async def submit_prompt(prompt: str) -> str:
        headers, payload = build_request(config, prompt, api_key, model)
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.post(config.endpoint, json=payload, headers=headers) as response:
                if response.status != 200:
                    body = await response.text()
                    raise ProviderError(
                        f"{config.name} request failed ({response.status}): {body[:200]}"
                    )
                data = await response.json(content_type=None)
        return extract_completion(config, data)

    return submit_prompt


async def check_provider_ready(config: ProviderConfig, api_key: str = "") -> tuple[bool, str]:
    """Return (ready, reason) for a provider.

    API providers are considered ready once a key is present; Ollama is
    probed with a short request against its local tags endpoint.
    """
    if config.requires_api_key and not api_key:
        return False, f"{config.name} requires an API key."

    if config.style != STYLE_OLLAMA:
        return True, f"{config.name} is configured"

    try:
        client_timeout = aiohttp.ClientTimeout(total=PROVIDER_PROBE_TIMEOUT)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(config.test_endpoint) as response:
                if response.status == 200:
                    return True, "Ollama is running"
                return False, "Ollama is not responding. Make sure it's installed and running."
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.debug("Ollama probe failed: %s", e)
        return False, "Cannot connect to Ollama. Is it running?"
