"""
LLM inference service for FlashDeck.

Talks to a local Ollama server (settings.ollama_base_url) over its
/api/generate endpoint. Configured models are tried in order; the first one
that answers wins.

Usage:
    model, text = await generate_text(prompt)
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from flashdeck.config import settings

logger = logging.getLogger(__name__)


class LLMUnavailableError(Exception):
    """Raised when no configured Ollama model produced a response."""


async def generate_text(
    prompt: str,
    models: Sequence[str] | None = None,
) -> tuple[str, str]:
    """
    Run a non-streaming completion and return (model name, response text).

    Raises LLMUnavailableError if every model fails or Ollama is unreachable.
    """
    candidates = list(models or settings.ollama_models)
    errors: list[str] = []

    async with httpx.AsyncClient(
        base_url=settings.ollama_base_url, timeout=settings.generation_timeout
    ) as client:
        for model in candidates:
            payload = {
                "model": model,
                "prompt": prompt,
                "stream": False,
                "options": {
                    "temperature": settings.generation_temperature,
                    "num_predict": settings.generation_max_tokens,
                },
            }
            try:
                res = await client.post("/api/generate", json=payload)
            except httpx.HTTPError as e:
                logger.warning("Ollama request for model %s failed: %s", model, e)
                errors.append(f"{model}: {e}")
                continue

            if res.status_code != 200:
                logger.info("Model %s unavailable (HTTP %d)", model, res.status_code)
                errors.append(f"{model}: HTTP {res.status_code}")
                continue

            try:
                data = res.json()
            except ValueError as e:
                errors.append(f"{model}: invalid JSON ({e})")
                continue
            text = str(data.get("response") or "") if isinstance(data, dict) else ""

            logger.info("Generated with %s: %s...", model, text[:100])
            return model, text

    raise LLMUnavailableError(
        "No working Ollama model found"
        + (f" ({'; '.join(errors)})" if errors else "")
    )


async def list_models(timeout: float | None = None) -> list[dict[str, Any]]:
    """
    Return the models Ollama reports from /api/tags.

    Raises httpx.HTTPStatusError on a non-2xx reply, other httpx.HTTPError on
    connection failure, and ValueError on a non-JSON body.
    """
    async with httpx.AsyncClient(base_url=settings.ollama_base_url) as client:
        res = await client.get("/api/tags", timeout=timeout or settings.health_timeout)
        res.raise_for_status()
        data = res.json()
    if not isinstance(data, dict):
        raise ValueError("Unexpected /api/tags payload")
    return data.get("models") or []
