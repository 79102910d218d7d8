"""Text-generation backends consumed by the plan generator.

Every backend exposes the same ``complete(prompt, params)`` call and reports
any failure (transport error, non-2xx status, empty content) as
``BackendError`` so the caller can move on to the next one.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

import httpx
import openai

from app.core.config import Settings

logger = logging.getLogger(__name__)

DEEPSEEK = "deepseek"
HUGGINGFACE = "huggingface"


class BackendError(Exception):
    """A single generation attempt failed."""


@dataclass(frozen=True)
class GenerationPrompt:
    system: str
    user: str


@dataclass(frozen=True)
class GenerationParams:
    temperature: float = 0.6
    max_tokens: int = 1200


class GenerationBackend:
    """Base interface for text-generation providers."""

    name: str = "backend"

    def complete(self, prompt: GenerationPrompt, params: GenerationParams) -> str:
        raise NotImplementedError


class DeepSeekBackend(GenerationBackend):
    """Chat completions against DeepSeek's OpenAI-compatible API."""

    name = DEEPSEEK

    def __init__(self, api_key: str, *, base_url: str, model: str, timeout: float | None = None) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout

    def complete(self, prompt: GenerationPrompt, params: GenerationParams) -> str:
        try:
            client = openai.OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
            completion = client.chat.completions.create(
                model=self.model,
                temperature=params.temperature,
                max_tokens=params.max_tokens,
                messages=[
                    {"role": "system", "content": prompt.system},
                    {"role": "user", "content": prompt.user},
                ],
            )
        except openai.OpenAIError as exc:
            raise BackendError(f"{self.name} request failed: {exc}") from exc

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise BackendError(f"{self.name} returned no content")
        return content


class HuggingFaceBackend(GenerationBackend):
    """Hosted text-generation inference endpoint (instruction-tuned model)."""

    name = HUGGINGFACE

    def __init__(self, api_key: str, *, model_url: str, timeout: float | None = None) -> None:
        self.api_key = api_key
        self.model_url = model_url
        self.timeout = timeout

    def complete(self, prompt: GenerationPrompt, params: GenerationParams) -> str:
        body = {
            "inputs": (
                "[INST] Return ONLY valid JSON (no markdown, no prose). "
                f"{prompt.system}\n\n{prompt.user} [/INST]"
            ),
            "parameters": {
                "max_new_tokens": params.max_tokens,
                "temperature": params.temperature,
                "return_full_text": False,
            },
        }
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.post(self.model_url, headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise BackendError(
                f"{self.name} error {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise BackendError(f"{self.name} request failed: {exc}") from exc

        content = _generated_text(data)
        if not content.strip():
            raise BackendError(f"{self.name} returned no content")
        return content


def _generated_text(data: Any) -> str:
    if isinstance(data, list):
        data = data[0] if data else {}
    if isinstance(data, dict):
        text = data.get("generated_text")
        return text if isinstance(text, str) else ""
    return ""


def build_backends(settings: Settings) -> List[GenerationBackend]:
    """Backends that have credentials configured; an empty list means fallback only."""
    backends: List[GenerationBackend] = []
    if settings.deepseek_api_key:
        backends.append(
            DeepSeekBackend(
                settings.deepseek_api_key,
                base_url=settings.deepseek_base_url,
                model=settings.deepseek_model,
                timeout=settings.llm_timeout_seconds,
            )
        )
    if settings.huggingface_api_key:
        backends.append(
            HuggingFaceBackend(
                settings.huggingface_api_key,
                model_url=settings.huggingface_model_url,
                timeout=settings.llm_timeout_seconds,
            )
        )
    if not backends:
        logger.debug("No generation backend configured; plans will use deterministic fallbacks.")
    return backends
