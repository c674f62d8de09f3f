"""Generative AI clients that turn a prompt into text."""

from __future__ import annotations

from typing import Protocol

import structlog

from ..config import GenAIConfig, GenAIKind
from ..errors import ConfigError, GenAIError


class GenAIClient(Protocol):
    """Anything able to answer a prompt with generated text."""

    def send(self, prompt: str) -> str:
        ...


class GeminiClient:
    """Send prompts to the Gemini API.

    Credentials come from the environment (``GEMINI_API_KEY`` or
    ``GOOGLE_API_KEY``) as read by ``google-genai`` itself.
    """

    def __init__(self, model: str, logger: structlog.BoundLogger | None = None) -> None:
        self.model = model
        self.logger = logger or structlog.get_logger("feed_summarizer.genai")
        self._client = None

    def _ensure_client(self):
        if self._client is not None:
            return self._client
        from google import genai

        try:
            self._client = genai.Client()
        except Exception as exc:  # noqa: BLE001
            raise GenAIError(f"failed to create Gemini client: {exc}") from exc
        return self._client

    def send(self, prompt: str) -> str:
        client = self._ensure_client()
        self.logger.info("genai_request", model=self.model, prompt_chars=len(prompt))
        try:
            result = client.models.generate_content(model=self.model, contents=prompt)
        except Exception as exc:  # noqa: BLE001
            raise GenAIError(f"Gemini request failed: {exc}") from exc
        text = result.text
        if not text:
            raise GenAIError("Gemini returned an empty response")
        self.logger.info("genai_response", model=self.model, response_chars=len(text))
        return text


def new_genai_client(config: GenAIConfig) -> GenAIClient:
    if config.kind is GenAIKind.GEMINI:
        return GeminiClient(config.model)
    raise ConfigError(f"unsupported API type: {config.kind}")


__all__ = ["GeminiClient", "GenAIClient", "new_genai_client"]
