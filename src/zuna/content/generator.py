"""Text generation client for editorial content (tips)."""

from __future__ import annotations

from abc import ABC, abstractmethod

import httpx
import structlog

logger = structlog.get_logger()


class ContentUnavailableError(Exception):
    """Content could not be produced; callers fall back to a default."""


class BaseTextGenerator(ABC):
    """Abstract base class for text generation backends."""

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Return the model's reply. Raises ContentUnavailableError on failure."""
        ...


class HttpTextGenerator(BaseTextGenerator):
    """POST prompts to a completion endpoint that answers ``{"text": ...}``."""

    def __init__(
        self,
        url: str,
        api_key: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str) -> str:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, headers=headers, json={"prompt": prompt})
                response.raise_for_status()
                text = response.json().get("text", "")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("content_generation_failed", url=self.url, error=str(exc))
            raise ContentUnavailableError(str(exc)) from exc

        logger.info("content_generated", url=self.url, length=len(text))
        return text
