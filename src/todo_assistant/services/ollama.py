"""Thin async client for a local Ollama server."""

import logging

import httpx
from pydantic import ValidationError

from ..exceptions import AssistantUnavailableError
from ..models.chat import AssistantConfig, OllamaGenerateResponse

logger = logging.getLogger(__name__)

# Liveness probe only; should answer quickly even while a model is loading
PROBE_TIMEOUT = 5.0


class OllamaClient:
    """Sends prompts to ``/api/generate`` and probes ``/api/tags``."""

    def __init__(
        self,
        config: AssistantConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._transport = transport

    def _client(self, timeout: float | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.root_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def generate(self, prompt: str) -> str:
        """Run one non-streaming completion and return the reply text.

        Raises:
            AssistantUnavailableError: on any transport or HTTP error.
        """
        payload = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": self.config.max_tokens,
            },
        }

        try:
            async with self._client(self.config.timeout) as client:
                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()
            body = OllamaGenerateResponse.model_validate(response.json())
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, ValidationError) as e:
            logger.error(f"Error calling Ollama ({self.config.model}): {e}")
            raise AssistantUnavailableError("Failed to generate AI response") from e

        logger.debug(f"Ollama replied with {len(body.response)} chars (eval_count={body.eval_count})")
        return body.response

    async def check_connection(self) -> bool:
        """True if the server answers the model listing route with a 2xx."""
        try:
            async with self._client(PROBE_TIMEOUT) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Ollama not reachable at {self.config.root_url}: {e}")
            return False
        return True
