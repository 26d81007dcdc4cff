"""
Text-generation backend built on the OpenAI chat completions API.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol

import httpx
import openai
from openai import AsyncOpenAI

from .config import PipelineConfig
from .errors import backend_unavailable
from .models import HealthStatus

logger = logging.getLogger("transcreator")

SYSTEM_PROMPT = (
    "You are part of a professional subtitle localisation team. "
    "Always answer with a single valid JSON object and nothing else."
)

# Failures worth another attempt; everything else is a request problem.
TRANSIENT_ERRORS = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


class TextGenerator(Protocol):
    async def generate(self, prompt: str, model: str) -> str: ...


def backoff_delay(attempt: int, backoff_ms: int) -> float:
    """Seconds to wait after failed attempt number `attempt` (1-based)."""
    return backoff_ms * (2 ** (attempt - 1)) / 1000.0


class OpenAITextGenerator:
    """Calls chat completions and retries transient transport failures."""

    def __init__(
        self,
        config: PipelineConfig,
        client: Optional[Any] = None,
        temperature: float = 0.5,
        expect_json: bool = True,
    ):
        self.config = config
        self.temperature = temperature
        self.expect_json = expect_json
        if client is None:
            if not config.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY is not set. Put it in .env or environment.")
            client = AsyncOpenAI(
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
                timeout=httpx.Timeout(config.request_timeout, connect=10.0),
                max_retries=0,
            )
        self._client = client

    async def _complete(self, prompt: str, model: str) -> str:
        kwargs: dict[str, Any] = {}
        if self.expect_json:
            kwargs["response_format"] = {"type": "json_object"}
        response = await self._client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            **kwargs,
        )
        return response.choices[0].message.content or ""

    async def generate(self, prompt: str, model: str) -> str:
        max_retries = self.config.max_retries
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._complete(prompt, model)
            except TRANSIENT_ERRORS as e:
                if attempt >= max_retries:
                    logger.error(f"LLM call to {model} failed on final attempt {attempt}: {e}")
                    raise backend_unavailable(
                        f"LLM call failed after {max_retries} attempts.",
                        model=model,
                        original_error=str(e),
                    ) from e
                delay = backoff_delay(attempt, self.config.backoff_ms)
                logger.warning(
                    f"LLM call to {model} failed (attempt {attempt}/{max_retries}): {e}. "
                    f"Retrying in {delay:.2f}s..."
                )
                await asyncio.sleep(delay)
            except openai.APIError as e:
                logger.error(f"LLM call to {model} rejected: {e}")
                raise backend_unavailable(
                    "LLM call rejected by the backend.", model=model, original_error=str(e)
                ) from e

    async def status(self, model: Optional[str] = None) -> HealthStatus:
        """Check that the backend is reachable and the model exists."""
        model = model or self.config.translation_model
        try:
            await self._client.models.retrieve(model)
        except openai.APIError as e:
            return HealthStatus(name="OpenAI", is_healthy=False, message=str(e))
        return HealthStatus(name="OpenAI", is_healthy=True, message=f"Model {model} available.")
