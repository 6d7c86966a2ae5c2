"""Gemini adapter for recipe text generation.

This module provides the GeminiRecipeClient class that wraps the Google Gen AI
SDK behind a two-call contract:
- is_available(): credentials present AND a lightweight model listing succeeds
- complete(prompt): one bounded generate_content call, no retries

Every SDK, transport or timeout failure is converted to UpstreamError so raw
SDK exceptions never reach the pipeline. Task cancellation is not converted:
asyncio.CancelledError propagates and the in-flight request is abandoned.
"""

import asyncio
from typing import Optional

from google import genai
from google.genai import types

from pantry_chef.generation.errors import UpstreamError
from pantry_chef.prompts.prompts import SYSTEM_INSTRUCTIONS
from pantry_chef.utils.config import Config, config
from pantry_chef.utils.logger import logger


class GeminiRecipeClient:
    """Generate raw recipe text with Gemini.

    Each instance owns its SDK client (created lazily on first use), so tests
    and callers can build isolated instances or inject a fake client.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.7,
        max_output_tokens: int = 4000,
        timeout: float = 60.0,
        probe_timeout: float = 10.0,
        client: Optional[genai.Client] = None,
    ) -> None:
        """Initialize GeminiRecipeClient with configuration.

        Args:
            api_key: Gemini API key. Empty means "not configured" (never available).
            model: Gemini model id used for generation.
            temperature: Sampling temperature (moderate randomness).
            max_output_tokens: Token ceiling, large enough for 3-5 full recipes.
            timeout: Default timeout in seconds for complete().
            probe_timeout: Timeout in seconds for the availability probe.
            client: Optional pre-built genai.Client (used by tests).
        """
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self._client = client

    @classmethod
    def from_config(cls, settings: Config = config) -> "GeminiRecipeClient":
        """Build a client from application configuration."""
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            temperature=settings.TEMPERATURE,
            max_output_tokens=settings.MAX_OUTPUT_TOKENS,
            timeout=settings.REQUEST_TIMEOUT_SECONDS,
            probe_timeout=settings.PROBE_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def is_available(self) -> bool:
        """Check credentials and probe the API by listing one page of models.

        A configured key whose probe fails is treated exactly like a missing key.

        Returns:
            bool: True only if the probe succeeded.
        """
        if not self.is_configured:
            logger.info("GEMINI_API_KEY not configured - generator unavailable")
            return False

        try:
            client = self._get_client()
            await asyncio.wait_for(
                client.aio.models.list(config={"page_size": 1}),
                timeout=self.probe_timeout,
            )
            logger.debug("Gemini availability probe succeeded")
            return True
        except Exception as e:
            logger.warning(f"Gemini availability probe failed: {type(e).__name__}: {e}")
            return False

    async def complete(self, prompt: str, timeout: Optional[float] = None) -> str:
        """Send one generation request and return the raw response text.

        Args:
            prompt: Rendered user prompt.
            timeout: Seconds to wait for the reply. Defaults to the instance timeout.

        Returns:
            str: Raw model text (may still contain fences; see normalizer).

        Raises:
            UpstreamError: On any SDK/transport error, timeout, or empty reply.
        """
        effective_timeout = self.timeout if timeout is None else timeout

        try:
            client = self._get_client()
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=types.GenerateContentConfig(
                        system_instruction=SYSTEM_INSTRUCTIONS,
                        temperature=self.temperature,
                        max_output_tokens=self.max_output_tokens,
                        response_mime_type="application/json",
                    ),
                ),
                timeout=effective_timeout,
            )
            text = response.text
        except asyncio.TimeoutError as e:
            raise UpstreamError(f"Gemini request timed out after {effective_timeout}s") from e
        except Exception as e:
            raise UpstreamError(f"Gemini request failed: {type(e).__name__}: {e}") from e

        if not text:
            raise UpstreamError("No response text from Gemini")

        logger.debug(f"Raw response preview: {text[:100]}")
        return text
