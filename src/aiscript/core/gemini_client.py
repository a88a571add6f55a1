"""Google AI Gemini LLM client."""

import os
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional

from google import genai

from aiscript.core.errors import ConfigurationError
from aiscript.core.logging import get_logger
from aiscript.core.retry import retry_with_exponential_backoff

logger = get_logger("aiscript.llm.gemini")

# Google AI Studio URL for getting API keys
GOOGLE_AI_STUDIO_URL = "https://aistudio.google.com/app/apikey"


class GeminiClient:
    """Client for interacting with Google AI Gemini API."""

    provider = "gemini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 4000,
        retry_delay: float = 1.0,
    ):
        """
        Initialize Gemini client.

        Args:
            api_key: Gemini API key (defaults to GEMINI_API_KEY env var)
            model: Model name to use (default: gemini-2.5-flash)
            temperature: Temperature for generation
            max_tokens: Maximum output tokens
            retry_delay: Initial backoff delay between attempts in seconds

        Raises:
            ConfigurationError: If no API key is available
        """
        api_key = (api_key or os.getenv("GEMINI_API_KEY") or "").strip().strip('"').strip("'")
        if not api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY environment variable is required for Gemini provider. "
                f"Get your free API key from: {GOOGLE_AI_STUDIO_URL}"
            )

        self.api_key = api_key
        self.model = model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_delay = retry_delay
        self.client = genai.Client(api_key=self.api_key)

    def _extract_response_text(self, response) -> str:
        if not response:
            return ""
        if getattr(response, "text", None):
            return str(response.text).strip()
        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                text = getattr(part, "text", None)
                if text and text.strip():
                    return text.strip()
        return ""

    def _complete(self, prompt: str, timeout: int) -> str:
        # The SDK has no per-call timeout, so run it on a worker thread
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(
            self.client.models.generate_content,
            model=self.model,
            contents=prompt,
            config={"temperature": self.temperature, "max_output_tokens": self.max_tokens},
        )
        try:
            response = future.result(timeout=timeout)
        except FutureTimeoutError:
            raise TimeoutError(f"Gemini API call timed out after {timeout} seconds")
        finally:
            executor.shutdown(wait=False)

        result = self._extract_response_text(response)
        if not result:
            raise RuntimeError(f"Gemini API returned an empty response (model: {self.model})")
        return result

    def generate(
        self,
        prompt: str,
        max_retries: int = 3,
        timeout: int = 120,
    ) -> str:
        """
        Generate response from Gemini API.

        Args:
            prompt: Input prompt
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds (enforced with a worker thread)

        Returns:
            Generated text response

        Raises:
            RuntimeError: If API call fails after retries
        """
        call = retry_with_exponential_backoff(
            max_retries=max(max_retries - 1, 0),
            initial_delay=self.retry_delay,
            logger_instance=logger,
        )(self._complete)

        start_time = time.time()
        try:
            result = call(prompt, timeout)
        except Exception as e:
            raise RuntimeError(
                f"Failed to generate response from Gemini after {max_retries} attempts: {e}"
            ) from e

        logger.log_llm_call(
            provider=self.provider,
            model=self.model,
            prompt=prompt,
            response=result,
            latency_ms=(time.time() - start_time) * 1000,
        )
        return result
