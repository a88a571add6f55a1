"""Ollama LLM client for local generation."""

import os
import time
from typing import Optional

from ollama import Client

from aiscript.core.logging import get_logger
from aiscript.core.retry import retry_with_exponential_backoff

logger = get_logger("aiscript.llm.ollama")


def _model_missing(error: BaseException) -> bool:
    message = str(error).lower()
    return "not found" in message or "404" in message


class OllamaClient:
    """
    Client for interacting with a local Ollama server.

    Implements LLMClientBase protocol.
    """

    provider = "ollama"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 4000,
        retry_delay: float = 1.0,
    ):
        """
        Initialize Ollama client.

        Args:
            base_url: Base URL for Ollama API (defaults to http://localhost:11434)
            model: Model name to use (default: llama3.1)
            temperature: Temperature for generation
            max_tokens: Maximum tokens to predict
            retry_delay: Initial backoff delay between attempts in seconds
        """
        self.base_url = base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
        self.model = model or os.getenv("OLLAMA_MODEL", "llama3.1")
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_delay = retry_delay
        self.client = Client(host=self.base_url)

    def _complete(self, prompt: str) -> str:
        response = self.client.generate(
            model=self.model,
            prompt=prompt,
            options={"temperature": self.temperature, "num_predict": self.max_tokens},
            stream=False,
        )
        return response.get("response", "")

    def generate(
        self,
        prompt: str,
        max_retries: int = 3,
        timeout: int = 120,
    ) -> str:
        """
        Generate response from Ollama.

        Args:
            prompt: Input prompt
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds (enforced by the server)

        Returns:
            Generated text response

        Raises:
            RuntimeError: If the model is missing or the call fails after retries
        """
        call = retry_with_exponential_backoff(
            max_retries=max(max_retries - 1, 0),
            initial_delay=self.retry_delay,
            should_retry=lambda e: not _model_missing(e),
            logger_instance=logger,
        )(self._complete)

        start_time = time.time()
        try:
            text = call(prompt)
        except Exception as e:
            if _model_missing(e):
                raise RuntimeError(
                    f"Model '{self.model}' not found. Pull it with 'ollama pull {self.model}'"
                ) from e
            raise RuntimeError(f"Failed to generate response after {max_retries} attempts: {e}") from e

        logger.log_llm_call(
            provider=self.provider,
            model=self.model,
            prompt=prompt,
            response=text,
            latency_ms=(time.time() - start_time) * 1000,
        )
        return text
