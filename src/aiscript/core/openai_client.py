"""LLM client for OpenAI-compatible chat APIs (OpenRouter, Qwen DashScope)."""

import os
import time
from typing import Optional

from openai import OpenAI

from aiscript.core.errors import ConfigurationError
from aiscript.core.logging import get_logger
from aiscript.core.retry import retry_with_exponential_backoff

logger = get_logger("aiscript.llm.openai")

OPENROUTER_ENDPOINT = "https://openrouter.ai/api/v1"
DASHSCOPE_ENDPOINT = "https://dashscope.aliyuncs.com/compatible-mode/v1"

# provider -> (api key env var, base url env var, default endpoint, default model)
PROVIDER_SETTINGS = {
    "openrouter": ("OPENROUTER_API_KEY", "OPENROUTER_API_BASE", OPENROUTER_ENDPOINT, "anthropic/claude-3.5-sonnet"),
    "qwen": ("QWEN_API_KEY", "QWEN_API_BASE", DASHSCOPE_ENDPOINT, "qwen-plus"),
}


class OpenAICompatibleClient:
    """Client for chat-completion APIs that speak the OpenAI protocol."""

    def __init__(
        self,
        provider: str = "openrouter",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.0,
        max_tokens: int = 4000,
        retry_delay: float = 1.0,
    ):
        """
        Initialize client.

        Args:
            provider: "openrouter" or "qwen"
            api_key: API key (defaults to the provider's env var)
            base_url: API base URL (defaults to the provider's endpoint)
            model: Model name (defaults to the provider's default model)
            temperature: Temperature for generation
            max_tokens: Maximum tokens in a completion
            retry_delay: Initial backoff delay between attempts in seconds

        Raises:
            ConfigurationError: If the provider is unknown or no API key is available
        """
        if provider not in PROVIDER_SETTINGS:
            raise ConfigurationError(f"Unknown OpenAI-compatible provider: {provider}")
        key_env, base_env, default_endpoint, default_model = PROVIDER_SETTINGS[provider]

        # Strip quotes, a common mistake when exporting env vars
        api_key = (api_key or os.getenv(key_env) or "").strip().strip('"').strip("'")
        if not api_key:
            raise ConfigurationError(
                f"{key_env} environment variable is required for the {provider} provider. "
                "Set it or pass --api-key."
            )

        self.provider = provider
        self.api_key = api_key
        self.base_url = base_url or os.getenv(base_env, default_endpoint)
        self.model = model or default_model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.retry_delay = retry_delay

        default_headers = None
        if provider == "openrouter":
            default_headers = {
                "HTTP-Referer": os.getenv("OPENROUTER_HTTP_REFERER", "https://github.com/aiscript"),
                "X-Title": os.getenv("OPENROUTER_X_TITLE", "aiscript"),
            }
        self.client = OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            default_headers=default_headers,
        )

    def _complete(self, prompt: str, timeout: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            timeout=timeout,
        )
        if response.choices:
            return response.choices[0].message.content or ""
        return ""

    def generate(
        self,
        prompt: str,
        max_retries: int = 3,
        timeout: int = 120,
    ) -> str:
        """
        Generate response from the chat completions endpoint.

        Args:
            prompt: Input prompt
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds

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
            response = call(prompt, timeout)
        except Exception as e:
            error_msg = str(e)
            if "401" in error_msg or "unauthorized" in error_msg.lower():
                raise RuntimeError(
                    f"{self.provider} authentication failed. Check your API key. Error: {error_msg}"
                ) from e
            raise RuntimeError(
                f"Failed to generate response from {self.provider} after {max_retries} attempts: {error_msg}"
            ) from e

        logger.log_llm_call(
            provider=self.provider,
            model=self.model,
            prompt=prompt,
            response=response,
            latency_ms=(time.time() - start_time) * 1000,
        )
        return response
