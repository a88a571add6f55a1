"""Factory for creating LLM provider clients with auto-detection."""

import os
from typing import Optional

import requests

from aiscript.core.config import Config
from aiscript.core.errors import ConfigurationError
from aiscript.core.gemini_client import GeminiClient
from aiscript.core.llm_base import LLMClientBase
from aiscript.core.llm_client import OllamaClient
from aiscript.core.openai_client import OpenAICompatibleClient

SUPPORTED_PROVIDERS = ["auto", "openrouter", "qwen", "gemini", "ollama"]

# Auto-detection order for providers that need a key
API_KEY_ENV_VARS = {
    "openrouter": "OPENROUTER_API_KEY",
    "qwen": "QWEN_API_KEY",
    "gemini": "GEMINI_API_KEY",
}


def check_ollama_available(base_url: Optional[str] = None) -> bool:
    """
    Check if Ollama is available and running.

    Args:
        base_url: Ollama base URL to check

    Returns:
        True if Ollama is available, False otherwise
    """
    base_url = base_url or os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    try:
        response = requests.get(f"{base_url}/api/tags", timeout=2)
        return response.status_code == 200
    except requests.RequestException:
        return False


def detect_provider(config: Config) -> str:
    """
    Pick a provider for "auto": the first one with a key set, else a running Ollama.

    Raises:
        ConfigurationError: If no provider is available
    """
    for provider, env_var in API_KEY_ENV_VARS.items():
        if os.getenv(env_var):
            return provider
    if check_ollama_available(config.base_url):
        return "ollama"
    raise ConfigurationError(
        "No LLM provider available. Set OPENROUTER_API_KEY, QWEN_API_KEY or "
        "GEMINI_API_KEY, or start an Ollama server."
    )


def create_client(config: Config) -> LLMClientBase:
    """
    Create an LLM client for the configured provider.

    Args:
        config: Loaded configuration; provider, model, api_key, base_url,
            temperature and max_tokens are used

    Returns:
        LLM client instance

    Raises:
        ConfigurationError: If the provider is invalid, unavailable, or missing its API key
    """
    provider = (config.provider or "auto").lower()
    if provider == "auto":
        provider = detect_provider(config)

    if provider in ("openrouter", "qwen"):
        return OpenAICompatibleClient(
            provider=provider,
            api_key=config.api_key,
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    elif provider == "gemini":
        return GeminiClient(
            api_key=config.api_key,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    elif provider == "ollama":
        if not check_ollama_available(config.base_url):
            raise ConfigurationError(
                f"Ollama is not available at {config.base_url or os.getenv('OLLAMA_BASE_URL', 'http://localhost:11434')}. "
                "Please ensure Ollama is running."
            )
        return OllamaClient(
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
        )

    raise ConfigurationError(
        f"Unknown provider: {provider}. Supported providers: {', '.join(SUPPORTED_PROVIDERS)}"
    )
