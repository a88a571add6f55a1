"""Interface shared by the LLM provider clients."""

from typing import Protocol


class LLMClientBase(Protocol):
    """
    Protocol/interface for LLM clients.

    All LLM provider implementations must implement these attributes and methods.
    """

    provider: str
    model: str

    def generate(self, prompt: str, max_retries: int = 3, timeout: int = 120) -> str:
        """
        Generate response from LLM.

        Args:
            prompt: Input prompt text
            max_retries: Maximum number of attempts
            timeout: Request timeout in seconds

        Returns:
            Generated text response

        Raises:
            RuntimeError: If generation fails after retries
        """
        ...
