"""Tests for LLM client creation."""

from unittest.mock import MagicMock, patch

import pytest

from aiscript.core.config import Config
from aiscript.core.errors import ConfigurationError
from aiscript.core.provider_factory import create_client, detect_provider
from aiscript.core.retry import is_transient_error, retry_with_exponential_backoff


@pytest.fixture(autouse=True)
def no_keys(monkeypatch):
    for var in ("OPENROUTER_API_KEY", "QWEN_API_KEY", "GEMINI_API_KEY"):
        monkeypatch.delenv(var, raising=False)


class TestDetectProvider:
    """Test provider auto-detection."""

    def test_prefers_openrouter_key(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g")
        monkeypatch.setenv("OPENROUTER_API_KEY", "o")
        assert detect_provider(Config()) == "openrouter"

    def test_falls_back_to_ollama(self):
        with patch("aiscript.core.provider_factory.check_ollama_available", return_value=True):
            assert detect_provider(Config()) == "ollama"

    def test_nothing_available(self):
        with patch("aiscript.core.provider_factory.check_ollama_available", return_value=False):
            with pytest.raises(ConfigurationError):
                detect_provider(Config())


class TestCreateClient:
    """Test client construction from config."""

    @patch("aiscript.core.openai_client.OpenAI")
    def test_openrouter_client(self, mock_openai, monkeypatch):
        """Test an OpenRouter client picks up the env key and default model."""
        monkeypatch.setenv("OPENROUTER_API_KEY", '"sk-or-123"')
        config = Config()
        config.provider = "openrouter"

        client = create_client(config)

        assert client.provider == "openrouter"
        assert client.model == "anthropic/claude-3.5-sonnet"
        assert client.api_key == "sk-or-123"
        assert mock_openai.call_args.kwargs["base_url"] == "https://openrouter.ai/api/v1"

    @patch("aiscript.core.openai_client.OpenAI")
    def test_api_key_from_config(self, mock_openai):
        """Test an explicit key wins without any env var."""
        config = Config()
        config.provider = "qwen"
        config.api_key = "sk-q"
        config.model = "qwen-max"

        client = create_client(config)

        assert client.provider == "qwen"
        assert client.model == "qwen-max"

    def test_missing_key(self):
        """Test a keyed provider without a key is a ConfigurationError."""
        config = Config()
        config.provider = "gemini"
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            create_client(config)

    def test_unknown_provider(self):
        config = Config()
        config.provider = "nope"
        with pytest.raises(ConfigurationError):
            create_client(config)

    @patch("aiscript.core.openai_client.OpenAI")
    def test_generate_retries_then_succeeds(self, mock_openai, monkeypatch):
        """Test transient failures are retried."""
        monkeypatch.setenv("OPENROUTER_API_KEY", "sk")
        choice = MagicMock()
        choice.message.content = "export default function A() {}"
        completions = mock_openai.return_value.chat.completions
        completions.create.side_effect = [RuntimeError("timeout"), MagicMock(choices=[choice])]
        config = Config()
        config.provider = "openrouter"
        client = create_client(config)
        client.retry_delay = 0

        assert client.generate("prompt", max_retries=2) == "export default function A() {}"
        assert completions.create.call_count == 2

    @patch("aiscript.core.openai_client.OpenAI")
    def test_generate_gives_up(self, mock_openai, monkeypatch):
        """Test exhausting retries raises RuntimeError."""
        monkeypatch.setenv("QWEN_API_KEY", "sk")
        mock_openai.return_value.chat.completions.create.side_effect = RuntimeError("boom")
        config = Config()
        config.provider = "qwen"
        client = create_client(config)
        client.retry_delay = 0

        with pytest.raises(RuntimeError, match="after 2 attempts"):
            client.generate("prompt", max_retries=2)


class TestRetry:
    """Test the backoff decorator."""

    def test_retries_only_listed_exceptions(self):
        calls = []

        @retry_with_exponential_backoff(max_retries=3, initial_delay=0, retryable_exceptions=(ConnectionError,))
        def flaky():
            calls.append(1)
            raise ValueError("not retryable")

        with pytest.raises(ValueError):
            flaky()
        assert len(calls) == 1

    def test_reraises_last_error(self):
        @retry_with_exponential_backoff(max_retries=1, initial_delay=0, jitter=False)
        def always_fails():
            raise ConnectionError("down")

        with pytest.raises(ConnectionError, match="down"):
            always_fails()

    def test_rejected_request_not_retried(self):
        """Test an authentication failure is raised on the first attempt."""
        calls = []

        @retry_with_exponential_backoff(max_retries=3, initial_delay=0)
        def unauthorized():
            calls.append(1)
            raise RuntimeError("Error code: 401 - invalid api key")

        with pytest.raises(RuntimeError):
            unauthorized()
        assert len(calls) == 1

    def test_is_transient_error_uses_status_code(self):
        rate_limited = RuntimeError("slow down")
        rate_limited.status_code = 429
        bad_request = RuntimeError("slow down")
        bad_request.status_code = 400
        assert is_transient_error(rate_limited)
        assert not is_transient_error(bad_request)
        assert is_transient_error(TimeoutError("read timed out"))
