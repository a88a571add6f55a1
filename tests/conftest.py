"""Shared fixtures: a throwaway front-end project and a scripted LLM client."""

import logging
import re
from pathlib import Path

import pytest

NAME_IN_PROMPT = re.compile(r"component named (\w+)")


class FakeLLMClient:
    """LLM client that answers with a stub component and can be told to fail."""

    provider = "fake"
    model = "fake-model"

    def __init__(self, fail_for=(), response=None):
        self.fail_for = set(fail_for)
        self.response = response
        self.calls: list[str] = []

    def generate(self, prompt: str, max_retries: int = 3, timeout: int = 120) -> str:
        name = NAME_IN_PROMPT.search(prompt).group(1)
        self.calls.append(name)
        if name in self.fail_for:
            raise RuntimeError(f"service unavailable for {name}")
        if self.response is not None:
            return self.response
        return f"export default function {name}() {{\n  return null;\n}}\n"


@pytest.fixture
def fake_llm():
    return FakeLLMClient()


@pytest.fixture
def project(tmp_path):
    """Project root with a src/ directory; returns a helper that writes files."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)

    def write(relative: str, content: str) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    write.root = root
    return write


@pytest.fixture
def llm_factory():
    """Build FakeLLMClient instances with custom behaviour."""
    return FakeLLMClient


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by configure_logging so they never outlive a CliRunner stream."""
    yield
    logger = logging.getLogger("aiscript")
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
