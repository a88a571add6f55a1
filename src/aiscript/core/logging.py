"""Structured logging for aiscript."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pythonjsonlogger import jsonlogger


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _make_formatter(json_output: bool) -> logging.Formatter:
    if json_output:
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            timestamp=True,
        )
    return logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class StructuredLogger:
    """
    Structured logger with JSON output support and bound context.

    All aiscript loggers are children of the "aiscript" logger, which owns
    the handlers. Bound context and the context dict passed to each call are
    attached to the record, so the JSON formatter emits them as fields.
    """

    def __init__(self, name: str = "aiscript", context: Optional[dict[str, Any]] = None):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            context: Fields added to every record from this logger
        """
        self.name = name
        self.context = dict(context or {})
        self.logger = logging.getLogger(name)

    def bind(self, **context: Any) -> "StructuredLogger":
        """Return a logger for the same name with extra fields on every record."""
        return StructuredLogger(self.name, {**self.context, **context})

    def log(self, level: int, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        fields = {**self.context, **(context or {}), **kwargs}
        self.logger.log(level, message, extra=fields or None)

    def debug(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[dict[str, Any]] = None, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, context, **kwargs)

    def log_llm_call(
        self,
        provider: str,
        model: str,
        prompt: str,
        response: str,
        latency_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Log LLM API call with structured metadata.

        Args:
            provider: LLM provider name (e.g., "openrouter", "gemini")
            model: Model name
            prompt: Input prompt (truncated in logs)
            response: Response text (truncated in logs)
            latency_ms: Request latency in milliseconds
            **kwargs: Additional metadata
        """
        context = {
            "event_type": "llm_call",
            "provider": provider,
            "model": model,
            "prompt_length": len(prompt),
            "response_length": len(response),
            "response_preview": response[:200] + "..." if len(response) > 200 else response,
        }
        if latency_ms is not None:
            context["latency_ms"] = latency_ms
        context.update(kwargs)

        self.info(f"LLM call: {provider}/{model}", context=context)

    def log_phase(
        self,
        phase: str,
        status: str,
        duration_ms: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        """
        Log reconciliation phase execution.

        Args:
            phase: Phase name ("scan", "prune", "generate", "index")
            status: Status ("started", "completed", "failed")
            duration_ms: Phase duration in milliseconds
            **kwargs: Additional metadata
        """
        context = {
            "event_type": "phase",
            "phase": phase,
            "status": status,
        }
        if duration_ms is not None:
            context["duration_ms"] = duration_ms
        context.update(kwargs)

        if status == "failed":
            self.error(f"Phase {phase} failed", context=context)
        else:
            self.info(f"Phase {phase} {status}", context=context)


def get_logger(name: str = "aiscript") -> StructuredLogger:
    """Get a structured logger; names should live under the "aiscript" hierarchy."""
    return StructuredLogger(name)


def configure_logging(
    level: str = "WARNING",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> StructuredLogger:
    """
    Configure handlers on the root "aiscript" logger.

    Calling this again replaces the previous handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON-formatted logs
        log_file: Optional file path to write logs to

    Returns:
        The root StructuredLogger
    """
    log_level = getattr(logging, LogLevel[level.upper()].value)
    root = logging.getLogger("aiscript")
    root.setLevel(log_level)
    root.propagate = False
    root.handlers.clear()

    formatter = _make_formatter(json_output)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return StructuredLogger("aiscript")
