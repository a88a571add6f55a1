"""Exception types raised by aiscript."""


class AiscriptError(Exception):
    """Base class for aiscript errors."""

    pass


class ConfigurationError(AiscriptError):
    """Raised when required configuration (e.g. a provider API key) is missing or invalid."""

    pass


class GenerationError(AiscriptError):
    """Raised when the LLM provider fails or returns an unusable component."""

    def __init__(self, component_name: str, message: str):
        self.component_name = component_name
        self.reason = message
        super().__init__(f"{component_name}: {message}")
