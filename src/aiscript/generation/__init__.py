"""Component generation through an LLM provider."""

from aiscript.generation.generator import ComponentGenerator

__all__ = ["ComponentGenerator"]
