"""Generate a component's source text with an LLM."""

import re
from pathlib import Path
from typing import Optional

from aiscript.core.errors import GenerationError
from aiscript.core.llm_base import LLMClientBase
from aiscript.core.logging import get_logger
from aiscript.schemas.usage import Dialect

logger = get_logger("aiscript.generator")

TEMPLATE_PATH = Path(__file__).parent / "prompts" / "component.txt"

# A whole response wrapped in ``` fences, with an optional language tag
CODE_FENCE = re.compile(r"^\s*```[\w.+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a markdown code fence wrapping the whole response, if present."""
    match = CODE_FENCE.match(text)
    if match:
        return match.group(1)
    return text


class ComponentGenerator:
    """Turns (component name, usage context, dialect) into component source text."""

    def __init__(
        self,
        llm_client: LLMClientBase,
        template: Optional[str] = None,
        max_retries: int = 3,
        timeout: int = 120,
    ):
        """
        Initialize generator.

        Args:
            llm_client: LLM client for API calls
            template: Prompt template (default: packaged prompts/component.txt)
            max_retries: Attempts per component passed to the client
            timeout: Request timeout in seconds passed to the client
        """
        self.llm_client = llm_client
        self.prompt_template = template if template is not None else TEMPLATE_PATH.read_text(encoding="utf-8")
        self.max_retries = max_retries
        self.timeout = timeout

    def build_prompt(self, component_name: str, context_text: str, dialect: Dialect) -> str:
        """Format the prompt template for one component."""
        requirements = [
            "Be exported as default",
            "Include proper TypeScript types" if dialect.is_typescript else "Use JSDoc for type documentation",
            "Be fully functional based on how it appears to be used in the source file, "
            "and align exactly with the comments in the usage file",
            "Be COMPLETELY self contained apart from third party imports: no .css imports, "
            "and no imports of helper functions or other components",
        ]
        if dialect.is_vue:
            requirements.append("Include both template and script sections")
        requirements.append("ONLY have one default export, the component")

        return self.prompt_template.format(
            framework=dialect.framework.value,
            language=dialect.language.value,
            component_name=component_name,
            context=context_text,
            requirements="\n".join(f"{i}. {rule}" for i, rule in enumerate(requirements, start=1)),
        )

    def generate(self, component_name: str, context_text: str, dialect: Dialect) -> str:
        """
        Generate the source of one component.

        Args:
            component_name: Bare component name, e.g. "UserCard"
            context_text: Content of the file where the component is used
            dialect: Framework and language to write the component in

        Returns:
            Component source text, without markdown fences

        Raises:
            GenerationError: If the provider fails or returns an empty response
        """
        prompt = self.build_prompt(component_name, context_text, dialect)

        try:
            response = self.llm_client.generate(prompt, max_retries=self.max_retries, timeout=self.timeout)
        except Exception as e:
            raise GenerationError(component_name, str(e)) from e

        code = strip_code_fence(response or "")
        if not code.strip():
            raise GenerationError(component_name, "provider returned an empty response")

        logger.debug(
            f"Generated {component_name}",
            context={"component": component_name, "framework": dialect.framework.value, "chars": len(code)},
        )
        return code
