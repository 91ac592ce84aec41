"""Abstract generation backend interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING
from pydantic import BaseModel

from ..models import ModelDefinition

if TYPE_CHECKING:
    from ..config import Config


class BackendReply(BaseModel):
    """Raw reply from a generation backend."""

    content: str
    model: str
    tokens_used: Optional[int] = None


@dataclass(frozen=True)
class SamplingParams:
    """Sampling settings passed to every generation call.

    timeout, when set, is the time left before the caller's deadline. Backends
    use it to cap their own request timeout.
    """

    temperature: float = 0.7
    max_tokens: int = 8192
    timeout: Optional[float] = None


class BackendInitializationError(RuntimeError):
    """Raised when a backend cannot be brought into a ready state."""

    def __init__(self, backend_id: str, message: str):
        super().__init__(f"Failed to initialize backend '{backend_id}': {message}")
        self.backend_id = backend_id


class GenerationBackend(ABC):
    """A swappable generation substrate keyed by a ModelDefinition.

    Construction must be cheap. Expensive work such as loading weights or
    building clients belongs in initialize().
    """

    def __init__(self, definition: ModelDefinition):
        self.definition = definition

    @property
    def backend_id(self) -> str:
        return self.definition.id

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the backend for generation."""

    @abstractmethod
    def generate(self, messages: list[dict], params: SamplingParams) -> BackendReply:
        """Generate a reply for the given chat messages.

        Args:
            messages: Chat messages as role/content dicts
            params: Sampling parameters

        Returns:
            BackendReply with the generated text
        """

    def close(self) -> None:
        """Release resources held by the backend."""


def build_messages(prompt: str, system: Optional[str] = None) -> list[dict]:
    """Build role/content chat messages."""
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


def coerce_content(content: Any) -> str:
    """Ensure chat model responses are flattened into plain text."""
    if content is None:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        parts: list[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
                continue

            text = getattr(block, "text", None)
            if text:
                parts.append(text)
                continue

            if isinstance(block, dict):
                text = block.get("text")
                if text:
                    parts.append(text)
                continue
        return "".join(parts).strip()

    return str(content)


def create_backend(definition: ModelDefinition, config: "Config") -> GenerationBackend:
    """Create an uninitialized backend for a catalogue entry.

    Args:
        definition: Catalogue entry to build a backend for
        config: Application configuration

    Returns:
        GenerationBackend matching definition.backend_library_id

    Raises:
        ValueError: If the backend library is not supported
    """
    library = (definition.backend_library_id or "litellm").lower()

    if library == "litellm":
        from .litellm_backend import LiteLLMBackend

        return LiteLLMBackend(
            definition,
            api_key=config.api_key,
            base_url=config.api_base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
            warmup=config.warmup_on_initialize,
        )
    elif library == "langchain":
        from .langchain_backend import LangChainBackend

        return LangChainBackend(
            definition,
            api_key=config.api_key,
            base_url=config.api_base_url,
            max_retries=config.max_retries,
            timeout=config.timeout,
            temperature=config.temperature,
            max_tokens=config.max_output_tokens,
        )
    else:
        raise ValueError(
            f"Unknown backend library '{definition.backend_library_id}' for {definition.id}. "
            "Use 'litellm' or 'langchain'."
        )
