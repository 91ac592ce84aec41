"""Ordered catalogue of generation backends."""

from typing import Iterable, Iterator, Optional, Sequence, Tuple, TYPE_CHECKING

from ..models import ModelDefinition

if TYPE_CHECKING:
    from ..config import Config


PRIMARY_MODEL = ModelDefinition(
    id="Qwen/Qwen2.5-0.5B-Instruct-GGUF",
    display_name="Qwen 2.5 0.5B Instruct",
    description="Primary instruction-tuned model",
    is_uncensored=False,
    source_ref="https://huggingface.co/Qwen/Qwen2.5-0.5B-Instruct-GGUF",
    backend_library_id="litellm",
    model_route="ollama_chat/hf.co/Qwen/Qwen2.5-0.5B-Instruct-GGUF",
)

UNCENSORED_QWEN_MODEL = ModelDefinition(
    id="Triangle104/qwen2.5-.5b-uncensored-Q8_0-GGUF",
    display_name="Qwen 2.5 0.5B Uncensored (Q8)",
    description="Uncensored fallback model",
    is_uncensored=True,
    source_ref="https://huggingface.co/Triangle104/qwen2.5-.5b-uncensored-Q8_0-GGUF",
    quantization="q8_0",
    backend_library_id="litellm",
    model_route="ollama_chat/hf.co/Triangle104/qwen2.5-.5b-uncensored-Q8_0-GGUF:Q8_0",
)

UNCENSORED_LLAMA_MODEL = ModelDefinition(
    id="afrideva/llama2_xs_460M_uncensored-GGUF",
    display_name="Llama2 XS 460M Uncensored",
    description="Secondary uncensored fallback",
    is_uncensored=True,
    source_ref="https://huggingface.co/afrideva/llama2_xs_460M_uncensored-GGUF",
    quantization="q8_0",
    backend_library_id="litellm",
    model_route="ollama_chat/hf.co/afrideva/llama2_xs_460M_uncensored-GGUF:Q8_0",
)

# Order is fallback priority.
DEFAULT_MODELS: Tuple[ModelDefinition, ...] = (
    PRIMARY_MODEL,
    UNCENSORED_QWEN_MODEL,
    UNCENSORED_LLAMA_MODEL,
)


class BackendRegistry:
    """Read-only, ordered collection of ModelDefinitions.

    The first entry is the primary backend; the rest are fallbacks tried in
    sequence when an earlier backend refuses or fails.
    """

    def __init__(self, definitions: Iterable[ModelDefinition] = DEFAULT_MODELS):
        self._definitions: Tuple[ModelDefinition, ...] = tuple(definitions)
        if not self._definitions:
            raise ValueError("BackendRegistry requires at least one model definition")

        self._by_id = {}
        for definition in self._definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate backend id: {definition.id}")
            self._by_id[definition.id] = definition

    @property
    def primary(self) -> ModelDefinition:
        return self._definitions[0]

    def get(self, backend_id: str) -> ModelDefinition:
        """Look up a definition by id.

        Raises:
            KeyError: If no backend has this id
        """
        try:
            return self._by_id[backend_id]
        except KeyError:
            raise KeyError(f"Unknown backend: {backend_id}") from None

    def ids(self) -> list[str]:
        return [definition.id for definition in self._definitions]

    def select(self, backend_ids: Sequence[str]) -> "BackendRegistry":
        """Build a new registry holding only the given ids, in the given order."""
        return BackendRegistry(self.get(backend_id) for backend_id in backend_ids)

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self._by_id

    def __iter__(self) -> Iterator[ModelDefinition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"BackendRegistry({self.ids()!r})"


def default_registry(config: Optional["Config"] = None) -> BackendRegistry:
    """Build the registry from DEFAULT_MODELS, honouring config.backend_order."""
    registry = BackendRegistry(DEFAULT_MODELS)
    if config is not None and config.backend_order:
        return registry.select(config.backend_order)
    return registry
