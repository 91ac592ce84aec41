"""Generation backends, fallback management and refusal gating."""

from .backend import (
    BackendInitializationError,
    BackendReply,
    GenerationBackend,
    SamplingParams,
    create_backend,
)
from .manager import (
    EnginePhase,
    EngineState,
    ExhaustedBackendsError,
    GenerationCancelledError,
    GenerationError,
    GenerationManager,
)
from .refusal import RefusalGate
from .registry import DEFAULT_MODELS, BackendRegistry, default_registry

__all__ = [
    "BackendInitializationError",
    "BackendReply",
    "GenerationBackend",
    "SamplingParams",
    "create_backend",
    "EnginePhase",
    "EngineState",
    "ExhaustedBackendsError",
    "GenerationCancelledError",
    "GenerationError",
    "GenerationManager",
    "RefusalGate",
    "DEFAULT_MODELS",
    "BackendRegistry",
    "default_registry",
]
