"""Backend lifecycle and fallback generation."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..config import Config
from ..models import GenerationAttemptResult, ModelDefinition
from ..observability import trace_function
from .backend import (
    BackendInitializationError,
    GenerationBackend,
    SamplingParams,
    build_messages,
    create_backend,
)
from .refusal import RefusalGate
from .registry import BackendRegistry

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

BackendFactory = Callable[[ModelDefinition, Config], GenerationBackend]


class GenerationError(RuntimeError):
    """Base class for fatal generation outcomes."""


class ExhaustedBackendsError(GenerationError):
    """Raised when every backend failed or refused to answer."""

    def __init__(self, attempted: list[str]):
        super().__init__("All backends failed or refused to answer.")
        self.attempted = attempted


class GenerationCancelledError(GenerationError):
    """Raised when a generate call is cancelled or runs past its deadline."""


class EnginePhase(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class EngineState:
    """Which backend is resident, guarded by a single-writer lock."""

    active_backend_id: Optional[str] = None
    phase: EnginePhase = EnginePhase.UNINITIALIZED
    backend: Optional[GenerationBackend] = None
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def initialized(self) -> bool:
        return self.phase is EnginePhase.READY


class _Cancellation:
    """Combines an optional cancel event with an optional deadline."""

    def __init__(self, cancel_event: Optional[threading.Event], timeout: Optional[float]):
        self.cancel_event = cancel_event
        self.deadline = time.monotonic() + timeout if timeout is not None else None

    def check(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise GenerationCancelledError("Generation was cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise GenerationCancelledError("Generation deadline exceeded")

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, or None without one."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())


class GenerationManager:
    """Owns backend lifecycle and the ordered fallback-with-gate protocol.

    Only one backend is resident at a time. generate() walks the registry in
    order, lazily switching backends, and returns the first response that is
    neither a refusal nor low quality.
    """

    def __init__(
        self,
        registry: BackendRegistry,
        config: Optional[Config] = None,
        *,
        state: Optional[EngineState] = None,
        refusal_gate: Optional[RefusalGate] = None,
        backend_factory: BackendFactory = create_backend,
    ):
        self.registry = registry
        self.config = config or Config()
        self.state = state if state is not None else EngineState()
        self.refusal_gate = refusal_gate or RefusalGate()
        self.backend_factory = backend_factory

    @property
    def active_backend_id(self) -> Optional[str]:
        return self.state.active_backend_id

    @property
    def is_initialized(self) -> bool:
        return self.state.initialized

    def initialize(self, backend_id: Optional[str] = None) -> None:
        """Make the given backend (default: primary) the active one.

        Calling this for the backend that is already ready is a no-op.

        Raises:
            KeyError: If backend_id is not in the registry
            BackendInitializationError: If the backend fails to initialize
        """
        definition = self.registry.get(backend_id) if backend_id else self.registry.primary

        with self.state.lock:
            if self.state.initialized and self.state.active_backend_id == definition.id:
                return

            self._release_active()

            logger.info("Initializing backend: %s", definition.id)
            self.state.phase = EnginePhase.INITIALIZING
            self.state.active_backend_id = definition.id
            try:
                backend = self.backend_factory(definition, self.config)
                backend.initialize()
            except Exception as e:
                logger.error("Failed to load backend %s: %s", definition.id, e)
                self.state.phase = EnginePhase.UNINITIALIZED
                self.state.active_backend_id = None
                if isinstance(e, BackendInitializationError):
                    raise
                raise BackendInitializationError(definition.id, str(e)) from e

            self.state.backend = backend
            self.state.phase = EnginePhase.READY

    @trace_function(name="generate_with_fallback")
    def generate(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> GenerationAttemptResult:
        """Generate a response, falling back through the registry.

        Args:
            prompt: User prompt
            system_prompt: Optional system prompt
            cancel_event: Set to abort the whole call
            timeout: Seconds after which the whole call is aborted

        The deadline is checked between steps and the remaining time is passed
        to each backend call as params.timeout. A backend that cannot honour
        it (LangChain clients fix their timeout at init) may overrun; the
        call is then aborted as soon as that backend returns.

        Returns:
            GenerationAttemptResult for the first acceptable response

        Raises:
            ExhaustedBackendsError: If every backend failed or refused
            GenerationCancelledError: If cancelled or past the deadline
        """
        cancellation = _Cancellation(cancel_event, timeout)
        messages = build_messages(prompt, system_prompt or DEFAULT_SYSTEM_PROMPT)
        attempted: list[str] = []

        with self.state.lock:
            for definition in self.registry:
                cancellation.check()
                attempted.append(definition.id)

                if not (
                    self.state.initialized and self.state.active_backend_id == definition.id
                ):
                    try:
                        self.initialize(definition.id)
                    except Exception as e:
                        logger.warning(
                            "Backend %s unavailable, trying next: %s", definition.id, e
                        )
                        continue

                params = SamplingParams(
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_output_tokens,
                    timeout=cancellation.remaining(),
                )
                started = time.monotonic()
                try:
                    reply = self.state.backend.generate(messages, params)
                except Exception as e:
                    cancellation.check()
                    logger.warning("Error with backend %s: %s", definition.id, e)
                    continue
                logger.debug(
                    "Backend %s replied in %.2fs", definition.id, time.monotonic() - started
                )
                cancellation.check()

                content = reply.content
                if self.refusal_gate.is_refusal(content):
                    logger.warning("Backend %s refused. Trying fallback...", definition.id)
                    continue
                if not self.refusal_gate.is_quality_response(content):
                    logger.warning(
                        "Backend %s produced a low-quality response. Trying fallback...",
                        definition.id,
                    )
                    continue

                return GenerationAttemptResult(
                    content=content, backend_used=definition.id, is_refusal=False
                )

        raise ExhaustedBackendsError(attempted)

    def close(self) -> None:
        """Release the active backend."""
        with self.state.lock:
            self._release_active()

    def _release_active(self) -> None:
        """Tear down the resident backend. Caller must hold state.lock."""
        backend = self.state.backend
        if backend is not None:
            logger.info("Unloading backend: %s", self.state.active_backend_id)
            try:
                backend.close()
            except Exception as e:
                logger.warning("Error while closing backend %s: %s", backend.backend_id, e)
        self.state.backend = None
        self.state.active_backend_id = None
        self.state.phase = EnginePhase.UNINITIALIZED
