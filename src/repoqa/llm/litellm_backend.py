"""LiteLLM backend for local and hosted chat models."""

import logging
from typing import Optional
import litellm

from ..models import ModelDefinition
from .backend import (
    BackendInitializationError,
    BackendReply,
    GenerationBackend,
    SamplingParams,
)

logger = logging.getLogger(__name__)


class LiteLLMBackend(GenerationBackend):
    """Generation backend using LiteLLM for multi-provider support."""

    def __init__(
        self,
        definition: ModelDefinition,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_retries: int = 3,
        timeout: int = 120,
        warmup: bool = True,
    ):
        super().__init__(definition)
        self.model_name = definition.route
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self.warmup = warmup
        self.provider: Optional[str] = None

    def initialize(self) -> None:
        """Resolve the provider and optionally force the model to load.

        A one-token warm-up completion makes a local Ollama server load the
        weights, so the first real question does not pay for it.

        Raises:
            BackendInitializationError: If the route is unknown or the warm-up fails
        """
        try:
            _, provider, _, _ = litellm.get_llm_provider(self.model_name)
        except Exception as e:
            raise BackendInitializationError(self.backend_id, str(e)) from e
        self.provider = provider

        if not self.warmup:
            return

        logger.info("Warming up %s via %s", self.model_name, provider)
        try:
            litellm.completion(
                **self._completion_kwargs(
                    [{"role": "user", "content": "ping"}],
                    SamplingParams(temperature=0.0, max_tokens=1),
                )
            )
        except Exception as e:
            self.provider = None
            raise BackendInitializationError(self.backend_id, str(e)) from e

    def generate(self, messages: list[dict], params: SamplingParams) -> BackendReply:
        """Generate a reply using LiteLLM.

        Raises:
            RuntimeError: If generation fails with clear error message
        """
        try:
            response = litellm.completion(**self._completion_kwargs(messages, params))

            return BackendReply(
                content=response.choices[0].message.content or "",
                model=self.model_name,
                tokens_used=response.usage.total_tokens if hasattr(response, "usage") else None,
            )
        except litellm.AuthenticationError as e:
            provider = self._detect_provider(self.model_name)
            raise RuntimeError(
                f"{provider} authentication failed. Set LLM_API_KEY in your .env file"
            ) from e
        except litellm.RateLimitError as e:
            raise RuntimeError(f"Rate limit exceeded for {self.model_name}") from e
        except Exception as e:
            raise RuntimeError(f"LLM generation failed: {str(e)}") from e

    def close(self) -> None:
        self.provider = None

    def _completion_kwargs(self, messages: list[dict], params: SamplingParams) -> dict:
        timeout = self.timeout
        max_retries = self.max_retries
        if params.timeout is not None:
            # One request capped at the caller's remaining time; the fallback
            # chain takes the place of retries.
            timeout = min(timeout, params.timeout)
            max_retries = 0

        kwargs = {
            "model": self.model_name,
            "messages": messages,
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
            "max_retries": max_retries,
            "timeout": timeout,
            "stream": False,
        }

        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.base_url:
            kwargs["api_base"] = self.base_url

        return kwargs

    def _detect_provider(self, model_name: str) -> str:
        """Detect provider from model name for error messages."""
        if model_name.startswith("gpt-") or model_name.startswith("o1"):
            return "OpenAI"
        elif model_name.startswith("claude"):
            return "Anthropic"
        elif model_name.startswith("gemini"):
            return "Google"
        elif model_name.startswith("ollama"):
            return "Ollama"
        else:
            return "LLM Provider"
