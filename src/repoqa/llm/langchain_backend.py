"""LangChain chat model backend."""

import logging
from typing import Optional

from langchain.chat_models import init_chat_model
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from ..models import ModelDefinition
from .backend import (
    BackendInitializationError,
    BackendReply,
    GenerationBackend,
    SamplingParams,
    coerce_content,
)

logger = logging.getLogger(__name__)


class LangChainBackend(GenerationBackend):
    """Generation backend built on LangChain's init_chat_model.

    Sampling settings are bound when the chat model is built, so they come
    from configuration rather than from each call.
    """

    def __init__(
        self,
        definition: ModelDefinition,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_retries: int = 3,
        timeout: int = 120,
        temperature: float = 0.7,
        max_tokens: int = 8192,
    ):
        super().__init__(definition)
        self.model_name = definition.route
        self.api_key = api_key
        self.base_url = base_url
        self.max_retries = max_retries
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.client: Optional[BaseChatModel] = None

    def initialize(self) -> None:
        model_kwargs: dict = {
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "max_retries": self.max_retries,
            "timeout": self.timeout,
        }
        if self.base_url:
            model_kwargs["base_url"] = self.base_url
        if self.api_key:
            model_kwargs["api_key"] = self.api_key

        logger.debug("Building chat model %s", self.model_name)
        try:
            self.client = init_chat_model(self.model_name, **model_kwargs)
        except Exception as e:
            raise BackendInitializationError(self.backend_id, str(e)) from e

    def generate(self, messages: list[dict], params: SamplingParams) -> BackendReply:
        """Invoke the chat model.

        Sampling settings and the request timeout are fixed when the client is
        built, so params.timeout does not shorten a call already in flight.
        """
        if self.client is None:
            raise RuntimeError(f"Backend '{self.backend_id}' is not initialized")

        chat_messages = []
        for message in messages:
            if message["role"] == "system":
                chat_messages.append(SystemMessage(content=message["content"]))
            else:
                chat_messages.append(HumanMessage(content=message["content"]))

        try:
            response = self.client.invoke(chat_messages)
        except Exception as e:
            raise RuntimeError(f"LLM generation failed: {str(e)}") from e

        usage = getattr(response, "usage_metadata", None) or {}
        return BackendReply(
            content=coerce_content(response.content),
            model=self.model_name,
            tokens_used=usage.get("total_tokens"),
        )

    def close(self) -> None:
        self.client = None
