"""Tests for the LiteLLM and LangChain generation backends."""

import pytest
from unittest.mock import MagicMock, patch
from langchain_core.messages import AIMessage
from repoqa.llm.backend import (
    BackendInitializationError,
    SamplingParams,
    build_messages,
    coerce_content,
    create_backend,
)
from repoqa.llm.langchain_backend import LangChainBackend
from repoqa.llm.litellm_backend import LiteLLMBackend
from repoqa.models import ModelDefinition

LOCAL_MODEL = ModelDefinition(
    id="local-qwen",
    display_name="Local Qwen",
    model_route="ollama_chat/qwen2.5:0.5b",
)

PARAMS = SamplingParams(temperature=0.7, max_tokens=512)


def _completion_response(content: str, total_tokens: int = 42) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.total_tokens = total_tokens
    return response


class TestLiteLLMBackend:
    """Tests for LiteLLMBackend."""

    @patch("repoqa.llm.litellm_backend.litellm")
    def test_initialize_resolves_provider_without_warmup(self, mock_litellm):
        mock_litellm.get_llm_provider.return_value = ("qwen2.5:0.5b", "ollama_chat", None, None)

        backend = LiteLLMBackend(LOCAL_MODEL, warmup=False)
        backend.initialize()

        assert backend.provider == "ollama_chat"
        mock_litellm.get_llm_provider.assert_called_once_with("ollama_chat/qwen2.5:0.5b")
        mock_litellm.completion.assert_not_called()

    @patch("repoqa.llm.litellm_backend.litellm")
    def test_initialize_warms_up_model(self, mock_litellm):
        mock_litellm.get_llm_provider.return_value = ("qwen2.5:0.5b", "ollama_chat", None, None)

        backend = LiteLLMBackend(LOCAL_MODEL, base_url="http://localhost:11434", warmup=True)
        backend.initialize()

        kwargs = mock_litellm.completion.call_args[1]
        assert kwargs["max_tokens"] == 1
        assert kwargs["api_base"] == "http://localhost:11434"

    @patch("repoqa.llm.litellm_backend.litellm")
    def test_initialize_failure_is_wrapped(self, mock_litellm):
        mock_litellm.get_llm_provider.side_effect = ValueError("LLM Provider NOT provided")

        backend = LiteLLMBackend(LOCAL_MODEL, warmup=False)

        with pytest.raises(BackendInitializationError, match="local-qwen"):
            backend.initialize()

    @patch("repoqa.llm.litellm_backend.litellm")
    def test_warmup_failure_is_wrapped(self, mock_litellm):
        mock_litellm.get_llm_provider.return_value = ("m", "ollama_chat", None, None)
        mock_litellm.completion.side_effect = ConnectionError("connection refused")

        backend = LiteLLMBackend(LOCAL_MODEL, warmup=True)

        with pytest.raises(BackendInitializationError, match="connection refused"):
            backend.initialize()
        assert backend.provider is None

    @patch("repoqa.llm.litellm_backend.litellm.completion")
    def test_generate(self, mock_completion):
        mock_completion.return_value = _completion_response("Test response")

        backend = LiteLLMBackend(LOCAL_MODEL, api_key="test-key", timeout=30, max_retries=2)
        reply = backend.generate(build_messages("Test prompt", "Test system"), PARAMS)

        assert reply.content == "Test response"
        assert reply.model == "ollama_chat/qwen2.5:0.5b"
        assert reply.tokens_used == 42

        kwargs = mock_completion.call_args[1]
        assert kwargs["model"] == "ollama_chat/qwen2.5:0.5b"
        assert kwargs["temperature"] == 0.7
        assert kwargs["max_tokens"] == 512
        assert kwargs["api_key"] == "test-key"
        assert kwargs["timeout"] == 30
        assert kwargs["max_retries"] == 2
        assert kwargs["stream"] is False
        assert kwargs["messages"][0] == {"role": "system", "content": "Test system"}

    @patch("repoqa.llm.litellm_backend.litellm.completion")
    def test_generate_caps_timeout_at_deadline(self, mock_completion):
        mock_completion.return_value = _completion_response("Test response")

        backend = LiteLLMBackend(LOCAL_MODEL, timeout=120, max_retries=3)
        backend.generate(
            build_messages("q"), SamplingParams(temperature=0.7, max_tokens=512, timeout=5.0)
        )

        kwargs = mock_completion.call_args[1]
        assert kwargs["timeout"] == 5.0
        assert kwargs["max_retries"] == 0

    @patch("repoqa.llm.litellm_backend.litellm.completion")
    def test_generate_none_content_becomes_empty(self, mock_completion):
        mock_completion.return_value = _completion_response(None)

        reply = LiteLLMBackend(LOCAL_MODEL).generate(build_messages("q"), PARAMS)

        assert reply.content == ""

    @patch("repoqa.llm.litellm_backend.litellm.completion")
    def test_generate_errors_become_runtime_errors(self, mock_completion):
        mock_completion.side_effect = Exception("boom")

        with pytest.raises(RuntimeError, match="LLM generation failed: boom"):
            LiteLLMBackend(LOCAL_MODEL).generate(build_messages("q"), PARAMS)


class TestLangChainBackend:
    """Tests for LangChainBackend."""

    @patch("repoqa.llm.langchain_backend.init_chat_model")
    def test_initialize_builds_chat_model(self, mock_init):
        definition = LOCAL_MODEL.model_copy(update={"backend_library_id": "langchain"})
        backend = LangChainBackend(definition, base_url="http://localhost:11434", max_tokens=64)

        backend.initialize()

        args, kwargs = mock_init.call_args
        assert args == ("ollama_chat/qwen2.5:0.5b",)
        assert kwargs["max_tokens"] == 64
        assert kwargs["base_url"] == "http://localhost:11434"
        assert "api_key" not in kwargs
        assert backend.client is mock_init.return_value

    @patch("repoqa.llm.langchain_backend.init_chat_model")
    def test_initialize_failure_is_wrapped(self, mock_init):
        mock_init.side_effect = ValueError("Unable to infer model provider")

        with pytest.raises(BackendInitializationError, match="infer model provider"):
            LangChainBackend(LOCAL_MODEL).initialize()

    @patch("repoqa.llm.langchain_backend.init_chat_model")
    def test_generate_converts_messages(self, mock_init):
        client = MagicMock()
        client.invoke.return_value = AIMessage(
            content="Test response",
            usage_metadata={"total_tokens": 100, "input_tokens": 40, "output_tokens": 60},
        )
        mock_init.return_value = client

        backend = LangChainBackend(LOCAL_MODEL)
        backend.initialize()
        reply = backend.generate(build_messages("Test prompt", "Test system"), PARAMS)

        assert reply.content == "Test response"
        assert reply.tokens_used == 100
        messages = client.invoke.call_args[0][0]
        assert [m.content for m in messages] == ["Test system", "Test prompt"]

    def test_generate_requires_initialize(self):
        with pytest.raises(RuntimeError, match="not initialized"):
            LangChainBackend(LOCAL_MODEL).generate(build_messages("q"), PARAMS)

    @patch("repoqa.llm.langchain_backend.init_chat_model")
    def test_close_drops_client(self, mock_init):
        backend = LangChainBackend(LOCAL_MODEL)
        backend.initialize()

        backend.close()

        assert backend.client is None


class TestCreateBackend:
    """Tests for create_backend()."""

    def test_litellm_is_default(self, config):
        backend = create_backend(LOCAL_MODEL.model_copy(update={"backend_library_id": None}), config)

        assert isinstance(backend, LiteLLMBackend)
        assert backend.warmup is False

    def test_langchain(self, config):
        definition = LOCAL_MODEL.model_copy(update={"backend_library_id": "langchain"})

        backend = create_backend(definition, config)

        assert isinstance(backend, LangChainBackend)
        assert backend.temperature == 0.2
        assert backend.client is None

    def test_unknown_library(self, config):
        definition = LOCAL_MODEL.model_copy(update={"backend_library_id": "mlc"})

        with pytest.raises(ValueError, match="Unknown backend library"):
            create_backend(definition, config)


def test_build_messages_without_system():
    assert build_messages("Just a prompt") == [{"role": "user", "content": "Just a prompt"}]


def test_coerce_content_list_of_blocks():
    """coerce_content should flatten a list of content blocks."""
    blocks = [{"text": "Hello "}, "world", {"type": "image"}]
    assert coerce_content(blocks) == "Hello world"


def test_coerce_content_non_string():
    assert coerce_content(42) == "42"
    assert coerce_content(None) == ""
