"""Tests for the RepositoryAssistant facade."""

import pytest
from repoqa.assistant import RepositoryAssistant
from repoqa.llm.manager import ExhaustedBackendsError, GenerationManager
from repoqa.llm.registry import BackendRegistry

ANSWER = "The entry point is src/main.py and it reads API_KEY from the environment."


@pytest.fixture
def make_assistant(definition, config, backend_factory):
    def _make(behaviours):
        factory = backend_factory(behaviours)
        registry = BackendRegistry([definition("primary"), definition("fallback")])
        manager = GenerationManager(registry, config, backend_factory=factory)
        return RepositoryAssistant(config, manager=manager), factory

    return _make


def test_generate_answer_appends_attribution(make_assistant):
    assistant, _ = make_assistant(
        {"primary": {"reply": "I can't assist."}, "fallback": {"reply": ANSWER}}
    )

    answer = assistant.generate_answer("# ctx", "Where are secrets read?")

    assert answer == ANSWER + "\n\n*(answered by fallback)*"


def test_generate_answer_composes_prompts(make_assistant):
    assistant, factory = make_assistant({"primary": {"reply": ANSWER}})

    assistant.generate_answer(
        "# ctx",
        "Where are secrets read?",
        reasoning_summary="Focus: Hardcoded Secrets",
        analysis_type="security",
    )

    messages, _ = factory.created[0].generate_calls[0]
    system, user = messages[0]["content"], messages[1]["content"]
    assert system.startswith("You are a security and code analysis expert.")
    assert "Priority Focus: SECURITY" in system
    assert "ADDITIONAL REASONING CONTEXT:\nFocus: Hardcoded Secrets" in system
    assert system.index("Priority Focus") < system.index("ADDITIONAL REASONING CONTEXT")
    assert user == "# ctx\n\nQuestion: Where are secrets read?\n\nAnswer:"


def test_generate_answer_without_hints(make_assistant):
    assistant, factory = make_assistant({"primary": {"reply": ANSWER}})

    assistant.generate_answer("# ctx", "q")

    system = factory.created[0].generate_calls[0][0][0]["content"]
    assert "Priority Focus" not in system
    assert "ADDITIONAL REASONING CONTEXT" not in system


def test_exhaustion_reaches_caller(make_assistant):
    assistant, _ = make_assistant(
        {"primary": {"reply": "I cannot."}, "fallback": {"reply": "   "}}
    )

    with pytest.raises(ExhaustedBackendsError):
        assistant.generate_answer("# ctx", "q")


def test_ask_runs_reasoning_then_generation(make_assistant, sample_context):
    assistant, factory = make_assistant({"primary": {"reply": ANSWER}})

    answer = assistant.ask(sample_context, "Any security problems?")

    assert answer.endswith("*(answered by primary)*")
    system, user = [m["content"] for m in factory.created[0].generate_calls[0][0]]
    assert "Priority Focus: GENERAL" in system
    assert "Combined analysis from OpenReason and AdaReasoner." in system
    assert "### src/main.py" in user


def test_warm_up_initializes_primary(make_assistant):
    assistant, factory = make_assistant({})

    assistant.warm_up()

    assert assistant.manager.active_backend_id == "primary"
    assert factory.created[0].initialize_calls == 1
