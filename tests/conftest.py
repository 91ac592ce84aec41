"""Pytest configuration and shared fixtures."""

from typing import Callable, Optional

import pytest
from pathlib import Path
from repoqa.config import Config
from repoqa.llm.backend import BackendReply, GenerationBackend, SamplingParams
from repoqa.models import ModelDefinition, RepositoryContext, RepositoryFile


@pytest.fixture
def temp_repo(tmp_path: Path) -> Path:
    """Create a temporary repository structure for testing."""
    repo = tmp_path / "test_repo"
    repo.mkdir()

    # Create sample files
    (repo / "README.md").write_text("# Test Project")
    (repo / "main.py").write_text("print('hello')")
    (repo / "src").mkdir()
    (repo / "src" / "settings.py").write_text("API_KEY = 'xyz'\n")
    (repo / "src" / "util.py").write_text("# TODO: tidy up\n")

    return repo


@pytest.fixture
def config() -> Config:
    """Provide a test configuration."""
    return Config(
        api_base_url=None,
        warmup_on_initialize=False,
        temperature=0.2,
        max_output_tokens=256,
    )


@pytest.fixture
def sample_context() -> RepositoryContext:
    """A small Python repository snapshot."""
    files = (
        RepositoryFile(path="README.md", content="# Demo", size=6),
        RepositoryFile(path="src", type="directory"),
        RepositoryFile(path="src/main.py", content="API_KEY=xyz\n", size=12),
        RepositoryFile(path="src/util.py", content="// TODO fix this\n", size=17),
    )
    return RepositoryContext(
        files=files,
        structure="README.md\nsrc/\n  main.py\n  util.py",
        total_files=3,
        total_size=35,
    )


@pytest.fixture
def empty_context() -> RepositoryContext:
    return RepositoryContext()


def make_definition(backend_id: str, **kwargs) -> ModelDefinition:
    return ModelDefinition(id=backend_id, display_name=backend_id.title(), **kwargs)


class FakeBackend(GenerationBackend):
    """In-memory backend that records every call."""

    def __init__(
        self,
        definition: ModelDefinition,
        reply: Optional[str] = None,
        init_error: Optional[Exception] = None,
        generate_error: Optional[Exception] = None,
        on_generate: Optional[Callable[[], None]] = None,
    ):
        super().__init__(definition)
        self.reply = reply
        self.init_error = init_error
        self.generate_error = generate_error
        self.on_generate = on_generate
        self.initialize_calls = 0
        self.generate_calls: list[tuple[list[dict], SamplingParams]] = []
        self.closed = False

    def initialize(self) -> None:
        self.initialize_calls += 1
        if self.init_error is not None:
            raise self.init_error

    def generate(self, messages: list[dict], params: SamplingParams) -> BackendReply:
        self.generate_calls.append((messages, params))
        if self.on_generate is not None:
            self.on_generate()
        if self.generate_error is not None:
            raise self.generate_error
        return BackendReply(content=self.reply or "", model=self.definition.id)

    def close(self) -> None:
        self.closed = True


class FakeBackendFactory:
    """backend_factory stand-in handing out prepared FakeBackends by id."""

    def __init__(self, behaviours: Optional[dict] = None):
        self.behaviours = behaviours or {}
        self.created: list[FakeBackend] = []

    def __call__(self, definition: ModelDefinition, config: Config) -> FakeBackend:
        backend = FakeBackend(definition, **self.behaviours.get(definition.id, {}))
        self.created.append(backend)
        return backend

    def created_for(self, backend_id: str) -> list[FakeBackend]:
        return [b for b in self.created if b.backend_id == backend_id]


@pytest.fixture
def backend_factory() -> Callable[..., FakeBackendFactory]:
    """Build a FakeBackendFactory from per-id behaviour dicts."""
    return FakeBackendFactory


@pytest.fixture
def definition() -> Callable[..., ModelDefinition]:
    return make_definition
