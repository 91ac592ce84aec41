"""Configuration management for repoqa."""

import os
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


DEFAULT_IGNORED_DIRS = [
    ".git",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    ".pytest_cache",
]


class Config(BaseModel):
    """Application configuration."""

    # Generation Settings
    api_base_url: Optional[str] = Field(default="http://localhost:11434")
    api_key: Optional[str] = Field(default=None)
    max_retries: int = Field(default=3)
    timeout: int = Field(default=120)
    temperature: float = Field(default=0.7)
    max_output_tokens: int = Field(default=8192)
    warmup_on_initialize: bool = Field(default=True)
    backend_order: Optional[list[str]] = Field(default=None)

    # Reasoning Settings
    analysis_timeout: Optional[float] = Field(default=None)

    # Loader Settings
    max_file_size: int = Field(default=1_000_000)  # 1MB
    ignored_dirs: list[str] = Field(default_factory=lambda: DEFAULT_IGNORED_DIRS.copy())

    log_level: str = Field(default="WARNING")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        def _parse_int(value: Optional[str], fallback: int) -> int:
            try:
                return int(value) if value is not None else fallback
            except ValueError:
                return fallback

        def _parse_float(value: Optional[str], fallback: Optional[float]) -> Optional[float]:
            try:
                return float(value) if value is not None else fallback
            except ValueError:
                return fallback

        def _parse_list(value: Optional[str]) -> list[str]:
            if not value:
                return []
            return [entry.strip() for entry in value.split(",") if entry.strip()]

        ignored_dirs = DEFAULT_IGNORED_DIRS.copy()
        ignored_dirs.extend(_parse_list(os.getenv("IGNORED_DIRS")))

        backend_order = _parse_list(os.getenv("BACKEND_ORDER")) or None
        warmup = os.getenv("LLM_WARMUP", "true").strip().lower() not in ("0", "false", "no")

        return cls(
            api_base_url=os.getenv("LLM_BASE_URL", "http://localhost:11434"),
            api_key=os.getenv("LLM_API_KEY"),
            max_retries=_parse_int(os.getenv("LLM_MAX_RETRIES"), 3),
            timeout=_parse_int(os.getenv("LLM_TIMEOUT"), 120),
            temperature=_parse_float(os.getenv("LLM_TEMPERATURE"), 0.7),
            max_output_tokens=_parse_int(os.getenv("LLM_MAX_OUTPUT_TOKENS"), 8192),
            warmup_on_initialize=warmup,
            backend_order=backend_order,
            analysis_timeout=_parse_float(os.getenv("ANALYSIS_TIMEOUT"), None),
            max_file_size=_parse_int(os.getenv("MAX_FILE_SIZE"), 1_000_000),
            ignored_dirs=ignored_dirs,
            log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        )
