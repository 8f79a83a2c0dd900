"""Runtime configuration for the DocQA service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from docqa.documents import DEFAULT_CATEGORY, DEFAULT_CATEGORY_DIRS


PromptTemplateName = Literal["invoice_qa", "invoice_calculator", "general_qa"]


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(env_prefix="docqa_", env_file=".env", case_sensitive=False)

    environment: Literal["dev", "test", "prod"] = "dev"
    log_level: str = "INFO"

    # Document store
    data_dir: Path = Path("./data")
    default_category: str = DEFAULT_CATEGORY
    category_dirs: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_DIRS))
    document_extension: str = ".txt"
    document_encoding: str = "utf-8"

    # Selection
    selection_strategy: Literal["substring", "token"] = "substring"
    selection_broadening_tokens: tuple[str, ...] | str = ("invoice",)
    selection_fallback_limit: int = Field(default=2, ge=1)

    # Prompt: per-category template names, prompt_template for unmapped categories
    category_templates: dict[str, PromptTemplateName] = Field(default_factory=lambda: {"invoices": "invoice_qa"})
    prompt_template: PromptTemplateName = "general_qa"

    # Generation backend (Ollama wire contract)
    ollama_base_url: str = "http://localhost:11434"
    ollama_generate_path: str = "/api/generate"
    generator_model: str = "llama3.2"
    generator_temperature: float = 0.0
    generator_top_p: float = 0.95
    generator_force_json: bool = True
    generator_timeout_seconds: float = Field(default=60.0, gt=0)
    generator_max_attempts: int = Field(default=1, ge=1)
    generator_backoff_seconds: float = Field(default=0.5, ge=0)
    generator_backoff_max_seconds: float = Field(default=8.0, ge=0)

    # CORS
    cors_allow_origins: tuple[str, ...] = ("*",)
    cors_allow_methods: tuple[str, ...] = ("POST", "GET", "OPTIONS")
    cors_allow_headers: tuple[str, ...] = ("Content-Type",)

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8001

    evaluation_min_recall: float = 0.5
    evaluation_min_precision: float = 0.5

    @field_validator("category_dirs", "category_templates")
    @classmethod
    def _lowercase_category_keys(cls, value: dict[str, str]) -> dict[str, str]:
        return {key.strip().lower(): item for key, item in value.items()}

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def broadening_tokens_tuple(self) -> tuple[str, ...]:
        value = self.selection_broadening_tokens
        if isinstance(value, tuple):
            return tuple(token.lower() for token in value if token)
        if isinstance(value, str):
            parts = [p.strip().lower() for p in value.split(",") if p.strip()]
            return tuple(parts)
        return ("invoice",)


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
