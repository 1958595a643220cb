from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

ASSETS_DIR = Path(__file__).resolve().parent / "assets"


def _discover_env_files() -> tuple[str, ...]:
    """Determine which env files should be loaded."""
    files: list[str] = []

    custom_env = os.getenv("ENV_FILE")
    if custom_env and Path(custom_env).is_file():
        files.append(custom_env)

    dot_env = Path.cwd() / ".env"
    if dot_env.is_file():
        files.append(str(dot_env))

    return tuple(dict.fromkeys(files))


def _discover_toml_files() -> tuple[str, ...]:
    """Bundled defaults first, then an operator-supplied file that overrides them."""
    files = [str(ASSETS_DIR / "config.toml")]

    custom_toml = os.getenv("FILTER_CONFIG_FILE")
    if custom_toml and Path(custom_toml).is_file():
        files.append(custom_toml)

    return tuple(dict.fromkeys(files))


class Settings(BaseSettings):
    """Runtime configuration for the content filter proxy."""

    model_config = SettingsConfigDict(
        env_prefix="FILTER_",
        env_file=_discover_env_files(),
        env_file_encoding="utf-8",
        toml_file=_discover_toml_files(),
        extra="ignore",
        populate_by_name=True,
        protected_namespaces=("settings_",),
    )

    # Moderation mode
    enable_llm: bool = Field(default=False, description="Classify content with the remote LLM.")
    enable_tract: bool = Field(default=False, description="Classify content with the local ONNX model.")

    # Policy
    sentiment_score_threshold: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Scores below this are logged as very negative (soft flag)."
    )
    hate_speech_cutoff: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Local-model scores below this are treated as hate speech (hard block)."
    )
    forbidden_words: str = Field(default="", alias="FORBIDDEN_WORDS", description="Comma-separated denylist.")

    # Local model assets
    vocab_path: Path | None = Field(default=None, description="Override for the bundled vocab.txt.")
    model_path: Path | None = Field(default=None, description="Override for the bundled model.onnx.")

    # Remote LLM
    llm_address: str = Field(default="http://localhost:11434", description="Base URL of the generate API.")
    llm_model: str = Field(default="llama3.2", description="Model name sent with each generate request.")
    llm_temperature: float = Field(default=0.0, ge=0.0, description="Sampling temperature for the LLM.")
    llm_prompt: str = Field(default="{}", description="Prompt template; '{}' is replaced with the content.")
    llm_timeout_seconds: float = Field(default=10.0, gt=0, description="Timeout for one LLM call.")

    # Proxy
    target: str = Field(default="http://localhost:3000", alias="BORD_TARGET", description="Upstream board origin.")
    origin_header_value: str = Field(default="board-filter", description="Value of the x-origin header added upstream.")
    upstream_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for forwarded requests.")
    host: str = Field(default="0.0.0.0", description="Bind address for the proxy server.")
    port: int = Field(default=8080, description="Bind port for the proxy server.")

    log_level: str = Field(default="INFO", description="Root log level.")

    @field_validator("target", "llm_address", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip().upper()
        return "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @property
    def mode(self) -> str:
        if self.enable_llm:
            return "llm"
        if self.enable_tract:
            return "tract"
        return "disabled"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
