"""Pydantic models describing feed-summarizer configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class GenAIKind(str, Enum):
    """Supported generative AI backends."""

    GEMINI = "gemini"


class OutputDestination(str, Enum):
    """Where formatted summaries are written."""

    STANDARD = "standard"
    FILE = "file"
    SQLITE = "sqlite"


class FileFormat(str, Enum):
    """Layout of files written by the ``file`` destination."""

    JSON = "json"
    TXT = "txt"


class FetchConfig(BaseModel):
    """Controls for downloading the pages linked from a feed."""

    max_concurrency: int = 10
    deadline_seconds: float = 180.0
    http_timeout_seconds: float = 60.0
    user_agent: str | None = None
    strip_html: bool = True

    @model_validator(mode="after")
    def _validate_bounds(self) -> "FetchConfig":
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.deadline_seconds <= 0:
            raise ValueError("deadline_seconds must be > 0")
        if self.http_timeout_seconds <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return self


class GenAIConfig(BaseModel):
    kind: GenAIKind = GenAIKind.GEMINI
    model: str = "gemini-2.0-flash"

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value


class PromptConfig(BaseModel):
    """Optional overrides for the bundled prompt files."""

    system_prompt_path: Path | None = None
    user_prompt_path: Path | None = None

    @model_validator(mode="after")
    def _require_pair(self) -> "PromptConfig":
        if (self.system_prompt_path is None) != (self.user_prompt_path is None):
            raise ValueError("system_prompt_path and user_prompt_path must be set together")
        return self


class OutputConfig(BaseModel):
    format_output: bool = False
    template_path: Path | None = None
    destination: OutputDestination = OutputDestination.STANDARD
    file_format: FileFormat = FileFormat.JSON
    outputs_dir: Path = Field(default=Path("data/outputs"))
    store_path: Path = Field(default=Path("data/summaries.db"))
    store_kind: str = "summaries"

    @field_validator("outputs_dir", "store_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    def resolve(self, path: Path, base_dir: Path) -> Path:
        """Return ``path`` anchored at ``base_dir`` when it is relative."""

        if not path.is_absolute():
            return (base_dir / path).resolve()
        return path


class AppConfig(BaseModel):
    """Top-level configuration stored in ``data/config.yaml``."""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    genai: GenAIConfig = Field(default_factory=GenAIConfig)
    prompts: PromptConfig = Field(default_factory=PromptConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


__all__ = [
    "AppConfig",
    "FetchConfig",
    "FileFormat",
    "GenAIConfig",
    "GenAIKind",
    "OutputConfig",
    "OutputDestination",
    "PromptConfig",
]
