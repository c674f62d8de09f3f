from __future__ import annotations

from pathlib import Path

import pytest

from feed_summarizer.config import (
    FetchConfig,
    FileFormat,
    GenAIConfig,
    GenAIKind,
    OutputConfig,
    PromptConfig,
)


@pytest.mark.parametrize(
    "overrides",
    [
        {"max_concurrency": 0},
        {"deadline_seconds": 0},
        {"http_timeout_seconds": -1},
    ],
)
def test_fetch_config_rejects_invalid_bounds(overrides: dict) -> None:
    with pytest.raises(ValueError):
        FetchConfig(**overrides)


def test_genai_kind_is_normalised() -> None:
    assert GenAIConfig(kind=" Gemini ").kind is GenAIKind.GEMINI
    with pytest.raises(ValueError):
        GenAIConfig(kind="openai")


def test_prompt_paths_must_be_paired() -> None:
    with pytest.raises(ValueError):
        PromptConfig(system_prompt_path="system.txt")
    cfg = PromptConfig(system_prompt_path="system.txt", user_prompt_path="user.j2")
    assert cfg.user_prompt_path == Path("user.j2")


def test_output_paths_resolve_against_base(tmp_path: Path) -> None:
    cfg = OutputConfig(outputs_dir="out")
    assert cfg.resolve(cfg.outputs_dir, tmp_path) == (tmp_path / "out").resolve()
    absolute = tmp_path / "abs.db"
    assert cfg.resolve(absolute, Path("/elsewhere")) == absolute


def test_output_file_format_defaults_to_json() -> None:
    assert OutputConfig().file_format is FileFormat.JSON
    assert OutputConfig(file_format="txt").file_format is FileFormat.TXT
    with pytest.raises(ValueError):
        OutputConfig(file_format="csv")
