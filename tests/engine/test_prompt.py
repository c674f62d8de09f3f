from __future__ import annotations

from pathlib import Path

import pytest

from feed_summarizer.engine import ArticleInfo, PromptBuilder, compile_template, load_prompt_builder
from feed_summarizer.errors import ConfigError


def test_prompt_builder_appends_after_system_prompt() -> None:
    builder = PromptBuilder("SYSTEM\n", compile_template("- {{ title }} <{{ link }}>\n"))
    builder.append(ArticleInfo("One", "https://e.com/1")).append(ArticleInfo("Two", "https://e.com/2"))
    assert builder.build() == "SYSTEM\n- One <https://e.com/1>\n- Two <https://e.com/2>\n"
    builder.reset()
    assert builder.build() == "SYSTEM\n"


def test_default_prompts_include_page_only_when_present() -> None:
    builder = load_prompt_builder()
    builder.append(ArticleInfo("With page", "https://e.com/1", page="Body text"))
    builder.append(ArticleInfo("Without page", "https://e.com/2"))
    prompt = builder.build()
    assert prompt.startswith("You are a news editor.")
    assert "Title: With page" in prompt
    assert "Body text" in prompt
    assert "Title: Without page" in prompt
    assert prompt.count("Page:") == 1


def test_custom_prompt_files(tmp_path: Path) -> None:
    system = tmp_path / "system.txt"
    user = tmp_path / "user.j2"
    system.write_text("Summarize:\n", encoding="utf-8")
    user.write_text("{{ title }}|{{ link }}\n", encoding="utf-8")
    builder = load_prompt_builder(system, user)
    builder.append(ArticleInfo("A", "https://e.com/a"))
    assert builder.build() == "Summarize:\nA|https://e.com/a\n"


def test_missing_prompt_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_prompt_builder(tmp_path / "missing.txt", tmp_path / "missing.j2")


def test_user_template_with_unknown_field_fails() -> None:
    builder = PromptBuilder("", compile_template("{{ author }}"))
    with pytest.raises(ConfigError):
        builder.append(ArticleInfo("A", "https://e.com/a"))


def test_invalid_template_source() -> None:
    with pytest.raises(ConfigError):
        compile_template("{% if %}")
