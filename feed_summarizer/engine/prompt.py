"""Prompt assembly from a system prompt and a per-article user template."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path

from jinja2 import Template

from ..errors import ConfigError
from .templates import (
    SYSTEM_PROMPT_FILENAME,
    USER_PROMPT_FILENAME,
    builtin_path,
    load_template,
    read_text_file,
)


@dataclass(slots=True)
class ArticleInfo:
    """Title, link and (optional) page text of one feed entry."""

    title: str
    link: str
    # None when the page could not be fetched
    page: str | None = None


class PromptBuilder:
    """Accumulate rendered user prompts after a fixed system prompt."""

    def __init__(self, system_prompt: str, user_template: Template) -> None:
        self.system_prompt = system_prompt
        self.user_template = user_template
        self._parts: list[str] = []

    def append(self, info: ArticleInfo) -> "PromptBuilder":
        try:
            self._parts.append(self.user_template.render(asdict(info)))
        except Exception as exc:  # noqa: BLE001
            raise ConfigError(f"failed to render user prompt for {info.link}: {exc}") from exc
        return self

    def build(self) -> str:
        return self.system_prompt + "".join(self._parts)

    def reset(self) -> None:
        self._parts.clear()


def load_prompt_builder(
    system_prompt_path: Path | None = None, user_prompt_path: Path | None = None
) -> PromptBuilder:
    """Build from custom files, falling back to the bundled prompts."""

    system_prompt = read_text_file(system_prompt_path or builtin_path(SYSTEM_PROMPT_FILENAME))
    user_template = load_template(user_prompt_path or builtin_path(USER_PROMPT_FILENAME))
    return PromptBuilder(system_prompt, user_template)


__all__ = ["ArticleInfo", "PromptBuilder", "load_prompt_builder"]
