"""Jinja2 template loading for prompts and output shaping."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, StrictUndefined, Template, TemplateError

from ..errors import ConfigError

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"

SYSTEM_PROMPT_FILENAME = "system_prompt.txt"
USER_PROMPT_FILENAME = "user_prompt.j2"
OUTPUT_TEMPLATE_FILENAME = "output.json.j2"


@lru_cache(maxsize=1)
def template_environment() -> Environment:
    """Environment whose undefined references raise instead of rendering blank."""

    return Environment(
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )


def compile_template(source: str, name: str = "<string>") -> Template:
    try:
        return template_environment().from_string(source)
    except TemplateError as exc:
        raise ConfigError(f"failed to parse template {name}: {exc}") from exc


def read_text_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read file {path}: {exc}") from exc


def load_template(path: Path) -> Template:
    return compile_template(read_text_file(path), name=str(path))


def builtin_path(filename: str) -> Path:
    path = TEMPLATES_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Template not found: {path}")
    return path


def load_output_template(path: Path | None = None) -> Template:
    """Return the custom output template, or the bundled default."""

    return load_template(path or builtin_path(OUTPUT_TEMPLATE_FILENAME))


__all__ = [
    "OUTPUT_TEMPLATE_FILENAME",
    "SYSTEM_PROMPT_FILENAME",
    "TEMPLATES_DIR",
    "USER_PROMPT_FILENAME",
    "builtin_path",
    "compile_template",
    "load_output_template",
    "load_template",
    "read_text_file",
    "template_environment",
]
