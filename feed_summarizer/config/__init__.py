"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    AppConfig,
    FetchConfig,
    FileFormat,
    GenAIConfig,
    GenAIKind,
    OutputConfig,
    OutputDestination,
    PromptConfig,
)

__all__ = [
    "AppConfig",
    "ConfigLocator",
    "ConfigRepository",
    "FetchConfig",
    "FileFormat",
    "GenAIConfig",
    "GenAIKind",
    "OutputConfig",
    "OutputDestination",
    "PromptConfig",
]
