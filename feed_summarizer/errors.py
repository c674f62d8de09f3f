"""Exception hierarchy shared by the fetch and extraction engines."""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class FeedSummarizerError(Exception):
    """Base class for every error raised by feed_summarizer."""


class ConfigError(FeedSummarizerError):
    """Invalid or unsupported configuration."""


class FetchFailure(FeedSummarizerError):
    """One identifier could not be fetched."""

    def __init__(self, identifier: str, cause: BaseException | str | None = None) -> None:
        self.identifier = identifier
        self.cause = cause
        detail = f": {cause}" if cause else ""
        super().__init__(f"failed to fetch {identifier}{detail}")


class DeadlineExceeded(FetchFailure):
    """The global deadline fired before the identifier completed."""

    def __init__(self, identifier: str) -> None:
        super().__init__(identifier, "deadline exceeded")


class FeedFetchError(FeedSummarizerError):
    """The feed document itself could not be downloaded or parsed."""


class GenAIError(FeedSummarizerError):
    """The generative AI backend failed to produce text."""


class AggregatedError(FeedSummarizerError):
    """Composite of independent failures collected instead of short-circuited."""

    def __init__(self, causes: Iterable[BaseException], message: str | None = None) -> None:
        self.causes: list[BaseException] = list(causes)
        self.message = message or f"{len(self.causes)} operation(s) failed"
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.causes:
            return self.message
        details = "; ".join(str(cause) for cause in self.causes)
        return f"{self.message}: {details}"

    def __len__(self) -> int:
        return len(self.causes)

    @property
    def failed_identifiers(self) -> set[str]:
        return {cause.identifier for cause in self.causes if isinstance(cause, FetchFailure)}


class ExtractionError(FeedSummarizerError):
    """Base for structured-output extraction errors."""


class NoStructureFoundError(ExtractionError):
    def __init__(self) -> None:
        super().__init__("no valid JSON object or array found in the input text")


class MalformedArrayError(ExtractionError):
    def __init__(self, candidate: str) -> None:
        self.candidate = candidate
        super().__init__("found a JSON array but its content is invalid or malformed")


class ExtractionStage(str, Enum):
    """Step of per-value processing at which a failure happened."""

    DECODE = "decode"
    RENDER = "render"
    REDECODE = "redecode"


class ExtractionItemFailure(ExtractionError):
    """One extracted value failed to decode, render or re-decode."""

    def __init__(self, value: str, stage: ExtractionStage, cause: BaseException) -> None:
        self.value = value
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage.value} failed: {cause}")


__all__ = [
    "AggregatedError",
    "ConfigError",
    "DeadlineExceeded",
    "ExtractionError",
    "ExtractionItemFailure",
    "ExtractionStage",
    "FeedFetchError",
    "FeedSummarizerError",
    "FetchFailure",
    "GenAIError",
    "MalformedArrayError",
    "NoStructureFoundError",
]
