"""Exporter Service Provider Interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable


class BaseExporter(ABC):
    """Uniform exporter contract for formatted summaries."""

    @abstractmethod
    def export(self, record: Any) -> None:
        """Persist a single formatted value."""

    def export_many(self, records: Iterable[Any]) -> None:
        for record in records:
            self.export(record)

    @abstractmethod
    def flush(self) -> None:
        """Flush buffered data to destination."""

    @abstractmethod
    def close(self) -> None:
        """Release underlying resources."""

    def __enter__(self) -> "BaseExporter":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.flush()
        self.close()


__all__ = ["BaseExporter"]
