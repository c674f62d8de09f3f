"""File based exporter writing JSON Lines or plain text."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .base import BaseExporter


class FileExporter(BaseExporter):
    """Write formatted summaries to one file per run."""

    def __init__(self, output_dir: Path, feed_name: str, fmt: str = "json", run_tag: str | None = None) -> None:
        if fmt not in ("json", "txt"):
            raise ValueError(f"Unsupported file format: {fmt}")
        self.output_dir = output_dir
        self.feed_name = feed_name
        self.format = fmt
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.run_tag = run_tag or datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        slug = re.sub(r"[^0-9A-Za-z_-]+", "_", feed_name.strip()).strip("_") or "feed"
        filename = f"{slug}-{self.run_tag}.{self._extension}"
        self.path = self.output_dir / filename
        self._file = self.path.open("a", encoding="utf-8")
        self._counter = 0

    @property
    def _extension(self) -> str:
        return "jsonl" if self.format == "json" else "txt"

    def export(self, record: Any) -> None:
        if self.format == "json":
            json.dump(record, self._file, ensure_ascii=False)
            self._file.write("\n")
            return
        self._counter += 1
        self._file.write(self._format_txt(record, index=self._counter))

    def flush(self) -> None:
        if not self._file.closed:
            self._file.flush()

    def close(self) -> None:
        self._file.close()

    @staticmethod
    def _format_txt(record: Any, index: int) -> str:
        if not isinstance(record, dict):
            return f"{index}. {json.dumps(record, ensure_ascii=False)}\n\n"
        heading = str(record.get("heading") or record.get("title") or "(untitled)")
        lines = [f"{index}. {heading}"]
        summary = record.get("summary")
        if isinstance(summary, str) and summary.strip():
            lines.append(summary.strip())
        link = record.get("link") or record.get("url")
        if link:
            lines.append(f"Link: {link}")
        return "\n".join(lines) + "\n\n"


__all__ = ["FileExporter"]
