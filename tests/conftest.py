"""Pytest configuration providing shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import httpx
import pytest
from jinja2 import Template

from feed_summarizer.config import ConfigLocator, ConfigRepository, FetchConfig
from feed_summarizer.engine import PageFetcher, compile_template

RSS_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Example Feed</title>
    <link>https://example.com/</link>
    <description>Example</description>
    {items}
  </channel>
</rss>
"""


@pytest.fixture
def identity_template() -> Template:
    return compile_template("{{ item | tojson }}")


@pytest.fixture
def sample_fetch_config() -> FetchConfig:
    return FetchConfig(max_concurrency=4, deadline_seconds=5, http_timeout_seconds=5)


@pytest.fixture
def rss_document() -> Callable[..., str]:
    def _builder(*entries: tuple[str, str]) -> str:
        items = "\n".join(
            f"<item><title>{title}</title><link>{link}</link></item>" for title, link in entries
        )
        return RSS_TEMPLATE.format(items=items)

    return _builder


@pytest.fixture
def mock_page_fetcher(sample_fetch_config: FetchConfig) -> Callable[..., PageFetcher]:
    """Build a PageFetcher answering from ``routes``: url -> (status, body, content type)."""

    def _builder(routes: dict[str, tuple[int, str, str]]) -> PageFetcher:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404, text="not found")
            status, body, content_type = route
            return httpx.Response(status, text=body, headers={"Content-Type": content_type})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return PageFetcher(sample_fetch_config, client=client)

    return _builder


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("FEED_SUMMARIZER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository
