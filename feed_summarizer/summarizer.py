"""Pipeline wiring feed fetching, page fetching, prompting and output formatting."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import structlog
from jinja2 import Template

from .config import FetchConfig
from .engine import (
    ArticleInfo,
    Feed,
    FetchOutcome,
    GenAIClient,
    PromptBuilder,
    ResourceFetcher,
    extract_and_format,
    fetch_all,
    load_prompt_builder,
)
from .errors import ConfigError

FeedSource = Callable[[str], Feed]


@dataclass(slots=True)
class SummaryResult:
    """Raw model reply for one feed plus what happened while fetching pages."""

    feed_url: str
    feed_title: str
    text: str
    articles: list[ArticleInfo] = field(default_factory=list)
    fetch_outcome: FetchOutcome = field(default_factory=FetchOutcome)

    def format(self, template: Template) -> list[Any]:
        return extract_and_format(self.text, template)


def build_article_infos(feed: Feed, outcome: FetchOutcome) -> list[ArticleInfo]:
    """Pair feed items with fetched pages; failed pages stay ``None``."""

    return [
        ArticleInfo(title=item.title, link=item.link, page=outcome.pages.get(item.link))
        for item in feed.items
    ]


class Summarizer:
    """Summarize feeds with a generative AI client.

    1. fetch the feed and collect its item links
    2. fetch every linked page concurrently; missing pages are tolerated
    3. build the prompt from the system prompt and one user section per item
    4. send it to the model and return the reply
    """

    def __init__(
        self,
        client: GenAIClient,
        feed_fetcher: FeedSource,
        page_fetcher: ResourceFetcher,
        fetch_config: FetchConfig | None = None,
        prompt_factory: Callable[[], PromptBuilder] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.feed_fetcher = feed_fetcher
        self.page_fetcher = page_fetcher
        self.fetch_config = fetch_config or FetchConfig()
        self.prompt_factory = prompt_factory or load_prompt_builder
        self.logger = logger or structlog.get_logger("feed_summarizer.summarizer")

    def load_prompts(
        self, system_prompt_path: Path | None, user_prompt_path: Path | None
    ) -> None:
        """Use custom prompt files for subsequent runs."""

        if not system_prompt_path or not user_prompt_path:
            raise ConfigError("both system and user prompt paths are required")
        # Fail now on unreadable files rather than mid-run
        load_prompt_builder(system_prompt_path, user_prompt_path)
        self.prompt_factory = lambda: load_prompt_builder(system_prompt_path, user_prompt_path)

    def summarize(self, feed_url: str) -> SummaryResult:
        log = self.logger.bind(feed_url=feed_url)
        feed = self.feed_fetcher(feed_url)
        links = feed.links()
        log.info("feed_loaded", title=feed.title, items=len(feed.items), links=len(links))

        outcome = fetch_all(
            links,
            self.page_fetcher,
            max_concurrency=self.fetch_config.max_concurrency,
            deadline=self.fetch_config.deadline_seconds,
            logger=log,
        )
        if outcome.error is not None:
            # Missing pages only shrink the prompt
            log.warning(
                "page_fetch_incomplete",
                failed=sorted(outcome.error.failed_identifiers),
                error=str(outcome.error),
            )

        articles = build_article_infos(feed, outcome)
        builder = self.prompt_factory()
        for info in articles:
            builder.append(info)
        text = self.client.send(builder.build())
        log.info("summary_generated", chars=len(text))
        return SummaryResult(
            feed_url=feed_url,
            feed_title=feed.title,
            text=text,
            articles=articles,
            fetch_outcome=outcome,
        )


__all__ = ["Summarizer", "SummaryResult", "build_article_infos"]
