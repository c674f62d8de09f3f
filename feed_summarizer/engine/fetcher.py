"""HTTP fetching of feed documents and the pages they link to."""

from __future__ import annotations

from dataclasses import dataclass, field

import feedparser
import httpx
import structlog
from selectolax.parser import HTMLParser

from ..config import FetchConfig
from ..errors import FeedFetchError, FetchFailure

DEFAULT_USER_AGENT = "feed-summarizer/0.1"
_NOISE_TAGS = ("script", "style", "noscript", "svg", "iframe", "template")


@dataclass(slots=True)
class FeedItem:
    """A single entry of a feed."""

    title: str
    link: str
    published: str | None = None


@dataclass(slots=True)
class Feed:
    """Feed metadata and its entries, in document order."""

    title: str
    link: str
    items: list[FeedItem] = field(default_factory=list)

    def links(self) -> list[str]:
        return list(dict.fromkeys(item.link for item in self.items if item.link))


def html_to_text(html: str) -> str:
    """Reduce an HTML page to its visible text."""

    tree = HTMLParser(html)
    tree.strip_tags(list(_NOISE_TAGS))
    root = tree.body or tree.root
    if root is None:
        return ""
    lines = (line.strip() for line in root.text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


class PageFetcher:
    """Download pages over one shared httpx client. Non-200 answers are errors."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        client: httpx.Client | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.config = config or FetchConfig()
        self.logger = logger or structlog.get_logger("feed_summarizer.fetcher")
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=self.config.http_timeout_seconds,
            headers={"User-Agent": self.config.user_agent or DEFAULT_USER_AGENT},
        )

    def __enter__(self) -> "PageFetcher":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get(self, url: str) -> httpx.Response:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchFailure(url, exc) from exc
        if response.status_code != httpx.codes.OK:
            raise FetchFailure(url, f"status code: {response.status_code}")
        return response

    def fetch(self, url: str) -> str:
        """Return the page body, reduced to text when ``strip_html`` is set."""

        response = self.get(url)
        self.logger.debug("page_fetched", url=url, size=len(response.text))
        content_type = response.headers.get("content-type", "")
        if self.config.strip_html and (not content_type or "html" in content_type):
            return html_to_text(response.text)
        return response.text


class FeedFetcher:
    """Download a feed and parse it with feedparser."""

    def __init__(
        self,
        page_fetcher: PageFetcher,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.page_fetcher = page_fetcher
        self.logger = logger or structlog.get_logger("feed_summarizer.fetcher")

    def fetch(self, feed_url: str) -> Feed:
        try:
            response = self.page_fetcher.get(feed_url)
        except FetchFailure as exc:
            raise FeedFetchError(f"failed to fetch RSS feed from URL {feed_url}: {exc.cause}") from exc
        return self.parse(response.content, feed_url)

    def parse(self, document: bytes | str, feed_url: str) -> Feed:
        # feedparser treats str input as a URL or path when it looks like one
        if isinstance(document, str):
            document = document.encode("utf-8")
        parsed = feedparser.parse(document)
        if parsed.bozo and not parsed.entries:
            raise FeedFetchError(
                f"failed to parse RSS feed from URL {feed_url}: {parsed.get('bozo_exception')}"
            )
        items = [
            FeedItem(
                title=entry.get("title", ""),
                link=entry.get("link", ""),
                published=entry.get("published"),
            )
            for entry in parsed.entries
        ]
        self.logger.info("feed_parsed", url=feed_url, items=len(items))
        return Feed(
            title=parsed.feed.get("title", ""),
            link=parsed.feed.get("link", feed_url),
            items=items,
        )


__all__ = ["Feed", "FeedFetcher", "FeedItem", "PageFetcher", "html_to_text"]
