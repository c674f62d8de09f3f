"""Engine components: fetch pages, prompt the model, extract structured output."""

from .fetcher import Feed, FeedFetcher, FeedItem, PageFetcher, html_to_text
from .genai_client import GeminiClient, GenAIClient, new_genai_client
from .jsonify import ExtractedValue, extract_and_format, extract_values, find_candidates
from .parallel import FetchOutcome, ResourceFetcher, fetch_all
from .prompt import ArticleInfo, PromptBuilder, load_prompt_builder
from .templates import compile_template, load_output_template

__all__ = [
    "ArticleInfo",
    "ExtractedValue",
    "Feed",
    "FeedFetcher",
    "FeedItem",
    "FetchOutcome",
    "GeminiClient",
    "GenAIClient",
    "PageFetcher",
    "PromptBuilder",
    "ResourceFetcher",
    "compile_template",
    "extract_and_format",
    "extract_values",
    "fetch_all",
    "find_candidates",
    "html_to_text",
    "load_output_template",
    "load_prompt_builder",
    "new_genai_client",
]
