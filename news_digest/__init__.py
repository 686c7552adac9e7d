"""
News Digest - multi-feed aggregator with AI summaries.

This package fetches several RSS/Atom feeds concurrently, picks the best
content field of each entry, and summarizes it through an OpenAI-compatible
chat completion service. Without an API key it falls back to an extractive
summary of the leading sentences. Model output is cleaned of reasoning
leakage before it is returned.

Main entry point is the CLI via `news-digest run` command.

Example:
    $ news-digest run -c config.yaml -o feeds.json
"""

__all__ = ["__version__", "NewsItem", "Source", "load_config", "run_pipeline"]
__version__ = "0.1.0"

from .config import load_config
from .core.types import NewsItem, Source
from .runner import run_pipeline
