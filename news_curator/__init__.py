"""
News Curator - AI-assisted crypto news curation.

This package fetches RSS/Atom feeds and community listings, extracts
individual stories with an LLM, merges them across sources, and ranks
them into a short list of what matters today.

Main entry point is the CLI via `news-curator run` command.

Example:
    $ news-curator run -o output/
"""

__all__ = ["__version__", "run_curation", "load_config"]
__version__ = "0.1.0"

from .config import load_config
from .runner import run_curation
