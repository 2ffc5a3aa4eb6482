"""
BGG Rankings Package - BoardGameGeek rankings crawler.

This package provides:
1. Crawling the BoardGameGeek browse rankings, enriched from each game's detail page
2. Writing and querying the resulting JSON dataset
"""

__version__ = "0.1.0"
__author__ = "BGG Data Team"

# Main package imports for convenience
from .scraper import BGGRankingsCollector, HttpFetcher
from .dataset import GameDataset
from .models import Game, DetailAttributes, CrawlResult
from .logging_config import setup_logging

__all__ = [
    "BGGRankingsCollector",
    "HttpFetcher",
    "GameDataset",
    "Game",
    "DetailAttributes",
    "CrawlResult",
    "setup_logging",
]
