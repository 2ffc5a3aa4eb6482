"""
Scraper module for the BGG browse rankings.

This module handles:
- Number normalization for scraped tokens
- Listing page parsing and pagination
- Multi-strategy detail page extraction
- Paced fetching with retries
- Crawl orchestration (LangGraph)
"""

from .collector import BGGRankingsCollector
from .details import DETAIL_STRATEGIES, extract_details_from_html
from .fetch import HttpFetcher, RequestPacer
from .listing import extract_games_from_html, get_next_page_url
from ..models import Game, DetailAttributes, CrawlResult

__all__ = [
    "BGGRankingsCollector",
    "HttpFetcher",
    "RequestPacer",
    "DETAIL_STRATEGIES",
    "extract_details_from_html",
    "extract_games_from_html",
    "get_next_page_url",
    "Game",
    "DetailAttributes",
    "CrawlResult",
]
