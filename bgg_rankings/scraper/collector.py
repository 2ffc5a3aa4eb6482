"""
Crawl orchestrator using LangGraph to drive the rankings crawl.

The crawl is a small state graph:

    crawl_listing --(next page)--> crawl_listing
    crawl_listing --> select --> enrich --> END
    crawl_listing --(start page unreachable)--> END

Each listing page is one step of ``crawl_listing``, so pagination progress
is visible in the graph state rather than hidden in a loop.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Set, TypedDict

from langgraph.graph import StateGraph, END

from ..config import DEFAULT_ATTEMPTS, DEFAULT_DELAY_SECONDS, DEFAULT_LIMIT, GRAPH_RECURSION_LIMIT, START_URL
from ..error_handling import FetchError, StartPageError, safe_execute
from ..models import CrawlResult, Game
from .fetch import HttpFetcher
from .listing import extract_games_from_html, get_next_page_url

logger = logging.getLogger(__name__)


class CrawlState(TypedDict, total=False):
    next_url: Optional[str]
    page: int
    all_pages: bool
    target: Optional[int]
    # Accumulator and dedup set, owned by the graph state
    games: List[Game]
    seen_ranks: Set[int]
    seen_urls: Set[str]
    pages_crawled: int
    start_error: Optional[str]
    listing_error: Optional[str]
    selected: List[Game]
    enriched: int
    failed_ranks: List[int]
    cancelled: bool


class BGGRankingsCollector:
    """Collects ranked games from the BGG browse pages and enriches them from their detail pages."""

    def __init__(self, fetcher: Optional[HttpFetcher] = None, start_url: str = START_URL,
                 delay_seconds: float = DEFAULT_DELAY_SECONDS, attempts: int = DEFAULT_ATTEMPTS):
        """
        Initialize the collector.

        Args:
            fetcher: Fetcher to use; a paced ``HttpFetcher`` is created when omitted
            start_url: First listing page
            delay_seconds: Minimum spacing between requests for the default fetcher
            attempts: Attempts per listing or detail page before giving up on it
        """
        self.fetcher = fetcher or HttpFetcher(delay_seconds=delay_seconds)
        self.start_url = start_url
        self.attempts = attempts
        self._cancel_event = threading.Event()
        self.graph = self._build_graph()

    def cancel(self) -> None:
        """Stop the crawl at the next request boundary, keeping what was collected."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def _build_graph(self):
        graph = StateGraph(CrawlState)

        def crawl_listing(state: CrawlState) -> CrawlState:
            url = state["next_url"]
            page = state.get("page", 1)
            pages_crawled = state.get("pages_crawled", 0)
            if self.cancelled:
                return {"cancelled": True, "next_url": None}

            try:
                html = self.fetcher.fetch_with_retry(url, self.attempts)
            except FetchError as e:
                if pages_crawled == 0:
                    logger.error(f"Could not fetch start page {url}: {e}")
                    return {"start_error": str(e), "next_url": None}
                logger.error(f"Error scraping {url}, stopping pagination: {e}")
                return {"listing_error": str(e), "next_url": None}
            except KeyboardInterrupt:
                logger.warning("Crawl interrupted during pagination")
                self.cancel()
                return {"cancelled": True, "next_url": None}

            page_games = safe_execute(
                extract_games_from_html, html,
                default_return=[], error_msg=f"Error parsing listing page {url}",
            )

            games = list(state.get("games", []))
            seen_ranks = set(state.get("seen_ranks", set()))
            added = 0
            for game in page_games:
                if game.rank in seen_ranks:
                    continue
                seen_ranks.add(game.rank)
                games.append(game)
                added += 1
            logger.info(f"Scraped page {page} → +{added} (total {len(games)})")

            seen_urls = set(state.get("seen_urls", set()))
            seen_urls.add(url)
            next_url = None
            target = state.get("target")
            if state.get("all_pages") or target is None or len(games) < target:
                next_url = get_next_page_url(html, url)
            if next_url in seen_urls:
                logger.warning(f"Next page {next_url} was already crawled, stopping pagination")
                next_url = None

            return {
                "games": games,
                "seen_ranks": seen_ranks,
                "seen_urls": seen_urls,
                "pages_crawled": pages_crawled + 1,
                "page": page + 1,
                "next_url": next_url,
            }

        def route_after_listing(state: CrawlState) -> str:
            if state.get("start_error"):
                return END
            if state.get("next_url") and not state.get("cancelled"):
                return "crawl_listing"
            return "select"

        def select(state: CrawlState) -> CrawlState:
            games = state.get("games", [])
            target = state.get("target")
            if state.get("all_pages") or target is None:
                selected = list(games)
            else:
                selected = games[:target]
            logger.info(f"Selected {len(selected)} of {len(games)} games for enrichment")
            return {"selected": selected}

        def enrich(state: CrawlState) -> CrawlState:
            selected = state.get("selected", [])
            enriched = 0
            failed_ranks: List[int] = []
            cancelled = state.get("cancelled", False)

            for i, game in enumerate(selected, 1):
                if self.cancelled:
                    cancelled = True
                    logger.warning(f"Crawl cancelled; {len(selected) - i + 1} game(s) left without details")
                    break
                try:
                    details = self.fetcher.fetch_game_details(game.url, self.attempts)
                except FetchError as e:
                    logger.error(f"Error fetching details for #{game.rank} {game.title}: {e}")
                    failed_ranks.append(game.rank)
                    continue
                except KeyboardInterrupt:
                    logger.warning("Crawl interrupted during enrichment")
                    self.cancel()
                    cancelled = True
                    break

                game.apply_details(details)
                if game.url:
                    enriched += 1
                    logger.info(f"Enriched #{game.rank} {game.title} with details ({i}/{len(selected)})")
                else:
                    logger.info(f"No detail page for #{game.rank} {game.title}, skipping ({i}/{len(selected)})")

            return {"enriched": enriched, "failed_ranks": failed_ranks, "cancelled": cancelled}

        graph.add_node("crawl_listing", crawl_listing)
        graph.add_node("select", select)
        graph.add_node("enrich", enrich)

        graph.add_conditional_edges(
            "crawl_listing",
            route_after_listing,
            {"crawl_listing": "crawl_listing", "select": "select", END: END},
        )
        graph.add_edge("select", "enrich")
        graph.add_edge("enrich", END)

        graph.set_entry_point("crawl_listing")
        return graph.compile()

    def collect(self, limit: int = DEFAULT_LIMIT, all_pages: bool = False) -> CrawlResult:
        """
        Crawl the rankings and enrich the selected games.

        Args:
            limit: Number of games to keep; ignored when ``all_pages`` is set
            all_pages: Follow pagination to the last page and keep everything

        Returns:
            The crawl result, games in listing order

        Raises:
            StartPageError: the first listing page could not be fetched
        """
        target = None if all_pages else max(1, int(limit))
        self._cancel_event.clear()
        logger.info(
            f"Starting crawl at {self.start_url} "
            f"({'all pages' if all_pages else f'target {target} games'})"
        )

        state: CrawlState = {
            "next_url": self.start_url,
            "page": 1,
            "all_pages": all_pages,
            "target": target,
            "games": [],
            "seen_ranks": set(),
            "seen_urls": set(),
            "pages_crawled": 0,
        }
        final: CrawlState = self.graph.invoke(state, config={"recursion_limit": GRAPH_RECURSION_LIMIT})

        if final.get("start_error"):
            raise StartPageError(final["start_error"])

        result = CrawlResult(
            games=final.get("selected", []),
            pages_crawled=final.get("pages_crawled", 0),
            enriched=final.get("enriched", 0),
            failed_ranks=final.get("failed_ranks", []),
            cancelled=bool(final.get("cancelled")),
            listing_error=final.get("listing_error"),
        )
        logger.info(
            f"Crawl completed: {len(result.games)} games from {result.pages_crawled} page(s), "
            f"{result.enriched} enriched, {len(result.failed_ranks)} failed"
        )
        return result
