"""
HTTP fetching with request pacing and bounded retries.
"""

import logging
import time
from typing import Callable, Optional

import requests

from ..config import (
    BACKOFF_CEILING_SECONDS,
    BACKOFF_STEP_SECONDS,
    DEFAULT_ATTEMPTS,
    REQUEST_HEADERS,
    REQUEST_TIMEOUT,
)
from ..error_handling import FetchError, safe_execute
from ..models import DetailAttributes
from .details import extract_details_from_html

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    return min(BACKOFF_CEILING_SECONDS, BACKOFF_STEP_SECONDS * attempt)


class RequestPacer:
    """
    Keeps consecutive requests at least ``min_interval`` seconds apart.

    Time spent elsewhere (parsing, retry backoff) counts toward the interval.
    """

    def __init__(self, min_interval: float = 0.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_interval = max(0.0, min_interval)
        self.clock = clock
        self.sleep = sleep
        self._last_request: Optional[float] = None

    def wait(self) -> None:
        """Block until the next request may be sent, then mark it as sent."""
        if self._last_request is not None and self.min_interval > 0:
            remaining = self.min_interval - (self.clock() - self._last_request)
            if remaining > 0:
                self.sleep(remaining)
        self._last_request = self.clock()


class HttpFetcher:
    """
    Fetches BGG pages one at a time over a shared session.
    """

    def __init__(self, delay_seconds: float = 0.0, timeout: float = REQUEST_TIMEOUT,
                 session: Optional[requests.Session] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the fetcher.

        Args:
            delay_seconds: Minimum spacing between consecutive requests
            timeout: Per-request timeout in seconds
            session: Session to reuse; a new one is created when omitted
            sleep: Sleep function, used for pacing and retry backoff
        """
        self.timeout = timeout
        self.sleep = sleep
        self.pacer = RequestPacer(delay_seconds, sleep=sleep)

        # Set up session for connection reuse
        self.session = session or requests.Session()
        self.session.headers.update(REQUEST_HEADERS)

    def fetch_html(self, url: str) -> str:
        """Fetch a page once. Raises ``requests.RequestException`` on failure."""
        self.pacer.wait()
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    def fetch_with_retry(self, url: str, attempts: int = DEFAULT_ATTEMPTS) -> str:
        """
        Fetch a page, retrying failures with increasing backoff.

        Args:
            url: URL to fetch
            attempts: Total number of attempts, at least one

        Returns:
            The page body

        Raises:
            FetchError: every attempt failed; chained to the last failure
        """
        attempts = max(1, attempts)
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return self.fetch_html(url)
            except requests.RequestException as e:
                last_error = e
                logger.warning(f"Fetch attempt {attempt}/{attempts} failed for {url}: {e}")
                if attempt < attempts:
                    self.sleep(backoff_delay(attempt))
        raise FetchError(url, attempts) from last_error

    def fetch_game_details(self, url: Optional[str],
                           attempts: int = DEFAULT_ATTEMPTS) -> DetailAttributes:
        """
        Fetch a game's detail page and extract its attributes.

        A game without a detail URL gets all-missing attributes and no
        request is made.

        Raises:
            FetchError: the page could not be fetched
        """
        if not url:
            return DetailAttributes()
        html = self.fetch_with_retry(url, attempts)
        return safe_execute(
            extract_details_from_html, html,
            default_return=DetailAttributes(),
            error_msg=f"Error extracting details from {url}",
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
