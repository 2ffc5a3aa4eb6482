"""
Configuration settings for the BGG rankings crawler.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent  # Go up one level to workspace root
DEFAULT_OUTPUT_FILE = "boardgames.json"  # relative to the working directory
# Logs directory for per-run logs
LOGS_DIR = PROJECT_ROOT / "bgg_rankings_cache" / "logs"

# Source site
BASE_URL = "https://boardgamegeek.com"
START_URL = os.environ.get("BGG_START_URL", f"{BASE_URL}/browse/boardgame")

# HTTP configuration
REQUEST_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
}
REQUEST_TIMEOUT = float(os.environ.get("BGG_REQUEST_TIMEOUT", "30"))

# Crawl defaults
DEFAULT_LIMIT = 250
DEFAULT_DELAY_SECONDS = 0.5  # minimum spacing between consecutive requests
DEFAULT_ATTEMPTS = 3

# Retry backoff: min(BACKOFF_CEILING_SECONDS, BACKOFF_STEP_SECONDS * attempt)
BACKOFF_STEP_SECONDS = 0.25
BACKOFF_CEILING_SECONDS = 2.0

# Listing rows with fewer cells are headers or filler
MIN_LISTING_COLUMNS = 6

# Each listing page is one graph step, so "all pages" mode needs headroom
GRAPH_RECURSION_LIMIT = int(os.environ.get("BGG_GRAPH_RECURSION_LIMIT", "10000"))

# Fields of the output artifact, in the order the table view expects them
OUTPUT_FIELDS = [
    "rank",
    "title",
    "year",
    "image",
    "url",
    "geek_rating",
    "avg_rating",
    "num_voters",
    "min_players",
    "max_players",
    "min_best_players",
    "max_best_players",
    "min_playing_time",
    "max_playing_time",
    "weight",
]

NUMERIC_FIELDS = frozenset(OUTPUT_FIELDS) - {"title", "image", "url"}
