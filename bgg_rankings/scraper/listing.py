"""
Parsing of the BGG "browse boardgame" rankings pages.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ..config import BASE_URL, MIN_LISTING_COLUMNS
from ..error_handling import safe_execute
from ..models import Game
from .normalize import Number, normalize_number, round_to

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"\((\d{4})\)")
NEXT_LABEL_PATTERN = re.compile(r"Next\s*»")


def _sort_value(cell) -> Optional[Number]:
    """Prefer the precise ``data-sort`` attribute over the display text."""
    value = normalize_number(cell.get("data-sort"))
    if value is not None:
        return value
    return normalize_number(cell.get_text(strip=True))


def _image_url(cell) -> Optional[str]:
    img = cell.find("img")
    if img is None:
        return None
    for attr in ("src", "data-src"):
        src = (img.get(attr) or "").strip().lstrip("@")
        # Lazy-loaded thumbnails carry an inline placeholder in src
        if not src or src.startswith("data:"):
            continue
        if src.startswith("//"):
            src = f"https:{src}"
        return src
    return None


def _parse_row(row) -> Optional[Game]:
    cells = row.find_all("td", recursive=False)
    if len(cells) < MIN_LISTING_COLUMNS:
        return None

    rank = _sort_value(cells[0])
    if rank is None or rank < 1:
        return None

    title_cell = cells[2]
    title_anchor = title_cell.find("a")
    title = title_anchor.get_text(strip=True) if title_anchor else ""
    if not title:
        return None

    year_match = YEAR_PATTERN.search(title_cell.get_text())
    year = normalize_number(year_match.group(1)) if year_match else None

    href = (title_anchor.get("href") or "").strip()
    url = urljoin(BASE_URL, href) if href else None

    geek_rating = _sort_value(cells[3])
    avg_rating = _sort_value(cells[4])
    num_voters = round_to(_sort_value(cells[5]), 0)

    return Game(
        rank=int(rank),
        title=title,
        year=year,
        image=_image_url(cells[1]),
        url=url,
        geek_rating=round_to(geek_rating, 3),
        avg_rating=round_to(avg_rating, 2),
        num_voters=None if num_voters is None else int(num_voters),
    )


def extract_games_from_html(html: str) -> List[Game]:
    """
    Extract ranked games from one listing page, in page order.

    Header rows, filler rows and rows without a readable rank are skipped.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table", id="collectionitems")
    if table is None:
        logger.warning("No rankings table found on listing page")
        return []

    games = []
    for row in table.find_all("tr"):
        game = safe_execute(_parse_row, row, error_msg="Skipping unreadable listing row")
        if game is not None:
            games.append(game)
    return games


def get_next_page_url(html: str, current_url: str) -> Optional[str]:
    """Return the absolute URL of the next listing page, or None on the last page."""
    soup = BeautifulSoup(html, "html.parser")
    for anchor in soup.find_all("a", href=True):
        title = (anchor.get("title") or "").strip().lower()
        if title == "next page" or NEXT_LABEL_PATTERN.search(anchor.get_text()):
            return urljoin(current_url, anchor["href"])
    return None
