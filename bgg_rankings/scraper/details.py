"""
Extraction of gameplay attributes from a BGG game detail page.

Detail pages come in several shapes, so extraction is an ordered list of
independent strategies, most reliable first:

1. the ``GEEK.geekitemPreload`` JSON object embedded in a script tag
2. the Next.js ``__NEXT_DATA__`` JSON payload used by newer page variants
3. regular expressions over the visible page text

Each strategy takes the raw page and returns ``DetailAttributes`` or ``None``
when it found nothing usable. The first strategy that yields any data is used
as-is; values are never mixed across strategies.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup

from ..error_handling import handle_errors
from ..models import DetailAttributes
from .normalize import coerce_float, coerce_int

logger = logging.getLogger(__name__)

PRELOAD_PATTERN = re.compile(r"GEEK\.geekitemPreload\s*=\s*")
NUMPLAYERS_POLL_PATTERN = re.compile(r"suggested_numplayers", re.IGNORECASE)

PLAYERS_TEXT_PATTERN = re.compile(r"Players[^\d]*(\d+)\s*[\-–]\s*(\d+)", re.IGNORECASE)
PLAYTIME_TEXT_PATTERN = re.compile(r"Playing\s*time[^\d]*(\d+)\s*[\-–]\s*(\d+)", re.IGNORECASE)
BEST_TEXT_PATTERN = re.compile(r"Best:\s*([\d,\s\-–]+)", re.IGNORECASE)
WEIGHT_TEXT_PATTERNS = (
    re.compile(r"Weight[^\d]*([\d.]+)\s*/\s*5", re.IGNORECASE),
    re.compile(r"Complexity[^\d]*([\d.]+)", re.IGNORECASE),
)

Strategy = Callable[[str], Optional[DetailAttributes]]
BestRange = Tuple[Optional[int], Optional[int]]


def _first_present(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _min_max(numbers: Iterable[Optional[int]]) -> BestRange:
    present = [n for n in numbers if n is not None]
    if not present:
        return None, None
    return min(present), max(present)


# ---------------------------------------------------------------------------
# Strategy 1: GEEK.geekitemPreload
# ---------------------------------------------------------------------------

def _load_preload(html: str) -> Optional[Dict[str, Any]]:
    match = PRELOAD_PATTERN.search(html)
    if not match:
        return None
    # raw_decode stops at the end of the object, whatever follows it
    payload, _end = json.JSONDecoder().raw_decode(html, match.end())
    if not isinstance(payload, dict):
        raise ValueError("geekitemPreload is not an object")
    return payload


def best_range_from_ranges(ranges: Any) -> BestRange:
    """
    Collapse the preload poll's list of ``{"min": .., "max": ..}`` ranges
    into one range: the smallest min and the largest max across all of them.
    """
    if not isinstance(ranges, list) or not ranges:
        return None, None
    ranges = [r for r in ranges if isinstance(r, dict)]
    mins = [coerce_int(r.get("min")) for r in ranges]
    maxs = [coerce_int(r.get("max")) for r in ranges]
    low, _ = _min_max(mins)
    _, high = _min_max(maxs)
    if low is None or high is None:
        return None, None
    return low, high


@handle_errors(default_return=None, log_level=logging.DEBUG)
def extract_from_preload(html: str) -> Optional[DetailAttributes]:
    """Read attributes from the embedded ``GEEK.geekitemPreload`` object."""
    preload = _load_preload(html)
    if preload is None:
        return None
    item = preload.get("item") or {}

    weight = _first_present(
        _dig(item, "polls", "boardgameweight", "averageweight"),
        _dig(item, "stats", "avgweight"),
    )
    min_best, max_best = best_range_from_ranges(_dig(item, "polls", "userplayers", "best"))

    return DetailAttributes(
        min_players=coerce_int(item.get("minplayers")),
        max_players=coerce_int(item.get("maxplayers")),
        min_best_players=min_best,
        max_best_players=max_best,
        min_playing_time=coerce_int(item.get("minplaytime")),
        max_playing_time=coerce_int(item.get("maxplaytime")),
        weight=coerce_float(weight, 2),
    )


# ---------------------------------------------------------------------------
# Strategy 2: Next.js __NEXT_DATA__
# ---------------------------------------------------------------------------

def _load_next_data(html: str) -> Optional[Dict[str, Any]]:
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id="__NEXT_DATA__")
    if script is None:
        return None
    text = script.string or script.get_text()
    if not text.strip():
        return None
    payload = json.loads(text)
    if not isinstance(payload, dict):
        raise ValueError("__NEXT_DATA__ is not an object")
    return payload


def _vote_bucket(label: str) -> Optional[str]:
    label = label.lower()
    if re.search(r"not\s*recommended", label):
        return "not_recommended"
    if "best" in label:
        return "best"
    if "recommended" in label:
        return "recommended"
    return None


def _tallies(results: Any) -> Dict[str, int]:
    tallies = {"best": 0, "recommended": 0, "not_recommended": 0}
    seen = set()
    if not isinstance(results, list):
        return tallies
    for entry in results:
        if not isinstance(entry, dict):
            continue
        bucket = _vote_bucket(str(entry.get("value") or ""))
        if bucket is None or bucket in seen:
            continue
        seen.add(bucket)
        tallies[bucket] = coerce_int(entry.get("numvotes")) or 0
    return tallies


def best_range_from_poll(poll: Any) -> BestRange:
    """
    Derive the best player range from a ``suggested_numplayers`` poll.

    A player count is "best" only when its Best tally is strictly higher
    than both its Recommended and Not Recommended tallies; ties exclude it.
    """
    if not isinstance(poll, dict) or not isinstance(poll.get("results"), list):
        return None, None

    best_counts: List[int] = []
    for option in poll["results"]:
        if not isinstance(option, dict):
            continue
        token = str(_first_present(option.get("numplayers"), option.get("numPlayers"), ""))
        digits = re.search(r"\d+", token)
        count = coerce_int(digits.group(0)) if digits else None
        if not count:
            continue
        tallies = _tallies(option.get("result"))
        best = tallies["best"]
        if best > tallies["recommended"] and best > tallies["not_recommended"]:
            best_counts.append(count)
    return _min_max(best_counts)


def _game_object(page_props: Dict[str, Any]) -> Dict[str, Any]:
    for candidate in (
        page_props.get("game"),
        _dig(page_props, "data", "game"),
        page_props.get("boardgame"),
    ):
        if isinstance(candidate, dict) and candidate:
            return candidate
    return page_props


@handle_errors(default_return=None, log_level=logging.DEBUG)
def extract_from_next_data(html: str) -> Optional[DetailAttributes]:
    """Read attributes from the Next.js ``__NEXT_DATA__`` payload."""
    next_data = _load_next_data(html)
    if next_data is None:
        return None
    page_props = _dig(next_data, "props", "pageProps")
    if not isinstance(page_props, dict):
        page_props = {}
    game = _game_object(page_props)

    def lookup(*keys: str) -> Any:
        return _first_present(
            *(game.get(key) for key in keys),
            *(page_props.get(key) for key in keys),
        )

    weight = _first_present(
        _dig(game, "statistics", "ratings", "averageweight"),
        game.get("averageweight"),
        game.get("averageWeight"),
        _dig(page_props, "statistics", "ratings", "averageweight"),
        page_props.get("averageweight"),
        page_props.get("averageWeight"),
    )

    polls = _first_present(game.get("polls"), page_props.get("polls"))
    poll = None
    if isinstance(polls, list):
        poll = next(
            (p for p in polls
             if isinstance(p, dict) and NUMPLAYERS_POLL_PATTERN.search(str(p.get("name") or ""))),
            None,
        )
    min_best, max_best = best_range_from_poll(poll)

    return DetailAttributes(
        min_players=coerce_int(lookup("minplayers", "minPlayers")),
        max_players=coerce_int(lookup("maxplayers", "maxPlayers")),
        min_best_players=min_best,
        max_best_players=max_best,
        min_playing_time=coerce_int(lookup("minplaytime", "minPlaytime")),
        max_playing_time=coerce_int(lookup("maxplaytime", "maxPlaytime")),
        weight=coerce_float(weight, 2),
    )


# ---------------------------------------------------------------------------
# Strategy 3: visible text
# ---------------------------------------------------------------------------

def best_range_from_text(text: str) -> BestRange:
    """Parse a ``Best: 3-4`` or ``Best: 2, 4`` annotation."""
    match = BEST_TEXT_PATTERN.search(text or "")
    if not match:
        return None, None
    return _min_max(int(n) for n in re.findall(r"\d+", match.group(1)))


def _text_range(pattern: "re.Pattern", text: str) -> BestRange:
    match = pattern.search(text)
    if not match:
        return None, None
    return coerce_int(match.group(1)), coerce_int(match.group(2))


def extract_from_text(html: str) -> Optional[DetailAttributes]:
    """Heuristic last resort: pattern-match the rendered page text."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body or soup
    text = root.get_text(" ")

    min_players, max_players = _text_range(PLAYERS_TEXT_PATTERN, text)
    min_time, max_time = _text_range(PLAYTIME_TEXT_PATTERN, text)
    min_best, max_best = best_range_from_text(text)

    weight = None
    for pattern in WEIGHT_TEXT_PATTERNS:
        match = pattern.search(text)
        if match:
            weight = coerce_float(match.group(1), 2)
            break

    return DetailAttributes(
        min_players=min_players,
        max_players=max_players,
        min_best_players=min_best,
        max_best_players=max_best,
        min_playing_time=min_time,
        max_playing_time=max_time,
        weight=weight,
    )


DETAIL_STRATEGIES: Tuple[Tuple[str, Strategy], ...] = (
    ("geekitem_preload", extract_from_preload),
    ("next_data", extract_from_next_data),
    ("visible_text", extract_from_text),
)


def extract_details_from_html(html: str,
                              strategies: Tuple[Tuple[str, Strategy], ...] = DETAIL_STRATEGIES,
                              ) -> DetailAttributes:
    """
    Run the extraction strategies in order and return the first usable result.

    Returns all-missing attributes when no strategy recognises the page.
    """
    for name, strategy in strategies:
        details = strategy(html)
        if details is None or details.is_empty():
            logger.debug(f"Detail strategy '{name}' found nothing")
            continue
        logger.debug(f"Detail strategy '{name}' matched")
        return details
    return DetailAttributes()
