"""
Shared data models for the BGG rankings crawler.
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Any, Dict, List, Optional

from .config import OUTPUT_FIELDS


@dataclass
class DetailAttributes:
    """Gameplay attributes recovered from a game's detail page."""
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    min_best_players: Optional[int] = None
    max_best_players: Optional[int] = None
    min_playing_time: Optional[int] = None
    max_playing_time: Optional[int] = None
    weight: Optional[float] = None

    def is_empty(self) -> bool:
        """True when every field is missing. Zero counts as present."""
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass
class Game:
    """
    One ranked game from the browse listing, enriched in place with its
    detail attributes.

    ``url`` is the absolute detail page reference; a game without one keeps
    missing detail attributes.
    """
    rank: int
    title: str
    year: Optional[int] = None
    image: Optional[str] = None
    url: Optional[str] = None
    geek_rating: Optional[float] = None
    avg_rating: Optional[float] = None
    num_voters: Optional[int] = None
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    min_best_players: Optional[int] = None
    max_best_players: Optional[int] = None
    min_playing_time: Optional[int] = None
    max_playing_time: Optional[int] = None
    weight: Optional[float] = None

    def apply_details(self, details: DetailAttributes) -> None:
        """Merge detail attributes into this game."""
        for name, value in asdict(details).items():
            setattr(self, name, value)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        return {key: data[key] for key in OUTPUT_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class CrawlResult:
    """Outcome of one crawl run."""
    games: List[Game] = field(default_factory=list)
    pages_crawled: int = 0
    enriched: int = 0
    failed_ranks: List[int] = field(default_factory=list)
    cancelled: bool = False
    listing_error: Optional[str] = None
