"""
Dataset operations for crawled BGG games.

This module persists crawl results as the JSON artifact consumed by the table
view, and reproduces that view's search, range filter and sort behaviour so
the same queries can be run from Python or the CLI.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..config import NUMERIC_FIELDS, OUTPUT_FIELDS
from ..models import Game

logger = logging.getLogger(__name__)

RANGE_OPERATORS = {
    "gte": "gte",
    "at-least": "gte",
    ">=": "gte",
    "lte": "lte",
    "at-most": "lte",
    "<=": "lte",
}

RangeFilter = Tuple[str, str, Union[str, float]]

_CHUNK_PATTERN = re.compile(r"(\d+)")


def _natural_key(text: str) -> List[Tuple[int, int, str]]:
    """Case-insensitive, numeric-aware sort key ("Game 9" before "Game 10")."""
    key = []
    for chunk in _CHUNK_PATTERN.split(text):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((0, int(chunk), ""))
        else:
            key.append((1, 0, chunk.casefold()))
    return key


def _parse_threshold(value: Union[str, float]) -> float:
    # The table view accepts decimal commas in its filter box
    return float(str(value).strip().replace(",", "."))


class GameDataset:
    """
    An ordered collection of crawled games backed by a JSON file.
    """

    def __init__(self, games: Optional[Iterable[Game]] = None):
        self.games: List[Game] = list(games or [])

    def __len__(self) -> int:
        return len(self.games)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "GameDataset":
        """
        Load a dataset previously written by ``save``.

        Args:
            path: Path to the JSON artifact

        Returns:
            The dataset, games in file order
        """
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"{path} does not contain a JSON array of games")
        games = [Game.from_dict(row) for row in data if isinstance(row, dict)]
        logger.info(f"Loaded {len(games)} games from {path}")
        return cls(games)

    def save(self, path: Union[str, Path]) -> Path:
        """
        Write the dataset as a JSON array. Missing values are written as null.

        Args:
            path: Output file, relative paths resolve against the working directory

        Returns:
            Absolute path of the written file
        """
        out_path = Path(path).expanduser().resolve()
        out_path.parent.mkdir(parents=True, exist_ok=True)
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump([game.to_dict() for game in self.games], f, indent=2, ensure_ascii=False)
        logger.info(f"Wrote {len(self.games)} games to {out_path}")
        return out_path

    def search(self, query: str, games: Optional[Sequence[Game]] = None) -> List[Game]:
        """Case-insensitive substring match over title and year."""
        rows = self.games if games is None else games
        q = (query or "").strip().lower()
        if not q:
            return list(rows)
        return [
            g for g in rows
            if q in (g.title or "").lower() or q in ("" if g.year is None else str(g.year))
        ]

    def filter_range(self, field: str, op: str, value: Union[str, float],
                     games: Optional[Sequence[Game]] = None) -> List[Game]:
        """
        Keep games whose numeric ``field`` is at least / at most ``value``.

        Games missing the field never match.
        """
        if field not in NUMERIC_FIELDS:
            raise ValueError(f"Cannot range-filter non-numeric field '{field}'")
        operator = RANGE_OPERATORS.get(op.lower())
        if operator is None:
            raise ValueError(f"Unknown range operator '{op}' (use gte or lte)")
        threshold = _parse_threshold(value)

        rows = self.games if games is None else games
        result = []
        for game in rows:
            current = getattr(game, field)
            if current is None:
                continue
            if operator == "gte" and current >= threshold:
                result.append(game)
            elif operator == "lte" and current <= threshold:
                result.append(game)
        return result

    def sort(self, key: str = "rank", descending: bool = False,
             games: Optional[Sequence[Game]] = None) -> List[Game]:
        """
        Sort by any output field. Numeric fields compare numerically, text
        fields case-insensitively with embedded numbers compared by value.
        Missing values sort as empty, ahead of everything else.
        """
        if key not in OUTPUT_FIELDS:
            raise ValueError(f"Unknown sort field '{key}'")
        rows = self.games if games is None else games

        if key in NUMERIC_FIELDS:
            def sort_key(game: Game):
                value = getattr(game, key)
                return (value is not None, value if value is not None else 0)
        else:
            def sort_key(game: Game):
                value = getattr(game, key)
                return _natural_key("" if value is None else str(value))

        return sorted(rows, key=sort_key, reverse=descending)

    def query(self, search: Optional[str] = None, filters: Iterable[RangeFilter] = (),
              sort_key: str = "rank", descending: bool = False) -> List[Game]:
        """Apply search, then each range filter, then the sort."""
        rows = self.search(search or "")
        for field, op, value in filters:
            rows = self.filter_range(field, op, value, games=rows)
        return self.sort(sort_key, descending, games=rows)

    def summary(self, shown: Sequence[Game]) -> str:
        return f"{len(shown)} of {len(self.games)} games"
