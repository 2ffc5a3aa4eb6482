"""
Dataset module for crawled BGG games.

This module handles:
- Writing and reading the JSON artifact
- Search, range filters and sorting over the games
"""

from .operations import GameDataset
from ..models import Game

__all__ = [
    "Game",
    "GameDataset",
]
