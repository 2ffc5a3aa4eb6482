"""
Command-line interface for the BGG rankings crawler.

This module provides CLI commands for:
- Crawling the rankings into a JSON dataset
- Querying an existing dataset
"""

from .main import main

__all__ = [
    "main",
]
