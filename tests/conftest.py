"""
Shared fixtures: HTML builders for BGG pages and a fake HTTP session.
"""

import json

import pytest
import requests

START_URL = "https://boardgamegeek.com/browse/boardgame"
PAGE_2_URL = "https://boardgamegeek.com/browse/boardgame/page/2"


def game_url(game_id):
    return f"https://boardgamegeek.com/boardgame/{game_id}/game-{game_id}"


def listing_row(rank, title, year=None, href=None, image="//cf.geekdo-images.com/thumb.jpg",
                geek_rating="8.41234", avg_rating="8.6012", voters="45,210"):
    year_html = f' <span class="smallerfont dull">({year})</span>' if year else ""
    href = href if href is not None else f"/boardgame/{rank}/game-{rank}"
    anchor = f'<a href="{href}" class="primary">{title}</a>' if href else f'<a class="primary">{title}</a>'
    img = f'<a href="{href}"><img alt="Board Game: {title}" src="{image}"/></a>' if image else ""
    return (
        "<tr>"
        f'<td class="collection_rank"><a name="{rank}"></a>{rank}</td>'
        f'<td class="collection_thumbnail">{img}</td>'
        f'<td class="collection_objectname"><div>{anchor}{year_html}</div></td>'
        f'<td class="collection_bggrating" data-sort="{geek_rating}">{geek_rating[:4]}</td>'
        f'<td class="collection_bggrating" data-sort="{avg_rating}">{avg_rating[:4]}</td>'
        f'<td class="collection_bggrating">{voters}</td>'
        "</tr>"
    )


def listing_page(rows, next_href=None):
    pager = ""
    if next_href:
        pager = f'<a href="{next_href}" title="next page"><b>Next &raquo;</b></a>'
    header = (
        '<tr><th>Board Game Rank</th><th>Thumbnail image</th><th>Title</th>'
        '<th>Geek Rating</th><th>Avg Rating</th><th>Num Voters</th></tr>'
    )
    return (
        "<html><body>"
        f'<div class="infobox">{pager}</div>'
        f'<table id="collectionitems" class="collection_table">{header}{"".join(rows)}</table>'
        f'<div class="infobox">{pager}</div>'
        "</body></html>"
    )


def preload_page(item):
    payload = json.dumps({"item": item, "config": {"siteurl": "boardgamegeek.com"}})
    return (
        "<html><head><script>\n"
        f"GEEK.geekitemPreload = {payload};\n"
        'GEEK.geekitemSettings = {"comments": true};\n'
        "</script></head><body><h1>Game</h1></body></html>"
    )


def next_data_page(page_props):
    payload = json.dumps({"props": {"pageProps": page_props}, "page": "/boardgame/[id]"})
    return (
        "<html><head></head><body><div id=\"__next\"></div>"
        f'<script id="__NEXT_DATA__" type="application/json">{payload}</script>'
        "</body></html>"
    )


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """
    Stands in for ``requests.Session``.

    ``routes`` maps a URL to a response, an exception to raise, a callable
    returning either, or a list of those consumed one per request (the last
    entry repeats). Unknown URLs raise ``requests.ConnectionError``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.headers = {}
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.calls.append(url)
        if url not in self.routes:
            raise requests.ConnectionError(f"no route to {url}")
        outcome = self.routes[url]
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if callable(outcome):
            outcome = outcome()
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, str):
            return FakeResponse(outcome)
        return outcome

    def close(self):
        self.closed = True


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def sleeper():
    return SleepRecorder()
