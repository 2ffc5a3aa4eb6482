import importlib
import json

import pytest

from bgg_rankings.dataset import GameDataset
from bgg_rankings.error_handling import StartPageError
from bgg_rankings.models import CrawlResult, Game

cli_main = importlib.import_module("bgg_rankings.cli.main")


class FakeCollector:
    outcome = None
    calls = []

    def __init__(self, fetcher=None, attempts=3, **kwargs):
        self.fetcher = fetcher
        self.attempts = attempts

    def collect(self, limit, all_pages=False):
        FakeCollector.calls.append((limit, all_pages, self.attempts, self.fetcher.pacer.min_interval))
        if isinstance(FakeCollector.outcome, Exception):
            raise FakeCollector.outcome
        return FakeCollector.outcome


@pytest.fixture
def fake_collector(monkeypatch):
    FakeCollector.calls = []
    monkeypatch.setattr(cli_main, "BGGRankingsCollector", FakeCollector)
    monkeypatch.setattr(cli_main, "setup_logging", lambda *a, **k: None)
    return FakeCollector


def test_crawl_writes_dataset(tmp_path, fake_collector, capsys):
    fake_collector.outcome = CrawlResult(
        games=[Game(rank=1, title="Brass: Birmingham", min_players=2)], pages_crawled=1, enriched=1,
    )
    out = tmp_path / "games.json"

    code = cli_main.main(["--limit", "5", "--delay", "0", "--attempts", "2", "--out", str(out)])

    assert code == 0
    assert fake_collector.calls == [(5, False, 2, 0.0)]
    rows = json.loads(out.read_text(encoding="utf-8"))
    assert rows[0]["title"] == "Brass: Birmingham"
    assert rows[0]["weight"] is None
    assert "CRAWL RESULTS" in capsys.readouterr().out


def test_crawl_all_pages_flag(tmp_path, fake_collector):
    fake_collector.outcome = CrawlResult()

    code = cli_main.main(["crawl", "-a", "-o", str(tmp_path / "all.json")])

    assert code == 0
    assert fake_collector.calls[0][1] is True


def test_unreachable_start_page_exits_non_zero(tmp_path, fake_collector):
    fake_collector.outcome = StartPageError("refused")
    out = tmp_path / "games.json"

    code = cli_main.main(["crawl", "--out", str(out)])

    assert code == 1
    assert not out.exists()


def test_show_filters_and_sorts(tmp_path, capsys):
    path = GameDataset([
        Game(rank=1, title="Brass: Birmingham", weight=3.87),
        Game(rank=2, title="Cascadia", weight=1.85),
        Game(rank=3, title="Spirit Island", weight=4.08),
    ]).save(tmp_path / "games.json")

    code = cli_main.main(["show", str(path), "--filter", "weight:gte:3", "--sort", "weight", "--desc"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.index("Spirit Island") < out.index("Brass: Birmingham")
    assert "Cascadia" not in out
    assert "2 of 3 games" in out


def test_show_missing_file(tmp_path, capsys):
    code = cli_main.main(["show", str(tmp_path / "nope.json")])

    assert code == 2
    assert "Error" in capsys.readouterr().err
