import json

import pytest

from bgg_rankings.config import OUTPUT_FIELDS
from bgg_rankings.dataset import GameDataset
from bgg_rankings.models import Game


@pytest.fixture
def dataset():
    return GameDataset([
        Game(rank=1, title="Brass: Birmingham", year=2018, weight=3.87, min_players=2, num_voters=45210),
        Game(rank=2, title="Pandemic Legacy: Season 1", year=2015, weight=2.83, min_players=2),
        Game(rank=3, title="Gloomhaven 2", year=2017, weight=None, min_players=1),
        Game(rank=4, title="gloomhaven 10", year=2020, weight=0.0, min_players=None),
    ])


def test_save_writes_nulls_and_zeros_exactly(tmp_path, dataset):
    out = dataset.save(tmp_path / "nested" / "boardgames.json")

    rows = json.loads(out.read_text(encoding="utf-8"))
    assert list(rows[0].keys()) == OUTPUT_FIELDS
    assert rows[2]["weight"] is None
    assert rows[3]["weight"] == 0.0
    assert rows[3]["min_players"] is None
    assert rows[0]["image"] is None


def test_load_reads_back_saved_games(tmp_path, dataset):
    path = dataset.save(tmp_path / "boardgames.json")

    loaded = GameDataset.load(path)

    assert [g.to_dict() for g in loaded.games] == [g.to_dict() for g in dataset.games]


def test_load_rejects_non_array(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"rank": 1}', encoding="utf-8")

    with pytest.raises(ValueError):
        GameDataset.load(path)


def test_search_matches_title_or_year_case_insensitively(dataset):
    assert [g.rank for g in dataset.search("GLOOM")] == [3, 4]
    assert [g.rank for g in dataset.search("2015")] == [2]
    assert len(dataset.search("  ")) == 4


def test_range_filters_exclude_missing_values(dataset):
    assert [g.rank for g in dataset.filter_range("weight", "gte", "2,5")] == [1, 2]
    assert [g.rank for g in dataset.filter_range("weight", "at-most", 3)] == [2, 4]
    assert [g.rank for g in dataset.filter_range("min_players", "lte", 1)] == [3]


def test_range_filter_rejects_bad_input(dataset):
    with pytest.raises(ValueError):
        dataset.filter_range("title", "gte", 1)
    with pytest.raises(ValueError):
        dataset.filter_range("weight", "between", 1)


def test_numeric_sort_puts_missing_first(dataset):
    assert [g.rank for g in dataset.sort("weight")] == [3, 4, 2, 1]
    assert [g.rank for g in dataset.sort("weight", descending=True)] == [1, 2, 4, 3]


def test_text_sort_is_case_insensitive_and_numeric_aware(dataset):
    titles = [g.title for g in dataset.sort("title")]

    assert titles == ["Brass: Birmingham", "Gloomhaven 2", "gloomhaven 10", "Pandemic Legacy: Season 1"]


def test_query_combines_search_filters_and_sort(dataset):
    games = dataset.query(search="a", filters=[("weight", "gte", "1")], sort_key="weight", descending=True)

    assert [g.rank for g in games] == [1, 2]
    assert dataset.summary(games) == "2 of 4 games"


def test_unknown_sort_field(dataset):
    with pytest.raises(ValueError):
        dataset.sort("publisher")
