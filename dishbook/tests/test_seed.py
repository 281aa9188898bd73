from __future__ import annotations

import json
from pathlib import Path

import pytest

from dishbook.catalog.store import DishStore
from dishbook.seed.loader import SeedError, load_seed


def test_bundled_seed_loads_into_store():
    seed = load_seed()
    store = DishStore()
    store.load(seed.categories, seed.dishes, seed.user_dishes)

    assert len(store.categories()) == 6
    assert len(store.get_filtered_dishes()) == 10
    assert {ud.dish_id for ud in store.get_my_dishes()} == {"dish_1", "dish_2", "dish_4"}
    assert all(d.is_preset for d in seed.dishes)


def test_bundled_seed_stats():
    seed = load_seed()
    store = DishStore()
    store.load(seed.categories, seed.dishes, seed.user_dishes)
    stats = store.get_dish_stats()

    assert stats.favorite_dishes == 2
    assert stats.most_cooked_dish.id == "dish_2"
    assert [d.id for d in stats.recent_additions] == ["dish_4", "dish_2", "dish_1"]


def test_missing_seed_file_raises(tmp_path: Path):
    with pytest.raises(SeedError):
        load_seed(tmp_path / "absent.json")


def test_malformed_seed_file_raises(tmp_path: Path):
    path = tmp_path / "seed.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SeedError):
        load_seed(path)


def test_seed_with_bad_record_raises(tmp_path: Path):
    path = tmp_path / "seed.json"
    path.write_text(
        json.dumps({"categories": [], "dishes": [{"id": "d1", "name": "x"}]}),
        encoding="utf-8",
    )
    with pytest.raises(SeedError):
        load_seed(path)


def test_partial_seed_defaults_to_empty_collections(tmp_path: Path):
    path = tmp_path / "seed.json"
    path.write_text(json.dumps({"categories": [{"id": "c1", "name": "Soups"}]}), encoding="utf-8")
    seed = load_seed(path)

    assert len(seed.categories) == 1
    assert seed.dishes == []
    assert seed.user_dishes == []
