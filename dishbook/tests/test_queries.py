from __future__ import annotations

from datetime import datetime, timedelta, timezone

from dishbook.catalog.models import (
    Category,
    Difficulty,
    Dish,
    DishFilters,
    SortOption,
    UserDish,
)
from dishbook.catalog.store import DishStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _dish(id: str, name: str, category_id: str = "c1", days: int = 0, **kwargs) -> Dish:
    created = T0 + timedelta(days=days)
    return Dish(
        id=id,
        name=name,
        category_id=category_id,
        created_at=created,
        updated_at=created,
        **kwargs,
    )


def _overlay(dish_id: str, days: int = 0, **kwargs) -> UserDish:
    return UserDish(
        id=f"u_{dish_id}",
        dish_id=dish_id,
        added_at=T0 + timedelta(days=days),
        **kwargs,
    )


CATEGORIES = [
    Category(id="c1", name="Home cooking"),
    Category(id="c2", name="Sichuan"),
    Category(id="c3", name="Soups"),
]


def _catalog_store() -> DishStore:
    store = DishStore()
    store.load(
        CATEGORIES,
        [
            _dish("d1", "Kung pao chicken", "c2", days=3, difficulty=Difficulty.medium,
                  cooking_time=30, tags=["Spicy", "peanuts"]),
            _dish("d2", "tomato eggs", "c1", days=1, difficulty=Difficulty.easy,
                  cooking_time=15, description="Sweet and sour"),
            _dish("d3", "Braised pork", "c1", days=2, difficulty=Difficulty.medium,
                  cooking_time=90),
            _dish("d4", "Rib soup", "c3", days=0, difficulty=Difficulty.easy),
            _dish("d5", "Orphan", "missing", days=4),
        ],
    )
    return store


def _names(dishes) -> list[str]:
    return [d.name for d in dishes]


# ── Join ─────────────────────────────────────────────────────────────────


def test_dish_with_missing_category_is_excluded_from_views():
    store = _catalog_store()
    ids = [d.id for d in store.get_filtered_dishes()]

    assert "d5" not in ids
    assert len(ids) == 4
    assert store.get_dish_by_id("d5") is None
    # the raw record is untouched
    assert "d5" in store.dishes


def test_joined_dish_carries_category():
    store = _catalog_store()
    dish = store.get_dish_by_id("d1")
    assert dish.category.name == "Sichuan"
    assert dish.is_custom is True


# ── Filters ──────────────────────────────────────────────────────────────


def test_cooking_time_max_keeps_only_quick_dish():
    store = DishStore()
    store.load(
        CATEGORIES,
        [_dish("d1", "Quick", cooking_time=15), _dish("d2", "Slow", cooking_time=90)],
    )
    result = store.get_filtered_dishes(DishFilters(cooking_time_max=30))
    assert [d.id for d in result] == ["d1"]


def test_dish_without_cooking_time_passes_max_filter():
    store = _catalog_store()
    result = store.get_filtered_dishes(DishFilters(cooking_time_max=20))
    assert {d.id for d in result} == {"d2", "d4"}


def test_zero_cooking_time_max_is_a_real_bound():
    store = _catalog_store()
    result = store.get_filtered_dishes(DishFilters(cooking_time_max=0))
    assert [d.id for d in result] == ["d4"]


def test_search_query_is_trimmed_and_blank_query_disables_filter():
    store = _catalog_store()
    padded = store.get_filtered_dishes(DishFilters(search_query="  pork "))
    blank = store.get_filtered_dishes(DishFilters(search_query="   "))

    assert [d.id for d in padded] == ["d3"]
    assert len(blank) == 4


def test_category_filter_is_or_within_field():
    store = _catalog_store()
    result = store.get_filtered_dishes(DishFilters(category_ids={"c2", "c3"}))
    assert {d.id for d in result} == {"d1", "d4"}


def test_filters_are_and_across_fields():
    store = _catalog_store()
    result = store.get_filtered_dishes(
        DishFilters(category_ids={"c1"}, difficulties={Difficulty.medium})
    )
    assert [d.id for d in result] == ["d3"]


def test_search_matches_name_description_or_tag_case_insensitively():
    store = _catalog_store()
    by_name = store.get_filtered_dishes(DishFilters(search_query="PORK"))
    by_description = store.get_filtered_dishes(DishFilters(search_query="sour"))
    by_tag = store.get_filtered_dishes(DishFilters(search_query="spicy"))

    assert [d.id for d in by_name] == ["d3"]
    assert [d.id for d in by_description] == ["d2"]
    assert [d.id for d in by_tag] == ["d1"]


def test_empty_filters_return_everything_joinable():
    store = _catalog_store()
    assert len(store.get_filtered_dishes(DishFilters())) == 4


def test_tag_filter():
    store = _catalog_store()
    result = store.get_filtered_dishes(DishFilters(tags={"peanuts"}))
    assert [d.id for d in result] == ["d1"]


def test_favorite_filter_uses_overlays():
    store = _catalog_store()
    store.ensure_favorite("d3")
    store.add_to_my_dishes("d1")

    favorites = store.get_filtered_dishes(DishFilters(is_favorite=True))
    others = store.get_filtered_dishes(DishFilters(is_favorite=False))

    assert [d.id for d in favorites] == ["d3"]
    assert {d.id for d in others} == {"d1", "d2", "d4"}


# ── Sorting ──────────────────────────────────────────────────────────────


def test_sort_by_name_ignores_case():
    store = _catalog_store()
    result = store.get_filtered_dishes(sort_by=SortOption.name_asc)
    assert _names(result) == ["Braised pork", "Kung pao chicken", "Rib soup", "tomato eggs"]


def test_sort_by_name_desc():
    store = _catalog_store()
    result = store.get_filtered_dishes(sort_by=SortOption.name_desc)
    assert _names(result) == ["tomato eggs", "Rib soup", "Kung pao chicken", "Braised pork"]


def test_name_sort_is_stable_for_equal_names():
    store = DishStore()
    store.load(
        CATEGORIES,
        [
            _dish("a1", "Soup"),
            _dish("b1", "Noodles"),
            _dish("a2", "soup"),
            _dish("b2", "Noodles"),
            _dish("a3", "Soup"),
        ],
    )
    asc = [d.id for d in store.get_filtered_dishes(sort_by=SortOption.name_asc)]
    desc = [d.id for d in store.get_filtered_dishes(sort_by=SortOption.name_desc)]

    assert asc == ["b1", "b2", "a1", "a2", "a3"]
    assert desc == ["a1", "a2", "a3", "b1", "b2"]


def test_sort_by_name_ignores_accents():
    store = DishStore()
    store.load(CATEGORIES, [_dish("a", "Cremz"), _dish("b", "Crème brûlée")])

    asc = [d.id for d in store.get_filtered_dishes(sort_by=SortOption.name_asc)]
    assert asc == ["b", "a"]


def test_accented_and_plain_names_tie_in_collection_order():
    store = DishStore()
    store.load(
        CATEGORIES,
        [_dish("a", "Pate"), _dish("b", "Pâte"), _dish("c", "Pate"), _dish("d", "Omelette")],
    )
    asc = [d.id for d in store.get_filtered_dishes(sort_by=SortOption.name_asc)]
    desc = [d.id for d in store.get_filtered_dishes(sort_by=SortOption.name_desc)]

    assert asc == ["d", "a", "b", "c"]
    assert desc == ["a", "b", "c", "d"]


def test_sort_by_created_at():
    store = _catalog_store()
    asc = store.get_filtered_dishes(sort_by=SortOption.created_at_asc)
    desc = store.get_filtered_dishes(sort_by=SortOption.created_at_desc)
    assert [d.id for d in asc] == ["d4", "d2", "d3", "d1"]
    assert [d.id for d in desc] == ["d1", "d3", "d2", "d4"]


def test_sort_by_cooking_time_treats_missing_as_zero():
    store = _catalog_store()
    asc = store.get_filtered_dishes(sort_by=SortOption.cooking_time_asc)
    desc = store.get_filtered_dishes(sort_by=SortOption.cooking_time_desc)
    assert [d.id for d in asc] == ["d4", "d2", "d1", "d3"]
    assert [d.id for d in desc] == ["d3", "d1", "d2", "d4"]


def test_sort_by_personal_rating():
    store = _catalog_store()
    store.add_to_my_dishes("d2")
    store.add_to_my_dishes("d4")
    store.user_dishes["d2"] = store.user_dishes["d2"].model_copy(update={"personal_rating": 3})
    store.user_dishes["d4"] = store.user_dishes["d4"].model_copy(update={"personal_rating": 5})

    result = store.get_filtered_dishes(sort_by=SortOption.rating_desc)
    assert [d.id for d in result] == ["d4", "d2", "d1", "d3"]


def test_dishes_by_category_applies_on_joined_view():
    store = _catalog_store()
    assert [d.id for d in store.get_dishes_by_category("c1")] == ["d3", "d2"]
    assert store.get_dishes_by_category("missing") == []


# ── My dishes ────────────────────────────────────────────────────────────


def test_my_dishes_drops_unresolvable_overlays():
    store = DishStore()
    store.load(
        CATEGORIES,
        [_dish("d1", "Kept"), _dish("d2", "No category", "missing")],
        [_overlay("d1"), _overlay("d2"), _overlay("ghost")],
    )
    mine = store.get_my_dishes()

    assert [ud.dish_id for ud in mine] == ["d1"]
    assert mine[0].dish.category.id == "c1"


def test_favorite_dishes():
    store = DishStore()
    store.load(
        CATEGORIES,
        [_dish("d1", "A"), _dish("d2", "B")],
        [_overlay("d1", is_favorite=True), _overlay("d2")],
    )
    assert [ud.dish_id for ud in store.get_favorite_dishes()] == ["d1"]


# ── Stats ────────────────────────────────────────────────────────────────


def test_stats_on_empty_library():
    store = _catalog_store()
    stats = store.get_dish_stats()

    assert stats.total_dishes == 5
    assert stats.favorite_dishes == 0
    assert stats.categories_count == 3
    assert stats.most_cooked_dish is None
    assert stats.recent_additions == []


def test_stats_most_cooked_and_recent_additions():
    store = DishStore()
    dishes = [_dish(f"d{i}", f"Dish {i}") for i in range(7)]
    overlays = [
        _overlay("d0", days=0, cook_count=4, is_favorite=True),
        _overlay("d1", days=5, cook_count=7),
        _overlay("d2", days=2, cook_count=7, is_favorite=True),
        _overlay("d3", days=6),
        _overlay("d4", days=1),
        _overlay("d5", days=3),
        _overlay("d6", days=4),
    ]
    store.load(CATEGORIES, dishes, overlays)
    stats = store.get_dish_stats()

    assert stats.total_dishes == 7
    assert stats.favorite_dishes == 2
    # tie on cook_count: first encountered wins
    assert stats.most_cooked_dish.id == "d1"
    assert [d.id for d in stats.recent_additions] == ["d3", "d1", "d6", "d5", "d2"]


def test_queries_reflect_latest_writes():
    store = _catalog_store()
    assert store.get_my_dishes() == []
    store.add_to_my_dishes("d1")
    assert len(store.get_my_dishes()) == 1
    store.delete_dish("d1")
    assert store.get_my_dishes() == []
