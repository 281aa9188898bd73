from __future__ import annotations

import logging
import unicodedata
from collections.abc import Iterable, Mapping
from typing import Any, Callable

from .models import (
    Category,
    Dish,
    DishFilters,
    DishStats,
    DishWithCategory,
    SortOption,
    UserDish,
    UserDishWithDetails,
)

logger = logging.getLogger(__name__)

DEFAULT_RECENT_ADDITIONS = 5


def _name_key(dish: Dish) -> str:
    """Collation key for dish names: accents dropped, case folded."""
    decomposed = unicodedata.normalize("NFKD", dish.name)
    return "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()


def _rating_key(user_dishes: Mapping[str, UserDish]) -> Callable[[Dish], int]:
    def key(dish: Dish) -> int:
        overlay = user_dishes.get(dish.id)
        if overlay is None or overlay.personal_rating is None:
            return 0
        return overlay.personal_rating

    return key


# (key, reverse) per sort option; missing cooking time counts as 0
_SORTS: dict[SortOption, tuple[Callable[[Dish], Any], bool]] = {
    SortOption.name_asc: (_name_key, False),
    SortOption.name_desc: (_name_key, True),
    SortOption.created_at_asc: (lambda d: d.created_at, False),
    SortOption.created_at_desc: (lambda d: d.created_at, True),
    SortOption.cooking_time_asc: (lambda d: d.cooking_time or 0, False),
    SortOption.cooking_time_desc: (lambda d: d.cooking_time or 0, True),
}


def join_category(
    dish: Dish, categories: Mapping[str, Category]
) -> DishWithCategory | None:
    """Attach the dish's category, or return None when it cannot be resolved."""
    category = categories.get(dish.category_id)
    if category is None:
        return None
    return DishWithCategory(**dish.model_dump(), category=category)


def join_dishes(
    dishes: Iterable[Dish], categories: Mapping[str, Category]
) -> list[DishWithCategory]:
    joined: list[DishWithCategory] = []
    for dish in dishes:
        row = join_category(dish, categories)
        if row is None:
            logger.warning(
                "Dish %s references unknown category %s, skipping",
                dish.id,
                dish.category_id,
            )
            continue
        joined.append(row)
    return joined


def _matches_query(dish: Dish, query: str) -> bool:
    if query in dish.name.lower():
        return True
    if dish.description and query in dish.description.lower():
        return True
    return any(query in tag.lower() for tag in dish.tags)


def apply_filters(
    dishes: list[DishWithCategory],
    filters: DishFilters,
    user_dishes: Mapping[str, UserDish],
) -> list[DishWithCategory]:
    """Keep dishes matching every active filter (AND across fields, OR within)."""
    result = dishes

    if filters.category_ids:
        result = [d for d in result if d.category_id in filters.category_ids]

    if filters.difficulties:
        result = [d for d in result if d.difficulty in filters.difficulties]

    if filters.cooking_time_max is not None:
        limit = filters.cooking_time_max
        result = [
            d for d in result if d.cooking_time is None or d.cooking_time <= limit
        ]

    if filters.search_query:
        query = filters.search_query.strip().lower()
        if query:
            result = [d for d in result if _matches_query(d, query)]

    if filters.tags:
        wanted = {t.strip().lower() for t in filters.tags}
        result = [d for d in result if wanted & {t.lower() for t in d.tags}]

    if filters.is_favorite is not None:
        def is_favorite(dish_id: str) -> bool:
            overlay = user_dishes.get(dish_id)
            return overlay is not None and overlay.is_favorite

        result = [d for d in result if is_favorite(d.id) == filters.is_favorite]

    return result


def sort_dishes(
    dishes: list[DishWithCategory],
    sort_by: SortOption,
    user_dishes: Mapping[str, UserDish],
) -> list[DishWithCategory]:
    """Stable sort; equal keys keep collection order in either direction."""
    if sort_by is SortOption.rating_desc:
        return sorted(dishes, key=_rating_key(user_dishes), reverse=True)
    key, reverse = _SORTS[sort_by]
    return sorted(dishes, key=key, reverse=reverse)


def filtered_dishes(
    dishes: Mapping[str, Dish],
    categories: Mapping[str, Category],
    user_dishes: Mapping[str, UserDish],
    filters: DishFilters | None = None,
    sort_by: SortOption = SortOption.name_asc,
) -> list[DishWithCategory]:
    joined = join_dishes(dishes.values(), categories)
    if filters is not None:
        joined = apply_filters(joined, filters, user_dishes)
    return sort_dishes(joined, sort_by, user_dishes)


def my_dishes(
    dishes: Mapping[str, Dish],
    categories: Mapping[str, Category],
    user_dishes: Mapping[str, UserDish],
) -> list[UserDishWithDetails]:
    """Join each overlay to its dish and category, dropping unresolvable ones."""
    rows: list[UserDishWithDetails] = []
    for overlay in user_dishes.values():
        dish = dishes.get(overlay.dish_id)
        if dish is None:
            logger.warning(
                "Overlay %s references unknown dish %s, skipping",
                overlay.id,
                overlay.dish_id,
            )
            continue
        joined = join_category(dish, categories)
        if joined is None:
            logger.warning(
                "Dish %s references unknown category %s, skipping overlay %s",
                dish.id,
                dish.category_id,
                overlay.id,
            )
            continue
        rows.append(UserDishWithDetails(**overlay.model_dump(), dish=joined))
    return rows


def compute_stats(
    dishes: Mapping[str, Dish],
    categories: Mapping[str, Category],
    user_dishes: Mapping[str, UserDish],
    recent_limit: int = DEFAULT_RECENT_ADDITIONS,
) -> DishStats:
    mine = my_dishes(dishes, categories, user_dishes)
    favorites = [ud for ud in mine if ud.is_favorite]

    # max() keeps the first entry among equal cook counts
    most_cooked = max(mine, key=lambda ud: ud.cook_count).dish if mine else None

    recent = sorted(mine, key=lambda ud: ud.added_at, reverse=True)[:recent_limit]

    return DishStats(
        total_dishes=len(dishes),
        favorite_dishes=len(favorites),
        categories_count=len(categories),
        most_cooked_dish=most_cooked,
        recent_additions=[ud.dish for ud in recent],
    )
