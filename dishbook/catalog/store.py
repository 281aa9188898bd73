from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Callable

from ..config import DEFAULT_STORE_CONFIG, StoreConfig
from ..recommendations.engine import Recommender
from ..recommendations.models import RandomRecommendation
from .models import (
    Category,
    Dish,
    DishCreate,
    DishFilters,
    DishStats,
    DishUpdate,
    DishWithCategory,
    SortOption,
    UserDish,
    UserDishUpdate,
    UserDishWithDetails,
)
from .queries import compute_stats, filtered_dishes, join_category, my_dishes

logger = logging.getLogger(__name__)

# Dish fields that may not be cleared through an update
_REQUIRED_DISH_FIELDS = {
    "name",
    "category_id",
    "tags",
    "difficulty",
    "ingredients",
    "is_preset",
}
_REQUIRED_USER_DISH_FIELDS = {"is_favorite", "cook_count"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex}"


class DishStore:
    """In-memory owner of categories, dishes and the user's dish overlays.

    Every mutation runs to completion synchronously. Lookups that miss return
    ``None`` and mutations on unknown ids are no-ops; nothing here raises for
    "not found". Joined views are recomputed on every call.
    """

    def __init__(
        self,
        *,
        config: StoreConfig = DEFAULT_STORE_CONFIG,
        clock: Callable[[], datetime] = _utcnow,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.clock = clock
        self.categories_by_id: dict[str, Category] = {}
        self.dishes: dict[str, Dish] = {}
        # keyed by dish_id: at most one overlay per dish
        self.user_dishes: dict[str, UserDish] = {}
        self.recommender = Recommender(
            history_limit=config.history_limit, rng=rng, clock=clock
        )

    # ── Seeding ──────────────────────────────────────────────────────────

    def load(
        self,
        categories: Iterable[Category],
        dishes: Iterable[Dish],
        user_dishes: Iterable[UserDish] = (),
    ) -> None:
        """Replace all three collections with seed records."""
        self.categories_by_id = {c.id: c for c in categories}
        self.dishes = {d.id: d for d in dishes}
        self.user_dishes = {}
        for overlay in user_dishes:
            if overlay.dish_id in self.user_dishes:
                logger.warning(
                    "Duplicate overlay %s for dish %s in seed, keeping the first",
                    overlay.id,
                    overlay.dish_id,
                )
                continue
            self.user_dishes[overlay.dish_id] = overlay
        logger.info(
            "Loaded %d categories, %d dishes, %d overlays",
            len(self.categories_by_id),
            len(self.dishes),
            len(self.user_dishes),
        )

    # ── Dish mutations ───────────────────────────────────────────────────

    def add_dish(self, data: DishCreate) -> Dish:
        now = self.clock()
        dish = Dish(
            **data.model_dump(),
            id=_new_id("dish"),
            created_at=now,
            updated_at=now,
        )
        self.dishes[dish.id] = dish
        logger.debug("Added dish %s", dish.id)
        return dish

    def update_dish(self, id: str, update: DishUpdate) -> Dish | None:
        dish = self.dishes.get(id)
        if dish is None:
            logger.debug("update_dish: no dish %s", id)
            return None
        changes = {
            field: value
            for field, value in update.model_dump(exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_DISH_FIELDS
        }
        changes["updated_at"] = self.clock()
        updated = Dish.model_validate({**dish.model_dump(), **changes})
        self.dishes[id] = updated
        logger.debug("Updated dish %s: %s", id, sorted(changes))
        return updated

    def delete_dish(self, id: str) -> bool:
        if self.dishes.pop(id, None) is None:
            logger.debug("delete_dish: no dish %s", id)
            return False
        if self.user_dishes.pop(id, None) is not None:
            logger.debug("Removed overlay for deleted dish %s", id)
        logger.debug("Deleted dish %s", id)
        return True

    # ── Overlay mutations ────────────────────────────────────────────────

    def add_to_my_dishes(self, dish_id: str) -> UserDish:
        existing = self.user_dishes.get(dish_id)
        if existing is not None:
            logger.debug("Dish %s already in my dishes", dish_id)
            return existing
        overlay = UserDish(
            id=_new_id("user_dish"),
            dish_id=dish_id,
            is_favorite=False,
            cook_count=0,
            added_at=self.clock(),
        )
        self.user_dishes[dish_id] = overlay
        logger.debug("Added dish %s to my dishes", dish_id)
        return overlay

    def remove_from_my_dishes(self, dish_id: str) -> bool:
        removed = self.user_dishes.pop(dish_id, None) is not None
        logger.debug("remove_from_my_dishes %s: removed=%s", dish_id, removed)
        return removed

    def _replace_overlay(self, dish_id: str, **changes: object) -> UserDish | None:
        overlay = self.user_dishes.get(dish_id)
        if overlay is None:
            logger.debug("No overlay for dish %s, ignoring", dish_id)
            return None
        updated = UserDish.model_validate({**overlay.model_dump(), **changes})
        self.user_dishes[dish_id] = updated
        return updated

    def toggle_favorite(self, dish_id: str) -> UserDish | None:
        """Flip the favorite flag. Does not create a missing overlay."""
        overlay = self.user_dishes.get(dish_id)
        if overlay is None:
            logger.debug("toggle_favorite: dish %s not in my dishes", dish_id)
            return None
        return self._replace_overlay(dish_id, is_favorite=not overlay.is_favorite)

    def ensure_favorite(self, dish_id: str) -> UserDish:
        """Add the dish to my dishes if needed and mark it favorite."""
        overlay = self.add_to_my_dishes(dish_id)
        if overlay.is_favorite:
            return overlay
        updated = overlay.model_copy(update={"is_favorite": True})
        self.user_dishes[dish_id] = updated
        return updated

    def increment_cook_count(self, dish_id: str) -> UserDish | None:
        overlay = self.user_dishes.get(dish_id)
        if overlay is None:
            logger.debug("increment_cook_count: dish %s not in my dishes", dish_id)
            return None
        return self._replace_overlay(
            dish_id,
            cook_count=overlay.cook_count + 1,
            last_cooked=self.clock(),
        )

    def update_user_dish(
        self, dish_id: str, update: UserDishUpdate
    ) -> UserDish | None:
        changes = {
            field: value
            for field, value in update.model_dump(exclude_unset=True).items()
            if value is not None or field not in _REQUIRED_USER_DISH_FIELDS
        }
        return self._replace_overlay(dish_id, **changes)

    # ── Queries ──────────────────────────────────────────────────────────

    def categories(self) -> list[Category]:
        return list(self.categories_by_id.values())

    def get_category(self, id: str) -> Category | None:
        return self.categories_by_id.get(id)

    def get_filtered_dishes(
        self,
        filters: DishFilters | None = None,
        sort_by: SortOption = SortOption.name_asc,
    ) -> list[DishWithCategory]:
        return filtered_dishes(
            self.dishes, self.categories_by_id, self.user_dishes, filters, sort_by
        )

    def get_my_dishes(self) -> list[UserDishWithDetails]:
        return my_dishes(self.dishes, self.categories_by_id, self.user_dishes)

    def get_favorite_dishes(self) -> list[UserDishWithDetails]:
        return [ud for ud in self.get_my_dishes() if ud.is_favorite]

    def get_dish_by_id(self, id: str) -> DishWithCategory | None:
        dish = self.dishes.get(id)
        if dish is None:
            return None
        return join_category(dish, self.categories_by_id)

    def get_user_dish_by_dish_id(self, dish_id: str) -> UserDish | None:
        return self.user_dishes.get(dish_id)

    def get_dishes_by_category(
        self,
        category_id: str,
        sort_by: SortOption = SortOption.name_asc,
    ) -> list[DishWithCategory]:
        return [
            d
            for d in self.get_filtered_dishes(sort_by=sort_by)
            if d.category_id == category_id
        ]

    def get_dish_stats(self) -> DishStats:
        return compute_stats(
            self.dishes,
            self.categories_by_id,
            self.user_dishes,
            recent_limit=self.config.recent_additions_limit,
        )

    # ── Recommendations ──────────────────────────────────────────────────

    def generate_random_recommendation(self) -> RandomRecommendation | None:
        return self.recommender.generate(
            self.dishes, self.categories_by_id, self.user_dishes
        )

    @property
    def current_recommendation(self) -> RandomRecommendation | None:
        return self.recommender.current

    @property
    def recommendation_history(self) -> list[RandomRecommendation]:
        return self.recommender.history

    def clear_recommendation_history(self) -> None:
        self.recommender.clear_history()
