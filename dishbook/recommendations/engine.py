from __future__ import annotations

import logging
import random
from collections import deque
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Callable

from ..catalog.models import Category, Dish, UserDish
from ..catalog.queries import join_category
from .models import RandomRecommendation

logger = logging.getLogger(__name__)

REASON_LIBRARY = "from your dish library"
REASON_SYSTEM = "system suggestion"
DEFAULT_HISTORY_LIMIT = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Recommender:
    """Biased random sampler over the dish catalog.

    The pool is the user's own library (dishes with an overlay) whenever that
    library is non-empty, otherwise the whole catalog. Within the pool every
    dish is equally likely.
    """

    def __init__(
        self,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.rng = random.Random() if rng is None else rng
        self.clock = clock
        self.current: RandomRecommendation | None = None
        self._history: deque[RandomRecommendation] = deque(maxlen=history_limit)

    @property
    def history(self) -> list[RandomRecommendation]:
        """Past picks, newest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def generate(
        self,
        dishes: Mapping[str, Dish],
        categories: Mapping[str, Category],
        user_dishes: Mapping[str, UserDish],
    ) -> RandomRecommendation | None:
        if not dishes:
            return None

        my_dish_ids = {ud.dish_id for ud in user_dishes.values()}
        if my_dish_ids:
            pool = [d for d in dishes.values() if d.id in my_dish_ids]
        else:
            pool = list(dishes.values())

        if not pool:
            logger.debug("No library overlay resolves to a dish, nothing to recommend")
            return None

        dish = self.rng.choice(pool)
        joined = join_category(dish, categories)
        if joined is None:
            logger.warning(
                "Picked dish %s has unknown category %s, dropping pick",
                dish.id,
                dish.category_id,
            )
            return None

        recommendation = RandomRecommendation(
            dish=joined,
            reason=REASON_LIBRARY if dish.id in my_dish_ids else REASON_SYSTEM,
            timestamp=self.clock(),
        )
        self.current = recommendation
        self._history.appendleft(recommendation)
        logger.debug("Recommended dish %s (%s)", dish.id, recommendation.reason)
        return recommendation
