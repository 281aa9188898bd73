from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query, Response

from .catalog.models import (
    Category,
    Difficulty,
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
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .recommendations.models import RandomRecommendation
from .state import AppState, get_state


def _dish_not_found(dish_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Dish not found: {dish_id}")


def _not_in_my_dishes(dish_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Dish not in my dishes: {dish_id}")


def create_app(config: StoreConfig = DEFAULT_STORE_CONFIG) -> FastAPI:
    app = FastAPI(title="Dishbook API", version="1.0.0")
    app.state.dishbook = AppState.from_config(config)

    # ── Public endpoints ─────────────────────────────────────────────────

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/categories", response_model=list[Category])
    def list_categories(state: AppState = Depends(get_state)) -> list[Category]:
        with state.lock:
            return state.store.categories()

    @app.get("/categories/{category_id}/dishes", response_model=list[DishWithCategory])
    def category_dishes(
        category_id: str,
        sort: SortOption = SortOption.name_asc,
        state: AppState = Depends(get_state),
    ) -> list[DishWithCategory]:
        with state.lock:
            if state.store.get_category(category_id) is None:
                raise HTTPException(
                    status_code=404, detail=f"Category not found: {category_id}"
                )
            return state.store.get_dishes_by_category(category_id, sort_by=sort)

    # ── Dishes ───────────────────────────────────────────────────────────

    @app.get("/dishes", response_model=list[DishWithCategory])
    def list_dishes(
        category_id: list[str] = Query(default=[]),
        difficulty: list[Difficulty] = Query(default=[]),
        cooking_time_max: int | None = Query(default=None, ge=0),
        q: str | None = None,
        tag: list[str] = Query(default=[]),
        is_favorite: bool | None = None,
        sort: SortOption = SortOption.name_asc,
        state: AppState = Depends(get_state),
    ) -> list[DishWithCategory]:
        filters = DishFilters(
            category_ids=set(category_id),
            difficulties=set(difficulty),
            cooking_time_max=cooking_time_max,
            search_query=q,
            tags=set(tag),
            is_favorite=is_favorite,
        )
        with state.lock:
            return state.store.get_filtered_dishes(filters, sort_by=sort)

    @app.post("/dishes", response_model=Dish, status_code=201)
    def create_dish(body: DishCreate, state: AppState = Depends(get_state)) -> Dish:
        with state.lock:
            return state.store.add_dish(body)

    @app.get("/dishes/{dish_id}", response_model=DishWithCategory)
    def get_dish(dish_id: str, state: AppState = Depends(get_state)) -> DishWithCategory:
        with state.lock:
            dish = state.store.get_dish_by_id(dish_id)
        if dish is None:
            raise _dish_not_found(dish_id)
        return dish

    @app.patch("/dishes/{dish_id}", response_model=Dish)
    def update_dish(
        dish_id: str, body: DishUpdate, state: AppState = Depends(get_state)
    ) -> Dish:
        with state.lock:
            dish = state.store.update_dish(dish_id, body)
        if dish is None:
            raise _dish_not_found(dish_id)
        return dish

    @app.delete("/dishes/{dish_id}", status_code=204)
    def delete_dish(dish_id: str, state: AppState = Depends(get_state)) -> Response:
        with state.lock:
            state.store.delete_dish(dish_id)
        return Response(status_code=204)

    # ── My dishes ────────────────────────────────────────────────────────

    @app.get("/my-dishes", response_model=list[UserDishWithDetails])
    def list_my_dishes(state: AppState = Depends(get_state)) -> list[UserDishWithDetails]:
        with state.lock:
            return state.store.get_my_dishes()

    @app.get("/my-dishes/favorites", response_model=list[UserDishWithDetails])
    def list_favorites(state: AppState = Depends(get_state)) -> list[UserDishWithDetails]:
        with state.lock:
            return state.store.get_favorite_dishes()

    @app.put("/my-dishes/{dish_id}", response_model=UserDish)
    def add_to_my_dishes(dish_id: str, state: AppState = Depends(get_state)) -> UserDish:
        with state.lock:
            if dish_id not in state.store.dishes:
                raise _dish_not_found(dish_id)
            return state.store.add_to_my_dishes(dish_id)

    @app.patch("/my-dishes/{dish_id}", response_model=UserDish)
    def update_my_dish(
        dish_id: str, body: UserDishUpdate, state: AppState = Depends(get_state)
    ) -> UserDish:
        with state.lock:
            overlay = state.store.update_user_dish(dish_id, body)
        if overlay is None:
            raise _not_in_my_dishes(dish_id)
        return overlay

    @app.delete("/my-dishes/{dish_id}", status_code=204)
    def remove_from_my_dishes(dish_id: str, state: AppState = Depends(get_state)) -> Response:
        with state.lock:
            state.store.remove_from_my_dishes(dish_id)
        return Response(status_code=204)

    @app.post("/my-dishes/{dish_id}/favorite/toggle", response_model=UserDish)
    def toggle_favorite(dish_id: str, state: AppState = Depends(get_state)) -> UserDish:
        with state.lock:
            overlay = state.store.toggle_favorite(dish_id)
        if overlay is None:
            raise _not_in_my_dishes(dish_id)
        return overlay

    @app.put("/my-dishes/{dish_id}/favorite", response_model=UserDish)
    def ensure_favorite(dish_id: str, state: AppState = Depends(get_state)) -> UserDish:
        with state.lock:
            if dish_id not in state.store.dishes:
                raise _dish_not_found(dish_id)
            return state.store.ensure_favorite(dish_id)

    @app.post("/my-dishes/{dish_id}/cooked", response_model=UserDish)
    def mark_cooked(dish_id: str, state: AppState = Depends(get_state)) -> UserDish:
        with state.lock:
            overlay = state.store.increment_cook_count(dish_id)
        if overlay is None:
            raise _not_in_my_dishes(dish_id)
        return overlay

    # ── Stats & recommendations ──────────────────────────────────────────

    @app.get("/stats", response_model=DishStats)
    def stats(state: AppState = Depends(get_state)) -> DishStats:
        with state.lock:
            return state.store.get_dish_stats()

    @app.post("/recommendations/random", response_model=RandomRecommendation | None)
    def random_recommendation(
        state: AppState = Depends(get_state),
    ) -> RandomRecommendation | None:
        with state.lock:
            return state.store.generate_random_recommendation()

    @app.get("/recommendations/current", response_model=RandomRecommendation | None)
    def current_recommendation(
        state: AppState = Depends(get_state),
    ) -> RandomRecommendation | None:
        with state.lock:
            return state.store.current_recommendation

    @app.get("/recommendations/history", response_model=list[RandomRecommendation])
    def recommendation_history(
        state: AppState = Depends(get_state),
    ) -> list[RandomRecommendation]:
        with state.lock:
            return state.store.recommendation_history

    @app.delete("/recommendations/history", status_code=204)
    def clear_history(state: AppState = Depends(get_state)) -> Response:
        with state.lock:
            state.store.clear_recommendation_history()
        return Response(status_code=204)

    return app


app = create_app()
