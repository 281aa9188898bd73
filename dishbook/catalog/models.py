from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Difficulty(str, Enum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class SortOption(str, Enum):
    name_asc = "name_asc"
    name_desc = "name_desc"
    created_at_asc = "created_at_asc"
    created_at_desc = "created_at_desc"
    cooking_time_asc = "cooking_time_asc"
    cooking_time_desc = "cooking_time_desc"
    rating_desc = "rating_desc"


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    description: str | None = None
    icon: str | None = None


class DishCreate(BaseModel):
    name: str
    description: str | None = None
    image: str | None = None
    category_id: str
    tags: list[str] = Field(default_factory=list)
    difficulty: Difficulty = Difficulty.medium
    cooking_time: int | None = Field(default=None, gt=0, description="Minutes")
    ingredients: list[str] = Field(default_factory=list)
    instructions: str | None = None
    is_preset: bool = False


class Dish(DishCreate):
    id: str = Field(..., min_length=1)
    created_at: datetime
    updated_at: datetime


class DishUpdate(BaseModel):
    """Partial dish update; only fields the caller explicitly set are applied."""

    name: str | None = None
    description: str | None = None
    image: str | None = None
    category_id: str | None = None
    tags: list[str] | None = None
    difficulty: Difficulty | None = None
    cooking_time: int | None = Field(default=None, gt=0)
    ingredients: list[str] | None = None
    instructions: str | None = None
    is_preset: bool | None = None


class UserDish(BaseModel):
    id: str = Field(..., min_length=1)
    dish_id: str = Field(..., min_length=1)
    is_favorite: bool = False
    personal_rating: int | None = Field(default=None, ge=1, le=5)
    personal_notes: str | None = None
    last_cooked: datetime | None = None
    cook_count: int = Field(default=0, ge=0)
    added_at: datetime


class UserDishUpdate(BaseModel):
    is_favorite: bool | None = None
    personal_rating: int | None = Field(default=None, ge=1, le=5)
    personal_notes: str | None = None
    last_cooked: datetime | None = None
    cook_count: int | None = Field(default=None, ge=0)


class DishWithCategory(Dish):
    category: Category

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_custom(self) -> bool:
        return not self.is_preset


class UserDishWithDetails(UserDish):
    dish: DishWithCategory


class DishFilters(BaseModel):
    category_ids: set[str] = Field(default_factory=set)
    difficulties: set[Difficulty] = Field(default_factory=set)
    cooking_time_max: int | None = Field(default=None, ge=0)
    search_query: str | None = None
    tags: set[str] = Field(default_factory=set)
    is_favorite: bool | None = None


class DishStats(BaseModel):
    total_dishes: int
    favorite_dishes: int
    categories_count: int
    most_cooked_dish: DishWithCategory | None = None
    recent_additions: list[DishWithCategory] = Field(default_factory=list)
