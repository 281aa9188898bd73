from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from ..catalog.models import Category, Dish, UserDish
from ..config import DEFAULT_STORE_CONFIG

logger = logging.getLogger(__name__)


class SeedError(ValueError):
    """Raised when a seed file is missing or does not match the catalog schema."""


class SeedData(BaseModel):
    categories: list[Category] = Field(default_factory=list)
    dishes: list[Dish] = Field(default_factory=list)
    user_dishes: list[UserDish] = Field(default_factory=list)


def load_seed(path: Path | None = None) -> SeedData:
    """Read and validate a seed file. Defaults to the bundled dataset."""
    path = DEFAULT_STORE_CONFIG.seed_path if path is None else path
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise SeedError(f"Seed file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise SeedError(f"Seed file is not valid JSON: {path}") from exc

    try:
        seed = SeedData.model_validate(raw)
    except ValidationError as exc:
        raise SeedError(f"Seed file {path} does not match the catalog schema") from exc

    logger.info(
        "Read seed %s: %d categories, %d dishes, %d overlays",
        path,
        len(seed.categories),
        len(seed.dishes),
        len(seed.user_dishes),
    )
    return seed
