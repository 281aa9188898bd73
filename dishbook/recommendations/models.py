from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from ..catalog.models import DishWithCategory


class RandomRecommendation(BaseModel):
    dish: DishWithCategory
    reason: str
    timestamp: datetime
