from __future__ import annotations

import threading
from dataclasses import dataclass, field

from fastapi import Request

from .catalog.store import DishStore
from .config import StoreConfig
from .seed.loader import load_seed


@dataclass
class AppState:
    """The one store of a running app and the lock that serialises access to it.

    Store operations are not meant to interleave: an existence check and the
    insert that follows it (``add_to_my_dishes``) must happen together.
    """

    store: DishStore
    lock: threading.Lock = field(default_factory=threading.Lock)

    @classmethod
    def from_config(cls, config: StoreConfig) -> AppState:
        store = DishStore(config=config)
        if config.seed_on_startup:
            seed = load_seed(config.seed_path)
            store.load(seed.categories, seed.dishes, seed.user_dishes)
        return cls(store=store)


def get_state(request: Request) -> AppState:
    """FastAPI dependency returning the app's ``AppState``."""
    return request.app.state.dishbook
