from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_BUNDLED_SEED = Path(__file__).resolve().parent / "seed" / "data" / "seed.json"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class StoreConfig:
    history_limit: int = int(os.getenv("DISHBOOK_HISTORY_LIMIT", "10"))
    recent_additions_limit: int = int(os.getenv("DISHBOOK_RECENT_ADDITIONS", "5"))
    seed_on_startup: bool = _env_bool("DISHBOOK_SEED", True)
    seed_path: Path = Path(os.getenv("DISHBOOK_SEED_PATH", str(_BUNDLED_SEED)))


DEFAULT_STORE_CONFIG = StoreConfig()
