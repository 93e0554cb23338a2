"""Runtime configuration: which query store to use and where it lives.

Values come from the environment (optionally seeded from a ``.env`` file):

    SHEETVIEW_STORE         memory | yaml | redis   (default: memory)
    SHEETVIEW_QUERIES_PATH  YAML file for the yaml backend
    REDIS_URL               Redis connection URL for the redis backend
    SHEETVIEW_REDIS_KEY     hash holding the saved queries
    LOG_CONFIG              dictConfig JSON file, read by logging_config.log_init
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from sheetview.registry.redis_store import KEY_QUERIES, RedisQueryStore
from sheetview.registry.store import InMemoryQueryStore, QueryStore, YamlQueryStore

BACKENDS = ("memory", "yaml", "redis")


@dataclass
class SheetViewConfig:
    store_backend: str = "memory"
    queries_path: Path = Path("data/queries.yaml")
    redis_url: str = "redis://localhost:6379"
    redis_key: str = KEY_QUERIES

    @classmethod
    def from_env(cls, dotenv: bool = True) -> SheetViewConfig:
        """Build a config from environment variables."""
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()
        return cls(
            store_backend=os.environ.get("SHEETVIEW_STORE", defaults.store_backend)
            .strip()
            .lower(),
            queries_path=Path(
                os.environ.get("SHEETVIEW_QUERIES_PATH", str(defaults.queries_path))
            ),
            redis_url=os.environ.get("REDIS_URL", defaults.redis_url),
            redis_key=os.environ.get("SHEETVIEW_REDIS_KEY", defaults.redis_key),
        )


def open_query_store(config: SheetViewConfig | None = None) -> QueryStore:
    """Instantiate the query store selected by ``config``."""
    config = config or SheetViewConfig()
    if config.store_backend == "memory":
        return InMemoryQueryStore()
    if config.store_backend == "yaml":
        return YamlQueryStore(config.queries_path)
    if config.store_backend == "redis":
        return RedisQueryStore(config.redis_url, key=config.redis_key)
    raise ValueError(
        f"Unknown store backend {config.store_backend!r}; expected one of {', '.join(BACKENDS)}"
    )
