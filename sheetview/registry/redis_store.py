"""Redis-backed QueryStore.

All definitions live in one hash, field = query id, value = JSON. Each
method is one Redis command, so concurrent writers on different hosts
interleave freely, the same as on the replicated store.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from sheetview.errors import BackingStoreError
from sheetview.registry.store import MALFORMED_ENTRY_ERRORS
from sheetview.registry.types import QueryDefinition

logger = logging.getLogger(__name__)

KEY_QUERIES = "sheetview:queries"


class RedisQueryStore:
    """QueryStore over a Redis hash."""

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379",
        key: str = KEY_QUERIES,
        client: Any = None,
    ) -> None:
        self._redis = client or aioredis.from_url(redis_url, decode_responses=True)
        self._key = key

    async def get(self, query_id: str) -> QueryDefinition | None:
        try:
            data = await self._redis.hget(self._key, query_id)
        except RedisError as exc:
            raise BackingStoreError(f"Failed to read query {query_id}") from exc
        if not data:
            return None
        try:
            return QueryDefinition.from_dict(json.loads(data))
        except MALFORMED_ENTRY_ERRORS as exc:
            raise BackingStoreError(f"Malformed query entry {query_id}") from exc

    async def put(self, definition: QueryDefinition) -> None:
        try:
            await self._redis.hset(
                self._key, definition.query_id, json.dumps(definition.to_dict())
            )
        except RedisError as exc:
            raise BackingStoreError(
                f"Failed to write query {definition.query_id}"
            ) from exc

    async def delete(self, query_id: str) -> bool:
        try:
            removed = await self._redis.hdel(self._key, query_id)
        except RedisError as exc:
            raise BackingStoreError(f"Failed to delete query {query_id}") from exc
        return bool(removed)

    async def list(self, schema_id: str) -> list[QueryDefinition]:
        try:
            entries = await self._redis.hgetall(self._key)
        except RedisError as exc:
            raise BackingStoreError("Failed to list queries") from exc

        definitions = []
        for query_id, data in entries.items():
            try:
                definition = QueryDefinition.from_dict(json.loads(data))
            except MALFORMED_ENTRY_ERRORS:
                logger.warning("Skipping malformed query entry %s", query_id)
                continue
            if definition.schema_id == schema_id:
                definitions.append(definition)
        return definitions

    async def close(self) -> None:
        await self._redis.close()
