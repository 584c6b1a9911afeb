# caminho: portal_auth/infrastructure/storage/redis.py
# Funções:
# - create_redis_client(): instancia Redis assíncrono a partir das Settings
# - create_storage(): escolhe o backend de armazenamento configurado

from __future__ import annotations

import redis.asyncio as redis

from portal_auth.config.settings import Settings
from portal_auth.infrastructure.storage.key_value import (
    KeyValueStorage,
    MemoryKeyValueStorage,
    RedisKeyValueStorage,
)


def create_redis_client(settings: Settings) -> redis.Redis:
    return redis.from_url(settings.REDIS_URL, encoding='utf-8', decode_responses=True)


def create_storage(settings: Settings) -> KeyValueStorage:
    if settings.STORAGE_BACKEND == 'memory':
        return MemoryKeyValueStorage()
    return RedisKeyValueStorage(create_redis_client(settings), prefix=settings.STORAGE_KEY_PREFIX)
