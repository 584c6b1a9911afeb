# caminho: portal_auth/infrastructure/storage/key_value.py
# Funções:
# - KeyValueStorage: protocolo do armazenamento durável do cliente
# - RedisKeyValueStorage: implementação com redis.asyncio (MGET/MSET atômicos)
# - MemoryKeyValueStorage: implementação em memória (testes / execução local)

from __future__ import annotations

from typing import Mapping, Protocol, Sequence

import redis.asyncio as redis


class KeyValueStorage(Protocol):
    async def get_many(self, keys: Sequence[str]) -> list[str | None]: ...
    async def set_many(self, mapping: Mapping[str, str]) -> None: ...
    async def delete(self, *keys: str) -> None: ...
    async def aclose(self) -> None: ...


class RedisKeyValueStorage:
    def __init__(self, client: redis.Redis, *, prefix: str = 'portal:auth') -> None:
        self._client = client
        self._prefix = prefix

    async def get_many(self, keys: Sequence[str]) -> list[str | None]:
        if not keys:
            return []
        return list(await self._client.mget([self._key(key) for key in keys]))

    async def set_many(self, mapping: Mapping[str, str]) -> None:
        # MSET grava todas as chaves numa única operação atômica
        await self._client.mset({self._key(key): value for key, value in mapping.items()})

    async def delete(self, *keys: str) -> None:
        if keys:
            await self._client.delete(*(self._key(key) for key in keys))

    async def aclose(self) -> None:
        close = getattr(self._client, 'aclose', None)
        if callable(close):
            await close()
        else:  # pragma: no cover - versões antigas
            await self._client.close()

    def _key(self, key: str) -> str:
        return f'{self._prefix}:{key}'


class MemoryKeyValueStorage:
    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get_many(self, keys: Sequence[str]) -> list[str | None]:
        return [self._data.get(key) for key in keys]

    async def set_many(self, mapping: Mapping[str, str]) -> None:
        self._data.update(mapping)

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def aclose(self) -> None:
        return None

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)
