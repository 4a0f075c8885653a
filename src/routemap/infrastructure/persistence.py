"""Persistence adapters — the store's only durability mechanism.

The store needs a set of location names plus one hash per location
mapping destination -> weight string. Reads go straight to the backend;
writes are collected in a :class:`WriteBatch` and committed atomically
when the :meth:`PersistenceAdapter.transaction` block exits, so a failed
commit never leaves half an operation in the backend.

Keyspace (``namespace`` defaults to ``routemap``)::

    {namespace}:locations        SET   every known location name
    {namespace}:routes:{name}    HASH  destination -> weight (decimal string)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

import redis

from routemap.domain.errors import PersistenceFailure

if TYPE_CHECKING:
    from routemap.config.settings import RouteSettings

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "routemap"


@dataclass(frozen=True)
class Keyspace:
    """Builds backend keys for one store namespace."""

    namespace: str = DEFAULT_NAMESPACE

    @property
    def locations(self) -> str:
        return f"{self.namespace}:locations"

    def routes(self, name: str) -> str:
        return f"{self.namespace}:routes:{name}"


# ---------------------------------------------------------------------------
# Contract
# ---------------------------------------------------------------------------


class WriteBatch(Protocol):
    """Write primitives queued inside a transaction."""

    def set_add(self, key: str, member: str) -> None: ...

    def set_remove(self, key: str, member: str) -> None: ...

    def hash_set(self, key: str, field: str, value: str) -> None: ...

    def hash_delete(self, key: str, field: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def __len__(self) -> int: ...


class PersistenceAdapter(Protocol):
    """Set and hash primitives the route store relies on.

    Every method raises :class:`PersistenceFailure` on backend errors.
    """

    def set_members(self, key: str) -> list[str]: ...

    def hash_get_all(self, key: str) -> dict[str, str]: ...

    def transaction(self) -> AbstractContextManager[WriteBatch]: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# Redis
# ---------------------------------------------------------------------------


class _RedisBatch:
    """WriteBatch over a MULTI/EXEC pipeline."""

    def __init__(self, pipe: redis.client.Pipeline) -> None:
        self._pipe = pipe
        self._queued = 0

    def __len__(self) -> int:
        return self._queued

    def set_add(self, key: str, member: str) -> None:
        self._queue(self._pipe.sadd, key, member)

    def set_remove(self, key: str, member: str) -> None:
        self._queue(self._pipe.srem, key, member)

    def hash_set(self, key: str, field: str, value: str) -> None:
        self._queue(self._pipe.hset, key, field, value)

    def hash_delete(self, key: str, field: str) -> None:
        self._queue(self._pipe.hdel, key, field)

    def delete(self, key: str) -> None:
        self._queue(self._pipe.delete, key)

    def _queue(self, command: Callable[..., object], *args: str) -> None:
        command(*args)
        self._queued += 1


class RedisBackend:
    """PersistenceAdapter backed by a Redis server."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, *, password: str | None = None) -> RedisBackend:
        """Connect to *url* and verify the server answers PING.

        A malformed URL or an unreachable server raises PersistenceFailure.
        """
        try:
            client = redis.Redis.from_url(url, password=password, decode_responses=True)
            client.ping()
        except (redis.RedisError, ValueError) as exc:
            raise PersistenceFailure(f"Cannot reach Redis at {url}: {exc}") from exc
        return cls(client)

    def set_members(self, key: str) -> list[str]:
        try:
            return sorted(self._client.smembers(key))
        except redis.RedisError as exc:
            raise PersistenceFailure(f"SMEMBERS {key} failed: {exc}") from exc

    def hash_get_all(self, key: str) -> dict[str, str]:
        try:
            return dict(self._client.hgetall(key))
        except redis.RedisError as exc:
            raise PersistenceFailure(f"HGETALL {key} failed: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[_RedisBatch]:
        """Queue writes on a MULTI/EXEC pipeline and execute them on exit.

        If the block raises, the pipeline is reset and nothing is sent.
        """
        pipe = self._client.pipeline(transaction=True)
        try:
            yield _RedisBatch(pipe)
            try:
                pipe.execute()
            except redis.RedisError as exc:
                logger.warning("Redis transaction failed: %s", exc)
                raise PersistenceFailure(f"Redis transaction failed: {exc}") from exc
        finally:
            pipe.reset()

    def close(self) -> None:
        self._client.close()


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


@dataclass
class _MemoryBatch:
    """WriteBatch that records operations until commit."""

    ops: list[tuple[str, tuple[str, ...]]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.ops)

    def set_add(self, key: str, member: str) -> None:
        self.ops.append(("set_add", (key, member)))

    def set_remove(self, key: str, member: str) -> None:
        self.ops.append(("set_remove", (key, member)))

    def hash_set(self, key: str, field: str, value: str) -> None:
        self.ops.append(("hash_set", (key, field, value)))

    def hash_delete(self, key: str, field: str) -> None:
        self.ops.append(("hash_delete", (key, field)))

    def delete(self, key: str) -> None:
        self.ops.append(("delete", (key,)))


class MemoryBackend:
    """Process-local PersistenceAdapter.

    Used for ``backend = "memory"`` and by the test suite. ``fail_next_commit``
    and ``fail_reads`` simulate an unavailable backend.
    """

    def __init__(self) -> None:
        self.sets: dict[str, set[str]] = {}
        self.hashes: dict[str, dict[str, str]] = {}
        self.commits: list[list[tuple[str, tuple[str, ...]]]] = []
        self.fail_next_commit = False
        self.fail_reads = False

    def set_members(self, key: str) -> list[str]:
        self._check_reads(f"SMEMBERS {key}")
        return sorted(self.sets.get(key, set()))

    def hash_get_all(self, key: str) -> dict[str, str]:
        self._check_reads(f"HGETALL {key}")
        return dict(self.hashes.get(key, {}))

    @contextmanager
    def transaction(self) -> Iterator[_MemoryBatch]:
        batch = _MemoryBatch()
        yield batch
        if self.fail_next_commit:
            self.fail_next_commit = False
            raise PersistenceFailure("Simulated commit failure")
        for op, args in batch.ops:
            getattr(self, f"_apply_{op}")(*args)
        self.commits.append(batch.ops)

    def close(self) -> None:
        pass

    def _check_reads(self, command: str) -> None:
        if self.fail_reads:
            raise PersistenceFailure(f"Simulated read failure: {command}")

    def _apply_set_add(self, key: str, member: str) -> None:
        self.sets.setdefault(key, set()).add(member)

    def _apply_set_remove(self, key: str, member: str) -> None:
        members = self.sets.get(key)
        if members is not None:
            members.discard(member)
            if not members:
                del self.sets[key]

    def _apply_hash_set(self, key: str, field: str, value: str) -> None:
        self.hashes.setdefault(key, {})[field] = value

    def _apply_hash_delete(self, key: str, field: str) -> None:
        fields = self.hashes.get(key)
        if fields is not None:
            fields.pop(field, None)
            if not fields:
                del self.hashes[key]

    def _apply_delete(self, key: str) -> None:
        self.sets.pop(key, None)
        self.hashes.pop(key, None)


def open_backend(settings: RouteSettings) -> PersistenceAdapter:
    """Build the backend selected by ``[store] backend``."""
    if settings.store.backend == "memory":
        return MemoryBackend()
    return RedisBackend.from_url(settings.redis.url, password=settings.redis.password)
