"""Tests for the Redis and in-memory persistence adapters."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import redis

from routemap.config.models import StoreConfig
from routemap.config.settings import RouteSettings
from routemap.domain.errors import PersistenceFailure
from routemap.infrastructure.persistence import (
    Keyspace,
    MemoryBackend,
    RedisBackend,
    open_backend,
)


class TestKeyspace:
    def test_default_namespace(self) -> None:
        keys = Keyspace()
        assert keys.locations == "routemap:locations"
        assert keys.routes("depot") == "routemap:routes:depot"

    def test_custom_namespace(self) -> None:
        assert Keyspace("rest_project").locations == "rest_project:locations"


# ---------------------------------------------------------------------------
# MemoryBackend
# ---------------------------------------------------------------------------


class TestMemoryBackend:
    def test_commit_applies_in_order(self) -> None:
        backend = MemoryBackend()
        with backend.transaction() as batch:
            batch.set_add("s", "a")
            batch.hash_set("h", "x", "1.0")
            batch.hash_set("h", "x", "2.0")
        assert backend.set_members("s") == ["a"]
        assert backend.hash_get_all("h") == {"x": "2.0"}
        assert len(backend.commits) == 1

    def test_nothing_visible_before_commit(self) -> None:
        backend = MemoryBackend()
        with backend.transaction() as batch:
            batch.set_add("s", "a")
            assert backend.set_members("s") == []
        assert backend.set_members("s") == ["a"]

    def test_error_in_block_discards_batch(self) -> None:
        backend = MemoryBackend()
        with pytest.raises(ValueError), backend.transaction() as batch:
            batch.set_add("s", "a")
            raise ValueError("boom")
        assert backend.set_members("s") == []
        assert backend.commits == []

    def test_simulated_commit_failure(self) -> None:
        backend = MemoryBackend()
        backend.fail_next_commit = True
        with pytest.raises(PersistenceFailure), backend.transaction() as batch:
            batch.set_add("s", "a")
        assert backend.set_members("s") == []
        # Only the next commit fails.
        with backend.transaction() as batch:
            batch.set_add("s", "a")
        assert backend.set_members("s") == ["a"]

    def test_simulated_read_failure(self) -> None:
        backend = MemoryBackend()
        backend.fail_reads = True
        with pytest.raises(PersistenceFailure):
            backend.set_members("s")
        with pytest.raises(PersistenceFailure):
            backend.hash_get_all("h")

    def test_removals_drop_empty_keys(self) -> None:
        backend = MemoryBackend()
        with backend.transaction() as batch:
            batch.set_add("s", "a")
            batch.hash_set("h", "x", "1.0")
        with backend.transaction() as batch:
            batch.set_remove("s", "a")
            batch.hash_delete("h", "x")
            batch.hash_delete("missing", "x")
        assert backend.sets == {}
        assert backend.hashes == {}

    def test_reads_return_copies(self) -> None:
        backend = MemoryBackend()
        with backend.transaction() as batch:
            batch.hash_set("h", "x", "1.0")
        backend.hash_get_all("h")["y"] = "2.0"
        assert backend.hash_get_all("h") == {"x": "1.0"}


# ---------------------------------------------------------------------------
# RedisBackend
# ---------------------------------------------------------------------------


@pytest.fixture
def client() -> MagicMock:
    return MagicMock(spec=redis.Redis)


class TestRedisBackend:
    def test_set_members_sorted(self, client: MagicMock) -> None:
        client.smembers.return_value = {"b", "a"}
        assert RedisBackend(client).set_members("k") == ["a", "b"]
        client.smembers.assert_called_once_with("k")

    def test_hash_get_all(self, client: MagicMock) -> None:
        client.hgetall.return_value = {"B": "1.0"}
        assert RedisBackend(client).hash_get_all("k") == {"B": "1.0"}

    def test_read_errors_become_persistence_failure(self, client: MagicMock) -> None:
        client.smembers.side_effect = redis.ConnectionError("down")
        client.hgetall.side_effect = redis.TimeoutError("slow")
        backend = RedisBackend(client)
        with pytest.raises(PersistenceFailure, match="SMEMBERS"):
            backend.set_members("k")
        with pytest.raises(PersistenceFailure, match="HGETALL"):
            backend.hash_get_all("k")

    def test_transaction_uses_multi_exec_pipeline(self, client: MagicMock) -> None:
        pipe = client.pipeline.return_value
        with RedisBackend(client).transaction() as batch:
            batch.set_add("locs", "A")
            batch.set_remove("locs", "Z")
            batch.hash_set("routes:A", "B", "1.0")
            batch.hash_delete("routes:A", "C")
            batch.delete("routes:Z")

        client.pipeline.assert_called_once_with(transaction=True)
        pipe.sadd.assert_called_once_with("locs", "A")
        pipe.srem.assert_called_once_with("locs", "Z")
        pipe.hset.assert_called_once_with("routes:A", "B", "1.0")
        pipe.hdel.assert_called_once_with("routes:A", "C")
        pipe.delete.assert_called_once_with("routes:Z")
        pipe.execute.assert_called_once_with()
        pipe.reset.assert_called_once_with()

    def test_exec_failure_becomes_persistence_failure(self, client: MagicMock) -> None:
        pipe = client.pipeline.return_value
        pipe.execute.side_effect = redis.ConnectionError("down")
        with pytest.raises(PersistenceFailure), RedisBackend(client).transaction() as batch:
            batch.set_add("locs", "A")
        pipe.reset.assert_called_once_with()

    def test_error_in_block_skips_exec(self, client: MagicMock) -> None:
        pipe = client.pipeline.return_value
        with pytest.raises(ValueError), RedisBackend(client).transaction() as batch:
            batch.set_add("locs", "A")
            raise ValueError("boom")
        pipe.execute.assert_not_called()
        pipe.reset.assert_called_once_with()

    def test_from_url_pings(self) -> None:
        fake = MagicMock(spec=redis.Redis)
        with patch.object(redis.Redis, "from_url", return_value=fake) as from_url:
            backend = RedisBackend.from_url("redis://example:6379/0", password="pw")
        from_url.assert_called_once_with(
            "redis://example:6379/0", password="pw", decode_responses=True
        )
        fake.ping.assert_called_once_with()
        assert isinstance(backend, RedisBackend)

    def test_from_url_unreachable(self) -> None:
        fake = MagicMock(spec=redis.Redis)
        fake.ping.side_effect = redis.ConnectionError("refused")
        with (
            patch.object(redis.Redis, "from_url", return_value=fake),
            pytest.raises(PersistenceFailure, match="Cannot reach Redis"),
        ):
            RedisBackend.from_url("redis://example:6379/0")


class TestOpenBackend:
    def test_memory(self) -> None:
        settings = RouteSettings(store=StoreConfig(backend="memory"))
        assert isinstance(open_backend(settings), MemoryBackend)

    def test_redis(self) -> None:
        settings = RouteSettings(store=StoreConfig(backend="redis"))
        with patch.object(RedisBackend, "from_url") as from_url:
            open_backend(settings)
        from_url.assert_called_once_with(settings.redis.url, password=settings.redis.password)


class TestBatchLength:
    def test_memory_batch_counts_queued_writes(self, backend: MemoryBackend) -> None:
        with backend.transaction() as batch:
            batch.set_add("locs", "A")
            batch.hash_set("routes:A", "B", "1.0")
            assert len(batch) == 2

    def test_redis_batch_counts_queued_writes(self, client: MagicMock) -> None:
        with RedisBackend(client).transaction() as batch:
            assert len(batch) == 0
            batch.set_add("locs", "A")
            batch.delete("routes:Z")
            assert len(batch) == 2


class TestMalformedUrl:
    def test_bad_scheme_becomes_persistence_failure(self) -> None:
        with pytest.raises(PersistenceFailure, match="Cannot reach Redis"):
            RedisBackend.from_url("not-a-redis-url")

    def test_open_backend_reports_bad_url(self) -> None:
        settings = RouteSettings(redis={"url": "http://example:6379/0"})
        with pytest.raises(PersistenceFailure):
            open_backend(settings)
