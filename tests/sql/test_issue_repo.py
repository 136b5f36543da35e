import asyncio
import sqlite3

import pytest

from issue_relay.errors import DatabaseError
from issue_relay.memory.sql import DatabaseManager, IssueCacheRepo


def _raw_count(path):
    conn = sqlite3.connect(path)
    try:
        return conn.execute("SELECT COUNT(*) FROM issues").fetchone()[0]
    finally:
        conn.close()


def test_upsert_and_get_live(tmp_path, clock, make_issue):
    async def scenario():
        manager = DatabaseManager(str(tmp_path / "bot.db"))
        repo = IssueCacheRepo(manager, clock=clock)
        try:
            await repo.upsert(make_issue(1), clock() + 60)
            return await repo.get_live("octo", "repo", 1)
        finally:
            await manager.close()

    issue = asyncio.run(scenario())
    assert issue == make_issue(1)


def test_expired_rows_are_hidden_until_purged(tmp_path, clock, make_issue):
    path = tmp_path / "bot.db"

    async def scenario():
        manager = DatabaseManager(str(path))
        repo = IssueCacheRepo(manager, clock=clock)
        try:
            await repo.upsert(make_issue(1), clock() + 10)
            await repo.upsert(make_issue(2), clock() + 1000)
            clock.advance(60)
            hidden = await repo.get_live("octo", "repo", 1)
            live = await repo.count_live()
            removed = await repo.purge_expired()
            again = await repo.purge_expired()
            survivor = await repo.get_live("octo", "repo", 2)
            return hidden, live, removed, again, survivor
        finally:
            await manager.close()

    hidden, live, removed, again, survivor = asyncio.run(scenario())
    assert hidden is None
    assert live == 1
    assert (removed, again) == (1, 0)
    assert survivor.number == 2
    assert _raw_count(path) == 1


def test_expired_row_still_on_disk_before_purge(tmp_path, clock, make_issue):
    path = tmp_path / "bot.db"

    async def scenario():
        manager = DatabaseManager(str(path))
        repo = IssueCacheRepo(manager, clock=clock)
        try:
            await repo.upsert(make_issue(1), clock() + 1)
            clock.advance(5)
            return await repo.get_live("octo", "repo", 1)
        finally:
            await manager.close()

    assert asyncio.run(scenario()) is None
    assert _raw_count(path) == 1


def test_upsert_replaces_existing_row(tmp_path, clock, make_issue):
    async def scenario():
        manager = DatabaseManager(str(tmp_path / "bot.db"))
        repo = IssueCacheRepo(manager, clock=clock)
        try:
            await repo.upsert(make_issue(1), clock() + 60)
            await repo.upsert(make_issue(1, title="Renamed", state="closed", labels=()), clock() + 60)
            return await repo.get_live("octo", "repo", 1), await repo.count_live()
        finally:
            await manager.close()

    issue, count = asyncio.run(scenario())
    assert count == 1
    assert issue.title == "Renamed"
    assert issue.state == "closed"
    assert issue.labels == ()


def test_delete_and_delete_all(tmp_path, clock, make_issue):
    async def scenario():
        manager = DatabaseManager(str(tmp_path / "bot.db"))
        repo = IssueCacheRepo(manager, clock=clock)
        try:
            for n in (1, 2, 3):
                await repo.upsert(make_issue(n), clock() + 60)
            first = await repo.delete("octo", "repo", 1)
            second = await repo.delete("octo", "repo", 1)
            cleared = await repo.delete_all()
            return first, second, cleared, await repo.count_live()
        finally:
            await manager.close()

    assert asyncio.run(scenario()) == (True, False, 2, 0)


def test_unreachable_store_reads_degrade_and_writes_raise(tmp_path, clock, make_issue):
    blocker = tmp_path / "file"
    blocker.write_text("x")

    async def scenario():
        manager = DatabaseManager(str(blocker / "bot.db"))
        repo = IssueCacheRepo(manager, clock=clock)
        reads = (
            await repo.get_live("octo", "repo", 1),
            await repo.count_live(),
            await repo.purge_expired(),
        )
        with pytest.raises(DatabaseError):
            await repo.upsert(make_issue(1), clock() + 60)
        with pytest.raises(DatabaseError):
            await repo.delete("octo", "repo", 1)
        with pytest.raises(DatabaseError):
            await repo.delete_all()
        return reads, manager.is_open

    reads, is_open = asyncio.run(scenario())
    assert reads == (None, 0, 0)
    assert is_open is False


def test_manager_health_stats_and_close(tmp_path):
    async def scenario():
        manager = DatabaseManager(str(tmp_path / "bot.db"))
        before = await manager.health_check()
        stats = await manager.stats()
        await manager.vacuum()
        await manager.close()
        after = await manager.health_check()
        return before, stats, after

    before, stats, after = asyncio.run(scenario())
    assert before is False
    assert stats["connection_status"] is True
    assert stats["table_count"] >= 1
    assert stats["index_count"] >= 1
    assert isinstance(stats["db_size"], int)
    assert after is False


def test_schema_migration_is_idempotent(tmp_path):
    path = str(tmp_path / "bot.db")

    async def open_and_close():
        manager = DatabaseManager(path)
        await manager.connection()
        await manager.close()

    asyncio.run(open_and_close())
    asyncio.run(open_and_close())
