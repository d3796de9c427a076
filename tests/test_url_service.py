"""Tests for the URL shortening service, identity source and repository."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import InvalidURLError, PersistenceError
from shortener.db.repository import UrlRepository
from shortener.services.codec import decode_base62
from shortener.services.identity_source import IdentitySource
from shortener.services.url_service import URLShorteningService


@pytest.mark.asyncio
async def test_identities_are_unique_and_increasing(db_session: AsyncSession):
    source = IdentitySource(db_session)
    issued = [await source.next_identity() for _ in range(20)]

    assert issued == sorted(issued)
    assert len(set(issued)) == 20
    assert issued[0] == 1


@pytest.mark.asyncio
async def test_create_short_url(db_session: AsyncSession):
    service = URLShorteningService(db_session)

    short_url = await service.create_short_url("https://example.com/a/long/path")

    assert short_url.short_code == "1"
    assert short_url.id == 1
    assert short_url.original_url == "https://example.com/a/long/path"
    assert short_url.click_count == 0
    assert short_url.created_at is not None
    assert short_url.last_clicked_at is None


@pytest.mark.asyncio
async def test_short_code_encodes_identity(db_session: AsyncSession):
    service = URLShorteningService(db_session)

    codes = [
        (await service.create_short_url(f"https://example.com/{n}")).short_code
        for n in range(3)
    ]

    assert codes == ["1", "2", "3"]
    assert [decode_base62(code) for code in codes] == [1, 2, 3]


@pytest.mark.asyncio
async def test_same_url_twice_gets_two_codes(db_session: AsyncSession):
    service = URLShorteningService(db_session)

    first = await service.create_short_url("https://example.com/")
    second = await service.create_short_url("https://example.com/")

    assert first.short_code != second.short_code


@pytest.mark.asyncio
async def test_invalid_url_does_not_consume_identity(db_session: AsyncSession):
    service = URLShorteningService(db_session)

    with pytest.raises(InvalidURLError):
        await service.create_short_url("ftp://example.com/file")

    short_url = await service.create_short_url("https://example.com/")
    assert short_url.short_code == "1"


@pytest.mark.asyncio
async def test_failed_insert_skips_identity(db_session: AsyncSession, monkeypatch):
    service = URLShorteningService(db_session)
    await service.create_short_url("https://example.com/first")

    async def failing_create(identity, original_url, short_code):
        raise PersistenceError("disk full")

    monkeypatch.setattr(service.repository, "create", failing_create)
    with pytest.raises(PersistenceError):
        await service.create_short_url("https://example.com/lost")
    monkeypatch.undo()

    short_url = await service.create_short_url("https://example.com/third")
    # Identity 2 was consumed by the failed attempt
    assert short_url.short_code == "3"
    assert await service.get_url_info("2") is None


@pytest.mark.asyncio
async def test_duplicate_code_raises_persistence_error(db_session: AsyncSession):
    repository = UrlRepository(db_session)
    await repository.create(5, "https://example.com/", "5")
    await db_session.commit()

    with pytest.raises(PersistenceError):
        await repository.create(6, "https://example.org/", "5")
    await db_session.rollback()


@pytest.mark.asyncio
async def test_get_url_info(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/info")

    found = await service.get_url_info(created.short_code)
    assert found is not None
    assert found.original_url == "https://example.com/info"

    assert await service.get_url_info("zzz") is None
    assert await service.get_url_info("bad-code") is None
    assert await service.get_url_info("") is None


@pytest.mark.asyncio
async def test_find_original_url(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/dest")

    assert await service.find_original_url(created.short_code) == "https://example.com/dest"
    assert await service.find_original_url("Zz9") is None


@pytest.mark.asyncio
async def test_record_click_increments_relative(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/clicks")

    assert await service.record_click(created.short_code) is True
    assert await service.record_click(created.short_code) is True

    found = await service.get_url_info(created.short_code)
    assert found.click_count == 2
    assert found.last_clicked_at is not None


@pytest.mark.asyncio
async def test_record_click_for_unknown_code(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    assert await service.record_click("nope") is False


@pytest.mark.asyncio
async def test_delete_url(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/delete-me")

    assert await service.delete_url(created.short_code) is True
    assert await service.get_url_info(created.short_code) is None
    assert await service.delete_url(created.short_code) is False
    assert await service.delete_url("not/valid") is False


@pytest.mark.asyncio
async def test_identity_not_reused_after_delete(db_session: AsyncSession):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/1")
    await service.delete_url(created.short_code)

    again = await service.create_short_url("https://example.com/2")
    assert again.short_code == "2"


def failing_commit_after(session: AsyncSession, successful_commits: int):
    """Return a commit replacement that lets the first N commits through, then fails."""
    real_commit = session.commit
    calls = {"count": 0}

    async def commit():
        calls["count"] += 1
        if calls["count"] > successful_commits:
            raise OperationalError("COMMIT", {}, Exception("database is locked"))
        await real_commit()

    return commit


@pytest.mark.asyncio
async def test_create_commit_failure_raises_persistence_error(db_session: AsyncSession, monkeypatch):
    service = URLShorteningService(db_session)

    # The identity commit goes through, the link commit fails
    monkeypatch.setattr(db_session, "commit", failing_commit_after(db_session, 1))
    with pytest.raises(PersistenceError) as exc_info:
        await service.create_short_url("https://example.com/locked")
    monkeypatch.undo()

    assert isinstance(exc_info.value.original_error, OperationalError)
    assert await service.get_url_info("1") is None

    short_url = await service.create_short_url("https://example.com/after")
    assert short_url.short_code == "2"


@pytest.mark.asyncio
async def test_delete_commit_failure_raises_persistence_error(db_session: AsyncSession, monkeypatch):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/keep")

    monkeypatch.setattr(db_session, "commit", failing_commit_after(db_session, 0))
    with pytest.raises(PersistenceError):
        await service.delete_url(created.short_code)
    monkeypatch.undo()

    # The delete was rolled back
    assert await service.get_url_info(created.short_code) is not None


@pytest.mark.asyncio
async def test_record_click_commit_failure_raises_persistence_error(db_session: AsyncSession, monkeypatch):
    service = URLShorteningService(db_session)
    created = await service.create_short_url("https://example.com/busy")

    monkeypatch.setattr(db_session, "commit", failing_commit_after(db_session, 0))
    with pytest.raises(PersistenceError):
        await service.record_click(created.short_code)
    monkeypatch.undo()

    info = await service.get_url_info(created.short_code)
    assert info.click_count == 0
