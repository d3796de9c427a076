"""Redirect behavior tests: lookup path and decoupled click recording."""

import asyncio
from typing import List

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import InvalidCodeError, PersistenceError, ShortCodeNotFoundError
from shortener.core.recorder_manager import get_click_recorder
from shortener.main import app
from shortener.services.click_recorder import ClickRecorder
from shortener.services.redirect_service import RedirectService
from shortener.services.url_service import URLShorteningService


class SpyRecorder:
    """Stands in for ClickRecorder and remembers what was handed over."""

    def __init__(self):
        self.submitted: List[str] = []

    def submit(self, short_code: str) -> bool:
        self.submitted.append(short_code)
        return True


async def shorten(client: AsyncClient, url: str) -> str:
    response = await client.post("/api/v1/urls", json={"url": url})
    assert response.status_code == 201, response.text
    return response.json()["short_code"]


class TestRedirectService:

    @pytest.mark.asyncio
    async def test_resolves_and_dispatches_click(self, db_session: AsyncSession):
        created = await URLShorteningService(db_session).create_short_url("https://example.com/x")
        spy = SpyRecorder()

        destination = await RedirectService(db_session, click_recorder=spy).redirect(created.short_code)

        assert destination == "https://example.com/x"
        assert spy.submitted == [created.short_code]

    @pytest.mark.asyncio
    async def test_unknown_code_records_nothing(self, db_session: AsyncSession):
        spy = SpyRecorder()

        with pytest.raises(ShortCodeNotFoundError):
            await RedirectService(db_session, click_recorder=spy).redirect("abc")

        assert spy.submitted == []

    @pytest.mark.asyncio
    async def test_malformed_code_never_reaches_storage(self):
        spy = SpyRecorder()
        # No session at all: any storage access would blow up
        service = RedirectService(session=None, click_recorder=spy)

        for code in ["", "abc-def", "!@#", "a b"]:
            with pytest.raises(InvalidCodeError):
                await service.redirect(code)

        assert spy.submitted == []

    @pytest.mark.asyncio
    async def test_missing_recorder_still_redirects(self, db_session: AsyncSession):
        created = await URLShorteningService(db_session).create_short_url("https://example.com/y")

        destination = await RedirectService(db_session, click_recorder=None).redirect(created.short_code)

        assert destination == "https://example.com/y"

    @pytest.mark.asyncio
    async def test_lookup_failure_propagates(self, db_session: AsyncSession, monkeypatch):
        service = RedirectService(db_session, click_recorder=SpyRecorder())

        async def failing_lookup(short_code):
            raise PersistenceError("connection refused")

        monkeypatch.setattr(service.url_service.repository, "find_original_url_by_short_code", failing_lookup)

        with pytest.raises(PersistenceError):
            await service.redirect("abc")
        assert service.click_recorder.submitted == []


@pytest.mark.asyncio
async def test_redirect_valid_code(client: AsyncClient) -> None:
    short_code = await shorten(client, "https://www.python.org/downloads/")

    response = await client.get(f"/{short_code}", follow_redirects=False)

    assert response.status_code == 303
    assert response.headers["location"] == "https://www.python.org/downloads/"


@pytest.mark.asyncio
async def test_shorten_then_redirect_roundtrip(client: AsyncClient) -> None:
    short_code = await shorten(client, "https://example.com/some/long/path?q=1")
    assert short_code == "1"

    response = await client.get(f"/{short_code}", follow_redirects=False)
    assert response.headers["location"] == "https://example.com/some/long/path?q=1"


@pytest.mark.asyncio
async def test_redirect_unknown_code(client: AsyncClient, click_recorder: ClickRecorder) -> None:
    response = await client.get("/nonexistent", follow_redirects=False)

    assert response.status_code == 404
    assert click_recorder.get_stats()["total_submitted"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("code", ["abc-def", "bad_code", "a.b"])
async def test_redirect_malformed_code(client: AsyncClient, click_recorder: ClickRecorder, code: str) -> None:
    response = await client.get(f"/{code}", follow_redirects=False)

    assert response.status_code == 400
    assert click_recorder.get_stats()["total_submitted"] == 0


@pytest.mark.asyncio
async def test_redirect_increments_clicks(client: AsyncClient, click_recorder: ClickRecorder) -> None:
    short_code = await shorten(client, "https://www.github.com/")

    for _ in range(3):
        await client.get(f"/{short_code}", follow_redirects=False)
    await asyncio.wait_for(click_recorder.join(), timeout=5)

    info = (await client.get(f"/api/v1/urls/{short_code}")).json()
    assert info["clicks"] == 3
    assert info["last_clicked_at"] is not None


@pytest.mark.asyncio
async def test_concurrent_redirects_both_counted(client: AsyncClient, click_recorder: ClickRecorder) -> None:
    short_code = await shorten(client, "https://example.com/popular")

    responses = await asyncio.gather(
        client.get(f"/{short_code}", follow_redirects=False),
        client.get(f"/{short_code}", follow_redirects=False),
    )
    assert [r.status_code for r in responses] == [303, 303]

    await asyncio.wait_for(click_recorder.join(), timeout=5)

    info = (await client.get(f"/api/v1/urls/{short_code}")).json()
    assert info["clicks"] == 2
    assert click_recorder.get_stats()["total_recorded"] == 2


@pytest.mark.asyncio
async def test_redirect_not_delayed_by_slow_recording(client: AsyncClient) -> None:
    short_code = await shorten(client, "https://example.com/slow")
    release = asyncio.Event()

    async def slow_record(code: str) -> None:
        await release.wait()

    recorder = ClickRecorder(record_click=slow_record, workers=1)
    await recorder.start()
    app.dependency_overrides[get_click_recorder] = lambda: recorder
    try:
        response = await asyncio.wait_for(
            client.get(f"/{short_code}", follow_redirects=False),
            timeout=2
        )
        assert response.status_code == 303
        assert recorder.get_stats()["total_recorded"] == 0

        release.set()
        await asyncio.wait_for(recorder.join(), timeout=2)
        assert recorder.get_stats()["total_recorded"] == 1
    finally:
        release.set()
        await recorder.stop(timeout=1)


@pytest.mark.asyncio
async def test_redirect_survives_recording_failure(client: AsyncClient) -> None:
    short_code = await shorten(client, "https://example.com/flaky")

    async def failing_record(code: str) -> None:
        raise PersistenceError("database is locked")

    recorder = ClickRecorder(record_click=failing_record, workers=1)
    await recorder.start()
    app.dependency_overrides[get_click_recorder] = lambda: recorder
    try:
        response = await client.get(f"/{short_code}", follow_redirects=False)
        assert response.status_code == 303
        assert response.headers["location"] == "https://example.com/flaky"

        await asyncio.wait_for(recorder.join(), timeout=2)
        assert recorder.get_stats()["total_failed"] == 1
    finally:
        await recorder.stop(timeout=1)

    info = (await client.get(f"/api/v1/urls/{short_code}")).json()
    assert info["clicks"] == 0
    assert info["last_clicked_at"] is None


@pytest.mark.asyncio
async def test_redirect_without_recorder(client: AsyncClient) -> None:
    short_code = await shorten(client, "https://example.com/no-recorder")
    app.dependency_overrides[get_click_recorder] = lambda: None

    response = await client.get(f"/{short_code}", follow_redirects=False)

    assert response.status_code == 303
