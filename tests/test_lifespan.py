# tests/test_lifespan.py
import pytest
from httpx import ASGITransport, AsyncClient

from api.main import create_app
from store.db import BookStore, StoreError


@pytest.mark.asyncio
async def test_startup_opens_injected_store(tmp_path):
    """
    The lifespan connects the store handed to create_app, the handlers read
    it through get_store, and shutdown closes it again.
    """
    store = BookStore(str(tmp_path / "app.db"))
    app = create_app(store)

    async with app.router.lifespan_context(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            r = await ac.post("/books", json={"title": "Started"})
            assert r.status_code == 201
            r = await ac.get("/books")
            assert [b["title"] for b in r.json()] == ["Started"]

    with pytest.raises(StoreError):
        await store.list_books()


@pytest.mark.asyncio
async def test_startup_fails_fast_when_store_cannot_open(tmp_path):
    store = BookStore(str(tmp_path / "nowhere" / "app.db"))
    app = create_app(store)

    with pytest.raises(StoreError):
        async with app.router.lifespan_context(app):
            pass
