# tests/conftest.py
import sys
import os

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT_DIR)

import pytest
from httpx import ASGITransport, AsyncClient

from api.main import app, get_store
from api.rate_limit import limiter
from store.db import BookStore
from store.models import BookIn


@pytest.fixture
def sample_books():
    """
    Three books as a client would POST them (camelCase keys).

    - "Alpha" and "Gamma" share authorId 1, "Beta" belongs to authorId 2
    - No book belongs to authorId 99, used for the empty author listing
    """
    return [
        {
            "title": "Alpha",
            "authorId": 1,
            "rating": 4.5,
            "ratingCount": 10,
            "reviewCount": 2,
            "description": "First book",
            "pages": 100,
            "dateOfPublication": "2020-01-01",
            "editionLanguage": "en",
            "price": 9.99,
            "onlineStores": "[]",
        },
        {
            "title": "Beta",
            "authorId": 2,
            "rating": 3.0,
            "ratingCount": 4,
            "reviewCount": 1,
            "description": "Second book",
            "pages": 250,
            "dateOfPublication": "2018-06-15",
            "editionLanguage": "fr",
            "price": 14.5,
            "onlineStores": '["amazon"]',
        },
        {
            "title": "Gamma",
            "authorId": 1,
            "rating": 4.0,
            "ratingCount": 7,
            "reviewCount": 3,
            "description": None,
            "pages": 320,
            "dateOfPublication": "2021-09-30",
            "editionLanguage": "en",
            "price": None,
            "onlineStores": None,
        },
    ]


@pytest.fixture
async def store(tmp_path, sample_books):
    """
    A connected BookStore on a per-test SQLite file, seeded with sample_books.

    Seeded rows get book ids 1, 2 and 3 in sample_books order.
    """
    s = BookStore(str(tmp_path / "goodreads_test.db"))
    await s.connect()
    for book in sample_books:
        await s.add_book(BookIn.model_validate(book))
    yield s
    await s.close()


@pytest.fixture
async def client(store):
    """
    Async test client talking to the app in-process.

    The seeded store replaces the application's own through the get_store
    dependency, and the rate limiter is reset so earlier tests never push a
    request over the limit.
    """
    app.dependency_overrides[get_store] = lambda: store
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
