# api/main.py
from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from typing import List
import os
from dotenv import load_dotenv
from .error_handlers import register_error_handlers
from .rate_limit import register_rate_limit, limiter, RATE_LIMIT
from store.db import BookStore, StoreError
from store.models import Book, BookCreated, BookIn
import logging

load_dotenv()
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "3000"))

logger = logging.getLogger("api")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
logger.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Open the store before serving and close it on shutdown.

    A store that cannot be opened is fatal: the error is logged and
    re-raised, so uvicorn aborts startup instead of serving requests
    against a missing database.
    """
    store = app.state.store
    try:
        await store.connect()
    except StoreError as e:
        logger.error(f"DB Error: {e}")
        raise
    logger.info(f"Server Running at http://localhost:{API_PORT}/")
    try:
        yield
    finally:
        await store.close()


def get_store(request: Request) -> BookStore:
    """Dependency returning the store created for this application."""
    return request.app.state.store


def create_app(store: BookStore = None) -> FastAPI:
    app = FastAPI(title="Goodreads Books API", version="1.0", lifespan=lifespan)
    app.state.store = store or BookStore()

    register_rate_limit(app)
    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    _add_routes(app)
    return app


def _add_routes(app: FastAPI):
    @app.get("/books", response_model=List[Book])
    @limiter.limit(RATE_LIMIT)
    async def list_books(request: Request, store: BookStore = Depends(get_store)):
        """Return every book, ordered by ascending bookId."""
        try:
            rows = await store.list_books()
        except StoreError as e:
            logger.error(f"Failed to fetch books: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch books")
        return [Book.model_validate(r) for r in rows]

    @app.get("/books/{book_id}", response_model=Book)
    @limiter.limit(RATE_LIMIT)
    async def get_book(
        request: Request, book_id: int, store: BookStore = Depends(get_store)
    ):
        """
        Retrieve a single book by its id.

        Raises:
            HTTPException: 404 if no row matches, 500 on a store failure
        """
        try:
            row = await store.get_book(book_id)
        except StoreError as e:
            logger.error(f"Failed to fetch book {book_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch book")
        if not row:
            raise HTTPException(status_code=404, detail="Book not found")
        return Book.model_validate(row)

    @app.post("/books", response_model=BookCreated, status_code=201)
    @limiter.limit(RATE_LIMIT)
    async def add_book(
        request: Request, book: BookIn, store: BookStore = Depends(get_store)
    ):
        """
        Insert a book and answer with the id the store assigned.

        Args:
            request (Request): FastAPI request object (required for rate limiting)
            book (BookIn): validated request body
            store (BookStore): injected data access object

        Returns:
            BookCreated: ``{"bookId": <int>}`` with status 201

        Raises:
            HTTPException: 500 when the store rejects the row
        """
        try:
            book_id = await store.add_book(book)
        except StoreError as e:
            logger.error(f"Error inserting book: {e}")
            raise HTTPException(status_code=500, detail="Failed to add book")
        return BookCreated(book_id=book_id)

    @app.put("/books/{book_id}", response_class=PlainTextResponse)
    @limiter.limit(RATE_LIMIT)
    async def update_book(
        request: Request,
        book_id: int,
        book: BookIn,
        store: BookStore = Depends(get_store),
    ):
        """
        Replace every field of an existing book.

        A zero affected-row count answers 404; the store cannot tell an
        unknown id apart from an update that changed nothing.
        """
        try:
            changes = await store.update_book(book_id, book)
        except StoreError as e:
            logger.error(f"Failed to update book {book_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update book")
        if changes == 0:
            raise HTTPException(
                status_code=404, detail="Book not found or no changes made"
            )
        return "Book Updated Successfully"

    @app.delete("/books/{book_id}", response_class=PlainTextResponse)
    @limiter.limit(RATE_LIMIT)
    async def delete_book(
        request: Request, book_id: int, store: BookStore = Depends(get_store)
    ):
        """
        Delete a book by its id.

        Args:
            request (Request): FastAPI request object (required for rate limiting)
            book_id (int): id of the book to delete
            store (BookStore): injected data access object

        Returns:
            str: plain-text confirmation, also when no row matched

        Raises:
            HTTPException: 500 on a store failure
        """
        try:
            await store.delete_book(book_id)
        except StoreError as e:
            logger.error(f"Failed to delete book {book_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete book")
        return "Book Deleted Successfully"

    @app.get("/authors/{author_id}/books/", response_model=List[Book])
    @limiter.limit(RATE_LIMIT)
    async def list_author_books(
        request: Request, author_id: int, store: BookStore = Depends(get_store)
    ):
        """
        List the books written by one author.

        Args:
            request (Request): FastAPI request object (required for rate limiting)
            author_id (int): author whose books are returned
            store (BookStore): injected data access object

        Returns:
            list[Book]: matching books in store order; empty when the author
            has none

        Raises:
            HTTPException: 500 on a store failure
        """
        try:
            rows = await store.list_books_by_author(author_id)
        except StoreError as e:
            logger.error(f"Failed to fetch books of author {author_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch author books")
        return [Book.model_validate(r) for r in rows]


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=API_HOST, port=API_PORT)
