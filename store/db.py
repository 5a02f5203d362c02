# store/db.py
import os
import logging
import aiosqlite
from dotenv import load_dotenv

load_dotenv()

DB_PATH = os.getenv("DB_PATH", "goodreads.db")

logger = logging.getLogger("store")
logger.setLevel(logging.INFO)
handler = logging.StreamHandler()
handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
logger.addHandler(handler)

CREATE_BOOK_TABLE = """
CREATE TABLE IF NOT EXISTS book (
    book_id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    author_id INTEGER,
    rating REAL,
    rating_count INTEGER,
    review_count INTEGER,
    description TEXT,
    pages INTEGER,
    date_of_publication TEXT,
    edition_language TEXT,
    price REAL,
    online_stores TEXT
)
"""


SQLITE_MIN_INT = -(2**63)
SQLITE_MAX_INT = 2**63 - 1


class StoreError(Exception):
    """Raised for any failure reported by the SQLite driver."""


def fits_integer_column(key):
    """
    Tell whether a Python int can be bound to a SQLite INTEGER.

    No row can carry an id outside the signed 64-bit range, so lookups by
    such a key are answered as "no match" without reaching the driver,
    which would otherwise refuse to bind it.
    """
    return SQLITE_MIN_INT <= key <= SQLITE_MAX_INT


class BookStore:
    """
    Data access for the ``book`` table over a single aiosqlite connection.

    One instance is created per process and shared by every request. All
    statements go through that one connection, so aiosqlite executes them
    one at a time on its worker thread. Each public method issues exactly
    one parameterized statement and commits writes straight away.

    Raises:
        StoreError: wraps every ``aiosqlite.Error`` and every value the
            driver cannot bind (``OverflowError``), and any call made while
            the store is not connected.
    """

    def __init__(self, db_path=DB_PATH):
        self.db_path = db_path
        self._conn = None

    @property
    def conn(self):
        if self._conn is None:
            raise StoreError("Store is not connected")
        return self._conn

    async def connect(self):
        """Open the database file and make sure the book table exists."""
        try:
            self._conn = await aiosqlite.connect(self.db_path)
            self._conn.row_factory = aiosqlite.Row
            await self._conn.execute(CREATE_BOOK_TABLE)
            await self._conn.commit()
        except aiosqlite.Error as e:
            await self.close()
            raise StoreError(str(e)) from e
        logger.info(f"Connected to {self.db_path}")

    async def close(self):
        """
        Close the connection if one is open.

        Safe to call more than once; after it, every query raises
        StoreError until connect() is called again.
        """
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await conn.close()

    async def _fetch_all(self, query, params=()):
        try:
            async with self.conn.execute(query, params) as cursor:
                rows = await cursor.fetchall()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(str(e)) from e
        return [dict(r) for r in rows]

    async def _fetch_one(self, query, params=()):
        try:
            async with self.conn.execute(query, params) as cursor:
                row = await cursor.fetchone()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(str(e)) from e
        return dict(row) if row is not None else None

    async def _run(self, query, params=()):
        """Execute a write and return the cursor after committing."""
        try:
            cursor = await self.conn.execute(query, params)
            await self.conn.commit()
        except (aiosqlite.Error, OverflowError) as e:
            raise StoreError(str(e)) from e
        return cursor

    async def list_books(self):
        """Return every book ordered by book_id."""
        return await self._fetch_all("SELECT * FROM book ORDER BY book_id")

    async def get_book(self, book_id):
        """Return the book row as a dict, or None when no row matches."""
        if not fits_integer_column(book_id):
            return None
        return await self._fetch_one(
            "SELECT * FROM book WHERE book_id = ?", (book_id,)
        )

    async def add_book(self, book):
        """Insert a BookIn and return the id the store assigned to it."""
        cursor = await self._run(
            """
            INSERT INTO book (title, author_id, rating, rating_count, review_count,
                description, pages, date_of_publication, edition_language, price,
                online_stores)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            book.as_params(),
        )
        return cursor.lastrowid

    async def update_book(self, book_id, book):
        """
        Replace every column of the matching row.

        Returns:
            int: number of rows the UPDATE touched (0 when book_id is unknown).
        """
        if not fits_integer_column(book_id):
            return 0
        cursor = await self._run(
            """
            UPDATE book
            SET title = ?, author_id = ?, rating = ?, rating_count = ?,
                review_count = ?, description = ?, pages = ?,
                date_of_publication = ?, edition_language = ?, price = ?,
                online_stores = ?
            WHERE book_id = ?
            """,
            (*book.as_params(), book_id),
        )
        return cursor.rowcount

    async def delete_book(self, book_id):
        """
        Delete the row with the given id, if there is one.

        Args:
            book_id (int): id of the book to remove

        Returns:
            int: number of rows removed, 0 or 1

        Note:
            The router ignores the count; deleting a missing book is not an
            error.
        """
        if not fits_integer_column(book_id):
            return 0
        cursor = await self._run("DELETE FROM book WHERE book_id = ?", (book_id,))
        return cursor.rowcount

    async def list_books_by_author(self, author_id):
        """Return the books whose author_id matches, possibly none."""
        if not fits_integer_column(author_id):
            return []
        # no ORDER BY: rows come back in whatever order SQLite scans them
        return await self._fetch_all(
            "SELECT * FROM book WHERE author_id = ?", (author_id,)
        )
