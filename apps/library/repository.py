"""Library module repository implementations."""

from typing import List, Optional
from sqlmodel import col, select
from framework.repository.base import AsyncBaseRepository, BaseRepository
from framework.repository.paging import apply_paging
from .models import Author, Book


def _title_matches(search: str):
    # Case-insensitive substring match, evaluated by the store
    return col(Book.title).icontains(search, autoescape=True)


def books_by_author_statement(author_id: int):
    return select(Book).where(Book.author_id == author_id).order_by(Book.id)


def books_search_statement(search: str, page: Optional[int] = None, page_size: Optional[int] = None):
    statement = select(Book).where(_title_matches(search))
    return apply_paging(statement, [Book.id], page, page_size)


class AuthorRepository(BaseRepository[Author]):
    """Author repository."""

    def __init__(self, store):
        super().__init__(store, Author)

    def get_by_name(self, name: str) -> Optional[Author]:
        """Find author by exact name."""
        return self.find_one(name=name)

    def get_books_by_author(self, author_id: int) -> List[Book]:
        """All books written by an author, by book id."""
        return self._fetch_all(books_by_author_statement(author_id))

    def get_books(
        self,
        search: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None
    ) -> List[Book]:
        """
        Books whose title contains ``search`` (case-insensitive).

        Args:
            search: Title fragment
            page: 1-based page number (page_size defaults to DEFAULT_PAGE_SIZE)
            page_size: Page size (page defaults to 1)

        Returns:
            Materialized list of books ordered by id
        """
        return self._fetch_all(books_search_statement(search, page, page_size))


class BookRepository(BaseRepository[Book]):
    """Book repository."""

    def __init__(self, store):
        super().__init__(store, Book)

    def search(
        self,
        title_contains: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None
    ) -> List[Book]:
        """Books whose title contains the fragment (case-insensitive), by id."""
        return self._fetch_all(books_search_statement(title_contains, page, page_size))


class AsyncAuthorRepository(AsyncBaseRepository[Author]):
    """Author repository (async session)."""

    def __init__(self, store):
        super().__init__(store, Author)

    async def get_by_name(self, name: str) -> Optional[Author]:
        return await self.find_one(name=name)

    async def get_books_by_author(self, author_id: int) -> List[Book]:
        return await self._fetch_all(books_by_author_statement(author_id))

    async def get_books(
        self,
        search: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None
    ) -> List[Book]:
        return await self._fetch_all(books_search_statement(search, page, page_size))


class AsyncBookRepository(AsyncBaseRepository[Book]):
    """Book repository (async session)."""

    def __init__(self, store):
        super().__init__(store, Book)

    async def search(
        self,
        title_contains: str,
        page: Optional[int] = None,
        page_size: Optional[int] = None
    ) -> List[Book]:
        return await self._fetch_all(books_search_statement(title_contains, page, page_size))
