from typing import Iterable
from loguru import logger
from framework.exceptions import DataAccessException
from framework.repository.unit_of_work import IAsyncUnitOfWork
from .models import Author, Book


class LibraryService:
    def __init__(self, uow: IAsyncUnitOfWork):
        """Initialize Library Service with a unit of work exposing `authors` and `books`."""
        self.uow = uow

    async def register_author(self, name: str, titles: Iterable[str] = ()) -> Author:
        """Register an author together with their books in one commit."""
        author = Author(name=name)
        books = [Book(title=title, author=author) for title in titles]

        self.uow.authors.add(author)
        self.uow.books.add_range(books)
        try:
            await self.uow.commit()
        except DataAccessException as e:
            logger.error(f"Failed to register author {name}: {e.message}")
            raise

        logger.info(f"Author {name} registered with {len(books)} book(s)")
        return author

    async def remove_books_by_author(self, author_id: int) -> int:
        """Remove every book of an author; returns the number of deleted books."""
        books = await self.uow.authors.get_books_by_author(author_id)
        self.uow.books.remove_range(books)
        removed = await self.uow.commit()
        logger.info(f"Removed {removed} book(s) of author {author_id}")
        return removed
