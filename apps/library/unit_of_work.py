"""Book library unit of work: authors and books share one session."""

from framework.repository.unit_of_work import AsyncUnitOfWork, UnitOfWork
from .repository import AsyncAuthorRepository, AsyncBookRepository, AuthorRepository, BookRepository


class LibraryUnitOfWork(UnitOfWork):
    """Library repositories over a sync session."""

    def __init__(self, session_factory=None, session=None):
        super().__init__(session_factory=session_factory, session=session)
        self.get_repository(AuthorRepository)
        self.get_repository(BookRepository)

    @property
    def authors(self) -> AuthorRepository:
        return self.get_repository(AuthorRepository)

    @property
    def books(self) -> BookRepository:
        return self.get_repository(BookRepository)


class AsyncLibraryUnitOfWork(AsyncUnitOfWork):
    """Library repositories over an async session."""

    def __init__(self, session_factory=None, session=None):
        super().__init__(session_factory=session_factory, session=session)
        self.get_repository(AsyncAuthorRepository)
        self.get_repository(AsyncBookRepository)

    @property
    def authors(self) -> AsyncAuthorRepository:
        return self.get_repository(AsyncAuthorRepository)

    @property
    def books(self) -> AsyncBookRepository:
        return self.get_repository(AsyncBookRepository)
