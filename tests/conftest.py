"""Test config and shared fixtures."""
import pytest
from typing import AsyncGenerator, Generator
from framework.database.sql_driver import SQLDriver
from apps.library.models import Author, Book
from apps.library.unit_of_work import AsyncLibraryUnitOfWork, LibraryUnitOfWork


# In-memory SQLite for tests (StaticPool: every session shares one connection)
TEST_DATABASE_URL = "sqlite://"
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture(scope="function")
def driver() -> Generator[SQLDriver, None, None]:
    """Create driver with a fresh sync schema."""
    driver = SQLDriver(TEST_DATABASE_URL, TEST_ASYNC_DATABASE_URL)
    driver.create_schema()
    yield driver
    driver.drop_schema()
    driver.disconnect()


@pytest.fixture(scope="function")
async def async_driver() -> AsyncGenerator[SQLDriver, None]:
    """Create driver with a fresh async schema."""
    driver = SQLDriver(TEST_DATABASE_URL, TEST_ASYNC_DATABASE_URL)
    await driver.create_schema_async()
    yield driver
    await driver.drop_schema_async()
    await driver.disconnect_async()
    driver.disconnect()


@pytest.fixture
def session_factory(driver: SQLDriver):
    return driver.session_factory


@pytest.fixture
def async_session_factory(async_driver: SQLDriver):
    return async_driver.async_session_factory


@pytest.fixture
def uow(session_factory) -> Generator[LibraryUnitOfWork, None, None]:
    """Sync library unit of work, disposed after the test."""
    uow = LibraryUnitOfWork(session_factory)
    yield uow
    uow.dispose()


@pytest.fixture
async def async_uow(async_session_factory) -> AsyncGenerator[AsyncLibraryUnitOfWork, None]:
    """Async library unit of work, disposed after the test."""
    uow = AsyncLibraryUnitOfWork(async_session_factory)
    yield uow
    await uow.dispose()


@pytest.fixture
def sample_library(session_factory) -> dict:
    """Persist two authors and their books."""
    uow = LibraryUnitOfWork(session_factory)
    uow.authors.add_range([Author(id=1, name="Gamma"), Author(id=2, name="Fowler")])
    uow.books.add_range([
        Book(id=1, title="Design Patterns", author_id=1),
        Book(id=2, title="Refactoring", author_id=2),
        Book(id=3, title="Patterns of Enterprise Application Architecture", author_id=2),
    ])
    uow.commit()
    uow.dispose()
    return {"authors": [1, 2], "books": [1, 2, 3]}


def _stage_design_books(uow, matches: int = 25, others: int = 5) -> None:
    """Stage `matches` books with 'Design' in the title interleaved with `others` that don't."""
    uow.authors.add(Author(id=1, name="Gamma"))
    book_id = 1
    for i in range(matches):
        uow.books.add(Book(id=book_id, title=f"Design Volume {i + 1}", author_id=1))
        book_id += 1
        if i < others:
            uow.books.add(Book(id=book_id, title=f"Cooking {i + 1}", author_id=1))
            book_id += 1


@pytest.fixture
def stage_design_books():
    """Return helper staging an author with 25 'Design' books and 5 others."""
    return _stage_design_books
