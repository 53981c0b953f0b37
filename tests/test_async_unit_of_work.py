"""Unit of work and repository test cases (async session)."""
import pytest
from sqlmodel import col
from framework.exceptions import DisposedError, DuplicateKeyError, NotTrackedError, StoreError
from framework.repository.unit_of_work import AsyncUnitOfWork, UnitOfWorkState
from apps.library.models import Author, Book
from apps.library.unit_of_work import AsyncLibraryUnitOfWork


class TestAsyncCommit:
    """Test awaitable commit."""

    @pytest.mark.asyncio
    async def test_commit_author_and_book(self, async_uow: AsyncLibraryUnitOfWork, async_session_factory):
        """Both entities retrievable by key from a fresh unit of work on the same store."""
        async_uow.authors.add(Author(id=1, name="Gamma"))
        async_uow.books.add(Book(id=1, title="Design Patterns", author_id=1))

        assert await async_uow.commit() == 2
        assert await async_uow.commit() == 0
        assert async_uow.state == UnitOfWorkState.COMMITTED

        async with AsyncLibraryUnitOfWork(async_session_factory) as fresh:
            author = await fresh.authors.find(1)
            book = await fresh.books.find(1)
            assert author.name == "Gamma"
            assert book.title == "Design Patterns"

    @pytest.mark.asyncio
    async def test_find_returns_staged_instance(self, async_uow: AsyncLibraryUnitOfWork):
        author = Author(id=1, name="Gamma")
        async_uow.authors.add(author)

        assert await async_uow.authors.find(1) is author
        with pytest.raises(DuplicateKeyError):
            async_uow.authors.add(Author(id=1, name="Helm"))

    @pytest.mark.asyncio
    async def test_remove_untracked_raises(self, async_uow: AsyncLibraryUnitOfWork):
        with pytest.raises(NotTrackedError):
            async_uow.books.remove(Book(id=1, title="Design Patterns"))

    @pytest.mark.asyncio
    async def test_remove_loaded_entities(self, async_uow: AsyncLibraryUnitOfWork, async_session_factory):
        async_uow.authors.add(Author(id=1, name="Fowler"))
        async_uow.books.add_range([
            Book(id=1, title="Refactoring", author_id=1),
            Book(id=2, title="Analysis Patterns", author_id=1),
        ])
        await async_uow.commit()

        async with AsyncLibraryUnitOfWork(async_session_factory) as other:
            books = await other.authors.get_books_by_author(1)
            other.books.remove_range(books)
            assert await other.commit() == 2
            assert await other.books.count() == 0

    @pytest.mark.asyncio
    async def test_failed_commit_stays_open(self, async_uow: AsyncLibraryUnitOfWork, async_session_factory):
        async_uow.authors.add(Author(id=1, name="Gamma"))
        await async_uow.commit()

        async with AsyncLibraryUnitOfWork(async_session_factory) as other:
            other.authors.add(Author(id=1, name="Someone Else"))
            with pytest.raises(StoreError):
                await other.commit()
            assert other.state == UnitOfWorkState.OPEN
            assert other.pending_changes == 1


class TestAsyncQueries:
    """Test awaitable queries."""

    @pytest.mark.asyncio
    async def test_find_where_second_page(self, async_uow: AsyncLibraryUnitOfWork, stage_design_books):
        stage_design_books(async_uow)
        await async_uow.commit()

        result = await async_uow.books.find_where(col(Book.title).contains("Design"), page=2, page_size=10)

        assert [book.title for book in result] == [f"Design Volume {i}" for i in range(11, 21)]
        assert list(result) == []

    @pytest.mark.asyncio
    async def test_domain_queries(self, async_uow: AsyncLibraryUnitOfWork, stage_design_books):
        stage_design_books(async_uow)
        await async_uow.commit()

        assert len(await async_uow.authors.get_books("design")) == 25
        assert len(await async_uow.books.search("COOKING", page=1)) == 5
        assert (await async_uow.authors.get_by_name("Gamma")).id == 1


class TestAsyncLifecycle:
    """Test dispose semantics."""

    @pytest.mark.asyncio
    async def test_operations_after_dispose_raise(self, async_session_factory):
        uow = AsyncLibraryUnitOfWork(async_session_factory)
        authors = uow.authors
        await uow.dispose()
        await uow.dispose()

        assert uow.state == UnitOfWorkState.DISPOSED
        with pytest.raises(DisposedError):
            await uow.commit()
        with pytest.raises(DisposedError):
            await authors.find(1)
        with pytest.raises(DisposedError):
            await authors.find_where()
        with pytest.raises(DisposedError):
            authors.add(Author(id=1, name="Gamma"))

    @pytest.mark.asyncio
    async def test_async_context_manager_disposes(self, async_session_factory):
        async with AsyncLibraryUnitOfWork(async_session_factory) as uow:
            uow.authors.add(Author(id=1, name="Gamma"))

        assert uow.state == UnitOfWorkState.DISPOSED
        async with AsyncLibraryUnitOfWork(async_session_factory) as fresh:
            assert await fresh.authors.find(1) is None

    @pytest.mark.asyncio
    async def test_from_session(self, async_session_factory):
        session = async_session_factory()
        uow = await AsyncUnitOfWork.from_session(session)

        assert uow.session is session
        await uow.dispose()

    def test_sync_session_rejected(self, session_factory):
        session = session_factory()
        with pytest.raises(TypeError):
            AsyncUnitOfWork(session=session)
        session.close()


class TestAsyncQueryFailures:
    """Test store failures on awaitable read paths."""

    @pytest.mark.asyncio
    async def test_query_failures_surface_as_store_error(self, async_driver, async_uow: AsyncLibraryUnitOfWork):
        async with async_driver.async_engine.begin() as conn:
            await conn.run_sync(Book.__table__.drop)

        with pytest.raises(StoreError):
            await async_uow.books.find(1)
        with pytest.raises(StoreError):
            await async_uow.books.find_where(Book.id == 1)
        with pytest.raises(StoreError):
            await async_uow.books.count()
        with pytest.raises(StoreError):
            await async_uow.authors.get_books("Design")
        with pytest.raises(StoreError):
            await async_uow.books.search("Design", page=1)


class TestAsyncStagingContracts:
    """Test model binding and persistent re-add on async repositories."""

    @pytest.mark.asyncio
    async def test_add_other_model_raises(self, async_uow: AsyncLibraryUnitOfWork):
        with pytest.raises(TypeError):
            async_uow.books.add(Author(id=1, name="Gamma"))

    @pytest.mark.asyncio
    async def test_add_loaded_entity_raises(self, async_uow: AsyncLibraryUnitOfWork):
        async_uow.authors.add(Author(id=1, name="Gamma"))
        await async_uow.commit()
        author = await async_uow.authors.find(1)

        with pytest.raises(DuplicateKeyError):
            async_uow.authors.add(author)
        assert await async_uow.commit() == 0
