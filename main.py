"""
Demo entry point: register an author with books, then remove the books,
each step in its own unit of work.
"""
import asyncio
from loguru import logger
from framework.config import settings
from framework.database.manager import DatabaseManager
from framework.logging.logger import LogConfig, reset_trace_id, set_trace_id
from apps.library.service import LibraryService
from apps.library.unit_of_work import AsyncLibraryUnitOfWork


async def run_demo(manager: DatabaseManager = None) -> dict:
    manager = manager or DatabaseManager.get_instance()
    await manager.sql.create_schema_async()
    factory = manager.sql.async_session_factory

    token = set_trace_id("demo")
    try:
        async with AsyncLibraryUnitOfWork(factory) as uow:
            author = await LibraryService(uow).register_author(
                "Gamma", ["Design Patterns", "Design Patterns Explained"]
            )
            author_id = author.id

        async with AsyncLibraryUnitOfWork(factory) as uow:
            found = await uow.authors.get_books("design", page=1, page_size=10)
            removed = await LibraryService(uow).remove_books_by_author(author_id)
    finally:
        reset_trace_id(token)

    logger.info(f"Demo finished on {settings.APP_NAME}: found {len(found)}, removed {removed}")
    return {"author_id": author_id, "found": len(found), "removed": removed}


def main():
    # Initialize logging configuration
    LogConfig.setup_logging()
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
