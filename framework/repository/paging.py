"""
Paging policy shared by all repositories.

Pages are 1-based. ``page`` alone uses ``settings.DEFAULT_PAGE_SIZE``;
``page_size`` alone means the first page; neither returns every match.
"""

from typing import Optional, Tuple
from framework.config import settings


def resolve_page(page: Optional[int] = None, page_size: Optional[int] = None) -> Optional[Tuple[int, int]]:
    """Translate page/page_size into (limit, offset), or None for no paging."""
    if page is None and page_size is None:
        return None

    if page is None:
        page = 1
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE

    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")

    return page_size, (page - 1) * page_size


def apply_paging(statement, order_by, page: Optional[int] = None, page_size: Optional[int] = None):
    """Order by the given columns, then apply limit/offset when paging is requested."""
    statement = statement.order_by(*order_by)
    window = resolve_page(page, page_size)
    if window is None:
        return statement
    limit, offset = window
    return statement.limit(limit).offset(offset)
