"""Offset pagination shared by every list endpoint."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from wealth.config import settings

T = TypeVar("T")


@dataclass(frozen=True)
class PageMeta:
    """Position of one page within the full result."""

    total: int
    limit: int
    offset: int
    has_more: bool
    next_offset: int | None


@dataclass
class Page(Generic[T]):
    """One slice of a list plus its metadata."""

    items: list[T] = field(default_factory=list)
    meta: PageMeta | None = None


def clamp(limit: int | None, offset: int | None, max_page_size: int | None = None) -> tuple[int, int]:
    """Normalize limit/offset: negatives become 0, limit is capped at ``max_page_size``."""
    max_page_size = max_page_size or settings.max_page_size
    if limit is None:
        limit = settings.default_page_size
    limit = min(max(int(limit), 0), max_page_size)
    offset = max(int(offset or 0), 0)
    return limit, offset


def paginate(
    items: Sequence[T],
    limit: int | None = None,
    offset: int | None = None,
    max_page_size: int | None = None,
) -> Page[T]:
    """Slice ``items`` into one page.

    An offset past the end yields no items but still reports the real total.

    Example:
        >>> page = paginate(list(range(45)), limit=20, offset=40)
        >>> len(page.items), page.meta.has_more, page.meta.next_offset
        (5, False, None)
    """
    limit, offset = clamp(limit, offset, max_page_size)
    total = len(items)
    has_more = offset + limit < total
    return Page(
        items=list(items[offset : offset + limit]),
        meta=PageMeta(
            total=total,
            limit=limit,
            offset=offset,
            has_more=has_more,
            next_offset=offset + limit if has_more else None,
        ),
    )
