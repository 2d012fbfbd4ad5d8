from __future__ import annotations

from dataclasses import dataclass

from folio.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_RECORD_ID


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def clamp_page(page: int | None, page_size: int | None) -> PageRequest:
    """Clamp ``page`` to at least 1 and ``page_size`` into ``1..MAX_PAGE_SIZE``.

    Very large pages are pulled back so the offset still fits a 64-bit
    integer; such pages are empty either way.
    """
    if page_size is None:
        page_size = DEFAULT_PAGE_SIZE
    page_size = min(max(1, page_size), MAX_PAGE_SIZE)
    page = min(max(1, page or 1), MAX_RECORD_ID // page_size)
    return PageRequest(page=page, page_size=page_size)
