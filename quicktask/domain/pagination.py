from __future__ import annotations

import math

DEFAULT_LIMIT = 10
PAGE_SIZE_OPTIONS = (5, 10, 20, 50)
PAGE_WINDOW_SIZE = 5


def total_pages(total_count: int, limit: int) -> int:
    if limit <= 0:
        return 1
    return max(1, math.ceil(total_count / limit))


def page_window(current: int, pages: int, size: int = PAGE_WINDOW_SIZE) -> list[int]:
    """Page numbers for a pager, keeping the current page centred when possible."""
    if pages <= size:
        return list(range(1, pages + 1))

    start = max(1, current - size // 2)
    end = start + size - 1
    if end > pages:
        end = pages
        start = max(1, end - size + 1)
    return list(range(start, end + 1))
