import math


def clamp_pagination(page: int, limit: int, max_limit: int = 100) -> tuple[int, int, int]:
    """Return (page, limit, offset) with page >= 1 and 1 <= limit <= max_limit."""
    page = max(1, page)
    limit = max(1, min(limit, max_limit))
    return page, limit, (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
