import math

from pydantic import BaseModel


class PageDTO(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    items: list


def page_offset(page: int, limit: int) -> int:
    """Pages are 1-based in the API."""
    return (max(page, 1) - 1) * limit


def total_pages(count: int, limit: int) -> int:
    if count == 0:
        return 0
    return math.ceil(count / limit)


def build_page(items: list, page: int, limit: int, count: int) -> PageDTO:
    return PageDTO(page=max(page, 1), limit=limit, total=count, total_pages=total_pages(count, limit), items=items)
