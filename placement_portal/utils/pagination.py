from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from placement_portal.core.config import get_settings


@dataclass(frozen=True)
class PageParams:
    page: int
    page_size: int


def clamp_page(page: Optional[int], page_size: Optional[int]) -> PageParams:
    """Page starts at 1; page_size is clamped to [1, max_page_size]."""
    settings = get_settings()
    page = max(page or 1, 1)
    if page_size is None:
        page_size = settings.default_page_size
    page_size = min(max(page_size, 1), settings.max_page_size)
    return PageParams(page=page, page_size=page_size)


def pagination_params(
    page: int = Query(1, description="Page number, starting at 1"),
    page_size: Optional[int] = Query(None, description="Items per page"),
) -> PageParams:
    return clamp_page(page, page_size)
