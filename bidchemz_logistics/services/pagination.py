"""Page/limit pagination helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int
    sort_order: str

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def newest_first(self) -> bool:
        return self.sort_order == "desc"


def get_page_params(
    page: Optional[int] = None, limit: Optional[int] = None, sort_order: Optional[str] = None
) -> PageParams:
    """Clamp raw query values: page >= 1, 1 <= limit <= 100, sort order asc or desc (default)."""
    return PageParams(
        page=max(1, page or 1),
        limit=min(MAX_PAGE_SIZE, max(1, limit or DEFAULT_PAGE_SIZE)),
        sort_order="asc" if sort_order == "asc" else "desc",
    )


def calculate_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": total_pages,
        "has_more": page < total_pages,
    }
