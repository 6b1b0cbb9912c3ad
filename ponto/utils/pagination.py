"""페이지네이션 유틸리티 모듈.

Pagination utility module. Every list endpoint returns the same page shape::

    {"items": [...], "total": 42, "page": 1, "per_page": 20, "pages": 3}

Repositories run the COUNT and OFFSET/LIMIT queries
(``BaseRepository.paginate``); this module only shapes the response.
"""

import math
from typing import Any


def build_page(items: list[Any], total: int, page: int, per_page: int) -> dict[str, Any]:
    """페이지 응답 딕셔너리를 만듭니다.

    Args:
        items: 현재 페이지 항목 목록 (Items for the current page)
        total: 전체 항목 수 (Total count across all pages)
        page: 현재 페이지 번호, 1부터 시작 (Current page, 1-indexed)
        per_page: 페이지당 항목 수 (Items per page)

    Returns:
        dict: items, total, page, per_page, pages (ceil(total / per_page))
    """
    return {
        "items": items,
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if per_page else 0,
    }
