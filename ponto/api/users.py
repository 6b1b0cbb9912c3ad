"""사용자 라우터 — 내 프로필, 전체 사용자 목록(관리자).

Users Router — Own profile and the cross-tenant user list for admins.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user
from ponto.database import get_db
from ponto.models.user import User
from ponto.services.user_service import build_user_response, user_service
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.get("/profile")
async def get_profile(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return build_user_response(current_user)


@router.get("")
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    search: Annotated[str | None, Query(description="이름/이메일 검색")] = None,
) -> dict:
    """전체 사용자 목록 (관리자 전용) — All users, admin only."""
    users, total = await user_service.list_users(db, current_user, search=search, page=page, per_page=limit)
    return build_page([build_user_response(u) for u in users], total, page, limit)
