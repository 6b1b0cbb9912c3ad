"""결근 라우터 — 결근 신청, 목록, 검토, 통계.

Absences Router — Absence requests, scoped listing, review and counts.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, require_staff
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.request import AbsenceCreate, ReviewRequest
from ponto.services.request_service import absence_service, build_absence_response
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.get("")
async def list_absences(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    absences, total = await absence_service.list_requests(db, current_user, status=status, page=page, per_page=limit)
    return build_page([build_absence_response(a) for a in absences], total, page, limit)


# /stats는 /{absence_id}보다 먼저 등록 — registered before the id route
@router.get("/stats")
async def absence_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    company_id: Annotated[UUID | None, Query(description="회사 필터 (admin)")] = None,
) -> dict:
    return await absence_service.stats(db, current_user, company_id)


@router.post("", status_code=201)
async def create_absence(
    data: AbsenceCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    absence = await absence_service.create(db, current_user, data)
    await db.commit()
    return {"message": "Absence request created successfully", "absence": build_absence_response(absence)}


@router.put("/{absence_id}")
async def review_absence(
    absence_id: UUID,
    data: ReviewRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    """결근 승인/거절 — manager, hr, admin; pending 상태에서만."""
    absence = await absence_service.review(db, current_user, absence_id, data)
    await db.commit()
    return {"message": f"Absence {absence.status}", "absence": build_absence_response(absence)}
