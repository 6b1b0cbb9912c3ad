"""통계 라우터 — 대시보드, 직원별 근무시간.

Stats Router — Company dashboard and per-employee worked-hours summary.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, require_staff
from ponto.database import get_db
from ponto.models.user import User
from ponto.services.stats_service import stats_service

router: APIRouter = APIRouter()


@router.get("/dashboard")
async def dashboard(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    company_id: Annotated[UUID | None, Query(description="회사 필터 (admin)")] = None,
) -> dict:
    return {"stats": await stats_service.dashboard(db, current_user, company_id)}


@router.get("/employee/{employee_id}")
async def employee_stats(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    start_date: Annotated[datetime | None, Query()] = None,
    end_date: Annotated[datetime | None, Query()] = None,
    mode: Annotated[str | None, Query(description="strict | legacy")] = None,
) -> dict:
    """직원 근무시간 요약 — 기본 기간은 이번 달 1일부터 현재까지.

    Worked-hours summary. Defaults to the current month up to now.
    """
    return {
        "stats": await stats_service.employee_stats(
            db, current_user, employee_id, start=start_date, end=end_date, mode=mode
        )
    }
