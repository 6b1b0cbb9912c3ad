"""시간 조정 라우터 — 사유 생성/분석, 조정 요청, 검토.

Adjustments Router — Justification generation and analysis, adjustment
requests and their review.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, require_staff
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.request import (
    AdjustmentCreate,
    AnalyzeJustificationRequest,
    GenerateJustificationRequest,
    ReviewRequest,
)
from ponto.services.justification_service import justification_service
from ponto.services.request_service import adjustment_service, build_adjustment_response
from ponto.utils.dates import utc_now
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.post("/generate-justification")
async def generate_justification(
    data: GenerateJustificationRequest,
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """비공식 설명을 공식 사유로 변환 — falls back to a template when generation is unavailable."""
    justification, generated = await justification_service.generate_justification(
        data.user_input, data.record_type, data.date or utc_now().date()
    )
    return {"justification": justification, "generated": generated}


@router.post("/analyze-justification")
async def analyze_justification(
    data: AnalyzeJustificationRequest,
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return {"analysis": await justification_service.analyze_justification(data.text)}


@router.get("")
async def list_adjustments(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    adjustments, total = await adjustment_service.list_requests(
        db, current_user, status=status, page=page, per_page=limit
    )
    return build_page([build_adjustment_response(a) for a in adjustments], total, page, limit)


@router.post("", status_code=201)
async def create_adjustment(
    data: AdjustmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    adjustment = await adjustment_service.create(db, current_user, data)
    await db.commit()
    return {
        "message": "Adjustment request created successfully",
        "adjustment": build_adjustment_response(adjustment),
    }


@router.put("/{adjustment_id}")
async def review_adjustment(
    adjustment_id: UUID,
    data: ReviewRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    adjustment = await adjustment_service.review(db, current_user, adjustment_id, data)
    await db.commit()
    return {
        "message": f"Adjustment {adjustment.status}",
        "adjustment": build_adjustment_response(adjustment),
    }
