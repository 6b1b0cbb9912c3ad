"""출퇴근 기록 라우터 — 이벤트 등록, 목록, 현재 상태, 동기화 플래그.

Time Records Router — Clock event submission (device header required),
listing, current status and the offline sync flag.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, get_device_context
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.time_record import SyncUpdate, TimeRecordCreate
from ponto.services.time_record_service import DeviceContext, build_record_response, time_record_service
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.post("", status_code=201)
async def create_time_record(
    data: TimeRecordCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    device: Annotated[DeviceContext, Depends(get_device_context)],
) -> dict:
    """출퇴근 이벤트 등록.

    Submit a clock event. The X-Device-ID header must name one of the
    user's authorized devices; the face and geolocation outcomes are stored
    on the record.
    """
    record = await time_record_service.record_event(db, current_user, data, device)
    await db.commit()
    return {
        "message": "Time record created successfully",
        "record": build_record_response(record),
    }


@router.get("")
async def list_time_records(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    start_date: Annotated[datetime | None, Query()] = None,
    end_date: Annotated[datetime | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    user_id: Annotated[UUID | None, Query(description="직원 필터 (manager/hr/admin)")] = None,
) -> dict:
    """기록 목록 — 최신순 (Newest first)."""
    records, total = await time_record_service.list_records(
        db, current_user, user_id=user_id, start=start_date, end=end_date, page=page, per_page=limit
    )
    return build_page([build_record_response(r) for r in records], total, page, limit)


@router.get("/status")
async def get_status(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """현재 근무 상태 — working | on_break | off_shift."""
    return await time_record_service.get_status(db, current_user)


@router.patch("/{record_id}/sync")
async def update_sync(
    record_id: UUID,
    data: SyncUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    record = await time_record_service.set_sync(db, current_user, record_id, data.is_synced)
    await db.commit()
    return {"message": "Sync status updated", "record": build_record_response(record)}
