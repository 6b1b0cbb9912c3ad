"""직원 요청 서비스 — 결근 및 시간 조정 요청의 생성, 조회, 검토.

Request Service — Absence and time-adjustment requests. Both follow the same
lifecycle: an employee files a request in ``pending``; a manager, hr or admin
of the same company approves or rejects it once.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.request import Absence, Adjustment
from ponto.models.user import User
from ponto.repositories.request_repository import (
    RequestRepository,
    absence_repository,
    adjustment_repository,
)
from ponto.repositories.time_record_repository import time_record_repository
from ponto.schemas.request import AbsenceCreate, AdjustmentCreate, Attachment, ReviewRequest
from ponto.services import access_policy
from ponto.services.access_policy import Action
from ponto.services.attendance_validator import parse_record_type
from ponto.services.storage_service import storage_service
from ponto.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

PENDING = "pending"
REVIEW_STATUSES: tuple[str, ...] = ("pending", "approved", "rejected")


def attachment_document(attachment: Attachment | None) -> dict[str, Any] | None:
    """첨부 문서 — temp 업로드를 최종 위치로 옮긴 뒤 저장할 JSON."""
    if attachment is None:
        return None
    document = attachment.model_dump()
    document["url"] = storage_service.finalize_upload(attachment.url)
    return document


def build_review_fields(request: Absence | Adjustment) -> dict[str, Any]:
    return {
        "status": request.status,
        "attachment": request.attachment,
        "reviewed_by": str(request.reviewed_by) if request.reviewed_by else None,
        "reviewed_at": request.reviewed_at,
        "review_notes": request.review_notes,
        "created_at": request.created_at,
    }


def build_absence_response(absence: Absence) -> dict[str, Any]:
    return {
        "id": str(absence.id),
        "user_id": str(absence.user_id),
        "company_id": str(absence.company_id),
        "date": absence.date,
        "reason": absence.reason,
        "type": absence.type,
        **build_review_fields(absence),
    }


def build_adjustment_response(adjustment: Adjustment) -> dict[str, Any]:
    return {
        "id": str(adjustment.id),
        "user_id": str(adjustment.user_id),
        "company_id": str(adjustment.company_id),
        "time_record_id": str(adjustment.time_record_id) if adjustment.time_record_id else None,
        "record_type": adjustment.record_type,
        "date": adjustment.date,
        "start": adjustment.start,
        "end": adjustment.end,
        "description": adjustment.description,
        "justification": adjustment.justification,
        **build_review_fields(adjustment),
    }


class _ReviewableRequestService:
    """검토 가능한 요청 공통 서비스.

    Shared list/review behaviour. Subclasses set the repository, the review
    action and the display name used in error messages.
    """

    repository: RequestRepository
    review_action: Action
    label: str

    async def list_requests(
        self,
        db: AsyncSession,
        actor: User,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Any], int]:
        """범위 내 요청 목록 — employees see their own, staff their company, admins all."""
        if status is not None and status not in REVIEW_STATUSES:
            raise ValidationError(f"Invalid status '{status}'")
        return await self.repository.list_scoped(
            db, access_policy.scope_for(actor), status=status, page=page, per_page=per_page
        )

    async def review(
        self,
        db: AsyncSession,
        actor: User,
        request_id: UUID,
        data: ReviewRequest,
    ) -> Any:
        """요청을 승인 또는 거절합니다.

        Approve or reject a pending request.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 검토자, manager/hr/admin (Reviewer)
            request_id: 요청 UUID (Request UUID)
            data: 검토 결정 (Decision and notes)

        Raises:
            AuthorizationError: 검토 권한 없음 또는 다른 회사 (Not a reviewer, or cross-tenant)
            NotFoundError: 요청 없음, 관리자 (Absent, admin)
            ValidationError: 이미 검토됨 (Already reviewed)
        """
        access_policy.authorize(actor, self.review_action)
        request = await self.repository.get_by_id(db, request_id, access_policy.scope_for(actor))
        if request is None:
            raise access_policy.missing_in_scope(actor, self.label)
        if request.status != PENDING:
            raise ValidationError(f"{self.label} has already been reviewed")

        request = await self.repository.update(
            db,
            request,
            {
                "status": data.status,
                "reviewed_by": actor.id,
                "reviewed_at": datetime.now(timezone.utc),
                "review_notes": data.review_notes,
            },
        )
        logger.info("%s %s %s by %s", self.label, request.id, data.status, actor.id)
        return request

    async def stats(self, db: AsyncSession, actor: User, company_id: UUID | None = None) -> dict[str, int]:
        """상태별 개수 — pending/approved/rejected counts within the reviewer's scope."""
        access_policy.authorize(actor, self.review_action)
        counts = await self.repository.count_by_status(db, access_policy.staff_scope_for(actor, company_id))
        return {status: counts.get(status, 0) for status in REVIEW_STATUSES}


class AbsenceService(_ReviewableRequestService):
    """결근 서비스."""

    repository = absence_repository
    review_action = Action.REVIEW_ABSENCE
    label = "Absence"

    async def create(self, db: AsyncSession, user: User, data: AbsenceCreate) -> Absence:
        return await absence_repository.create(
            db,
            {
                "user_id": user.id,
                "company_id": user.company_id,
                "date": data.date,
                "reason": data.reason,
                "type": data.type,
                "attachment": attachment_document(data.attachment),
            },
        )


class AdjustmentService(_ReviewableRequestService):
    """시간 조정 요청 서비스."""

    repository = adjustment_repository
    review_action = Action.REVIEW_ADJUSTMENT
    label = "Adjustment"

    async def create(self, db: AsyncSession, user: User, data: AdjustmentCreate) -> Adjustment:
        """조정 요청 생성 — 대상 기록은 본인 기록이어야 함.

        Raises:
            ValidationError: 알 수 없는 기록 유형 (Unknown record type)
            AuthorizationError: 다른 사람의 기록 (Record belongs to someone else)
        """
        record_type = parse_record_type(data.record_type)

        if data.time_record_id is not None:
            record = await time_record_repository.get_by_id(
                db, data.time_record_id, access_policy.AccessScope(company_id=user.company_id, user_id=user.id)
            )
            if record is None:
                raise access_policy.missing_in_scope(user, "Time record")

        return await adjustment_repository.create(
            db,
            {
                "user_id": user.id,
                "company_id": user.company_id,
                "time_record_id": data.time_record_id,
                "record_type": record_type.value,
                "date": data.date,
                "start": data.start,
                "end": data.end,
                "description": data.description,
                "justification": data.justification,
                "attachment": attachment_document(data.attachment),
            },
        )


# 싱글턴 인스턴스 — Singleton instances
absence_service: AbsenceService = AbsenceService()
adjustment_service: AdjustmentService = AdjustmentService()
