"""출퇴근 기록 서비스 — 이벤트 검증 파이프라인, 조회, 동기화.

Time Record Service — Runs the clock-event validation pipeline (type, device,
face, geolocation), persists the record with its validation document, and
serves listing, current status and sync flag updates.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.company import Company
from ponto.models.time_record import TimeRecord
from ponto.models.user import User
from ponto.repositories.company_repository import company_repository
from ponto.repositories.time_record_repository import time_record_repository
from ponto.schemas.time_record import TimeRecordCreate
from ponto.services import access_policy
from ponto.services.access_policy import Action
from ponto.services.attendance_reducer import current_state
from ponto.services.attendance_validator import FaceMatchResult, parse_record_type, validate_event
from ponto.services.face_match_client import face_match_client
from ponto.services.geolocation_service import geolocation_service
from ponto.services.storage_service import storage_service
from ponto.utils.dates import ensure_utc, utc_now
from ponto.utils.exceptions import AuthorizationError, ExternalServiceError, NotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceContext:
    """요청 기기 정보 — Values of the X-Device-* / X-Platform / X-App-Version headers."""

    device_id: str
    device_name: str | None = None
    platform: str | None = None
    app_version: str | None = None

    def to_document(self) -> dict[str, str]:
        return {
            "device_id": self.device_id,
            "device_name": self.device_name or "Unknown",
            "platform": self.platform or "Unknown",
            "app_version": self.app_version or "1.0.0",
        }


def build_record_response(record: TimeRecord) -> dict[str, Any]:
    return {
        "id": str(record.id),
        "user_id": str(record.user_id),
        "company_id": str(record.company_id),
        "type": record.type,
        "timestamp": ensure_utc(record.timestamp),
        "location": record.location,
        "device_info": record.device_info,
        "validation": record.validation,
        "overall_status": record.overall_status,
        "is_synced": record.is_synced,
        "metadata": record.extra,
        "created_at": record.created_at,
    }


class TimeRecordService:
    """출퇴근 기록 서비스."""

    async def _match_face(self, user: User, image_url: str | None) -> FaceMatchResult | None:
        # 협력 서비스 장애는 pending 처리 — an outage leaves the face check inconclusive
        if not image_url:
            return None
        try:
            return await face_match_client.match(image_url, user.profile_image_url)
        except ExternalServiceError as exc:
            logger.warning("Face match unavailable for user %s: %s", user.id, exc.detail)
            return None

    async def record_event(
        self,
        db: AsyncSession,
        user: User,
        data: TimeRecordCreate,
        device: DeviceContext,
    ) -> TimeRecord:
        """출퇴근 이벤트를 검증하고 기록합니다.

        Validate and persist one clock event. The order of checks is fixed:
        event type, device authorization, face match, geolocation. Type and
        device failures reject the request; face and geolocation outcomes
        are stored on the record and drive its overall status.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user: 인증된 직원 (Authenticated employee)
            data: 이벤트 데이터 (Event payload)
            device: 요청 기기 정보 (Device headers)

        Returns:
            TimeRecord: 저장된 기록 (Persisted record)

        Raises:
            ValidationError: 알 수 없는 이벤트 유형 (Unknown event type)
            AuthorizationError: 인증되지 않은 기기 (Device not authorized for this user)
        """
        record_type = parse_record_type(data.type)

        if not access_policy.is_device_authorized(user, device.device_id):
            logger.info("Rejected clock event from unauthorized device %s (user %s)", device.device_id, user.id)
            raise AuthorizationError("Device not authorized")

        company: Company | None = await company_repository.get_by_id(db, user.company_id)
        if company is None:
            raise NotFoundError("Company not found")

        face_image_url = storage_service.finalize_upload(data.face_image_url) if data.face_image_url else None
        face_match = await self._match_face(user, face_image_url)
        geo_result = geolocation_service.check(data.latitude, data.longitude, company)

        validation = validate_event(
            face_image_url=face_image_url,
            face_match=face_match,
            geo_result=geo_result,
            geo_reference_configured=company.has_workplace,
            device_authorized=True,
        )

        record = await time_record_repository.create(
            db,
            {
                "user_id": user.id,
                "company_id": user.company_id,
                "type": record_type.value,
                "timestamp": ensure_utc(data.timestamp) if data.timestamp else utc_now(),
                "location": {
                    "latitude": data.latitude,
                    "longitude": data.longitude,
                    "address": data.address,
                },
                "device_info": device.to_document(),
                "validation": validation.to_document(),
                "overall_status": validation.overall_status.value,
                "is_synced": data.is_synced,
                "extra": data.metadata,
            },
        )
        logger.info(
            "Time record %s (%s) for user %s: %s",
            record.id, record.type, user.id, record.overall_status,
        )
        return record

    async def list_records(
        self,
        db: AsyncSession,
        actor: User,
        user_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[Sequence[TimeRecord], int]:
        """기록 목록 — 직원은 본인 기록만, 관리 역할은 범위 내 특정 직원 지정 가능.

        Employees always see their own records. ``user_id`` is honoured for
        staff roles and must fall inside the actor's scope.
        """
        scope = access_policy.scope_for(actor)
        if user_id is not None and user_id != actor.id:
            access_policy.authorize(actor, Action.VIEW_OTHERS_RECORDS)
        elif not access_policy.can(actor, Action.VIEW_OTHERS_RECORDS):
            user_id = actor.id

        return await time_record_repository.list_paginated(
            db,
            scope,
            user_id=user_id,
            start=ensure_utc(start) if start else None,
            end=ensure_utc(end) if end else None,
            page=page,
            per_page=per_page,
        )

    async def get_status(self, db: AsyncSession, user: User) -> dict[str, Any]:
        """현재 근무 상태 — State derived from the latest record."""
        latest = await time_record_repository.latest_for_user(db, user.id)
        records = [latest] if latest is not None else []
        return {
            "state": current_state(records).value,
            "last_record": build_record_response(latest) if latest is not None else None,
        }

    async def set_sync(self, db: AsyncSession, user: User, record_id: UUID, is_synced: bool) -> TimeRecord:
        """동기화 플래그 변경 — 본인 기록만 (Owner only; the only mutable field)."""
        record = await time_record_repository.get_by_id(
            db, record_id, access_policy.AccessScope(company_id=user.company_id, user_id=user.id)
        )
        if record is None:
            raise NotFoundError("Time record not found")
        return await time_record_repository.update(db, record, {"is_synced": is_synced})


# 싱글턴 인스턴스 — Singleton instance
time_record_service: TimeRecordService = TimeRecordService()
