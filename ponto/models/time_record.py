"""출퇴근 기록 SQLAlchemy ORM 모델.

Time record SQLAlchemy ORM model.
A time record is one clock event (entrada, pausa, retorno, saida) with the
captured location, device metadata and the validation outcome. Records are
append-only: only ``is_synced`` may change after creation.

Tables:
    - time_records: 출퇴근 이벤트 (Clock events)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ponto.database import Base
from ponto.models.types import JSONDocument


class TimeRecord(Base):
    """출퇴근 기록 모델.

    Time record model.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 직원 FK (Employee)
        company_id: 회사 FK, 직원으로부터 복사 (Tenant, copied from the employee)
        type: 이벤트 유형 (entrada | pausa | retorno | saida)
        timestamp: 이벤트 시각 UTC (Event time)
        location: 위치 JSON {latitude, longitude, address}
        device_info: 기기 JSON {device_id, device_name, platform, app_version}
        validation: 검증 결과 JSON {face_recognition, geolocation, device_auth}
        overall_status: 종합 상태 (valid | invalid | pending_review)
        is_synced: 동기화 여부 (Offline sync flag, the only mutable field)
        extra: 메타데이터 JSON (Free-form metadata, column "metadata")
    """

    __tablename__ = "time_records"

    # 기록 고유 식별자 — Record unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 직원 FK — Employee who produced the event
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    # 회사 FK — Tenant scope (denormalized)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False)
    # 이벤트 유형 — "entrada" | "pausa" | "retorno" | "saida"
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    # 이벤트 시각 — Event timestamp (UTC)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    # 위치 — {latitude, longitude, address}
    location: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    # 기기 정보 — {device_id, device_name, platform, app_version}
    device_info: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    # 검증 결과 — Per-check outcome document
    validation: Mapped[dict] = mapped_column(JSONDocument, nullable=False)
    # 종합 상태 — Derived from the three checks
    overall_status: Mapped[str] = mapped_column(String(20), nullable=False)
    # 동기화 여부 — Offline capture sync flag
    is_synced: Mapped[bool] = mapped_column(Boolean, default=True)
    # 메타데이터 — Free-form client metadata ("metadata" is reserved on declarative classes)
    extra: Mapped[dict | None] = mapped_column("metadata", JSONDocument, nullable=True)
    # 생성/수정 일시 — Insertion order is the tie-breaker for equal timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_time_records_user_timestamp", "user_id", "timestamp"),
        Index("ix_time_records_company_timestamp", "company_id", "timestamp"),
    )
