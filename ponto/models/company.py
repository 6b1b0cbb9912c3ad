"""회사(테넌트) SQLAlchemy ORM 모델.

Company (tenant) SQLAlchemy ORM model.
A company is the tenant boundary: every employee, time record, absence,
ticket and adjustment belongs to exactly one company.

Tables:
    - companies: 회사 (Companies / tenants)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ponto.database import Base
from ponto.models.types import JSONDocument


class Company(Base):
    """회사 모델 — 멀티테넌트 격리 단위.

    Company model — Multi-tenant isolation unit.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        name: 회사명 (Company name)
        legal_id: 사업자 등록번호 CNPJ, 고유 (Legal registration id, unique)
        email: 대표 이메일, 고유 (Contact e-mail, unique)
        phone: 전화번호 (Phone)
        email_domain: 직원 이메일 도메인 (Domain used for corporate e-mails)
        address: 주소 JSON (street, number, city, state, zip_code)
        workplace_latitude: 근무지 위도 (Workplace latitude, geofence reference)
        workplace_longitude: 근무지 경도 (Workplace longitude)
        geofence_radius_m: 허용 반경(m) (Allowed radius, null = global default)
        is_active: 활성 상태 (Active flag)
    """

    __tablename__ = "companies"

    # 회사 고유 식별자 — Company unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 회사명 — Company display name
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # CNPJ — Legal registration id (unique across tenants)
    legal_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    # 대표 이메일 — Contact e-mail, lower-cased (defaults to contato@{email_domain})
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 전화번호 — Phone
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # 이메일 도메인 — Domain for generated corporate e-mails (no "@")
    email_domain: Mapped[str] = mapped_column(String(255), nullable=False)
    # 주소 — Address sub-document
    address: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)
    # 근무지 좌표 — Workplace reference for the geolocation check (nullable = check skipped)
    workplace_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    workplace_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 허용 반경(m) — Per-company geofence radius override
    geofence_radius_m: Mapped[float | None] = mapped_column(Float, nullable=True)
    # 활성 상태 — Active flag
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 생성/수정 일시 — Timestamps (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Employees linked to this company
    users: Mapped[list["User"]] = relationship(back_populates="company", passive_deletes=True)  # noqa: F821

    @property
    def has_workplace(self) -> bool:
        return self.workplace_latitude is not None and self.workplace_longitude is not None
