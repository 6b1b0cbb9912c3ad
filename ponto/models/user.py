"""사용자(직원) 및 인증 기기 SQLAlchemy ORM 모델.

User (employee) and authorized device SQLAlchemy ORM models.

Tables:
    - users: 사용자 (Employees, managers, HR staff and admins)
    - authorized_devices: 인증 기기 (Devices allowed to submit clock events)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ponto.database import Base


class User(Base):
    """사용자 모델 — 회사에 소속된 직원 계정.

    User model — Employee account belonging to one company.

    Roles: employee < manager < hr < admin (see ponto.services.access_policy).

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        company_id: 소속 회사 FK (Tenant)
        name: 이름 (Full name)
        email: 로그인 이메일, 소문자, 고유 (Login e-mail, lower-cased, unique)
        password_hash: bcrypt 해시 (bcrypt hash)
        national_id: CPF, 고유 (National id, unique)
        role: 역할 (employee | manager | hr | admin)
        department: 부서 (Department)
        position: 직책 (Job title)
        phone: 전화번호 (Phone)
        profile_image_url: 프로필/얼굴 기준 이미지 (Reference face image URL)
        is_active: 활성 상태 (Soft-delete flag)
        last_login_at: 마지막 로그인 (Last successful login)
    """

    __tablename__ = "users"

    # 사용자 고유 식별자 — User unique identifier (UUID v4)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소속 회사 FK — Tenant scope
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    # 이름 — Full name
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # 이메일 — Login e-mail (stored lower-cased)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    # 비밀번호 해시 — bcrypt hash
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # CPF — National id (unique)
    national_id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    # 역할 — "employee" | "manager" | "hr" | "admin"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    # 부서 / 직책 / 전화 — Optional profile fields
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    position: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    # 기준 얼굴 이미지 — Reference image sent to the face-match service
    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # 활성 상태 — Soft-delete flag (inactive users cannot log in)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    # 마지막 로그인 — Last successful login (UTC)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # 생성/수정 일시 — Timestamps (UTC)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # 관계 — Relationships
    company: Mapped["Company"] = relationship(back_populates="users")  # noqa: F821
    devices: Mapped[list["AuthorizedDevice"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="AuthorizedDevice.authorized_at",
        lazy="selectin",
    )


class AuthorizedDevice(Base):
    """인증 기기 모델 — 출퇴근 기록을 제출할 수 있는 기기.

    Authorized device model. At most MAX_AUTHORIZED_DEVICES rows per user,
    and a device id appears at most once per user.

    Constraints:
        uq_authorized_device_user_device: 동일 사용자+기기 중복 불가
            (One row per user per device id)
    """

    __tablename__ = "authorized_devices"

    # 고유 식별자 — Row identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 사용자 FK — Owner
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # 기기 ID — Client-supplied device identifier (X-Device-ID)
    device_id: Mapped[str] = mapped_column(String(255), nullable=False)
    # 기기 이름 — Display name
    device_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    # 인증 일시 — When the device was authorized
    authorized_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    user: Mapped["User"] = relationship(back_populates="devices")

    __table_args__ = (
        UniqueConstraint("user_id", "device_id", name="uq_authorized_device_user_device"),
    )
