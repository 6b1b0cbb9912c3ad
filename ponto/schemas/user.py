"""사용자/직원 관련 Pydantic 스키마.

User and employee Pydantic schemas.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ponto.schemas.auth import normalize_email

RoleName = Literal["employee", "manager", "hr", "admin"]


class DeviceResponse(BaseModel):
    device_id: str
    device_name: str | None = None
    authorized_at: datetime


class UserResponse(BaseModel):
    """사용자 응답 스키마 — password hash is never exposed."""

    id: str
    company_id: str
    name: str
    email: str
    national_id: str
    role: str
    department: str | None = None
    position: str | None = None
    phone: str | None = None
    profile_image_url: str | None = None
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    authorized_devices: list[DeviceResponse] = []


class EmployeeCreate(BaseModel):
    """직원 생성 요청 스키마.

    이메일은 부서명과 회사 도메인으로 자동 생성됩니다.
    The login e-mail is generated from the department and the company domain.

    Attributes:
        company_id: 관리자 전용 — 대상 회사 (Admins only; others use their own company)
    """

    name: str = Field(min_length=1, max_length=200)
    national_id: str = Field(min_length=1, max_length=32)
    department: str = Field(min_length=1, max_length=100)
    position: str | None = None
    phone: str | None = None
    role: RoleName = "employee"
    company_id: UUID | None = None


class EmployeeUpdate(BaseModel):
    """직원 수정 요청 스키마 (부분 업데이트) — role changes are admin only."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = None
    position: str | None = None
    phone: str | None = None
    profile_image_url: str | None = None
    is_active: bool | None = None
    role: RoleName | None = None


class ManagerCreate(BaseModel):
    """회사 관리자 생성 요청 — email defaults to a generated corporate address."""

    name: str = Field(min_length=1, max_length=200)
    national_id: str = Field(min_length=1, max_length=32)
    email: str | None = None
    phone: str | None = None
    department: str | None = None
    position: str | None = None

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str | None:
        return normalize_email(value) if value else value


class AccountCreatedResponse(BaseModel):
    """계정 생성 응답 — 임시 비밀번호 포함 (Includes the temporary password once)."""

    message: str
    user: UserResponse
    temporary_password: str
    email_sent: bool = False
