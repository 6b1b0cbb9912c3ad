"""인증 관련 Pydantic 요청/응답 스키마.

Authentication Pydantic request/response schemas.
"""

from uuid import UUID

from pydantic import BaseModel, Field, field_validator


def normalize_email(value: str) -> str:
    """이메일 정규화 — trim + lower-case, minimal shape check."""
    value = value.strip().lower()
    local, _, domain = value.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid e-mail address")
    return value


class RegisterRequest(BaseModel):
    """회원가입 요청 스키마.

    Attributes:
        name: 이름 (Full name)
        email: 이메일 (Login e-mail)
        password: 비밀번호, 6자 이상 (Password, min 6 chars)
        national_id: CPF (National id)
        company_id: 소속 회사 UUID (Company UUID)
    """

    name: str = Field(min_length=1, max_length=200)
    email: str
    password: str = Field(min_length=6)
    national_id: str = Field(min_length=1, max_length=32)
    company_id: UUID

    @field_validator("email")
    @classmethod
    def _email(cls, value: str) -> str:
        return normalize_email(value)


class LoginRequest(BaseModel):
    """로그인 요청 스키마 — 기기 정보는 선택 (device fields are optional)."""

    email: str
    password: str
    device_id: str | None = None  # 로그인 기기 ID (Device to authorize on login)
    device_name: str | None = None  # 기기 이름 (Device display name)

    @field_validator("email")
    @classmethod
    def _lower(cls, value: str) -> str:
        return value.strip().lower()


class TokenResponse(BaseModel):
    """토큰 응답 스키마 — Token plus the authenticated user."""

    message: str
    token: str  # JWT 액세스 토큰 (Access token)
    token_type: str = "bearer"
    user: dict
