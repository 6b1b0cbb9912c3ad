"""회사 관련 Pydantic 스키마 — Company schemas."""

from pydantic import BaseModel, Field, field_validator

from ponto.schemas.auth import normalize_email


class Address(BaseModel):
    street: str | None = None
    number: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class CompanyCreate(BaseModel):
    """회사 생성 요청 스키마.

    Attributes:
        legal_id: CNPJ, 고유 (Legal id, unique)
        email_domain: 직원 이메일 도메인 (Domain for corporate e-mails)
        email: 대표 이메일, 생략 시 contato@{email_domain}
        workplace_latitude / workplace_longitude: 근무지 좌표, 선택 (Geofence reference)
    """

    name: str = Field(min_length=1, max_length=200)
    legal_id: str = Field(min_length=1, max_length=32)
    email_domain: str = Field(min_length=3, max_length=255)
    email: str | None = None
    phone: str | None = None
    address: Address | None = None
    workplace_latitude: float | None = Field(default=None, ge=-90, le=90)
    workplace_longitude: float | None = Field(default=None, ge=-180, le=180)
    geofence_radius_m: float | None = Field(default=None, gt=0)

    @field_validator("email_domain")
    @classmethod
    def _domain(cls, value: str) -> str:
        return value.strip().lower().lstrip("@")

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str | None:
        return normalize_email(value) if value else value


class CompanyUpdate(BaseModel):
    """회사 수정 요청 스키마 (부분 업데이트)."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    legal_id: str | None = Field(default=None, min_length=1, max_length=32)
    email_domain: str | None = None
    email: str | None = None
    phone: str | None = None
    address: Address | None = None
    workplace_latitude: float | None = Field(default=None, ge=-90, le=90)
    workplace_longitude: float | None = Field(default=None, ge=-180, le=180)
    geofence_radius_m: float | None = Field(default=None, gt=0)
    is_active: bool | None = None

    @field_validator("email_domain")
    @classmethod
    def _domain(cls, value: str | None) -> str | None:
        return value.strip().lower().lstrip("@") if value else value

    @field_validator("email")
    @classmethod
    def _email(cls, value: str | None) -> str | None:
        return normalize_email(value) if value else value
