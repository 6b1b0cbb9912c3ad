"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    company: 회사 (Company / tenant)
    user: 사용자 및 인증 기기 (User and AuthorizedDevice)
    time_record: 출퇴근 기록 (Clock events)
    request: 결근, 조정 요청, 티켓 (Absence, Adjustment, Ticket, TicketResponse)
"""

from ponto.models.company import Company
from ponto.models.user import User, AuthorizedDevice
from ponto.models.time_record import TimeRecord
from ponto.models.request import Absence, Adjustment, Ticket, TicketResponse

__all__ = [
    "Company",
    "User", "AuthorizedDevice",
    "TimeRecord",
    "Absence", "Adjustment", "Ticket", "TicketResponse",
]
