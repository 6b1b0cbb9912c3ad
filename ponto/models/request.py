"""직원 요청 SQLAlchemy ORM 모델 — 결근, 기록 조정, 문의 티켓.

Employee request SQLAlchemy ORM models — Absences, adjustment requests and
support tickets. All three belong to one employee and carry the employee's
company for tenant scoping.

Tables:
    - absences: 결근/휴가 신청 (Absence requests)
    - adjustments: 출퇴근 기록 조정 요청 (Time record adjustment requests)
    - tickets: 문의 티켓 (Support tickets)
    - ticket_responses: 티켓 답변 (Ticket responses, ordered by created_at)
"""

import uuid
import datetime as dt

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ponto.database import Base
from ponto.models.types import JSONDocument


class Absence(Base):
    """결근 신청 모델.

    Absence request model.

    Status flow: pending -> approved | rejected (one transition, reviewer recorded)

    Attributes:
        type: 유형 (medical_certificate | justified | unjustified | leave | vacation)
        attachment: 첨부 JSON {url, filename, content_type, size, uploaded_at}
    """

    __tablename__ = "absences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 신청자 / 회사 — Requester and tenant
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    # 결근 일자 — Absence date
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # 사유 — Reason text
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    # 유형 — Absence type
    type: Mapped[str] = mapped_column(String(30), nullable=False, default="justified")
    # 상태 — "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    # 첨부 — Optional attachment metadata
    attachment: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)
    # 검토 정보 — Set on the transition out of pending
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc), onupdate=lambda: dt.datetime.now(dt.timezone.utc))


class Adjustment(Base):
    """출퇴근 기록 조정 요청 모델.

    Adjustment request model — asks a reviewer to correct or add a clock event.

    Status flow: pending -> approved | rejected
    """

    __tablename__ = "adjustments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    # 대상 기록 — Record being corrected (null when a missing event is requested)
    time_record_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("time_records.id", ondelete="SET NULL"), nullable=True)
    # 기록 유형 — One of the four event types
    record_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # 일자 / 시작 / 종료 — As captured by the client ("2024-03-01", "08:00", "17:00")
    date: Mapped[str] = mapped_column(String(20), nullable=False)
    start: Mapped[str | None] = mapped_column(String(20), nullable=True)
    end: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # 설명 / 사유 — Free description and (generated or typed) justification
    description: Mapped[str] = mapped_column(Text, nullable=False)
    justification: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 상태 — "pending" | "approved" | "rejected"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    # 첨부 — {filename, content_type, size, url}
    attachment: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)
    reviewed_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    review_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc), onupdate=lambda: dt.datetime.now(dt.timezone.utc))


class Ticket(Base):
    """문의 티켓 모델.

    Support ticket model.

    Status flow (forward only): open -> in_review -> resolved -> closed
    """

    __tablename__ = "tickets"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("companies.id", ondelete="RESTRICT"), nullable=False, index=True)
    subject: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # 우선순위 — "low" | "medium" | "high"
    priority: Mapped[str] = mapped_column(String(10), nullable=False, default="medium")
    # 분류 — "time_clock" | "system" | "question" | "complaint" | "suggestion" | "other"
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="other")
    # 상태 — "open" | "in_review" | "resolved" | "closed"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="open")
    resolved_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    resolved_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc), onupdate=lambda: dt.datetime.now(dt.timezone.utc))

    responses: Mapped[list["TicketResponse"]] = relationship(
        back_populates="ticket",
        cascade="all, delete-orphan",
        order_by="TicketResponse.created_at",
        lazy="selectin",
    )


class TicketResponse(Base):
    """티켓 답변 모델 — Ticket response (append-only)."""

    __tablename__ = "ticket_responses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    ticket_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=lambda: dt.datetime.now(dt.timezone.utc))

    ticket: Mapped["Ticket"] = relationship(back_populates="responses")
