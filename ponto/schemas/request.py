"""직원 요청(결근, 조정, 티켓) Pydantic 스키마.

Employee request Pydantic schemas — absences, adjustments and tickets.
"""

import datetime as dt
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

AbsenceType = Literal["medical_certificate", "justified", "unjustified", "leave", "vacation"]
TicketPriority = Literal["low", "medium", "high"]
TicketCategory = Literal["time_clock", "system", "question", "complaint", "suggestion", "other"]


class Attachment(BaseModel):
    """첨부 메타데이터 — Attachment metadata (file uploaded via /storage first)."""

    url: str
    filename: str = Field(min_length=1, max_length=255)
    content_type: str | None = None
    size: int | None = Field(default=None, ge=0)


class ReviewRequest(BaseModel):
    """검토 요청 — Review decision for absences and adjustments."""

    status: Literal["approved", "rejected"]
    review_notes: str | None = None


# === 결근 (Absence) ===

class AbsenceCreate(BaseModel):
    date: dt.date
    reason: str = Field(min_length=1)
    type: AbsenceType = "justified"
    attachment: Attachment | None = None


# === 조정 요청 (Adjustment) ===

class AdjustmentCreate(BaseModel):
    """조정 요청 생성 스키마.

    Attributes:
        record_type: 조정할 기록 유형 (entrada | pausa | retorno | saida)
        date: 기록 일자 (Date of the record, as the client shows it)
        start / end: 요청 시각 (Requested times)
        time_record_id: 조정 대상 기록, 선택 (Record being corrected)
        justification: 생성 또는 입력된 사유 (Generated or typed justification)
    """

    record_type: str
    date: str = Field(min_length=1, max_length=20)
    start: str | None = Field(default=None, max_length=20)
    end: str | None = Field(default=None, max_length=20)
    description: str = Field(min_length=1)
    justification: str | None = None
    time_record_id: UUID | None = None
    attachment: Attachment | None = None


class GenerateJustificationRequest(BaseModel):
    user_input: str = Field(min_length=1)
    record_type: str = Field(min_length=1)
    date: dt.date | None = None


class AnalyzeJustificationRequest(BaseModel):
    text: str = Field(min_length=1)


# === 티켓 (Ticket) ===

class TicketCreate(BaseModel):
    subject: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    priority: TicketPriority = "medium"
    category: TicketCategory = "other"


class TicketReply(BaseModel):
    message: str = Field(min_length=1)
