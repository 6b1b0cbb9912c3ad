"""직원 요청 레포지토리 — 결근, 조정 요청, 티켓.

Request Repositories — Absences, adjustments and tickets. All three are
listed newest first within an ``AccessScope`` with an optional status filter.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ponto.models.request import Absence, Adjustment, Ticket
from ponto.repositories.base import BaseRepository, ModelType
from ponto.services.access_policy import AccessScope


class RequestRepository(BaseRepository[ModelType]):
    """요청 공통 레포지토리 — Shared listing for request-like models."""

    def base_query(self) -> Select:
        return select(self.model)

    async def list_scoped(
        self,
        db: AsyncSession,
        scope: AccessScope,
        status: str | None = None,
        user_id: UUID | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """범위 내 요청 목록 — Newest first, optionally filtered by status/owner."""
        query: Select = self.scoped(self.base_query(), scope)
        if status:
            query = query.where(self.model.status == status)
        if user_id is not None:
            query = query.where(self.model.user_id == user_id)
        query = query.order_by(self.model.created_at.desc(), self.model.id)
        return await self.paginate(db, query, page, per_page)


class AbsenceRepository(RequestRepository[Absence]):
    def __init__(self) -> None:
        super().__init__(Absence)


class AdjustmentRepository(RequestRepository[Adjustment]):
    def __init__(self) -> None:
        super().__init__(Adjustment)


class TicketRepository(RequestRepository[Ticket]):
    """티켓 레포지토리 — responses are always eager-loaded."""

    def __init__(self) -> None:
        super().__init__(Ticket)

    def base_query(self) -> Select:
        return select(Ticket).options(selectinload(Ticket.responses))

    async def get_with_responses(
        self,
        db: AsyncSession,
        ticket_id: UUID,
        scope: AccessScope | None = None,
    ) -> Ticket | None:
        query = self.scoped(self.base_query().where(Ticket.id == ticket_id), scope)
        result = await db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instances
absence_repository: AbsenceRepository = AbsenceRepository()
adjustment_repository: AdjustmentRepository = AdjustmentRepository()
ticket_repository: TicketRepository = TicketRepository()
