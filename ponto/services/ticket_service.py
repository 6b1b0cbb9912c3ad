"""티켓 서비스 — 직원 문의/이슈 티켓과 응답.

Ticket Service — Support tickets raised by employees. Status only moves
forward: open -> in_review -> resolved -> closed. A response on an open
ticket moves it to in_review; closed tickets accept no responses.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.request import Ticket, TicketResponse
from ponto.models.user import User
from ponto.repositories.request_repository import ticket_repository
from ponto.schemas.request import TicketCreate
from ponto.services import access_policy
from ponto.services.access_policy import Action
from ponto.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

# 티켓 상태 순서 — Forward-only status order
TICKET_STATUSES: tuple[str, ...] = ("open", "in_review", "resolved", "closed")


def build_ticket_response(ticket: Ticket) -> dict[str, Any]:
    return {
        "id": str(ticket.id),
        "user_id": str(ticket.user_id),
        "company_id": str(ticket.company_id),
        "subject": ticket.subject,
        "description": ticket.description,
        "priority": ticket.priority,
        "category": ticket.category,
        "status": ticket.status,
        "resolved_by": str(ticket.resolved_by) if ticket.resolved_by else None,
        "resolved_at": ticket.resolved_at,
        "created_at": ticket.created_at,
        "responses": [
            {
                "id": str(r.id),
                "user_id": str(r.user_id),
                "message": r.message,
                "created_at": r.created_at,
            }
            for r in ticket.responses
        ],
    }


class TicketService:
    """티켓 서비스."""

    async def _get_scoped(self, db: AsyncSession, actor: User, ticket_id: UUID) -> Ticket:
        ticket = await ticket_repository.get_with_responses(db, ticket_id, access_policy.scope_for(actor))
        if ticket is None:
            raise access_policy.missing_in_scope(actor, "Ticket")
        return ticket

    async def _advance(self, db: AsyncSession, ticket: Ticket, target: str, **fields: Any) -> Ticket:
        # 상태는 앞으로만 — status never moves backwards
        if TICKET_STATUSES.index(target) <= TICKET_STATUSES.index(ticket.status):
            raise ValidationError(f"Ticket cannot move from '{ticket.status}' to '{target}'")
        ticket.status = target
        for name, value in fields.items():
            setattr(ticket, name, value)
        await db.flush()
        return ticket

    async def list_tickets(
        self,
        db: AsyncSession,
        actor: User,
        status: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[Ticket], int]:
        if status is not None and status not in TICKET_STATUSES:
            raise ValidationError(f"Invalid status '{status}'")
        return await ticket_repository.list_scoped(
            db, access_policy.scope_for(actor), status=status, page=page, per_page=per_page
        )

    async def create(self, db: AsyncSession, user: User, data: TicketCreate) -> Ticket:
        ticket = await ticket_repository.create(
            db,
            {
                "user_id": user.id,
                "company_id": user.company_id,
                "subject": data.subject,
                "description": data.description,
                "priority": data.priority,
                "category": data.category,
                "responses": [],
            },
        )
        logger.info("Ticket %s opened by %s", ticket.id, user.id)
        return ticket

    async def add_response(self, db: AsyncSession, actor: User, ticket_id: UUID, message: str) -> Ticket:
        """티켓에 응답을 추가합니다.

        Add a response. Allowed for the ticket owner and for reviewers whose
        scope covers the ticket.

        Raises:
            AuthorizationError: 범위 밖 (Out of scope, non-admin)
            ValidationError: 종료된 티켓 (Ticket is closed)
        """
        ticket = await self._get_scoped(db, actor, ticket_id)
        if ticket.status == "closed":
            raise ValidationError("Closed tickets do not accept responses")

        ticket.responses.append(TicketResponse(ticket_id=ticket.id, user_id=actor.id, message=message))
        if ticket.status == "open":
            ticket.status = "in_review"
        await db.flush()
        return ticket

    async def resolve(self, db: AsyncSession, actor: User, ticket_id: UUID) -> Ticket:
        access_policy.authorize(actor, Action.RESOLVE_TICKET)
        ticket = await self._get_scoped(db, actor, ticket_id)
        ticket = await self._advance(
            db, ticket, "resolved", resolved_by=actor.id, resolved_at=datetime.now(timezone.utc)
        )
        logger.info("Ticket %s resolved by %s", ticket.id, actor.id)
        return ticket

    async def close(self, db: AsyncSession, actor: User, ticket_id: UUID) -> Ticket:
        access_policy.authorize(actor, Action.CLOSE_TICKET)
        ticket = await self._get_scoped(db, actor, ticket_id)
        return await self._advance(db, ticket, "closed")


# 싱글턴 인스턴스 — Singleton instance
ticket_service: TicketService = TicketService()
