"""티켓 라우터 — 문의 티켓, 응답, 해결, 종료.

Tickets Router — Support tickets, responses, resolve and close.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, require_staff
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.request import TicketCreate, TicketReply
from ponto.services.ticket_service import build_ticket_response, ticket_service
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.get("")
async def list_tickets(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    status: Annotated[str | None, Query()] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    tickets, total = await ticket_service.list_tickets(db, current_user, status=status, page=page, per_page=limit)
    return build_page([build_ticket_response(t) for t in tickets], total, page, limit)


@router.post("", status_code=201)
async def create_ticket(
    data: TicketCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    ticket = await ticket_service.create(db, current_user, data)
    await db.commit()
    return {"message": "Ticket created successfully", "ticket": build_ticket_response(ticket)}


@router.post("/{ticket_id}/responses")
async def add_response(
    ticket_id: UUID,
    data: TicketReply,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """티켓 응답 추가 — 작성자 또는 범위 내 검토자."""
    ticket = await ticket_service.add_response(db, current_user, ticket_id, data.message)
    await db.commit()
    return {"message": "Response added successfully", "ticket": build_ticket_response(ticket)}


@router.put("/{ticket_id}/resolve")
async def resolve_ticket(
    ticket_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    ticket = await ticket_service.resolve(db, current_user, ticket_id)
    await db.commit()
    return {"message": "Ticket resolved", "ticket": build_ticket_response(ticket)}


@router.put("/{ticket_id}/close")
async def close_ticket(
    ticket_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    ticket = await ticket_service.close(db, current_user, ticket_id)
    await db.commit()
    return {"message": "Ticket closed", "ticket": build_ticket_response(ticket)}
