"""회사 라우터 — 회사 CRUD 및 관리자 계정 생성 (관리자 전용).

Companies Router — Tenant CRUD and manager account creation. Admin only.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import require_admin
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.company import CompanyCreate, CompanyUpdate
from ponto.schemas.user import AccountCreatedResponse, ManagerCreate
from ponto.services.company_service import build_company_response, company_service
from ponto.services.user_service import build_user_response

router: APIRouter = APIRouter()


@router.get("")
async def list_companies(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
    is_active: Annotated[bool | None, Query(description="활성 상태 필터")] = None,
) -> dict:
    return {"companies": await company_service.list_companies(db, current_user, is_active)}


@router.get("/{company_id}")
async def get_company(
    company_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    return {"company": await company_service.get_company(db, current_user, company_id)}


@router.post("", status_code=201)
async def create_company(
    data: CompanyCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    company = await company_service.create_company(db, current_user, data)
    await db.commit()
    return {"message": "Company created successfully", "company": build_company_response(company)}


@router.put("/{company_id}")
async def update_company(
    company_id: UUID,
    data: CompanyUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    company = await company_service.update_company(db, current_user, company_id, data)
    await db.commit()
    return {"message": "Company updated successfully", "company": build_company_response(company)}


@router.delete("/{company_id}")
async def delete_company(
    company_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """회사 삭제 — 연결된 사용자가 있으면 400."""
    await company_service.delete_company(db, current_user, company_id)
    await db.commit()
    return {"message": "Company deleted successfully"}


@router.post("/{company_id}/managers", response_model=AccountCreatedResponse, status_code=201)
async def create_manager(
    company_id: UUID,
    data: ManagerCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_admin)],
) -> dict:
    """관리자 계정 생성 — 임시 비밀번호를 한 번만 반환 (temporary password returned once)."""
    manager, temporary_password, email_sent = await company_service.create_manager(
        db, current_user, company_id, data
    )
    await db.commit()
    return {
        "message": "Manager created successfully",
        "user": build_user_response(manager),
        "temporary_password": temporary_password,
        "email_sent": email_sent,
    }
