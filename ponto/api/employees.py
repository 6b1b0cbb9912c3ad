"""직원 라우터 — 직원 목록, 생성, 수정, 비활성화, 기기 해제.

Employees Router — Scoped employee management for managers, hr and admins.

Permission Matrix (역할별 권한):
    - 목록/상세/수정/기기 해제: manager, hr, admin (own company; admin all)
    - 생성/비활성화: hr, admin
    - 역할 변경: admin
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user, require_staff
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.user import AccountCreatedResponse, EmployeeCreate, EmployeeUpdate
from ponto.services.user_service import build_user_response, user_service
from ponto.utils.pagination import build_page

router: APIRouter = APIRouter()


@router.get("")
async def list_employees(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    company_id: Annotated[UUID | None, Query(description="회사 필터 (admin)")] = None,
    search: Annotated[str | None, Query(description="이름/이메일/부서 검색")] = None,
    department: Annotated[str | None, Query(description="부서 필터")] = None,
    is_active: Annotated[bool | None, Query(description="활성 상태 필터")] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict:
    employees, total = await user_service.list_employees(
        db,
        current_user,
        company_id=company_id,
        search=search,
        department=department,
        is_active=is_active,
        page=page,
        per_page=limit,
    )
    return build_page([build_user_response(e) for e in employees], total, page, limit)


# /stats는 /{employee_id}보다 먼저 등록 — registered before the id route
@router.get("/stats")
async def employee_breakdown(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
    company_id: Annotated[UUID | None, Query(description="회사 필터 (admin)")] = None,
) -> dict:
    return await user_service.department_breakdown(db, current_user, company_id)


@router.get("/{employee_id}")
async def get_employee(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return build_user_response(await user_service.get_employee(db, current_user, employee_id))


@router.post("", response_model=AccountCreatedResponse, status_code=201)
async def create_employee(
    data: EmployeeCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    """직원 생성 — 회사 이메일과 임시 비밀번호 자동 생성.

    Create an employee. The e-mail is ``{department}[n]@{email_domain}`` and
    the temporary password is returned once.
    """
    employee, temporary_password, email_sent = await user_service.create_employee(db, current_user, data)
    await db.commit()
    return {
        "message": "Employee created successfully",
        "user": build_user_response(employee),
        "temporary_password": temporary_password,
        "email_sent": email_sent,
    }


@router.put("/{employee_id}")
async def update_employee(
    employee_id: UUID,
    data: EmployeeUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    employee = await user_service.update_employee(db, current_user, employee_id, data)
    await db.commit()
    return {"message": "Employee updated successfully", "user": build_user_response(employee)}


@router.delete("/{employee_id}")
async def deactivate_employee(
    employee_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    """직원 비활성화 (소프트 삭제) — records are kept."""
    employee = await user_service.deactivate_employee(db, current_user, employee_id)
    await db.commit()
    return {"message": "Employee deactivated successfully", "user": build_user_response(employee)}


@router.delete("/{employee_id}/devices/{device_id}")
async def revoke_device(
    employee_id: UUID,
    device_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(require_staff)],
) -> dict:
    employee = await user_service.revoke_device(db, current_user, employee_id, device_id)
    await db.commit()
    return {"message": "Device revoked successfully", "user": build_user_response(employee)}
