"""회사 서비스 — 회사(테넌트) 관리, 관리자 계정 생성.

Company Service — Tenant management for administrators: CRUD with head
counts, and creation of a company's first manager account.
"""

import logging
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.company import Company
from ponto.models.user import User
from ponto.repositories.company_repository import company_repository
from ponto.repositories.user_repository import user_repository
from ponto.schemas.company import CompanyCreate, CompanyUpdate
from ponto.schemas.user import ManagerCreate
from ponto.services import access_policy
from ponto.services.access_policy import Action, Role
from ponto.services.user_service import build_user_response, user_service
from ponto.utils.email import send_temporary_password
from ponto.utils.exceptions import ConflictError, NotFoundError, ValidationError
from ponto.utils.password import generate_temporary_password

logger = logging.getLogger(__name__)

# null로 지울 수 있는 필드 — Fields an update may reset to null
_CLEARABLE_FIELDS: frozenset[str] = frozenset(
    {"phone", "address", "workplace_latitude", "workplace_longitude", "geofence_radius_m"}
)


def build_company_response(company: Company) -> dict[str, Any]:
    return {
        "id": str(company.id),
        "name": company.name,
        "legal_id": company.legal_id,
        "email": company.email,
        "email_domain": company.email_domain,
        "phone": company.phone,
        "address": company.address,
        "workplace_latitude": company.workplace_latitude,
        "workplace_longitude": company.workplace_longitude,
        "geofence_radius_m": company.geofence_radius_m,
        "is_active": company.is_active,
        "created_at": company.created_at,
    }


class CompanyService:
    """회사 서비스 — every operation is admin only."""

    async def _get(self, db: AsyncSession, company_id: UUID) -> Company:
        company = await company_repository.get_by_id(db, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        return company

    async def list_companies(self, db: AsyncSession, actor: User, is_active: bool | None = None) -> list[dict[str, Any]]:
        """회사 목록과 역할별 인원 — Companies with employee and manager counts."""
        access_policy.authorize(actor, Action.MANAGE_COMPANIES)
        companies: Sequence[Company] = await company_repository.list_all(db, is_active=is_active)
        role_counts = await user_repository.role_counts_by_company(db)

        items = []
        for company in companies:
            counts = role_counts.get(company.id, {})
            items.append({
                **build_company_response(company),
                "employee_count": sum(counts.values()),
                "manager_count": counts.get(Role.MANAGER.value, 0),
            })
        return items

    async def get_company(self, db: AsyncSession, actor: User, company_id: UUID) -> dict[str, Any]:
        """회사 상세 — Company with its managers and the rest of its staff."""
        access_policy.authorize(actor, Action.MANAGE_COMPANIES)
        company = await self._get(db, company_id)
        users = await user_repository.list_by_company(db, company.id)

        return {
            **build_company_response(company),
            "managers": [build_user_response(u) for u in users if u.role == Role.MANAGER.value],
            "employees": [build_user_response(u) for u in users if u.role != Role.MANAGER.value],
            "total_employees": len(users),
        }

    async def create_company(self, db: AsyncSession, actor: User, data: CompanyCreate) -> Company:
        """회사를 생성합니다.

        Raises:
            ConflictError: CNPJ 또는 이메일 중복 (Duplicate legal id or e-mail)
        """
        access_policy.authorize(actor, Action.MANAGE_COMPANIES)

        email = data.email or f"contato@{data.email_domain}"
        if await company_repository.legal_id_taken(db, data.legal_id):
            raise ConflictError("Legal id already registered")
        if await company_repository.email_taken(db, email):
            raise ConflictError("Company e-mail already registered")

        company = await company_repository.create(
            db,
            {
                **data.model_dump(exclude={"email", "address"}),
                "email": email,
                "address": data.address.model_dump() if data.address else {},
                "is_active": True,
            },
        )
        logger.info("Company %s created by %s", company.id, actor.id)
        return company

    async def update_company(self, db: AsyncSession, actor: User, company_id: UUID, data: CompanyUpdate) -> Company:
        access_policy.authorize(actor, Action.MANAGE_COMPANIES)
        company = await self._get(db, company_id)

        update_data = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE_FIELDS
        }
        if "legal_id" in update_data and await company_repository.legal_id_taken(
            db, update_data["legal_id"], exclude_id=company.id
        ):
            raise ConflictError("Legal id already registered")
        if update_data.get("email") and await company_repository.email_taken(
            db, update_data["email"], exclude_id=company.id
        ):
            raise ConflictError("Company e-mail already registered")

        return await company_repository.update(db, company, update_data)

    async def delete_company(self, db: AsyncSession, actor: User, company_id: UUID) -> None:
        """회사 삭제 — 소속 사용자가 있으면 거부.

        Raises:
            ValidationError: 사용자가 연결된 회사 (Users are still linked)
        """
        access_policy.authorize(actor, Action.MANAGE_COMPANIES)
        company = await self._get(db, company_id)

        linked = await user_repository.count_by_company(db, company.id)
        if linked > 0:
            raise ValidationError(
                f"Cannot delete a company with {linked} linked user(s). Remove or transfer them first."
            )
        await company_repository.delete(db, company)
        logger.info("Company %s deleted by %s", company_id, actor.id)

    async def create_manager(
        self,
        db: AsyncSession,
        actor: User,
        company_id: UUID,
        data: ManagerCreate,
    ) -> tuple[User, str, bool]:
        """회사 관리자(coordenador) 계정을 생성합니다.

        Create a manager account. Without an explicit e-mail the address is
        ``coordenador[n]@{email_domain}``.

        Returns:
            tuple[User, str, bool]: (관리자, 임시 비밀번호, 메일 발송 여부)
        """
        access_policy.authorize(actor, Action.CREATE_MANAGER)
        company = await self._get(db, company_id)

        email = data.email or await user_service.corporate_email(db, "coordenador", company.email_domain)
        temporary_password = generate_temporary_password(6, prefix="coord")

        manager = await user_service.create_account(
            db,
            company,
            name=data.name,
            national_id=data.national_id,
            role=Role.MANAGER.value,
            email=email,
            temporary_password=temporary_password,
            department=data.department or "Gestão",
            position=data.position or "Coordenador",
            phone=data.phone,
        )
        logger.info("Manager %s created for company %s by %s", manager.id, company.id, actor.id)

        email_sent = await send_temporary_password(manager.email, manager.name, temporary_password)
        return manager, temporary_password, email_sent


# 싱글턴 인스턴스 — Singleton instance
company_service: CompanyService = CompanyService()
