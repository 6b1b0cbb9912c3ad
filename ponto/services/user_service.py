"""사용자/직원 서비스 — 직원 생성, 수정, 비활성화, 기기 관리.

User Service — Employee creation with generated corporate e-mails and
temporary passwords, scoped lookups, updates, soft deactivation and
authorized-device revocation.
"""

import logging
import re
import unicodedata
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.company import Company
from ponto.models.user import User
from ponto.repositories.company_repository import company_repository
from ponto.repositories.user_repository import user_repository
from ponto.schemas.user import EmployeeCreate, EmployeeUpdate
from ponto.services import access_policy
from ponto.services.access_policy import Action, Role
from ponto.utils.email import send_temporary_password
from ponto.utils.exceptions import ConflictError, NotFoundError, ValidationError
from ponto.utils.password import generate_temporary_password, hash_password

logger = logging.getLogger(__name__)

# null 허용 컬럼 — Columns a PUT may clear with an explicit null
_CLEARABLE_FIELDS: frozenset[str] = frozenset({"department", "position", "phone", "profile_image_url"})


def build_user_response(user: User) -> dict[str, Any]:
    """사용자 응답 딕셔너리 — password hash is never included."""
    return {
        "id": str(user.id),
        "company_id": str(user.company_id),
        "name": user.name,
        "email": user.email,
        "national_id": user.national_id,
        "role": user.role,
        "department": user.department,
        "position": user.position,
        "phone": user.phone,
        "profile_image_url": user.profile_image_url,
        "is_active": user.is_active,
        "last_login_at": user.last_login_at,
        "created_at": user.created_at,
        "authorized_devices": [
            {
                "device_id": d.device_id,
                "device_name": d.device_name,
                "authorized_at": d.authorized_at,
            }
            for d in user.devices
        ],
    }


def slugify_department(department: str) -> str:
    """부서명 슬러그 — accents stripped, lower-case alphanumerics only."""
    decomposed = unicodedata.normalize("NFKD", department)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = re.sub(r"[^a-z0-9]", "", ascii_only.lower())
    return slug or "colaborador"


class UserService:
    """사용자/직원 서비스."""

    async def get_scoped(self, db: AsyncSession, actor: User, user_id: UUID) -> User:
        """범위 내 사용자 조회 — Lookup honouring the actor's scope.

        Raises:
            AuthorizationError: 범위 밖 또는 없음, 비관리자 (Out of scope or absent, non-admin)
            NotFoundError: 없음, 관리자 (Absent, admin)
        """
        user = await user_repository.get_with_devices(db, user_id, access_policy.scope_for(actor))
        if user is None:
            raise access_policy.missing_in_scope(actor, "Employee")
        return user

    async def corporate_email(self, db: AsyncSession, local_part: str, domain: str) -> str:
        """회사 이메일 생성 — ``{slug}@{domain}``, then ``{slug}1@``, ``{slug}2@`` ..."""
        taken = await user_repository.emails_with_prefix(db, local_part, domain)
        candidate = f"{local_part}@{domain}"
        counter = 1
        while candidate in taken:
            candidate = f"{local_part}{counter}@{domain}"
            counter += 1
        return candidate

    async def create_account(
        self,
        db: AsyncSession,
        company: Company,
        *,
        name: str,
        national_id: str,
        role: str,
        email: str,
        temporary_password: str,
        department: str | None = None,
        position: str | None = None,
        phone: str | None = None,
    ) -> User:
        """계정 생성 공통 처리 — uniqueness checks, hashing and insert.

        Raises:
            ConflictError: CPF 또는 이메일 중복 (Duplicate national id or e-mail)
        """
        if await user_repository.national_id_taken(db, national_id):
            raise ConflictError("National id already registered")
        if await user_repository.email_taken(db, email):
            raise ConflictError("E-mail already registered")

        return await user_repository.create(
            db,
            {
                "company_id": company.id,
                "name": name,
                "email": email.lower(),
                "password_hash": hash_password(temporary_password),
                "national_id": national_id,
                "role": role,
                "department": department,
                "position": position,
                "phone": phone,
                "devices": [],
            },
        )

    async def create_employee(
        self,
        db: AsyncSession,
        actor: User,
        data: EmployeeCreate,
    ) -> tuple[User, str, bool]:
        """직원을 생성합니다.

        Create an employee with a generated corporate e-mail and a temporary
        password, and mail the password when SMTP is configured.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 사용자, hr 또는 admin (Acting user, hr or admin)
            data: 직원 생성 데이터 (Employee creation data)

        Returns:
            tuple[User, str, bool]: (생성된 직원, 임시 비밀번호, 메일 발송 여부)

        Raises:
            AuthorizationError: 권한 없음 또는 다른 회사 (Not allowed or cross-tenant)
            ValidationError: 비활성 회사 (Company inactive)
        """
        access_policy.authorize(actor, Action.CREATE_EMPLOYEE)
        access_policy.ensure_can_assign_role(actor, data.role)

        company_id = data.company_id or actor.company_id
        if access_policy.role_of(actor) is not Role.ADMIN:
            access_policy.ensure_same_tenant(actor, company_id)

        company = await company_repository.get_by_id(db, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        if not company.is_active:
            raise ValidationError("Company is inactive")

        email = await self.corporate_email(db, slugify_department(data.department), company.email_domain)
        temporary_password = generate_temporary_password(8)

        employee = await self.create_account(
            db,
            company,
            name=data.name,
            national_id=data.national_id,
            role=data.role,
            email=email,
            temporary_password=temporary_password,
            department=data.department,
            position=data.position,
            phone=data.phone,
        )
        logger.info("Employee %s created in company %s by %s", employee.id, company.id, actor.id)

        email_sent = await send_temporary_password(employee.email, employee.name, temporary_password)
        return employee, temporary_password, email_sent

    async def list_employees(
        self,
        db: AsyncSession,
        actor: User,
        company_id: UUID | None = None,
        search: str | None = None,
        department: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[User], int]:
        access_policy.authorize(actor, Action.VIEW_EMPLOYEES)
        scope = access_policy.staff_scope_for(actor, company_id)
        return await user_repository.search(
            db,
            scope,
            search=search,
            department=department,
            is_active=is_active,
            page=page,
            per_page=per_page,
        )

    async def list_users(
        self,
        db: AsyncSession,
        actor: User,
        search: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[User], int]:
        """전체 사용자 목록 (관리자 전용) — All users across tenants, admin only."""
        access_policy.authorize(actor, Action.LIST_USERS)
        return await user_repository.search(
            db, access_policy.scope_for(actor), search=search, page=page, per_page=per_page
        )

    async def get_employee(self, db: AsyncSession, actor: User, employee_id: UUID) -> User:
        if actor.id != employee_id:
            access_policy.authorize(actor, Action.VIEW_EMPLOYEES)
        return await self.get_scoped(db, actor, employee_id)

    async def update_employee(
        self,
        db: AsyncSession,
        actor: User,
        employee_id: UUID,
        data: EmployeeUpdate,
    ) -> User:
        """직원 정보를 수정합니다.

        Update an employee. Only admins may change a role.

        Raises:
            AuthorizationError: 권한 없음, 다른 회사, 역할 변경 시도
                                (Not allowed, cross-tenant, or role change by non-admin)
        """
        access_policy.authorize(actor, Action.UPDATE_EMPLOYEE)
        employee = await self.get_scoped(db, actor, employee_id)

        update_data = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE_FIELDS
        }
        if "role" in update_data and update_data["role"] != employee.role:
            access_policy.authorize(actor, Action.CHANGE_ROLE)
        if update_data.get("is_active") is False:
            access_policy.authorize(actor, Action.DEACTIVATE_EMPLOYEE)

        return await user_repository.update(db, employee, update_data)

    async def deactivate_employee(self, db: AsyncSession, actor: User, employee_id: UUID) -> User:
        """직원 비활성화 (소프트 삭제) — Soft delete; history stays intact."""
        access_policy.authorize(actor, Action.DEACTIVATE_EMPLOYEE)
        employee = await self.get_scoped(db, actor, employee_id)
        if employee.id == actor.id:
            raise ValidationError("You cannot deactivate your own account")
        return await user_repository.update(db, employee, {"is_active": False})

    async def revoke_device(self, db: AsyncSession, actor: User, employee_id: UUID, device_id: str) -> User:
        """인증 기기 해제 — Remove one device from an employee's authorized list."""
        access_policy.authorize(actor, Action.MANAGE_DEVICES)
        await self.get_scoped(db, actor, employee_id)

        employee = await user_repository.lock_for_device_update(db, employee_id)
        if not await user_repository.remove_device(db, employee, device_id):
            raise NotFoundError("Device not found")
        logger.info("Device %s revoked for user %s by %s", device_id, employee_id, actor.id)
        return employee

    async def department_breakdown(self, db: AsyncSession, actor: User, company_id: UUID | None = None) -> dict[str, Any]:
        """직원 통계 — active/inactive totals and active head-count per department."""
        access_policy.authorize(actor, Action.VIEW_EMPLOYEES)
        scope = access_policy.staff_scope_for(actor, company_id)
        users, _ = await user_repository.search(db, scope, role=Role.EMPLOYEE.value, page=1, per_page=100000)

        by_department: dict[str, int] = {}
        total_active = total_inactive = 0
        for user in users:
            if not user.is_active:
                total_inactive += 1
                continue
            total_active += 1
            key = user.department or "-"
            by_department[key] = by_department.get(key, 0) + 1

        return {
            "total_employees": total_active,
            "total_inactive": total_inactive,
            "by_department": [
                {"department": name, "count": count}
                for name, count in sorted(by_department.items(), key=lambda kv: (-kv[1], kv[0]))
            ],
        }


# 싱글턴 인스턴스 — Singleton instance
user_service: UserService = UserService()
