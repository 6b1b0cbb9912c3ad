"""사용자 레포지토리 — 직원 조회, 검색, 인증 기기 관리.

User Repository — Employee lookups, search and authorized device storage.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ponto.models.user import AuthorizedDevice, User
from ponto.repositories.base import BaseRepository
from ponto.services.access_policy import AccessScope
from ponto.utils.exceptions import ConflictError


class UserRepository(BaseRepository[User]):
    """사용자 레포지토리.

    User repository. The owner column of a user row is its own ``id``, so an
    employee-level scope resolves to the employee alone.

    Extends:
        BaseRepository[User]
    """

    owner_column_name = "id"

    def __init__(self) -> None:
        super().__init__(User)

    async def get_with_devices(
        self,
        db: AsyncSession,
        user_id: UUID,
        scope: AccessScope | None = None,
    ) -> User | None:
        """기기 목록과 함께 사용자 조회 — User with authorized devices eager-loaded."""
        query: Select = self.scoped(
            select(User).options(selectinload(User.devices)).where(User.id == user_id),
            scope,
        )
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(
            select(User).options(selectinload(User.devices)).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def email_taken(self, db: AsyncSession, email: str, exclude_id: UUID | None = None) -> bool:
        return await self.exists(db, {"email": email.strip().lower()}, exclude_id=exclude_id)

    async def national_id_taken(self, db: AsyncSession, national_id: str, exclude_id: UUID | None = None) -> bool:
        return await self.exists(db, {"national_id": national_id}, exclude_id=exclude_id)

    async def emails_with_prefix(self, db: AsyncSession, local_prefix: str, domain: str) -> set[str]:
        """접두사가 같은 이메일 목록 — Existing e-mails ``{prefix}*@{domain}``."""
        result = await db.execute(
            select(User.email).where(User.email.like(f"{local_prefix}%@{domain}"))
        )
        return set(result.scalars().all())

    async def search(
        self,
        db: AsyncSession,
        scope: AccessScope,
        search: str | None = None,
        department: str | None = None,
        is_active: bool | None = None,
        role: str | None = None,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[User], int]:
        """직원 목록을 검색합니다.

        Search users within ``scope``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            scope: 접근 범위 (Access scope)
            search: 이름/이메일/부서 부분 일치 (Case-insensitive match on name, e-mail, department)
            department: 부서 필터 (Department filter)
            is_active: 활성 상태 필터 (Active flag filter)
            role: 역할 필터 (Role filter)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[User], int]: (사용자 목록, 전체 개수)
        """
        query: Select = self.scoped(select(User), scope)

        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(User.department).like(pattern),
                )
            )
        if department:
            query = query.where(User.department == department)
        if is_active is not None:
            query = query.where(User.is_active == is_active)
        if role:
            query = query.where(User.role == role)

        query = query.order_by(User.name, User.id)
        return await self.paginate(db, query, page, per_page)

    async def list_by_company(
        self,
        db: AsyncSession,
        company_id: UUID,
        role: str | None = None,
    ) -> Sequence[User]:
        query: Select = select(User).where(User.company_id == company_id)
        if role:
            query = query.where(User.role == role)
        result = await db.execute(query.order_by(User.name))
        return result.scalars().all()

    async def count_by_company(self, db: AsyncSession, company_id: UUID) -> int:
        result = await db.execute(select(func.count()).select_from(User).where(User.company_id == company_id))
        return result.scalar() or 0

    async def role_counts_by_company(self, db: AsyncSession) -> dict[UUID, dict[str, int]]:
        """회사별 역할 인원 — {company_id: {role: count}} for active users."""
        result = await db.execute(
            select(User.company_id, User.role, func.count())
            .where(User.is_active.is_(True))
            .group_by(User.company_id, User.role)
        )
        counts: dict[UUID, dict[str, int]] = {}
        for company_id, role, count in result.all():
            counts.setdefault(company_id, {})[role] = count
        return counts

    async def department_headcounts(
        self,
        db: AsyncSession,
        scope: AccessScope,
        limit: int = 10,
    ) -> list[tuple[str, int]]:
        """부서별 활성 직원 수 상위 N — Top departments by active employee count."""
        query = self.scoped(
            select(User.department, func.count(User.id))
            .where(User.role == "employee", User.is_active.is_(True), User.department.is_not(None))
            .group_by(User.department)
            .order_by(func.count(User.id).desc(), User.department)
            .limit(limit),
            scope,
        )
        result = await db.execute(query)
        return [(name, count) for name, count in result.all()]

    async def count_active_employees(self, db: AsyncSession, scope: AccessScope) -> int:
        query = self.scoped(
            select(func.count()).select_from(User).where(User.role == "employee", User.is_active.is_(True)),
            scope,
        )
        return (await db.execute(query)).scalar() or 0

    async def employee_counts_by_company(self, db: AsyncSession) -> dict[UUID, int]:
        result = await db.execute(
            select(User.company_id, func.count())
            .where(User.role == "employee")
            .group_by(User.company_id)
        )
        return {company_id: count for company_id, count in result.all()}

    # === 인증 기기 (Authorized devices) ===

    async def lock_for_device_update(self, db: AsyncSession, user_id: UUID) -> User | None:
        """기기 목록 변경을 위해 사용자 행을 잠급니다.

        Lock the user row (``SELECT ... FOR UPDATE``) and load its devices so
        concurrent device appends for the same user are serialized. SQLite
        ignores the lock clause.
        """
        result = await db.execute(
            select(User)
            .options(selectinload(User.devices))
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_device(
        self,
        db: AsyncSession,
        user: User,
        device_id: str,
        device_name: str | None,
    ) -> AuthorizedDevice:
        """기기 추가 — Insert an authorized device row for ``user``.

        Callers hold the row lock from ``lock_for_device_update``. The unique
        constraint on (user_id, device_id) is the last line against duplicates;
        a violation discards only the savepoint, not the request's transaction.

        Raises:
            ConflictError: 이미 등록된 기기 (Concurrent insert of the same device)
        """
        device = AuthorizedDevice(user_id=user.id, device_id=device_id, device_name=device_name)
        try:
            async with db.begin_nested():
                db.add(device)
        except IntegrityError:
            raise ConflictError("Device is already authorized") from None
        user.devices.append(device)
        return device

    async def remove_device(self, db: AsyncSession, user: User, device_id: str) -> bool:
        for device in list(user.devices):
            if device.device_id == device_id:
                user.devices.remove(device)
                await db.flush()
                return True
        return False


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
