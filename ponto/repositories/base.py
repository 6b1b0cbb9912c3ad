"""공통 레포지토리 — 접근 범위가 적용된 조회/생성/수정.

Shared repository for tenant-owned models. Every read goes through
``scoped()`` so a query is narrowed to the caller's ``AccessScope`` before it
reaches the database.

Usage:
    class AbsenceRepository(BaseRepository[Absence]):
        def __init__(self) -> None:
            super().__init__(Absence)
"""

from typing import Any, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.database import Base
from ponto.services.access_policy import AccessScope

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """범위 인식 레포지토리.

    The scope's company filter applies to ``company_id``; its owner filter
    applies to ``owner_column_name`` (``user_id`` unless a subclass says
    otherwise).

    Attributes:
        model: 관리 대상 모델 (Managed ORM model)
        owner_column_name: 소유자 컬럼 (Column holding the owning user id)
    """

    owner_column_name: str = "user_id"

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def scoped(self, query: Select, scope: AccessScope | None) -> Select:
        if scope is None:
            return query
        return scope.apply(
            query,
            company_column=getattr(self.model, "company_id"),
            owner_column=getattr(self.model, self.owner_column_name, None),
        )

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        scope: AccessScope | None = None,
    ) -> ModelType | None:
        """범위 내 단건 조회.

        Args:
            db: 비동기 세션 (Async session)
            record_id: 대상 UUID (Target id)
            scope: 접근 범위, None이면 전체 (Access scope; None means unrestricted)

        Returns:
            ModelType | None: 범위 밖이거나 없으면 None (None when absent or out of scope)
        """
        result = await db.execute(self.scoped(select(self.model).where(self.model.id == record_id), scope))
        return result.scalar_one_or_none()

    async def paginate(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        per_page: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        """한 페이지와 전체 개수 — (items on ``page``, total matching rows).

        The total is counted on ``query`` with its ORDER BY stripped.
        """
        total = (await db.execute(select(func.count()).select_from(query.order_by(None).subquery()))).scalar() or 0
        rows = await db.execute(query.offset((page - 1) * per_page).limit(per_page))
        return rows.scalars().all(), total

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        instance: ModelType = self.model(**obj_data)
        db.add(instance)
        await db.flush()
        await db.refresh(instance)
        return instance

    async def update(self, db: AsyncSession, instance: ModelType, changes: dict[str, Any]) -> ModelType:
        """로드된 객체에 변경 적용.

        ``instance`` already came from a scoped lookup; unknown keys are ignored.
        """
        for name, value in changes.items():
            if hasattr(instance, name):
                setattr(instance, name, value)
        await db.flush()
        await db.refresh(instance)
        return instance

    async def exists(
        self,
        db: AsyncSession,
        filters: dict[str, Any],
        exclude_id: UUID | None = None,
    ) -> bool:
        """중복 검사 — True when a row matches every filter (``exclude_id`` ignored)."""
        query: Select = select(func.count()).select_from(self.model)
        for name, value in filters.items():
            query = query.where(getattr(self.model, name) == value)
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)
        return ((await db.execute(query)).scalar() or 0) > 0

    async def count_by_status(self, db: AsyncSession, scope: AccessScope | None = None) -> dict[str, int]:
        # 상태별 개수 — {status: count}
        query = self.scoped(select(self.model.status, func.count()).group_by(self.model.status), scope)
        result = await db.execute(query)
        return {status: count for status, count in result.all()}
