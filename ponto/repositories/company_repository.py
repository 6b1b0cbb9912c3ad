"""회사 레포지토리 — Company queries."""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.company import Company
from ponto.repositories.base import BaseRepository


class CompanyRepository(BaseRepository[Company]):
    """회사 레포지토리.

    Company rows are not tenant-scoped themselves; company endpoints are
    admin-only and employees reach their own company through ``User.company_id``.
    """

    def __init__(self) -> None:
        super().__init__(Company)

    async def list_all(self, db: AsyncSession, is_active: bool | None = None) -> Sequence[Company]:
        query = select(Company)
        if is_active is not None:
            query = query.where(Company.is_active == is_active)
        result = await db.execute(query.order_by(Company.name))
        return result.scalars().all()

    async def legal_id_taken(self, db: AsyncSession, legal_id: str, exclude_id=None) -> bool:
        return await self.exists(db, {"legal_id": legal_id}, exclude_id=exclude_id)

    async def email_taken(self, db: AsyncSession, email: str, exclude_id=None) -> bool:
        return await self.exists(db, {"email": email.lower()}, exclude_id=exclude_id)

    async def delete(self, db: AsyncSession, company: Company) -> None:
        await db.delete(company)
        await db.flush()


# 싱글턴 인스턴스 — Singleton instance
company_repository: CompanyRepository = CompanyRepository()
