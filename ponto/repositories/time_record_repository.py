"""출퇴근 기록 레포지토리 — 기록 조회, 기간별 집계용 조회.

Time Record Repository — Listing, per-employee windows for the reducer and
dashboard aggregates. Records are append-only: there is no delete method.
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.models.time_record import TimeRecord
from ponto.repositories.base import BaseRepository
from ponto.services.access_policy import AccessScope


class TimeRecordRepository(BaseRepository[TimeRecord]):
    """출퇴근 기록 레포지토리.

    Extends:
        BaseRepository[TimeRecord]
    """

    def __init__(self) -> None:
        super().__init__(TimeRecord)

    async def list_paginated(
        self,
        db: AsyncSession,
        scope: AccessScope,
        user_id: UUID | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        per_page: int = 50,
    ) -> tuple[Sequence[TimeRecord], int]:
        """기록 목록을 최신순으로 조회합니다.

        List records newest first within ``scope``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            scope: 접근 범위 (Access scope)
            user_id: 직원 필터 (Employee filter)
            start: 시작 시각, 포함 (Inclusive lower bound)
            end: 종료 시각, 포함 (Inclusive upper bound)
            page: 페이지 번호 (Page number)
            per_page: 페이지당 항목 수 (Items per page)

        Returns:
            tuple[Sequence[TimeRecord], int]: (기록 목록, 전체 개수)
        """
        query: Select = self.scoped(select(TimeRecord), scope)
        if user_id is not None:
            query = query.where(TimeRecord.user_id == user_id)
        if start is not None:
            query = query.where(TimeRecord.timestamp >= start)
        if end is not None:
            query = query.where(TimeRecord.timestamp <= end)

        query = query.order_by(TimeRecord.timestamp.desc(), TimeRecord.created_at.desc())
        return await self.paginate(db, query, page, per_page)

    async def list_window(
        self,
        db: AsyncSession,
        user_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Sequence[TimeRecord]:
        """직원 한 명의 기간 내 기록 — 시각 오름차순, 동일 시각은 삽입 순.

        One employee's records in [start, end], ascending by (timestamp,
        created_at). This is the order the attendance reducer expects.
        """
        query: Select = select(TimeRecord).where(TimeRecord.user_id == user_id)
        if start is not None:
            query = query.where(TimeRecord.timestamp >= start)
        if end is not None:
            query = query.where(TimeRecord.timestamp <= end)
        result = await db.execute(query.order_by(TimeRecord.timestamp, TimeRecord.created_at))
        return result.scalars().all()

    async def latest_for_user(self, db: AsyncSession, user_id: UUID) -> TimeRecord | None:
        result = await db.execute(
            select(TimeRecord)
            .where(TimeRecord.user_id == user_id)
            .order_by(TimeRecord.timestamp.desc(), TimeRecord.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def latest_per_user(self, db: AsyncSession, scope: AccessScope) -> Sequence[TimeRecord]:
        """직원별 최신 기록 — One latest record per employee within ``scope``.

        Uses ROW_NUMBER() partitioned by user, ordered by (timestamp desc,
        created_at desc).
        """
        ranked = self.scoped(
            select(
                TimeRecord.id.label("record_id"),
                func.row_number()
                .over(
                    partition_by=TimeRecord.user_id,
                    order_by=(TimeRecord.timestamp.desc(), TimeRecord.created_at.desc()),
                )
                .label("row_rank"),
            ),
            scope,
        ).subquery()

        result = await db.execute(
            select(TimeRecord)
            .join(ranked, ranked.c.record_id == TimeRecord.id)
            .where(ranked.c.row_rank == 1)
        )
        return result.scalars().all()

    async def count_since(self, db: AsyncSession, scope: AccessScope, since: datetime) -> int:
        query = self.scoped(
            select(func.count()).select_from(TimeRecord).where(TimeRecord.timestamp >= since),
            scope,
        )
        return (await db.execute(query)).scalar() or 0

    async def active_user_ids_since(self, db: AsyncSession, scope: AccessScope, since: datetime) -> set[UUID]:
        """기간 내 기록이 있는 직원 — Distinct employees with a record since ``since``."""
        query = self.scoped(
            select(TimeRecord.user_id).where(TimeRecord.timestamp >= since).distinct(),
            scope,
        )
        result = await db.execute(query)
        return set(result.scalars().all())

    async def timestamps_since(self, db: AsyncSession, scope: AccessScope, since: datetime) -> Sequence[datetime]:
        query = self.scoped(select(TimeRecord.timestamp).where(TimeRecord.timestamp >= since), scope)
        result = await db.execute(query)
        return result.scalars().all()

    async def active_users_by_company_since(self, db: AsyncSession, since: datetime) -> dict[UUID, int]:
        result = await db.execute(
            select(TimeRecord.company_id, func.count(func.distinct(TimeRecord.user_id)))
            .where(TimeRecord.timestamp >= since)
            .group_by(TimeRecord.company_id)
        )
        return {company_id: count for company_id, count in result.all()}


# 싱글턴 인스턴스 — Singleton instance
time_record_repository: TimeRecordRepository = TimeRecordRepository()
