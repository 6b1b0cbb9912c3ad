"""통계 서비스 — 대시보드 집계와 직원별 근무시간 요약.

Stats Service — Company dashboard aggregates and per-employee worked-hours
summaries. Worked hours and current state come from the attendance reducer;
SQL is only used to fetch the rows and simple counts.
"""

from collections import Counter
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.config import settings
from ponto.models.user import User
from ponto.repositories.company_repository import company_repository
from ponto.repositories.time_record_repository import time_record_repository
from ponto.repositories.user_repository import user_repository
from ponto.services import access_policy
from ponto.services.access_policy import Action, Role
from ponto.services.attendance_reducer import AggregationMode, AttendanceState, current_state, summarize
from ponto.services.user_service import user_service
from ponto.utils.dates import ensure_utc, start_of_day, start_of_month, utc_now
from ponto.utils.exceptions import ValidationError


def parse_aggregation_mode(value: str | None) -> AggregationMode:
    """집계 방식 파싱 — defaults to DEFAULT_AGGREGATION_MODE.

    Raises:
        ValidationError: 알 수 없는 방식 (Unknown mode)
    """
    try:
        return AggregationMode(value or settings.DEFAULT_AGGREGATION_MODE)
    except ValueError:
        allowed = ", ".join(m.value for m in AggregationMode)
        raise ValidationError(f"Invalid aggregation mode '{value}'. Allowed: {allowed}") from None


class StatsService:
    """통계 서비스."""

    async def dashboard(self, db: AsyncSession, actor: User, company_id: UUID | None = None) -> dict[str, Any]:
        """대시보드 통계를 계산합니다.

        Dashboard numbers for the actor's company (admins: all companies, or
        ``company_id`` when given).

        Returns:
            dict: total_employees, active_today, working_now, on_break,
            month_records, by_department (top 10), records_by_day (last 7
            days) and, for admins, per-company figures.
        """
        access_policy.authorize(actor, Action.VIEW_DASHBOARD)
        scope = access_policy.staff_scope_for(actor, company_id)

        today = start_of_day()
        week_ago = today - timedelta(days=7)

        # 직원별 최신 기록으로 현재 상태 판정 — state per employee from their latest record
        states = Counter(current_state([record]) for record in await time_record_repository.latest_per_user(db, scope))

        by_day = Counter(
            ensure_utc(ts).date().isoformat()
            for ts in await time_record_repository.timestamps_since(db, scope, week_ago)
        )

        stats: dict[str, Any] = {
            "total_employees": await user_repository.count_active_employees(db, scope),
            "active_today": len(await time_record_repository.active_user_ids_since(db, scope, today)),
            "working_now": states[AttendanceState.WORKING],
            "on_break": states[AttendanceState.ON_BREAK],
            "month_records": await time_record_repository.count_since(db, scope, start_of_month()),
            "by_department": [
                {"department": name, "count": count}
                for name, count in await user_repository.department_headcounts(db, scope)
            ],
            "records_by_day": [{"date": day, "count": by_day[day]} for day in sorted(by_day)],
        }

        if access_policy.role_of(actor) is Role.ADMIN:
            employee_counts = await user_repository.employee_counts_by_company(db)
            active_today = await time_record_repository.active_users_by_company_since(db, today)
            stats["companies"] = [
                {
                    "id": str(company.id),
                    "name": company.name,
                    "employee_count": employee_counts.get(company.id, 0),
                    "active_today": active_today.get(company.id, 0),
                }
                for company in await company_repository.list_all(db)
            ]

        return stats

    async def employee_stats(
        self,
        db: AsyncSession,
        actor: User,
        employee_id: UUID,
        start: datetime | None = None,
        end: datetime | None = None,
        mode: str | None = None,
    ) -> dict[str, Any]:
        """직원 근무시간 요약.

        Summarize one employee's records in [start, end]. The window defaults
        to the current month up to now.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            actor: 요청 사용자 (Acting user)
            employee_id: 직원 UUID (Employee UUID)
            start: 시작 시각 (Window start)
            end: 종료 시각 (Window end)
            mode: 집계 방식 strict | legacy (Aggregation mode)

        Raises:
            AuthorizationError: 범위 밖 직원 (Employee outside the actor's scope)
            ValidationError: 잘못된 기간 또는 방식 (Bad window or mode)
        """
        if actor.id != employee_id:
            access_policy.authorize(actor, Action.VIEW_OTHERS_RECORDS)
        aggregation_mode = parse_aggregation_mode(mode)
        employee = await user_service.get_scoped(db, actor, employee_id)

        window_start = ensure_utc(start) if start else start_of_month()
        window_end = ensure_utc(end) if end else utc_now()
        if window_start > window_end:
            raise ValidationError("start_date must not be after end_date")

        records = await time_record_repository.list_window(db, employee.id, window_start, window_end)
        summary = summarize(records, aggregation_mode)
        latest = await time_record_repository.latest_for_user(db, employee.id)

        return {
            "employee": {
                "id": str(employee.id),
                "name": employee.name,
                "department": employee.department,
                "position": employee.position,
            },
            "period": {"start": window_start, "end": window_end},
            "current_state": current_state([latest] if latest is not None else []).value,
            **summary.to_dict(),
        }


# 싱글턴 인스턴스 — Singleton instance
stats_service: StatsService = StatsService()
