"""통계 API 테스트 — 대시보드와 직원별 근무시간.

Stats API tests — Dashboard figures and per-employee worked-hours summaries.
"""

from datetime import timedelta

import pytest_asyncio
from httpx import AsyncClient

from ponto.utils.dates import utc_now
from tests.conftest import auth_header, make_record, utc

STATS = "/api/stats"


class TestDashboard:
    """대시보드 집계."""

    @pytest_asyncio.fixture
    async def activity(self, db, employee_user, manager_user, other_employee):
        now = utc_now().replace(microsecond=0)
        await make_record(db, employee_user, "entrada", now)
        await make_record(db, manager_user, "entrada", now - timedelta(seconds=1))
        await make_record(db, manager_user, "pausa", now)
        await make_record(db, other_employee, "entrada", now)
        return now

    async def test_manager_dashboard(self, client: AsyncClient, activity, manager_token):
        res = await client.get(f"{STATS}/dashboard", headers=auth_header(manager_token))
        assert res.status_code == 200
        stats = res.json()["stats"]
        assert stats["total_employees"] == 1
        assert stats["active_today"] == 2
        assert stats["working_now"] == 1
        assert stats["on_break"] == 1
        assert stats["month_records"] == 3
        assert stats["by_department"] == [{"department": "Vendas", "count": 1}]
        assert stats["records_by_day"] == [{"date": activity.date().isoformat(), "count": 3}]
        assert "companies" not in stats

    async def test_admin_dashboard_lists_companies(self, client: AsyncClient, activity, admin_token, company, other_company):
        res = await client.get(f"{STATS}/dashboard", headers=auth_header(admin_token))
        stats = res.json()["stats"]
        assert stats["active_today"] == 3
        by_name = {c["name"]: c for c in stats["companies"]}
        assert by_name["Acme Ltda"]["employee_count"] == 1
        assert by_name["Acme Ltda"]["active_today"] == 2
        assert by_name["Globex SA"]["active_today"] == 1

    async def test_admin_company_filter(self, client: AsyncClient, activity, admin_token, other_company):
        res = await client.get(
            f"{STATS}/dashboard", params={"company_id": str(other_company.id)}, headers=auth_header(admin_token)
        )
        stats = res.json()["stats"]
        assert stats["active_today"] == 1
        assert stats["working_now"] == 1
        assert stats["by_department"] == [{"department": "Suporte", "count": 1}]

    async def test_employee_forbidden(self, client: AsyncClient, employee_token):
        res = await client.get(f"{STATS}/dashboard", headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_empty_company(self, client: AsyncClient, hr_token):
        stats = (await client.get(f"{STATS}/dashboard", headers=auth_header(hr_token))).json()["stats"]
        assert stats["working_now"] == 0
        assert stats["records_by_day"] == []


class TestEmployeeStats:
    """직원별 근무시간 요약."""

    WINDOW = {"start_date": "2024-03-01T00:00:00Z", "end_date": "2024-03-31T23:59:59Z"}

    @pytest_asyncio.fixture
    async def full_day(self, db, employee_user):
        await make_record(db, employee_user, "entrada", utc(2024, 3, 1, 8))
        await make_record(db, employee_user, "pausa", utc(2024, 3, 1, 12))
        await make_record(db, employee_user, "retorno", utc(2024, 3, 1, 13))
        await make_record(db, employee_user, "saida", utc(2024, 3, 1, 17))

    async def test_strict_summary(self, client: AsyncClient, full_day, employee_user, manager_token):
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}", params=self.WINDOW, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        stats = res.json()["stats"]
        assert stats["employee"]["department"] == "Vendas"
        assert stats["mode"] == "strict"
        assert stats["record_count"] == 4
        assert stats["total_hours"] == 9.0
        assert stats["days_worked"] == 1
        assert stats["average_hours_per_day"] == 9.0
        assert stats["needs_review"] is False
        assert stats["sessions"][0]["break_hours"] == 1.0
        assert stats["current_state"] == "off_shift"

    async def test_legacy_mode(self, client: AsyncClient, full_day, employee_user, manager_token):
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}",
            params={**self.WINDOW, "mode": "legacy"},
            headers=auth_header(manager_token),
        )
        stats = res.json()["stats"]
        assert stats["mode"] == "legacy"
        assert stats["total_hours"] == 9.0
        assert stats["sessions"] == []

    async def test_unclosed_session_flagged(self, client: AsyncClient, db, employee_user, employee_token):
        await make_record(db, employee_user, "entrada", utc(2024, 3, 4, 8))
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}", params=self.WINDOW, headers=auth_header(employee_token)
        )
        stats = res.json()["stats"]
        assert stats["total_hours"] == 0
        assert stats["needs_review"] is True
        assert [a["kind"] for a in stats["anomalies"]] == ["unclosed_session"]
        assert stats["current_state"] == "working"

    async def test_window_excludes_outside_records(self, client: AsyncClient, full_day, employee_user, employee_token):
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}",
            params={"start_date": "2024-04-01T00:00:00Z", "end_date": "2024-04-30T23:59:59Z"},
            headers=auth_header(employee_token),
        )
        stats = res.json()["stats"]
        assert stats["record_count"] == 0
        assert stats["average_hours_per_day"] == 0

    async def test_employee_cannot_view_others(self, client: AsyncClient, manager_user, employee_token):
        res = await client.get(f"{STATS}/employee/{manager_user.id}", headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_manager_cannot_cross_tenant(self, client: AsyncClient, other_employee, manager_token):
        res = await client.get(f"{STATS}/employee/{other_employee.id}", headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_invalid_mode(self, client: AsyncClient, employee_user, employee_token):
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}", params={"mode": "fuzzy"}, headers=auth_header(employee_token)
        )
        assert res.status_code == 400

    async def test_inverted_window(self, client: AsyncClient, employee_user, employee_token):
        res = await client.get(
            f"{STATS}/employee/{employee_user.id}",
            params={"start_date": "2024-03-31T00:00:00Z", "end_date": "2024-03-01T00:00:00Z"},
            headers=auth_header(employee_token),
        )
        assert res.status_code == 400
        assert res.json() == {"error": "start_date must not be after end_date"}
