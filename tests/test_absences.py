"""결근 API 테스트 — 신청, 범위별 목록, 검토, 통계.

Absence API tests — Requests, scoped listing, one-time review and counts.
"""

import datetime as dt

from httpx import AsyncClient

from ponto.models.request import Absence
from tests.conftest import auth_header

ABSENCES = "/api/absences"


async def make_absence(db, user, status: str = "pending") -> Absence:
    absence = Absence(
        user_id=user.id,
        company_id=user.company_id,
        date=dt.date(2024, 3, 4),
        reason="Consulta médica",
        type="medical_certificate",
        status=status,
    )
    db.add(absence)
    await db.flush()
    await db.refresh(absence)
    return absence


class TestCreateAbsence:
    """결근 신청."""

    async def test_create(self, client: AsyncClient, employee_user, employee_token):
        res = await client.post(ABSENCES, json={
            "date": "2024-03-04",
            "reason": "Consulta médica",
            "type": "medical_certificate",
            "attachment": {
                "url": "https://cdn.example.com/atestado.pdf",
                "filename": "atestado.pdf",
                "content_type": "application/pdf",
                "size": 2048,
            },
        }, headers=auth_header(employee_token))
        assert res.status_code == 201
        absence = res.json()["absence"]
        assert absence["status"] == "pending"
        assert absence["user_id"] == str(employee_user.id)
        assert absence["company_id"] == str(employee_user.company_id)
        assert absence["attachment"]["filename"] == "atestado.pdf"
        assert absence["reviewed_by"] is None

    async def test_default_type(self, client: AsyncClient, employee_token):
        res = await client.post(ABSENCES, json={"date": "2024-03-04", "reason": "Trânsito"}, headers=auth_header(employee_token))
        assert res.json()["absence"]["type"] == "justified"

    async def test_invalid_type(self, client: AsyncClient, employee_token):
        res = await client.post(
            ABSENCES, json={"date": "2024-03-04", "reason": "x", "type": "holiday"}, headers=auth_header(employee_token)
        )
        assert res.status_code == 400


class TestListAbsences:
    """목록 범위 — 직원 본인, 관리자 회사, admin 전체."""

    async def test_scopes(
        self, client: AsyncClient, db, employee_user, manager_user, other_employee,
        employee_token, manager_token, admin_token,
    ):
        await make_absence(db, employee_user)
        await make_absence(db, manager_user, status="approved")
        await make_absence(db, other_employee)

        assert (await client.get(ABSENCES, headers=auth_header(employee_token))).json()["total"] == 1
        assert (await client.get(ABSENCES, headers=auth_header(manager_token))).json()["total"] == 2
        assert (await client.get(ABSENCES, headers=auth_header(admin_token))).json()["total"] == 3

    async def test_status_filter(self, client: AsyncClient, db, employee_user, manager_user, manager_token):
        await make_absence(db, employee_user)
        await make_absence(db, manager_user, status="approved")
        res = await client.get(ABSENCES, params={"status": "approved"}, headers=auth_header(manager_token))
        assert [a["status"] for a in res.json()["items"]] == ["approved"]

    async def test_bad_status_filter(self, client: AsyncClient, manager_token):
        res = await client.get(ABSENCES, params={"status": "maybe"}, headers=auth_header(manager_token))
        assert res.status_code == 400


class TestReviewAbsence:
    """검토 — pending에서 한 번만."""

    async def test_approve(self, client: AsyncClient, db, employee_user, manager_user, manager_token):
        absence = await make_absence(db, employee_user)
        res = await client.put(
            f"{ABSENCES}/{absence.id}",
            json={"status": "approved", "review_notes": "Atestado ok"},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        data = res.json()["absence"]
        assert data["status"] == "approved"
        assert data["reviewed_by"] == str(manager_user.id)
        assert data["reviewed_at"] is not None
        assert data["review_notes"] == "Atestado ok"

    async def test_second_review_rejected(self, client: AsyncClient, db, employee_user, manager_token):
        absence = await make_absence(db, employee_user, status="rejected")
        res = await client.put(f"{ABSENCES}/{absence.id}", json={"status": "approved"}, headers=auth_header(manager_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Absence has already been reviewed"}

    async def test_employee_cannot_review(self, client: AsyncClient, db, employee_user, employee_token):
        absence = await make_absence(db, employee_user)
        res = await client.put(f"{ABSENCES}/{absence.id}", json={"status": "approved"}, headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_cross_tenant_review_forbidden(self, client: AsyncClient, db, other_employee, manager_token):
        absence = await make_absence(db, other_employee)
        res = await client.put(f"{ABSENCES}/{absence.id}", json={"status": "approved"}, headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_admin_unknown_id_is_404(self, client: AsyncClient, admin_token):
        res = await client.put(
            f"{ABSENCES}/00000000-0000-0000-0000-000000000000",
            json={"status": "approved"},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 404

    async def test_invalid_decision(self, client: AsyncClient, db, employee_user, manager_token):
        absence = await make_absence(db, employee_user)
        res = await client.put(f"{ABSENCES}/{absence.id}", json={"status": "pending"}, headers=auth_header(manager_token))
        assert res.status_code == 400


class TestAbsenceStats:
    async def test_counts(self, client: AsyncClient, db, employee_user, other_employee, hr_token):
        await make_absence(db, employee_user)
        await make_absence(db, employee_user, status="approved")
        await make_absence(db, other_employee)
        res = await client.get(f"{ABSENCES}/stats", headers=auth_header(hr_token))
        assert res.status_code == 200
        assert res.json() == {"pending": 1, "approved": 1, "rejected": 0}

    async def test_employee_forbidden(self, client: AsyncClient, employee_token):
        res = await client.get(f"{ABSENCES}/stats", headers=auth_header(employee_token))
        assert res.status_code == 403
