"""직원 API 테스트 — 목록, 생성, 수정, 비활성화, 기기 해제.

Employee API tests — Scoped listing, creation with generated e-mails, updates,
soft deactivation and device revocation.
"""

from httpx import AsyncClient

from tests.conftest import DEVICE_ID, auth_header

EMPLOYEES = "/api/employees"


class TestListEmployees:
    """직원 목록과 통계."""

    async def test_manager_sees_own_company(
        self, client: AsyncClient, manager_token, admin_user, hr_user, employee_user, other_employee
    ):
        res = await client.get(EMPLOYEES, headers=auth_header(manager_token))
        assert res.status_code == 200
        emails = {u["email"] for u in res.json()["items"]}
        assert employee_user.email in emails
        assert other_employee.email not in emails
        assert res.json()["total"] == 4

    async def test_search(self, client: AsyncClient, manager_token, employee_user, hr_user):
        res = await client.get(EMPLOYEES, params={"search": "JOAO"}, headers=auth_header(manager_token))
        assert [u["email"] for u in res.json()["items"]] == [employee_user.email]

    async def test_department_filter(self, client: AsyncClient, manager_token, employee_user):
        res = await client.get(EMPLOYEES, params={"department": "Vendas"}, headers=auth_header(manager_token))
        assert res.json()["total"] == 1

    async def test_admin_filters_company(self, client: AsyncClient, admin_token, other_company, other_employee, employee_user):
        res = await client.get(EMPLOYEES, params={"company_id": str(other_company.id)}, headers=auth_header(admin_token))
        assert [u["email"] for u in res.json()["items"]] == [other_employee.email]

    async def test_employee_forbidden(self, client: AsyncClient, employee_token):
        res = await client.get(EMPLOYEES, headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_stats(self, client: AsyncClient, db, company, hr_token, employee_user):
        from tests.conftest import make_user

        await make_user(db, company, "ana@acme.com.br", "900", department="Vendas")
        await make_user(db, company, "bia@acme.com.br", "901", department="Financeiro")
        await make_user(db, company, "caio@acme.com.br", "902", department="Financeiro", is_active=False)

        res = await client.get(f"{EMPLOYEES}/stats", headers=auth_header(hr_token))
        assert res.status_code == 200
        assert res.json() == {
            "total_employees": 3,
            "total_inactive": 1,
            "by_department": [
                {"department": "Vendas", "count": 2},
                {"department": "Financeiro", "count": 1},
            ],
        }


class TestGetEmployee:
    async def test_employee_views_self(self, client: AsyncClient, employee_user, employee_token):
        res = await client.get(f"{EMPLOYEES}/{employee_user.id}", headers=auth_header(employee_token))
        assert res.status_code == 200
        assert res.json()["authorized_devices"][0]["device_id"] == DEVICE_ID

    async def test_employee_cannot_view_others(self, client: AsyncClient, manager_user, employee_token):
        res = await client.get(f"{EMPLOYEES}/{manager_user.id}", headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_manager_cannot_cross_tenant(self, client: AsyncClient, other_employee, manager_token):
        res = await client.get(f"{EMPLOYEES}/{other_employee.id}", headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_admin_unknown_is_404(self, client: AsyncClient, admin_token):
        res = await client.get(f"{EMPLOYEES}/00000000-0000-0000-0000-000000000000", headers=auth_header(admin_token))
        assert res.status_code == 404


class TestCreateEmployee:
    """직원 생성 — hr/admin, 부서 기반 이메일."""

    async def test_hr_creates_employee(self, client: AsyncClient, hr_token, company):
        res = await client.post(EMPLOYEES, json={
            "name": "Pedro Alves",
            "national_id": "321.654.987-00",
            "department": "Recursos Humanos",
            "position": "Analista",
        }, headers=auth_header(hr_token))
        assert res.status_code == 201
        data = res.json()
        assert data["user"]["email"] == "recursoshumanos@acme.com.br"
        assert data["user"]["company_id"] == str(company.id)
        assert data["user"]["role"] == "employee"
        assert len(data["temporary_password"]) == 8
        assert data["email_sent"] is False

    async def test_email_counter_and_accents(self, client: AsyncClient, hr_token):
        first = await client.post(EMPLOYEES, json={
            "name": "A", "national_id": "100", "department": "Operações",
        }, headers=auth_header(hr_token))
        second = await client.post(EMPLOYEES, json={
            "name": "B", "national_id": "101", "department": "Operações",
        }, headers=auth_header(hr_token))
        assert first.json()["user"]["email"] == "operacoes@acme.com.br"
        assert second.json()["user"]["email"] == "operacoes1@acme.com.br"

    async def test_created_employee_can_log_in(self, client: AsyncClient, hr_token):
        created = await client.post(EMPLOYEES, json={
            "name": "Pedro", "national_id": "200", "department": "Logística",
        }, headers=auth_header(hr_token))
        data = created.json()
        login = await client.post("/api/auth/login", json={
            "email": data["user"]["email"],
            "password": data["temporary_password"],
        })
        assert login.status_code == 200

    async def test_manager_cannot_create(self, client: AsyncClient, manager_token):
        res = await client.post(EMPLOYEES, json={
            "name": "X", "national_id": "300", "department": "Vendas",
        }, headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_hr_cannot_create_manager(self, client: AsyncClient, hr_token):
        res = await client.post(EMPLOYEES, json={
            "name": "X", "national_id": "301", "department": "Vendas", "role": "manager",
        }, headers=auth_header(hr_token))
        assert res.status_code == 403

    async def test_hr_cannot_create_in_other_company(self, client: AsyncClient, hr_token, other_company):
        res = await client.post(EMPLOYEES, json={
            "name": "X", "national_id": "302", "department": "Vendas", "company_id": str(other_company.id),
        }, headers=auth_header(hr_token))
        assert res.status_code == 403

    async def test_admin_creates_in_any_company(self, client: AsyncClient, admin_token, other_company):
        res = await client.post(EMPLOYEES, json={
            "name": "X", "national_id": "303", "department": "Suporte", "company_id": str(other_company.id),
            "role": "hr",
        }, headers=auth_header(admin_token))
        assert res.status_code == 201
        assert res.json()["user"]["email"] == "suporte@globex.com"
        assert res.json()["user"]["role"] == "hr"


class TestUpdateEmployee:
    """직원 수정 — 역할 변경은 admin만."""

    async def test_manager_updates_department(self, client: AsyncClient, manager_token, employee_user):
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}", json={"department": "Marketing"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["user"]["department"] == "Marketing"

    async def test_manager_cannot_change_role(self, client: AsyncClient, manager_token, employee_user):
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}", json={"role": "manager"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 403

    async def test_admin_changes_role(self, client: AsyncClient, admin_token, employee_user):
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}", json={"role": "manager"}, headers=auth_header(admin_token)
        )
        assert res.json()["user"]["role"] == "manager"

    async def test_null_keeps_required_fields(self, client: AsyncClient, manager_token, employee_user):
        """name: null은 무시, department: null은 비움."""
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}",
            json={"name": None, "department": None},
            headers=auth_header(manager_token),
        )
        assert res.status_code == 200
        user = res.json()["user"]
        assert user["name"] == "Joao"
        assert user["department"] is None

    async def test_admin_null_role_and_active_ignored(self, client: AsyncClient, admin_token, employee_user):
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}",
            json={"role": None, "is_active": None},
            headers=auth_header(admin_token),
        )
        assert res.status_code == 200
        assert res.json()["user"]["role"] == "employee"
        assert res.json()["user"]["is_active"] is True

    async def test_employee_cannot_update(self, client: AsyncClient, employee_token, employee_user):
        res = await client.put(
            f"{EMPLOYEES}/{employee_user.id}", json={"department": "TI"}, headers=auth_header(employee_token)
        )
        assert res.status_code == 403


class TestDeactivateAndDevices:
    """비활성화와 기기 해제."""

    async def test_hr_deactivates(self, client: AsyncClient, hr_token, employee_user):
        res = await client.delete(f"{EMPLOYEES}/{employee_user.id}", headers=auth_header(hr_token))
        assert res.status_code == 200
        assert res.json()["user"]["is_active"] is False

    async def test_deactivated_employee_cannot_log_in(self, client: AsyncClient, hr_token, employee_user):
        from tests.conftest import PASSWORD

        await client.delete(f"{EMPLOYEES}/{employee_user.id}", headers=auth_header(hr_token))
        res = await client.post("/api/auth/login", json={"email": employee_user.email, "password": PASSWORD})
        assert res.status_code == 401

    async def test_cannot_deactivate_self(self, client: AsyncClient, hr_token, hr_user):
        res = await client.delete(f"{EMPLOYEES}/{hr_user.id}", headers=auth_header(hr_token))
        assert res.status_code == 400

    async def test_manager_cannot_deactivate(self, client: AsyncClient, manager_token, employee_user):
        res = await client.delete(f"{EMPLOYEES}/{employee_user.id}", headers=auth_header(manager_token))
        assert res.status_code == 403

    async def test_revoke_device(self, client: AsyncClient, manager_token, employee_user):
        res = await client.delete(
            f"{EMPLOYEES}/{employee_user.id}/devices/{DEVICE_ID}", headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        assert res.json()["user"]["authorized_devices"] == []

    async def test_revoke_unknown_device(self, client: AsyncClient, manager_token, employee_user):
        res = await client.delete(
            f"{EMPLOYEES}/{employee_user.id}/devices/nope", headers=auth_header(manager_token)
        )
        assert res.status_code == 404
        assert res.json() == {"error": "Device not found"}
