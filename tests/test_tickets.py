"""티켓 API 테스트 — 생성, 응답, 상태 전이.

Ticket API tests — Creation, responses and the forward-only status flow.
"""

import pytest_asyncio
from httpx import AsyncClient

from tests.conftest import auth_header

TICKETS = "/api/tickets"


class TestTickets:
    """티켓 수명주기."""

    @pytest_asyncio.fixture
    async def ticket_id(self, client: AsyncClient, employee_token) -> str:
        res = await client.post(TICKETS, json={
            "subject": "Relógio não registrou",
            "description": "Bati o ponto às 8h mas não apareceu",
            "priority": "high",
            "category": "time_clock",
        }, headers=auth_header(employee_token))
        assert res.status_code == 201
        return res.json()["ticket"]["id"]

    async def test_create_defaults(self, client: AsyncClient, employee_token):
        res = await client.post(
            TICKETS, json={"subject": "Dúvida", "description": "Como funciona o banco de horas?"},
            headers=auth_header(employee_token),
        )
        ticket = res.json()["ticket"]
        assert ticket["status"] == "open"
        assert ticket["priority"] == "medium"
        assert ticket["category"] == "other"
        assert ticket["responses"] == []

    async def test_invalid_priority(self, client: AsyncClient, employee_token):
        res = await client.post(
            TICKETS, json={"subject": "x", "description": "y", "priority": "urgent"},
            headers=auth_header(employee_token),
        )
        assert res.status_code == 400

    async def test_response_moves_open_to_in_review(self, client: AsyncClient, ticket_id, manager_token, manager_user):
        res = await client.post(
            f"{TICKETS}/{ticket_id}/responses", json={"message": "Vamos verificar"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 200
        ticket = res.json()["ticket"]
        assert ticket["status"] == "in_review"
        assert [r["message"] for r in ticket["responses"]] == ["Vamos verificar"]
        assert ticket["responses"][0]["user_id"] == str(manager_user.id)

    async def test_owner_may_reply(self, client: AsyncClient, ticket_id, employee_token):
        res = await client.post(
            f"{TICKETS}/{ticket_id}/responses", json={"message": "Segue o print"}, headers=auth_header(employee_token)
        )
        assert res.status_code == 200

    async def test_other_employee_cannot_reply(self, client: AsyncClient, ticket_id, other_employee_token):
        res = await client.post(
            f"{TICKETS}/{ticket_id}/responses", json={"message": "?"}, headers=auth_header(other_employee_token)
        )
        assert res.status_code == 403

    async def test_resolve_then_close(self, client: AsyncClient, ticket_id, hr_token, hr_user):
        resolved = await client.put(f"{TICKETS}/{ticket_id}/resolve", headers=auth_header(hr_token))
        assert resolved.status_code == 200
        data = resolved.json()["ticket"]
        assert data["status"] == "resolved"
        assert data["resolved_by"] == str(hr_user.id)
        assert data["resolved_at"] is not None

        closed = await client.put(f"{TICKETS}/{ticket_id}/close", headers=auth_header(hr_token))
        assert closed.json()["ticket"]["status"] == "closed"

    async def test_status_never_moves_backwards(self, client: AsyncClient, ticket_id, manager_token):
        await client.put(f"{TICKETS}/{ticket_id}/close", headers=auth_header(manager_token))
        res = await client.put(f"{TICKETS}/{ticket_id}/resolve", headers=auth_header(manager_token))
        assert res.status_code == 400

    async def test_closed_ticket_rejects_responses(self, client: AsyncClient, ticket_id, manager_token):
        await client.put(f"{TICKETS}/{ticket_id}/close", headers=auth_header(manager_token))
        res = await client.post(
            f"{TICKETS}/{ticket_id}/responses", json={"message": "Reabrir?"}, headers=auth_header(manager_token)
        )
        assert res.status_code == 400
        assert res.json() == {"error": "Closed tickets do not accept responses"}

    async def test_employee_cannot_resolve(self, client: AsyncClient, ticket_id, employee_token):
        res = await client.put(f"{TICKETS}/{ticket_id}/resolve", headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_other_tenant_manager_cannot_resolve(self, client: AsyncClient, ticket_id, other_manager_token):
        res = await client.put(f"{TICKETS}/{ticket_id}/resolve", headers=auth_header(other_manager_token))
        assert res.status_code == 403

    async def test_listing(self, client: AsyncClient, ticket_id, employee_token, other_manager_token, admin_token):
        assert (await client.get(TICKETS, headers=auth_header(employee_token))).json()["total"] == 1
        assert (await client.get(TICKETS, headers=auth_header(other_manager_token))).json()["total"] == 0
        res = await client.get(TICKETS, params={"status": "open"}, headers=auth_header(admin_token))
        assert [t["id"] for t in res.json()["items"]] == [ticket_id]
