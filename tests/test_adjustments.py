"""시간 조정 API 테스트 — 사유 생성/분석, 요청, 검토.

Adjustment API tests — Justification generation and analysis (template
fallback), adjustment requests and their review.
"""

from httpx import AsyncClient

from ponto.services.justification_service import fallback_justification
from tests.conftest import auth_header, make_record, utc

ADJUSTMENTS = "/api/adjustments"


class TestJustification:
    """사유 생성 — API 키 없으면 템플릿."""

    async def test_generate_uses_template(self, client: AsyncClient, employee_token):
        res = await client.post(f"{ADJUSTMENTS}/generate-justification", json={
            "user_input": "esqueci de bater o ponto",
            "record_type": "saida",
            "date": "2024-03-01",
        }, headers=auth_header(employee_token))
        assert res.status_code == 200
        data = res.json()
        assert data["generated"] is False
        assert "saída" in data["justification"]
        assert "01/03/2024" in data["justification"]

    async def test_unknown_type_falls_back_to_entrada(self):
        text = fallback_justification("almoco", utc(2024, 3, 1))
        assert "entrada" in text

    async def test_generate_with_service(self, client: AsyncClient, employee_token, monkeypatch):
        from ponto.config import settings
        from ponto.services.justification_service import justification_service

        async def _generate(prompt):
            assert "esqueci" in prompt
            return "Justificativa formal."

        monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
        monkeypatch.setattr(justification_service, "_generate", _generate)
        res = await client.post(f"{ADJUSTMENTS}/generate-justification", json={
            "user_input": "esqueci",
            "record_type": "entrada",
        }, headers=auth_header(employee_token))
        assert res.json() == {"justification": "Justificativa formal.", "generated": True}

    async def test_analyze_default(self, client: AsyncClient, employee_token):
        res = await client.post(
            f"{ADJUSTMENTS}/analyze-justification", json={"text": "Esqueci"}, headers=auth_header(employee_token)
        )
        assert res.json() == {"analysis": {"sentiment": "neutral", "urgency": "medium", "category": "geral"}}

    async def test_analyze_parses_fenced_json(self, client: AsyncClient, employee_token, monkeypatch):
        from ponto.config import settings
        from ponto.services.justification_service import justification_service

        async def _generate(prompt):
            return '```json\n{"sentiment": "negative", "urgency": "high"}\n```'

        monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
        monkeypatch.setattr(justification_service, "_generate", _generate)
        res = await client.post(
            f"{ADJUSTMENTS}/analyze-justification", json={"text": "Urgente"}, headers=auth_header(employee_token)
        )
        assert res.json()["analysis"] == {"sentiment": "negative", "urgency": "high", "category": "geral"}


class TestAdjustments:
    """조정 요청 생성과 검토."""

    async def test_create_for_own_record(self, client: AsyncClient, db, employee_user, employee_token):
        record = await make_record(db, employee_user, "saida", utc(2024, 3, 1, 17))
        res = await client.post(ADJUSTMENTS, json={
            "record_type": "saida",
            "date": "2024-03-01",
            "start": "17:00",
            "end": "18:00",
            "description": "Saí mais tarde",
            "justification": "Reunião estendida",
            "time_record_id": str(record.id),
        }, headers=auth_header(employee_token))
        assert res.status_code == 201
        adjustment = res.json()["adjustment"]
        assert adjustment["status"] == "pending"
        assert adjustment["time_record_id"] == str(record.id)
        assert adjustment["record_type"] == "saida"

    async def test_create_for_missing_event(self, client: AsyncClient, employee_token):
        res = await client.post(ADJUSTMENTS, json={
            "record_type": "entrada",
            "date": "2024-03-02",
            "start": "08:00",
            "description": "Esqueci de marcar",
        }, headers=auth_header(employee_token))
        assert res.status_code == 201
        assert res.json()["adjustment"]["time_record_id"] is None

    async def test_invalid_record_type(self, client: AsyncClient, employee_token):
        res = await client.post(ADJUSTMENTS, json={
            "record_type": "almoco",
            "date": "2024-03-02",
            "description": "x",
        }, headers=auth_header(employee_token))
        assert res.status_code == 400

    async def test_cannot_target_someone_elses_record(self, client: AsyncClient, db, manager_user, employee_token):
        record = await make_record(db, manager_user, "entrada", utc(2024, 3, 1, 8))
        res = await client.post(ADJUSTMENTS, json={
            "record_type": "entrada",
            "date": "2024-03-01",
            "description": "x",
            "time_record_id": str(record.id),
        }, headers=auth_header(employee_token))
        assert res.status_code == 403

    async def test_review_flow(self, client: AsyncClient, employee_token, hr_token, hr_user):
        created = await client.post(ADJUSTMENTS, json={
            "record_type": "entrada",
            "date": "2024-03-02",
            "description": "Esqueci de marcar",
        }, headers=auth_header(employee_token))
        adjustment_id = created.json()["adjustment"]["id"]

        res = await client.put(
            f"{ADJUSTMENTS}/{adjustment_id}", json={"status": "rejected", "review_notes": "Sem evidência"},
            headers=auth_header(hr_token),
        )
        assert res.status_code == 200
        data = res.json()["adjustment"]
        assert data["status"] == "rejected"
        assert data["reviewed_by"] == str(hr_user.id)

        again = await client.put(f"{ADJUSTMENTS}/{adjustment_id}", json={"status": "approved"}, headers=auth_header(hr_token))
        assert again.status_code == 400

    async def test_listing_is_scoped(self, client: AsyncClient, employee_token, other_employee_token, other_manager_token):
        await client.post(ADJUSTMENTS, json={"record_type": "entrada", "date": "2024-03-02", "description": "a"},
                          headers=auth_header(employee_token))
        await client.post(ADJUSTMENTS, json={"record_type": "saida", "date": "2024-03-02", "description": "b"},
                          headers=auth_header(other_employee_token))

        mine = await client.get(ADJUSTMENTS, headers=auth_header(employee_token))
        assert [a["record_type"] for a in mine.json()["items"]] == ["entrada"]

        theirs = await client.get(ADJUSTMENTS, headers=auth_header(other_manager_token))
        assert [a["record_type"] for a in theirs.json()["items"]] == ["saida"]
