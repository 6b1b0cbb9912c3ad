"""Axiom 로깅 미들웨어 테스트 — 마스킹, 이벤트 구성, 실패 격리.

Axiom logging middleware tests — masking, event contents and ingest failure
isolation, using an injected in-memory client.
"""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from httpx import ASGITransport, AsyncClient

from ponto.middleware.axiom_logging import AxiomLoggingMiddleware, error_message, mask_sensitive


class FakeAxiom:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.events: list[dict] = []

    def ingest_events(self, dataset, events):
        if self.fail:
            raise RuntimeError("axiom down")
        assert dataset == "api-logs"
        self.events.extend(events)


def build_app(axiom: FakeAxiom) -> FastAPI:
    app = FastAPI()
    app.add_middleware(AxiomLoggingMiddleware, client=axiom, dataset="api-logs")

    @app.post("/api/auth/login")
    async def login(payload: dict) -> dict:
        return {"ok": True}

    @app.get("/api/fail")
    async def fail() -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Boom"})

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


@pytest_asyncio.fixture
async def axiom_client():
    axiom = FakeAxiom()
    transport = ASGITransport(app=build_app(axiom))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client, axiom


class TestMasking:
    def test_nested_sensitive_keys(self):
        masked = mask_sensitive({"email": "a@b.com", "password": "x", "user": {"national_id": "123", "name": "A"}})
        assert masked == {"email": "a@b.com", "password": "***", "user": {"national_id": "***", "name": "A"}}

    def test_lists_are_capped(self):
        assert len(mask_sensitive(list(range(50)))) == 20

    @pytest.mark.parametrize("body,expected", [
        (b'{"error": "Device not authorized"}', "Device not authorized"),
        (b"plain failure", "plain failure"),
        (b'{"detail": "x"}', '{"detail": "x"}'),
    ])
    def test_error_message(self, body, expected):
        assert error_message(body) == expected


class TestMiddleware:
    """요청 이벤트 전송."""

    async def test_body_is_masked(self, axiom_client):
        client, axiom = axiom_client
        res = await client.post(
            "/api/auth/login",
            json={"email": "joao@acme.com.br", "password": "senha123"},
            headers={"X-Device-ID": "device-1", "X-Platform": "ios"},
        )
        assert res.status_code == 200
        event = axiom.events[-1]
        assert event["request_body"] == {"email": "joao@acme.com.br", "password": "***"}
        assert event["device_id"] == "device-1"
        assert event["platform"] == "ios"
        assert event["status_code"] == 200
        assert "error" not in event

    async def test_error_response_is_recorded_and_returned(self, axiom_client):
        client, axiom = axiom_client
        res = await client.get("/api/fail", params={"token": "abc"})
        assert res.json() == {"error": "Boom"}
        event = axiom.events[-1]
        assert event["error"] == "Boom"
        assert event["query_params"] == {"token": "***"}

    async def test_health_is_skipped(self, axiom_client):
        client, axiom = axiom_client
        await client.get("/health")
        assert axiom.events == []

    async def test_ingest_failure_does_not_fail_request(self):
        transport = ASGITransport(app=build_app(FakeAxiom(fail=True)))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            res = await client.get("/api/fail")
        assert res.status_code == 400
