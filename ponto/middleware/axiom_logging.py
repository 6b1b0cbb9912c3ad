"""Axiom API 로깅 미들웨어.

Axiom API logging middleware.
Sends one structured event per API request to Axiom: endpoint, method,
masked body and params, status code, duration, the requesting device and
the error message of failed requests. Credentials and personal identifiers
(password, token, national id) are masked before anything leaves the process.
"""

import json
import logging
import re
import time
from typing import Any

from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from ponto.config import settings

logger = logging.getLogger(__name__)

_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|credential|national_id|cpf)",
    re.IGNORECASE,
)

_SKIP_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})

# 이벤트에 복사할 기기 헤더 — Device headers copied onto each event
_DEVICE_HEADERS: dict[str, str] = {
    "x-device-id": "device_id",
    "x-platform": "platform",
    "x-app-version": "app_version",
}

_MAX_ERROR_LENGTH = 500


def mask_sensitive(data: Any, depth: int = 0) -> Any:
    """민감 필드 마스킹 — nested dicts/lists, at most 20 list items, 5 levels deep."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            key: "***" if _SENSITIVE_KEYS.search(str(key)) else mask_sensitive(value, depth + 1)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [mask_sensitive(item, depth + 1) for item in data[:20]]
    return data


def error_message(body: bytes) -> str:
    """에러 응답 본문에서 사유 추출 — the ``error`` field of JSON bodies, raw text otherwise."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return body.decode("utf-8", errors="replace")[:_MAX_ERROR_LENGTH]
    message = data.get("error", data) if isinstance(data, dict) else data
    message = message if isinstance(message, str) else json.dumps(message, default=str)
    if len(message) > _MAX_ERROR_LENGTH:
        return message[:_MAX_ERROR_LENGTH] + "..."
    return message


def build_log_event(
    request: Request,
    status_code: int,
    duration_ms: float,
    request_body: Any = None,
    error: str | None = None,
) -> dict[str, Any]:
    """요청 하나의 로그 이벤트 — optional keys are present only when they carry data."""
    event: dict[str, Any] = {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    if request.query_params:
        event["query_params"] = mask_sensitive(dict(request.query_params))
    if request.path_params:
        event["path_params"] = dict(request.path_params)
    for header, field in _DEVICE_HEADERS.items():
        if request.headers.get(header):
            event[field] = request.headers[header]
    if request_body is not None:
        event["request_body"] = request_body
    if error:
        event["error"] = error
    return event


async def _read_json_body(request: Request) -> Any:
    if request.method not in ("POST", "PUT", "PATCH"):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        return mask_sensitive(json.loads(raw))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """모든 API 요청을 Axiom에 기록하는 미들웨어.

    Pass-through when AXIOM_API_TOKEN or AXIOM_DATASET is not configured and
    no client is injected.
    """

    def __init__(self, app: Any, client: AxiomClient | None = None, dataset: str | None = None) -> None:
        super().__init__(app)
        self._dataset: str = dataset or settings.AXIOM_DATASET
        self._client: AxiomClient | None = client
        if self._client is None and settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    def _ingest(self, event: dict[str, Any]) -> None:
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:
            # 로깅 실패는 요청에 영향 없음
            logger.warning("Axiom ingest failed: %s", exc)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if self._client is None or request.url.path in _SKIP_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        request_body = await _read_json_body(request)
        status_code = 500
        error: str | None = None
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                # 에러 본문은 한 번만 읽을 수 있으므로 다시 감싸서 반환
                body = b"".join(
                    [chunk if isinstance(chunk, bytes) else chunk.encode("utf-8") async for chunk in response.body_iterator]
                )
                error = error_message(body)
                response = Response(
                    content=body,
                    status_code=status_code,
                    headers=dict(response.headers),
                    media_type=response.media_type,
                )
        except Exception as exc:
            error = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            self._ingest(build_log_event(request, status_code, duration_ms, request_body, error))

        return response
