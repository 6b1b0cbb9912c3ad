"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리기, 라우터 등록.

FastAPI application entry point — Lifespan (database handle), middleware,
exception handlers and router registration.

Error bodies always have the shape ``{"error": <message>}``; request
validation failures add ``details``.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from ponto.api import api_router
from ponto.config import Settings, settings
from ponto.database import Database
from ponto.middleware.axiom_logging import AxiomLoggingMiddleware
from ponto.services.storage_service import UPLOADS_DIR
from ponto.utils.dates import utc_now

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패 → 400 (Request validation failures are 400, not 422)."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Invalid request data", "details": details})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # 내부 정보는 응답에 노출하지 않음 — internal detail stays in the log
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(app_settings: Settings = settings, database: Database | None = None) -> FastAPI:
    """애플리케이션 팩토리.

    Build the FastAPI application.

    Args:
        app_settings: 설정 (Settings to use)
        database: 외부에서 주입한 DB 핸들, 없으면 lifespan에서 생성
                  (Injected database handle; created in the lifespan when omitted)

    Returns:
        FastAPI: 구성된 애플리케이션 (Configured application)
    """
    logging.basicConfig(
        level=app_settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "database", None) is None
        if owned:
            app.state.database = Database.from_settings(app_settings)
        if app_settings.DB_CREATE_ALL:
            await app.state.database.create_all()
        logger.info("%s %s started", app_settings.APP_NAME, app_settings.APP_VERSION)
        try:
            yield
        finally:
            if owned:
                await app.state.database.dispose()

    app: FastAPI = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # Axiom API 로깅 미들웨어 — CORS보다 먼저 등록하여 모든 요청을 캡처
    # (Registered before CORS to capture all requests)
    app.add_middleware(AxiomLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """서버 상태 확인 엔드포인트 — Health check for load balancers and monitoring."""
        return {
            "status": "ok",
            "timestamp": utc_now().isoformat(),
            "app": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
        }

    app.include_router(api_router, prefix="/api")
    # 로컬 업로드 파일 제공 — Serves local-mode uploads
    app.mount("/uploads", StaticFiles(directory=UPLOADS_DIR, check_dir=False), name="uploads")
    return app


app: FastAPI = create_app()
