"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every resource router under a single
router mounted at ``/api``.

Included routers:
    - auth: 인증 (Registration, login, profile)
    - users: 사용자 (Own profile, admin user list)
    - time_records: 출퇴근 기록 (Clock events)
    - absences: 결근 (Absence requests)
    - tickets: 티켓 (Support tickets)
    - adjustments: 시간 조정 (Adjustment requests, justification helper)
    - companies: 회사 (Tenants, admin only)
    - employees: 직원 관리 (Employee management)
    - stats: 통계 (Dashboard and worked hours)
    - storage: 파일 업로드 (Uploads)
"""

from fastapi import APIRouter

from ponto.api.absences import router as absences_router
from ponto.api.adjustments import router as adjustments_router
from ponto.api.auth import router as auth_router
from ponto.api.companies import router as companies_router
from ponto.api.employees import router as employees_router
from ponto.api.stats import router as stats_router
from ponto.api.storage import router as storage_router
from ponto.api.tickets import router as tickets_router
from ponto.api.time_records import router as time_records_router
from ponto.api.users import router as users_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(time_records_router, prefix="/time-records", tags=["Time Records"])
api_router.include_router(absences_router, prefix="/absences", tags=["Absences"])
api_router.include_router(tickets_router, prefix="/tickets", tags=["Tickets"])
api_router.include_router(adjustments_router, prefix="/adjustments", tags=["Adjustments"])
api_router.include_router(companies_router, prefix="/companies", tags=["Companies"])
api_router.include_router(employees_router, prefix="/employees", tags=["Employees"])
api_router.include_router(stats_router, prefix="/stats", tags=["Stats"])
api_router.include_router(storage_router, prefix="/storage", tags=["Storage"])
