"""FastAPI 의존성 주입 모듈 — 인증, 역할 검사, 기기 헤더.

FastAPI dependency injection module — Authentication, role checks and the
device headers required for clock events.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns its payload)
    3. 페이로드의 "sub" 필드로 DB에서 사용자를 조회
       (User is fetched from the DB using the "sub" claim)
    4. 사용자 활성 상태를 확인 (User active status is verified)
"""

from typing import Annotated, Awaitable, Callable
from uuid import UUID

import jwt
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.database import get_db
from ponto.models.user import User
from ponto.repositories.user_repository import user_repository
from ponto.services.access_policy import Role, role_of
from ponto.services.time_record_service import DeviceContext
from ponto.utils.exceptions import AuthenticationError, AuthorizationError
from ponto.utils.jwt import decode_token

# HTTP Bearer 토큰 추출기 — 누락 시 자체 401 메시지를 쓰기 위해 auto_error 끔
# (auto_error disabled so a missing header yields our own 401 message)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """JWT 토큰에서 현재 인증된 사용자를 추출합니다.

    Decode the JWT from the Authorization header and return the
    authenticated user with its authorized devices loaded.

    Raises:
        AuthenticationError(401): 토큰 없음, 만료, 유효하지 않음, 사용자 없음/비활성
            (Missing, expired or invalid token; user not found or inactive)
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired") from None
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token") from None

    if payload.get("type") != "access" or payload.get("sub") is None:
        raise AuthenticationError("Invalid token")
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token") from None

    user: User | None = await user_repository.get_with_devices(db, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    return user


def require_roles(*roles: Role) -> Callable[..., Awaitable[User]]:
    """역할 기반 권한 검사 의존성 팩토리.

    Dependency factory allowing only the given roles.

    Args:
        roles: 허용 역할 (Allowed roles)

    Returns:
        FastAPI 의존성 함수 — 인증된 사용자 반환 또는 403 발생
        (Dependency returning the user or raising 403)
    """
    allowed = frozenset(roles)

    async def _check(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if role_of(current_user) not in allowed:
            raise AuthorizationError("Insufficient permissions")
        return current_user

    return _check


# 편의 의존성 — Pre-configured role dependencies
require_staff = require_roles(Role.MANAGER, Role.HR, Role.ADMIN)
require_admin = require_roles(Role.ADMIN)


async def get_device_context(
    x_device_id: Annotated[str | None, Header()] = None,
    x_device_name: Annotated[str | None, Header()] = None,
    x_platform: Annotated[str | None, Header()] = None,
    x_app_version: Annotated[str | None, Header()] = None,
) -> DeviceContext:
    """기기 헤더 추출 — X-Device-ID is mandatory for clock events.

    Raises:
        AuthorizationError(403): X-Device-ID 누락 (Missing device id)
    """
    if not x_device_id:
        raise AuthorizationError("Device ID required")
    return DeviceContext(
        device_id=x_device_id,
        device_name=x_device_name,
        platform=x_platform,
        app_version=x_app_version,
    )
