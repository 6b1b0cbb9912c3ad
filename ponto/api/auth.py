"""인증 라우터 — 회원가입, 로그인, 프로필, 로그아웃.

Auth Router — Registration, login (with device authorization), current
user profile and logout.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ponto.api.deps import get_current_user
from ponto.database import get_db
from ponto.models.user import User
from ponto.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from ponto.services.auth_service import auth_service
from ponto.services.user_service import build_user_response

router: APIRouter = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """직원 자가 가입 — Register into an existing company and receive a token."""
    user: User = await auth_service.register(db, data)
    await db.commit()
    return {
        "message": "User registered successfully",
        "token": auth_service.create_token(user),
        "user": build_user_response(user),
    }


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """로그인 — 새 기기는 인증 목록에 추가 (최대 3대).

    Login. An unknown device_id is added to the authorized list; a fourth
    device is rejected with 400.
    """
    user: User = await auth_service.login(db, data)
    await db.commit()
    return {
        "message": "Login successful",
        "token": auth_service.create_token(user),
        "user": build_user_response(user),
    }


@router.get("/me")
async def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    return {"user": build_user_response(current_user)}


@router.post("/logout")
async def logout(
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """로그아웃 — 상태 없는 토큰이므로 확인 응답만 반환 (Stateless acknowledgement)."""
    return {"message": "Logout successful"}
