"""인증 서비스 — 회원가입, 로그인, 기기 인증.

Auth Service — Registration, login with device authorization, and token
issuance.

A user holds at most MAX_AUTHORIZED_DEVICES entries and no
duplicate devices. Appends lock the user row and re-check the count inside the
transaction, so concurrent logins cannot exceed the cap.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from ponto.config import settings
from ponto.models.user import User
from ponto.repositories.company_repository import company_repository
from ponto.repositories.user_repository import user_repository
from ponto.schemas.auth import LoginRequest, RegisterRequest
from ponto.services.access_policy import Role, is_device_authorized
from ponto.utils.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ponto.utils.jwt import create_access_token
from ponto.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class AuthService:
    """인증 서비스."""

    def create_token(self, user: User) -> str:
        """액세스 토큰 생성 — Access token for ``user``."""
        return create_access_token({
            "sub": str(user.id),
            "company": str(user.company_id),
            "role": user.role,
        })

    async def register(self, db: AsyncSession, data: RegisterRequest) -> User:
        """직원 자가 가입.

        Self-registration of an employee into an existing company.

        Raises:
            NotFoundError: 회사 없음 (Company not found)
            ValidationError: 비활성 회사 (Company inactive)
            ConflictError: 이메일 또는 CPF 중복 (Duplicate e-mail or national id)
        """
        company = await company_repository.get_by_id(db, data.company_id)
        if company is None:
            raise NotFoundError("Company not found")
        if not company.is_active:
            raise ValidationError("Company is inactive")

        if await user_repository.email_taken(db, data.email):
            raise ConflictError("E-mail already registered")
        if await user_repository.national_id_taken(db, data.national_id):
            raise ConflictError("National id already registered")

        user = await user_repository.create(
            db,
            {
                "company_id": company.id,
                "name": data.name,
                "email": data.email,
                "password_hash": hash_password(data.password),
                "national_id": data.national_id,
                "role": Role.EMPLOYEE.value,
                "devices": [],
            },
        )
        logger.info("User %s registered in company %s", user.id, company.id)
        return user

    async def login(self, db: AsyncSession, data: LoginRequest) -> User:
        """로그인 — 자격 증명 확인, 새 기기 인증, 마지막 로그인 갱신.

        Verify credentials, authorize the login device if it is new, and
        stamp ``last_login_at``.

        Raises:
            AuthenticationError: 잘못된 자격 증명 또는 비활성 계정 (Bad credentials or inactive account)
            ValidationError: 기기 한도 초과 (Device cap reached)
        """
        user = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Account is inactive")

        if data.device_id:
            user = await self.authorize_device(db, user.id, data.device_id, data.device_name)

        user.last_login_at = datetime.now(timezone.utc)
        await db.flush()
        return user

    async def authorize_device(
        self,
        db: AsyncSession,
        user_id,
        device_id: str,
        device_name: str | None = None,
    ) -> User:
        """기기를 인증 목록에 추가합니다 (중복 없음, 최대 개수 제한).

        Add ``device_id`` to the user's authorized devices. An already
        authorized device is left as is.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 사용자 UUID (User UUID)
            device_id: 기기 ID (Device id)
            device_name: 기기 이름 (Device display name)

        Returns:
            User: 기기 목록이 갱신된 사용자 (User with the refreshed device list)

        Raises:
            ValidationError: 최대 기기 수 초과 — 목록은 변경되지 않음
                             (Cap reached; the list is left unchanged)
        """
        user = await user_repository.lock_for_device_update(db, user_id)
        if user is None:
            raise NotFoundError("User not found")

        if is_device_authorized(user, device_id):
            return user

        if len(user.devices) >= settings.MAX_AUTHORIZED_DEVICES:
            raise ValidationError(
                f"Maximum of {settings.MAX_AUTHORIZED_DEVICES} authorized devices reached"
            )

        try:
            await user_repository.add_device(db, user, device_id, device_name)
        except ConflictError:
            # 동시 요청이 먼저 등록함 — a concurrent login inserted the same device first
            logger.info("Device %s was authorized concurrently for user %s", device_id, user_id)
            return await user_repository.lock_for_device_update(db, user_id)

        logger.info("Device %s authorized for user %s", device_id, user.id)
        return user


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
