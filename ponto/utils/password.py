"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification utility module.
Uses bcrypt directly; the cost factor comes from BCRYPT_ROUNDS.
"""

import secrets
import string

import bcrypt

from ponto.config import settings

_TEMP_PASSWORD_ALPHABET: str = string.ascii_letters + string.digits


def hash_password(password: str, rounds: int | None = None) -> str:
    """평문 비밀번호를 bcrypt 해시로 변환합니다.

    Hash a plain text password using bcrypt.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)
        rounds: bcrypt 비용 인자, 생략 시 설정값 (Cost factor, defaults to BCRYPT_ROUNDS)

    Returns:
        str: bcrypt 해시 문자열 (Bcrypt hash string, ~60 chars)
    """
    salt: bytes = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """평문 비밀번호와 bcrypt 해시를 비교 검증합니다.

    Verify a plain text password against a bcrypt hash.
    """
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )


def generate_temporary_password(length: int = 8, prefix: str = "") -> str:
    """임시 비밀번호 생성 — Random temporary password for created accounts."""
    return prefix + "".join(secrets.choice(_TEMP_PASSWORD_ALPHABET) for _ in range(length))
