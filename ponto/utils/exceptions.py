"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Each error kind of the API maps to one HTTPException subclass so services can
raise domain errors without specifying status codes at each call site.
The handlers in ``ponto.main`` render every one of them as ``{"error": detail}``.

Usage:
    from ponto.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Employee not found")
    raise ConflictError("E-mail already registered")
"""

from fastapi import HTTPException, status


class AuthenticationError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when authentication is missing, invalid, or expired
    (missing bearer token, bad signature, expired token, wrong credentials,
    inactive account).

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class AuthorizationError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised on role, tenant, or device-authorization violations.

    Args:
        detail: 오류 메시지 (Error message, default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class ValidationError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    Raised for business-rule failures beyond what Pydantic catches
    (unknown event type, device cap reached, illegal status transition).

    Args:
        detail: 오류 메시지 (Error message, default: "Invalid request data")
    """

    def __init__(self, detail: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class ConflictError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    Raised on uniqueness violations (national id, e-mail, company legal id).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ExternalServiceError(HTTPException):
    """502 Bad Gateway 예외 — 외부 협력 서비스 장애.

    Raised when a collaborator (face match, text generation) is unavailable.
    Callers recover locally where a fallback exists.

    Args:
        detail: 오류 메시지 (Error message, default: "External service unavailable")
    """

    def __init__(self, detail: str = "External service unavailable") -> None:
        super().__init__(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)
