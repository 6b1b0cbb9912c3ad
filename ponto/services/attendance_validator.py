"""출퇴근 이벤트 검증기 — 세 가지 검사 결과로 종합 상태를 도출.

Attendance event validator. A clock event goes through three checks:

    face_recognition  success | failed | skipped | pending
    geolocation       success | failed | skipped | pending
    device_auth       success | failed

and the overall status is derived from them:

    invalid         any check failed
    valid           face and geo are success or skipped, device is success
    pending_review  everything else (an inconclusive "pending" check)

``pending`` is reserved for collaborator outages (face-match timeout and the
like). Everything here is pure: I/O happens in the time record service and
only the outcomes are passed in.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ponto.utils.exceptions import ValidationError


class RecordType(str, Enum):
    """출퇴근 이벤트 유형 — Clock event type."""

    ENTRADA = "entrada"  # 출근 (clock in)
    PAUSA = "pausa"  # 휴식 시작 (break start)
    RETORNO = "retorno"  # 휴식 종료 (break end)
    SAIDA = "saida"  # 퇴근 (clock out)


class CheckStatus(str, Enum):
    """개별 검사 결과 — Outcome of one validation check."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"
    PENDING = "pending"


class OverallStatus(str, Enum):
    """종합 상태 — Overall record status."""

    VALID = "valid"
    INVALID = "invalid"
    PENDING_REVIEW = "pending_review"


_PASSING: frozenset[CheckStatus] = frozenset({CheckStatus.SUCCESS, CheckStatus.SKIPPED})


@dataclass(frozen=True)
class FaceMatchResult:
    """얼굴 인식 협력 서비스 응답 — Face match collaborator answer."""

    matched: bool
    confidence: float | None = None


@dataclass(frozen=True)
class GeoCheckResult:
    """위치 검사 결과 — Distance from the workplace and whether it is inside the radius."""

    within_range: bool
    distance_m: float


@dataclass(frozen=True)
class EventValidation:
    """이벤트 검증 결과 — Per-check outcomes plus the derived overall status."""

    face: CheckStatus
    geolocation: CheckStatus
    device: CheckStatus
    overall_status: OverallStatus
    face_confidence: float | None = None
    face_image_url: str | None = None
    distance_m: float | None = None

    def to_document(self) -> dict[str, Any]:
        """기록에 저장할 JSON 문서 — Document stored in ``time_records.validation``."""
        return {
            "face_recognition": {
                "status": self.face.value,
                "confidence": self.face_confidence,
                "image_url": self.face_image_url,
            },
            "geolocation": {
                "status": self.geolocation.value,
                "distance_from_workplace": self.distance_m,
            },
            "device_auth": {
                "status": self.device.value,
            },
        }


def parse_record_type(value: str) -> RecordType:
    """이벤트 유형 파싱 — 허용되지 않은 값은 400.

    Parse a raw event type. Runs before any validation check.

    Raises:
        ValidationError: 알 수 없는 유형 (Unknown event type)
    """
    try:
        return RecordType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in RecordType)
        raise ValidationError(f"Invalid record type '{value}'. Allowed: {allowed}") from None


def face_check_status(image_url: str | None, match: FaceMatchResult | None) -> CheckStatus:
    """얼굴 검사 결과.

    No image submitted means the check was skipped. An image with no answer
    from the collaborator (``match is None``) is inconclusive.
    """
    if not image_url:
        return CheckStatus.SKIPPED
    if match is None:
        return CheckStatus.PENDING
    return CheckStatus.SUCCESS if match.matched else CheckStatus.FAILED


def geolocation_check_status(result: GeoCheckResult | None, reference_configured: bool) -> CheckStatus:
    """위치 검사 결과 — No workplace reference configured means skipped."""
    if not reference_configured:
        return CheckStatus.SKIPPED
    if result is None:
        return CheckStatus.PENDING
    return CheckStatus.SUCCESS if result.within_range else CheckStatus.FAILED


def device_check_status(authorized: bool) -> CheckStatus:
    # 기기 검사는 항상 수행 — the device check is never skipped
    return CheckStatus.SUCCESS if authorized else CheckStatus.FAILED


def derive_overall_status(face: CheckStatus, geo: CheckStatus, device: CheckStatus) -> OverallStatus:
    """세 검사 결과로 종합 상태를 도출합니다.

    Derive the overall status from the three check outcomes.

    Args:
        face: 얼굴 검사 결과 (Face recognition outcome)
        geo: 위치 검사 결과 (Geolocation outcome)
        device: 기기 검사 결과 (Device authorization outcome)

    Returns:
        OverallStatus: invalid if any check failed; valid if face and geo
        passed or were skipped and the device is authorized; otherwise
        pending_review.
    """
    checks = (CheckStatus(face), CheckStatus(geo), CheckStatus(device))
    if CheckStatus.FAILED in checks:
        return OverallStatus.INVALID
    if checks[0] in _PASSING and checks[1] in _PASSING and checks[2] is CheckStatus.SUCCESS:
        return OverallStatus.VALID
    return OverallStatus.PENDING_REVIEW


def validate_event(
    *,
    face_image_url: str | None,
    face_match: FaceMatchResult | None,
    geo_result: GeoCheckResult | None,
    geo_reference_configured: bool,
    device_authorized: bool,
) -> EventValidation:
    """수집된 검사 결과로 이벤트 검증 결과를 만듭니다.

    Build the full validation outcome for one clock event from the
    collaborator answers gathered by the caller.
    """
    face = face_check_status(face_image_url, face_match)
    geo = geolocation_check_status(geo_result, geo_reference_configured)
    device = device_check_status(device_authorized)

    return EventValidation(
        face=face,
        geolocation=geo,
        device=device,
        overall_status=derive_overall_status(face, geo, device),
        face_confidence=face_match.confidence if face_match is not None else None,
        face_image_url=face_image_url,
        distance_m=round(geo_result.distance_m, 1) if geo_result is not None else None,
    )
