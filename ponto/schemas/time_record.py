"""출퇴근 기록 Pydantic 스키마.

Time record Pydantic schemas.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class TimeRecordCreate(BaseModel):
    """출퇴근 이벤트 생성 요청 스키마.

    Clock event creation request. Device information comes from the
    X-Device-ID / X-Device-Name / X-Platform / X-App-Version headers.

    Attributes:
        type: 이벤트 유형 — 서비스에서 검증 (Event type, validated by the service)
        latitude / longitude: 제출 좌표 (Submitted coordinates)
        address: 주소 문자열, 선택 (Optional address)
        face_image_url: 얼굴 이미지 URL, 없으면 얼굴 검사 생략 (Face image; omitted = check skipped)
        timestamp: 오프라인 캡처 시각, 생략 시 서버 시각 (Capture time for offline events)
        is_synced: 동기화 여부 (Sync flag, false for offline captures not yet confirmed)
        metadata: 자유 형식 메타데이터 (Free-form metadata)
    """

    type: str
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None
    face_image_url: str | None = None
    timestamp: datetime | None = None
    is_synced: bool = True
    metadata: dict[str, Any] | None = None


class SyncUpdate(BaseModel):
    is_synced: bool
