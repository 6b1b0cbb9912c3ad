"""얼굴 인식 협력 서비스 클라이언트.

Face match collaborator client. Sends the submitted image and the employee's
reference image to an HTTP face-match service and returns whether they match.

When FACE_MATCH_URL is empty no service is consulted and a submitted image is
accepted as matched.
"""

import logging

import httpx

from ponto.config import settings
from ponto.services.attendance_validator import FaceMatchResult
from ponto.utils.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)


class FaceMatchClient:
    """얼굴 비교 클라이언트 — httpx based face-match client."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        min_confidence: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._min_confidence = min_confidence
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url if self._url is not None else settings.FACE_MATCH_URL

    @property
    def timeout(self) -> float:
        return self._timeout if self._timeout is not None else settings.FACE_MATCH_TIMEOUT_SECONDS

    @property
    def min_confidence(self) -> float:
        return self._min_confidence if self._min_confidence is not None else settings.FACE_MATCH_MIN_CONFIDENCE

    async def match(self, image_url: str, reference_image_url: str | None) -> FaceMatchResult:
        """제출 이미지와 기준 이미지를 비교합니다.

        Compare the submitted image with the reference image.

        Args:
            image_url: 제출된 얼굴 이미지 URL (Submitted face image)
            reference_image_url: 직원 기준 이미지 URL (Employee reference image)

        Returns:
            FaceMatchResult: 일치 여부와 신뢰도 (Match verdict and confidence)

        Raises:
            ExternalServiceError: 서비스 타임아웃/오류 (Service timeout or error)
        """
        if not self.url:
            return FaceMatchResult(matched=True, confidence=None)

        payload = {"image_url": image_url, "reference_image_url": reference_image_url}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                data = response.json()
            if not isinstance(data, dict):
                raise ValueError(f"unexpected response body: {data!r}")
            confidence = data.get("confidence")
            if confidence is None:
                return FaceMatchResult(matched=bool(data.get("matched")), confidence=None)
            confidence = float(confidence)
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            logger.warning("Face match request failed: %s", exc)
            raise ExternalServiceError("Face match service unavailable") from exc

        return FaceMatchResult(matched=confidence >= self.min_confidence, confidence=confidence)


# 싱글턴 인스턴스 — Singleton instance
face_match_client: FaceMatchClient = FaceMatchClient()
