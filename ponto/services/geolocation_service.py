"""위치 검증 서비스 — 근무지 반경 내 여부 확인 (Haversine).

Geolocation check. Measures the great-circle distance between the submitted
coordinates and the company's workplace and compares it with the radius.
"""

import math

from ponto.config import settings
from ponto.models.company import Company
from ponto.services.attendance_validator import GeoCheckResult

# 지구 반지름(m) — Earth radius in meters
EARTH_RADIUS_M: float = 6371000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """두 좌표 간 거리(m) — Great-circle distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


class GeolocationService:
    """근무지 반경 검사."""

    def check(self, latitude: float, longitude: float, company: Company) -> GeoCheckResult | None:
        """근무지 반경 검사 — None when the company has no workplace reference.

        Args:
            latitude: 제출 위도 (Submitted latitude)
            longitude: 제출 경도 (Submitted longitude)
            company: 직원 회사 (Employee's company, holds the workplace)

        Returns:
            GeoCheckResult | None: 반경 내 여부와 거리 (Verdict and distance), or None
        """
        if not company.has_workplace:
            return None

        radius = company.geofence_radius_m or settings.GEOFENCE_RADIUS_M
        distance = haversine_distance(
            latitude, longitude, company.workplace_latitude, company.workplace_longitude
        )
        return GeoCheckResult(within_range=distance <= radius, distance_m=distance)


# 싱글턴 인스턴스 — Singleton instance
geolocation_service: GeolocationService = GeolocationService()
