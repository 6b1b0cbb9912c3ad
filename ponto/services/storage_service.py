"""스토리지 서비스 — 얼굴 이미지와 요청 첨부파일 업로드.

Storage Service — Uploads for clock-event face images, profile pictures and
absence/adjustment attachments. Files go to S3 through presigned PUT URLs, or
to the local ``uploads/`` directory when no AWS credentials are configured.

Uploads always land under ``temp/``; the request that references a file
(a clock event, an absence, an adjustment) moves it out with
``finalize_upload()``, so abandoned uploads stay in ``temp/`` only.
"""

import shutil
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from ponto.config import settings
from ponto.utils.exceptions import ValidationError

_PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
UPLOADS_DIR: Path = Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _PROJECT_ROOT / "uploads"

TEMP_PREFIX = "temp/"

# 폴더별 허용 content type 접두사 — Accepted content types per upload folder
UPLOAD_RULES: dict[str, tuple[str, ...]] = {
    "faces": ("image/",),
    "profiles": ("image/",),
    "absences": ("image/", "application/pdf"),
    "adjustments": ("image/", "application/pdf"),
}


@dataclass(frozen=True)
class PresignedUpload:
    """업로드 대상 — Where the client PUTs the file and the URL to reference it by."""

    upload_url: str
    file_url: str
    key: str


class StorageService:
    """업로드 서비스 — S3 when configured, local directory otherwise."""

    def __init__(self) -> None:
        self._s3 = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def s3(self):
        # boto3는 S3 모드에서만 로드 — imported lazily, local mode never needs it
        if self._s3 is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._s3 = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._s3

    def public_url(self, key: str) -> str:
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/{key}"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/{key}"

    def key_from_url(self, file_url: str) -> str | None:
        """우리 스토리지 URL이면 key, 외부 URL이면 None."""
        prefix = self.public_url("")
        return file_url[len(prefix):] if file_url.startswith(prefix) else None

    def generate_presigned_upload_url(
        self,
        filename: str,
        content_type: str,
        folder: str,
        expires: int = 3600,
    ) -> PresignedUpload:
        """업로드 URL을 발급합니다.

        Issue an upload target under ``temp/{folder}/YYYY/MM/DD/``.

        Args:
            filename: 원본 파일명, 확장자만 사용 (Original name; only the extension is kept)
            content_type: MIME 타입 (MIME type)
            folder: 업로드 폴더 (faces | profiles | absences | adjustments)
            expires: presigned URL 유효 시간(초) (Presigned URL lifetime, seconds)

        Raises:
            ValidationError: 알 수 없는 폴더 또는 허용되지 않은 타입
                             (Unknown folder or content type not accepted there)
        """
        accepted = UPLOAD_RULES.get(folder)
        if accepted is None:
            raise ValidationError(f"Invalid upload folder '{folder}'")
        if not content_type.lower().startswith(accepted):
            raise ValidationError(f"Content type '{content_type}' is not accepted in '{folder}'")

        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
        day = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        key = f"{TEMP_PREFIX}{folder}/{day}/{uuid.uuid4().hex}.{extension}"

        if self.is_local:
            upload_url = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/api/storage/upload/{key}"
        else:
            upload_url = self.s3.generate_presigned_url(
                "put_object",
                Params={"Bucket": settings.AWS_S3_BUCKET, "Key": key, "ContentType": content_type},
                ExpiresIn=expires,
            )
        return PresignedUpload(upload_url=upload_url, file_url=self.public_url(key), key=key)

    def _local_path(self, key: str) -> Path:
        """업로드 디렉터리 안의 경로 — keys with ``..`` or escaping the uploads dir are refused."""
        root = UPLOADS_DIR.resolve()
        path = (root / key).resolve()
        if ".." in Path(key).parts or not path.is_relative_to(root):
            raise ValidationError("Invalid upload key")
        return path

    def _local_temp_path(self, key: str) -> Path:
        if not key.startswith(TEMP_PREFIX):
            raise ValidationError("Invalid upload key")
        return self._local_path(key)

    def save_local(self, key: str, data: bytes) -> Path:
        """로컬 모드 업로드 저장 — only keys under temp/ are written."""
        path = self._local_temp_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    def finalize_upload(self, file_url: str) -> str:
        """temp/ 업로드를 최종 위치로 옮기고 최종 URL을 반환합니다.

        URLs that are not temp uploads in our storage (external URLs,
        already-final files) are returned unchanged; so is a local temp URL
        whose file was never uploaded.

        Raises:
            ValidationError: ``..`` 포함 key (Key with ``..`` segments)
        """
        key = self.key_from_url(file_url)
        if key is None or not key.startswith(TEMP_PREFIX):
            return file_url
        if ".." in key.split("/"):
            raise ValidationError("Invalid upload key")
        final_key = key[len(TEMP_PREFIX):]

        if self.is_local:
            source = self._local_temp_path(key)
            if not source.exists():
                return file_url
            target = self._local_path(final_key)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        else:
            bucket = settings.AWS_S3_BUCKET
            self.s3.copy_object(Bucket=bucket, Key=final_key, CopySource={"Bucket": bucket, "Key": key})
            self.s3.delete_object(Bucket=bucket, Key=key)
        return self.public_url(final_key)


storage_service: StorageService = StorageService()
