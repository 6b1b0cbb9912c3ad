"""스토리지 API 테스트 — 로컬 모드 업로드와 temp 파일 확정.

Storage API tests — local-mode presigned URLs, uploads and moving a temp
upload to its final location when a request references it.
"""

import pytest
from httpx import AsyncClient

from ponto.services import storage_service as storage_module
from ponto.utils.exceptions import ValidationError
from tests.conftest import auth_header

STORAGE = "/api/storage"


@pytest.fixture(autouse=True)
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(storage_module, "UPLOADS_DIR", tmp_path)
    return tmp_path


async def presign(client: AsyncClient, token: str, folder: str = "absences") -> tuple[str, str]:
    res = await client.post(f"{STORAGE}/presigned-url", json={
        "filename": "atestado.PDF",
        "content_type": "application/pdf",
        "folder": folder,
    }, headers=auth_header(token))
    assert res.status_code == 200
    data = res.json()
    return data["upload_url"].split("/api/storage/upload/", 1)[1], data["file_url"]


class TestLocalStorage:
    """로컬 모드 (AWS 키 없음)."""

    async def test_presigned_url_points_to_temp(self, client: AsyncClient, employee_token):
        key, file_url = await presign(client, employee_token)
        assert key.startswith("temp/absences/")
        assert key.endswith(".pdf")
        assert file_url.endswith("/uploads/" + key)

    async def test_invalid_folder(self, client: AsyncClient, employee_token):
        res = await client.post(f"{STORAGE}/presigned-url", json={
            "filename": "x.png",
            "content_type": "image/png",
            "folder": "secrets",
        }, headers=auth_header(employee_token))
        assert res.status_code == 400

    async def test_face_upload_must_be_image(self, client: AsyncClient, employee_token):
        res = await client.post(f"{STORAGE}/presigned-url", json={
            "filename": "rosto.pdf",
            "content_type": "application/pdf",
            "folder": "faces",
        }, headers=auth_header(employee_token))
        assert res.status_code == 400
        assert res.json() == {"error": "Content type 'application/pdf' is not accepted in 'faces'"}

    async def test_presign_requires_auth(self, client: AsyncClient):
        res = await client.post(f"{STORAGE}/presigned-url", json={"filename": "x.png", "content_type": "image/png"})
        assert res.status_code == 401

    async def test_upload_writes_file(self, client: AsyncClient, employee_token, uploads_dir):
        key, _ = await presign(client, employee_token)
        res = await client.put(f"{STORAGE}/upload/{key}", content=b"%PDF-1.4")
        assert res.status_code == 200
        assert (uploads_dir / key).read_bytes() == b"%PDF-1.4"

    async def test_upload_outside_temp_rejected(self, client: AsyncClient):
        res = await client.put(f"{STORAGE}/upload/absences/x.pdf", content=b"x")
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid upload key"}

    def test_save_rejects_parent_segments(self, uploads_dir):
        service = storage_module.StorageService()
        with pytest.raises(ValidationError):
            service.save_local("temp/a/../../escaped.txt", b"x")
        assert not (uploads_dir.parent / "escaped.txt").exists()

    def test_finalize_cannot_leave_uploads_dir(self, uploads_dir):
        """temp/a/../../x — 원본은 uploads 안이지만 목적지는 밖."""
        service = storage_module.StorageService()
        (uploads_dir / "escaped.txt").write_bytes(b"x")
        key = "temp/a/../../escaped.txt"
        with pytest.raises(ValidationError):
            service.finalize_upload(service.public_url(key))
        assert (uploads_dir / "escaped.txt").exists()
        assert not (uploads_dir.parent / "escaped.txt").exists()

    async def test_attachment_is_finalized(self, client: AsyncClient, employee_token, uploads_dir):
        """결근 첨부 — temp/ 파일이 최종 위치로 이동."""
        key, file_url = await presign(client, employee_token)
        await client.put(f"{STORAGE}/upload/{key}", content=b"%PDF-1.4")

        res = await client.post("/api/absences", json={
            "date": "2024-03-04",
            "reason": "Consulta",
            "type": "medical_certificate",
            "attachment": {"url": file_url, "filename": "atestado.pdf"},
        }, headers=auth_header(employee_token))
        assert res.status_code == 201

        final_key = key[len("temp/"):]
        assert res.json()["absence"]["attachment"]["url"].endswith("/uploads/" + final_key)
        assert (uploads_dir / final_key).read_bytes() == b"%PDF-1.4"
        assert not (uploads_dir / key).exists()
