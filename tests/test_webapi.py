import re

from convertify import webapi
from convertify.conversion import ConversionService
from convertify.conversion.adapters import SignatureEncoder, UuidIdentifiers

DOWNLOAD_URL = re.compile(r"^/api/download/(?P<id>[^/?]{36,})\?format=(?P<fmt>.+)$")


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_convert_without_file_is_400(client):
    response = client.post("/api/convert", data={"targetFormat": "pdf"})
    assert response.status_code == 400
    assert response.json() == {"error": "No file provided"}


def test_convert_without_target_format_is_400(client):
    response = client.post("/api/convert", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert response.status_code == 400
    assert response.json() == {"error": "No target format specified"}


def test_convert_returns_completed_record(client):
    response = client.post(
        "/api/convert",
        files={"file": ("Photo.PNG", b"x" * 1234, "image/png")},
        data={"targetFormat": "jpg"},
    )
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"id", "originalName", "sourceFormat", "targetFormat", "size", "downloadUrl", "status"}
    assert body["originalName"] == "Photo.PNG"
    assert body["sourceFormat"] == "png"
    assert body["targetFormat"] == "jpg"
    assert body["size"] == 1234
    assert body["status"] == "completed"
    match = DOWNLOAD_URL.match(body["downloadUrl"])
    assert match is not None
    assert match["id"] == body["id"]
    assert match["fmt"] == "jpg"


def test_convert_filename_without_extension(client):
    response = client.post(
        "/api/convert",
        files={"file": ("Makefile", b"all:", "text/plain")},
        data={"targetFormat": "txt"},
    )
    assert response.status_code == 200
    assert response.json()["sourceFormat"] == ""


def test_each_conversion_gets_a_fresh_id(client):
    ids = {
        client.post(
            "/api/convert",
            files={"file": ("a.txt", b"a", "text/plain")},
            data={"targetFormat": "pdf"},
        ).json()["id"]
        for _ in range(3)
    }
    assert len(ids) == 3


def test_convert_accepts_valid_options(client):
    response = client.post(
        "/api/convert",
        files={"file": ("clip.mp4", b"\x00" * 10, "video/mp4")},
        data={"targetFormat": "webm", "options": '{"resolution": "1080p", "bitrate_kbps": 4000}'},
    )
    assert response.status_code == 200


def test_convert_rejects_invalid_options(client):
    response = client.post(
        "/api/convert",
        files={"file": ("clip.mp4", b"\x00" * 10, "video/mp4")},
        data={"targetFormat": "webm", "options": '{"bitrate_kbps": 9000}'},
    )
    assert response.status_code == 400
    assert "bitrate_kbps" in response.json()["error"]


def test_convert_over_upload_limit_is_413(client, monkeypatch):
    small = ConversionService(SignatureEncoder(), UuidIdentifiers(), delay_sec=0.01, max_upload_mb=1)
    monkeypatch.setattr(webapi, "SERVICE", small)
    response = client.post(
        "/api/convert",
        files={"file": ("big.bin", b"\x00" * (1024 * 1024 + 1), "application/octet-stream")},
        data={"targetFormat": "zip"},
    )
    assert response.status_code == 413
    assert "error" in response.json()


def test_convert_internal_fault_is_500(client, monkeypatch):
    class BrokenIds:
        def new_id(self):
            raise RuntimeError("boom")

    broken = ConversionService(SignatureEncoder(), BrokenIds(), delay_sec=0.01)
    monkeypatch.setattr(webapi, "SERVICE", broken)
    response = client.post(
        "/api/convert",
        files={"file": ("a.txt", b"a", "text/plain")},
        data={"targetFormat": "pdf"},
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Error processing conversion"}


def test_download_pdf(client):
    response = client.get("/api/download/any-id-at-all?format=pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content[:8] == b"%PDF-1.5"
    assert response.headers["content-disposition"] == "attachment; filename=converted-any-id-a.pdf"
    assert int(response.headers["content-length"]) == len(response.content)


def test_download_defaults_to_text(client):
    response = client.get("/api/download/0123456789abcdef")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"] == "attachment; filename=converted-01234567.txt"
    assert b"Format: txt" in response.content


def test_download_without_id_is_400(client):
    for path in ("/api/download", "/api/download/"):
        response = client.get(path)
        assert response.status_code == 400
        assert response.json() == {"error": "No file ID provided"}


def test_download_internal_fault_is_500(client, monkeypatch):
    class BrokenEncoder:
        def encode(self, identifier, target_format, *, options=None):
            raise RuntimeError("boom")

    broken = ConversionService(BrokenEncoder(), UuidIdentifiers(), delay_sec=0.01)
    monkeypatch.setattr(webapi, "SERVICE", broken)
    response = client.get("/api/download/abc?format=png")
    assert response.status_code == 500
    assert response.json() == {"error": "Error retrieving file"}


def test_upload_then_download_docx_to_pdf(client):
    """A 2 MB report converted to PDF yields a PDF-signed download named after the id."""
    convert = client.post(
        "/api/convert",
        files={"file": ("report.docx", b"\x00" * (2 * 1024 * 1024), "application/octet-stream")},
        data={"targetFormat": "pdf"},
    )
    assert convert.status_code == 200
    body = convert.json()
    assert body["sourceFormat"] == "docx"
    assert body["targetFormat"] == "pdf"
    assert body["status"] == "completed"
    assert body["size"] == 2 * 1024 * 1024

    download = client.get(body["downloadUrl"])
    assert download.status_code == 200
    assert download.content.startswith(b"%PDF-1.5")
    assert download.headers["content-disposition"] == f"attachment; filename=converted-{body['id'][:8]}.pdf"


def test_download_non_ascii_format_uses_encoded_filename(client):
    response = client.get("/api/download/abc12345?format=%E6%97%A5%E6%9C%AC")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.headers["content-disposition"] == (
        "attachment; filename*=UTF-8''converted-abc12345.%E6%97%A5%E6%9C%AC"
    )
    assert "Format: 日本".encode("utf-8") in response.content
    assert int(response.headers["content-length"]) == len(response.content)


def test_download_header_fault_is_json_500(client, monkeypatch):
    from convertify.conversion.interfaces import EncodedFile

    class BadHeaderEncoder:
        def encode(self, identifier, target_format, *, options=None):
            return EncodedFile(data=b"x", filename="a.txt", content_type="text/plain日")

    broken = ConversionService(BadHeaderEncoder(), UuidIdentifiers(), delay_sec=0.01)
    monkeypatch.setattr(webapi, "SERVICE", broken)
    response = client.get("/api/download/abc?format=txt")
    assert response.status_code == 500
    assert response.json() == {"error": "Error retrieving file"}
