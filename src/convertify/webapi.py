import logging
import os
from urllib.parse import quote

from fastapi import FastAPI, File, Form, UploadFile, status
from fastapi.responses import JSONResponse, Response

from convertify import __version__
from convertify.conversion import ConversionService
from convertify.conversion.adapters import SignatureEncoder, UuidIdentifiers
from convertify.conversion.catalog import source_format_of
from convertify.conversion.options import InvalidOptions, parse_options
from convertify.conversion.validation import UploadTooLarge

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Convertify",
    version=os.getenv("CONVERTIFY_VERSION", __version__),
    description=(
        "Demo conversion API. Uploads are measured and answered with a "
        "download link to a signature-stub file of the requested format."
    ),
)

# Global configuration defaults
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "100"))
SIMULATED_DELAY_SEC = float(os.getenv("CONVERTIFY_SIMULATED_DELAY_SEC", "2.0"))
LOG_LEVEL = os.getenv("CONVERTIFY_LOG_LEVEL", "INFO").upper()

SERVICE: ConversionService = ConversionService(
    encoder=SignatureEncoder(),
    identifiers=UuidIdentifiers(),
    delay_sec=SIMULATED_DELAY_SEC,
    max_upload_mb=MAX_UPLOAD_MB,
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _content_disposition(filename: str) -> str:
    # Header values must be Latin-1; other names go in the RFC 5987 form
    if filename.isascii():
        return f"attachment; filename={filename}"
    return f"attachment; filename*=UTF-8''{quote(filename)}"


@app.on_event("startup")
async def _startup() -> None:
    logging.getLogger("convertify").setLevel(LOG_LEVEL)
    logger.info("convertify %s ready (delay=%.1fs, max upload=%d MB)", app.version, SERVICE.delay_sec, MAX_UPLOAD_MB)


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.post("/api/convert")
async def convert(
    file: UploadFile | None = File(None),
    targetFormat: str | None = Form(None),
    options: str | None = Form(None),
) -> JSONResponse:
    """Accept an upload and a target format; answer with a completed conversion record.

    Accepts multipart/form-data with parts "file" and "targetFormat", plus an
    optional JSON "options" part. Nothing is stored: the record's downloadUrl
    carries everything the download endpoint needs.
    """
    if file is None:
        logger.warning("convert rejected: no file")
        return _error(status.HTTP_400_BAD_REQUEST, "No file provided")
    if not targetFormat:
        logger.warning("convert rejected: no target format")
        return _error(status.HTTP_400_BAD_REQUEST, "No target format specified")

    filename = file.filename or ""
    try:
        parsed_options = parse_options(options, source_format_of(filename))
    except InvalidOptions as e:
        logger.warning("convert rejected: %s", e)
        return _error(status.HTTP_400_BAD_REQUEST, str(e))

    try:
        record = await SERVICE.create_record_from_upload(
            filename=filename,
            target_format=targetFormat,
            reader=file.read,
            options=parsed_options,
        )
    except UploadTooLarge as e:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(e))
    except Exception:
        logger.exception("Conversion error")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error processing conversion")

    return JSONResponse(status_code=status.HTTP_200_OK, content=record.to_dict())


@app.get("/api/download")
@app.get("/api/download/")
async def download_without_id() -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, "No file ID provided")


@app.get("/api/download/{conversion_id}")
async def download(conversion_id: str, format: str = "txt") -> Response:
    """Stream the synthetic output for any id/format pair; no lookup happens."""
    if not conversion_id.strip():
        return _error(status.HTTP_400_BAD_REQUEST, "No file ID provided")
    try:
        encoded = SERVICE.render_download(conversion_id, format or "txt")
        headers = {
            "Content-Disposition": _content_disposition(encoded.filename),
            "Content-Length": str(len(encoded.data)),
        }
        return Response(content=encoded.data, media_type=encoded.content_type, headers=headers)
    except Exception:
        logger.exception("Download error")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Error retrieving file")


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = os.getenv("RELOAD", "true").lower() in {"1", "true", "yes", "on"}

    logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run("convertify.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
