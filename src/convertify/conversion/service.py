import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from .catalog import source_format_of
from .interfaces import EncodedFile, EncoderGateway, IdentifierGateway
from .validation import UploadTooLarge

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SEC = 2.0


class ConversionStatus:
    COMPLETED = "completed"
    PROCESSING = "processing"
    FAILED = "failed"


@dataclass
class ConversionRecord:
    id: str
    original_name: str
    source_format: str
    target_format: str
    size: int
    download_url: str
    status: str = ConversionStatus.COMPLETED

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "originalName": self.original_name,
            "sourceFormat": self.source_format,
            "targetFormat": self.target_format,
            "size": self.size,
            "downloadUrl": self.download_url,
            "status": self.status,
        }


def download_url_for(identifier: str, target_format: str) -> str:
    return f"/api/download/{identifier}?format={target_format}"


class ConversionService:
    """Core domain service behind the convert and download endpoints.

    This service is framework-agnostic. Nothing is stored: each record is
    fabricated per request, and downloads are re-derived from the id and
    format carried in the download URL.
    """

    def __init__(
        self,
        encoder: EncoderGateway,
        identifiers: IdentifierGateway,
        *,
        delay_sec: float = DEFAULT_DELAY_SEC,
        max_upload_mb: int = 100,
    ) -> None:
        self._encoder = encoder
        self._identifiers = identifiers
        self._delay_sec = delay_sec if delay_sec > 0 else DEFAULT_DELAY_SEC
        self._max_upload_mb = max_upload_mb

    @property
    def delay_sec(self) -> float:
        return self._delay_sec

    # API used by HTTP controller to create a record from an upload stream
    async def create_record_from_upload(
        self,
        filename: str,
        target_format: str,
        reader: Callable[[int], Awaitable[bytes]],
        *,
        options: Mapping[str, Any] | None = None,
    ) -> ConversionRecord:
        """Measure the upload, wait out the simulated processing time and return a completed record."""
        source_format = source_format_of(filename)

        size_bytes = 0
        CHUNK = 1024 * 1024
        max_bytes = self._max_upload_mb * 1024 * 1024
        while True:
            chunk = await reader(CHUNK)
            if not chunk:
                break
            size_bytes += len(chunk)
            if size_bytes > max_bytes:
                raise UploadTooLarge(f"upload exceeds {self._max_upload_mb} MB")

        await asyncio.sleep(self._delay_sec)

        conversion_id = self._identifiers.new_id()
        record = ConversionRecord(
            id=conversion_id,
            original_name=filename,
            source_format=source_format,
            target_format=target_format,
            size=size_bytes,
            download_url=download_url_for(conversion_id, target_format),
        )
        logger.info(
            "conversion %s accepted: %s -> %s (%d bytes, options=%s)",
            conversion_id[:8], source_format or "?", target_format, size_bytes, bool(options),
        )
        return record

    def render_download(
        self,
        identifier: str,
        target_format: str,
        *,
        options: Mapping[str, Any] | None = None,
    ) -> EncodedFile:
        encoded = self._encoder.encode(identifier, target_format, options=options)
        logger.info(
            "download %s served as %s (%d bytes)", identifier[:8], encoded.content_type, len(encoded.data)
        )
        return encoded
