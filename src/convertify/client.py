"""HTTP client for the conversion API, used by the page in API mode."""

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping
from urllib.parse import unquote

import requests

from convertify.conversion.flow import ConvertedFile, Converter, SelectedFile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversionOutcome:
    success: bool
    download_url: str | None = None
    error: str | None = None


class ConvertifyClient:
    def __init__(self, api_base: str = "http://localhost:8080", *, session: Any = None, timeout: float = 60) -> None:
        self._base = api_base.rstrip("/")
        self._http = session if session is not None else requests.Session()
        self._timeout = timeout

    def convert_file(
        self,
        name: str,
        data: bytes,
        target_format: str,
        *,
        options: Mapping[str, Any] | None = None,
        content_type: str = "application/octet-stream",
    ) -> ConversionOutcome:
        files = {"file": (name, data, content_type)}
        form = {"targetFormat": target_format}
        if options:
            form["options"] = json.dumps(dict(options))
        try:
            resp = self._http.post(f"{self._base}/api/convert", files=files, data=form, timeout=self._timeout)
        except Exception as e:
            logger.warning("convert request failed: %s", e)
            return ConversionOutcome(success=False, error=f"Failed to connect to API: {e}")
        if resp.status_code != 200:
            try:
                message = resp.json().get("error")
            except ValueError:
                message = None
            return ConversionOutcome(success=False, error=message or "Conversion failed")
        return ConversionOutcome(success=True, download_url=resp.json()["downloadUrl"])

    def download(self, download_url: str) -> ConvertedFile:
        url = download_url if download_url.startswith("http") else f"{self._base}{download_url}"
        resp = self._http.get(url, timeout=self._timeout)
        resp.raise_for_status()
        disposition = resp.headers.get("content-disposition", "")
        _, _, encoded_name = disposition.partition("filename*=UTF-8''")
        if encoded_name:
            filename = unquote(encoded_name)
        else:
            _, _, filename = disposition.partition("filename=")
        return ConvertedFile(
            data=resp.content,
            filename=filename.strip('"') or "converted",
            content_type=resp.headers.get("content-type", "application/octet-stream"),
            locator=download_url,
        )

    def as_converter(self) -> Converter:
        """Adapt the client to :class:`ConversionFlow`'s converter signature."""

        def convert(file: SelectedFile, target_format: str, options: Mapping[str, Any] | None) -> ConvertedFile:
            outcome = self.convert_file(file.name, file.data, target_format, options=options)
            if not outcome.success or not outcome.download_url:
                raise RuntimeError(outcome.error or "Conversion failed")
            return self.download(outcome.download_url)

        return convert
