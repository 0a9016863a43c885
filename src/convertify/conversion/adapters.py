import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from .catalog import MIME_TYPES
from .interfaces import EncoderGateway, EncodedFile, IdentifierGateway

_PDF_TEMPLATE = """%PDF-1.5
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /Resources << /Font << /F1 4 0 R >> >> /Contents 5 0 R >>
endobj
4 0 obj
<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>
endobj
5 0 obj
<< /Length 68 >>
stream
BT
/F1 12 Tf
72 712 Td
(Convertify Demo PDF File - ID: {short_id}) Tj
ET
endstream
endobj
xref
0 6
0000000000 65535 f
0000000009 00000 n
0000000058 00000 n
0000000115 00000 n
0000000216 00000 n
0000000283 00000 n
trailer
<< /Size 6 /Root 1 0 R >>
startxref
401
%%EOF"""

# format -> (header bytes, body text with {short_id})
SIGNATURES: dict[str, tuple[bytes, str]] = {
    "docx": (
        bytes([0x50, 0x4B, 0x03, 0x04, 0x14, 0x00, 0x00, 0x00]),
        "This is a simulated DOCX file created by Convertify. ID: {short_id}",
    ),
    "jpg": (
        bytes([
            0xFF, 0xD8,  # SOI
            0xFF, 0xE0,  # APP0
            0x00, 0x10,  # APP0 length
            0x4A, 0x46, 0x49, 0x46, 0x00,  # "JFIF\0"
            0x01, 0x01,  # version
            0x00,  # units
            0x00, 0x01,  # X density
            0x00, 0x01,  # Y density
            0x00, 0x00,  # no thumbnail
        ]),
        "Convertify Image {short_id}",
    ),
    "png": (
        bytes([
            0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,  # signature
            0x00, 0x00, 0x00, 0x0D,  # IHDR length
        ]),
        "Convertify PNG {short_id}",
    ),
    "mp3": (
        bytes([
            0x49, 0x44, 0x33,  # "ID3"
            0x03, 0x00,  # v2.3
            0x00,  # flags
            0x00, 0x00, 0x00, 0x16,  # tag size
        ]),
        "Convertify MP3 Sample {short_id}",
    ),
    "mp4": (
        bytes([
            0x00, 0x00, 0x00, 0x18,  # box size
            0x66, 0x74, 0x79, 0x70,  # "ftyp"
            0x6D, 0x70, 0x34, 0x32,  # major brand "mp42"
            0x00, 0x00, 0x00, 0x00,  # minor version
            0x6D, 0x70, 0x34, 0x32,  # compatible "mp42"
            0x69, 0x73, 0x6F, 0x6D,  # compatible "isom"
        ]),
        "Convertify MP4 {short_id}",
    ),
    "zip": (
        bytes([
            0x50, 0x4B, 0x03, 0x04,  # local file header
            0x0A, 0x00,  # version
            0x00, 0x00,  # flags
            0x00, 0x00,  # compression
            0x00, 0x00,  # time
            0x00, 0x00,  # date
        ]),
        "Convertify Archive {short_id}",
    ),
}
SIGNATURES["jpeg"] = SIGNATURES["jpg"]


def short_id(identifier: str) -> str:
    return identifier[:8]


class SignatureEncoder(EncoderGateway):
    """Emit buffers that carry a format's magic number but are not valid files.

    Good enough for signature sniffing tools; anything unknown becomes a
    plain-text note. ``options`` is accepted and ignored.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def encode(
        self,
        identifier: str,
        target_format: str,
        *,
        options: Mapping[str, Any] | None = None,
    ) -> EncodedFile:
        sid = short_id(identifier)
        fmt = target_format.lower()
        filename = f"converted-{sid}.{target_format}"

        if fmt == "pdf":
            data = _PDF_TEMPLATE.replace("{short_id}", sid).encode("utf-8")
        elif fmt in SIGNATURES:
            header, body = SIGNATURES[fmt]
            data = header + body.format(short_id=sid).encode("utf-8")
        else:
            return EncodedFile(
                data=self._plain_text(identifier, target_format).encode("utf-8"),
                filename=filename,
                content_type="text/plain",
            )
        return EncodedFile(data=data, filename=filename, content_type=MIME_TYPES[fmt])

    def _plain_text(self, identifier: str, target_format: str) -> str:
        created = self._clock().isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return (
            f"This is a Convertify converted file (ID: {short_id(identifier)})\n\n"
            "This file was created for demonstration purposes.\n"
            f"In a real application, this would be a properly converted {target_format} file.\n\n"
            f"Format: {target_format}\n"
            f"Conversion ID: {identifier}\n"
            f"Created: {created}\n\n"
            "Thank you for using Convertify!"
        )


class UuidIdentifiers(IdentifierGateway):
    def new_id(self) -> str:
        return str(uuid.uuid4())
