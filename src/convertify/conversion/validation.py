from typing import Any, Iterable

from .catalog import format_file_size, get_file_extension
from .interfaces import ValidationResult

DEFAULT_MAX_SIZE = 100 * 1024 * 1024


class UploadTooLarge(ValueError):
    pass


def validate_file(
    file: Any,
    max_size_bytes: int = DEFAULT_MAX_SIZE,
    allowed_extensions: Iterable[str] | None = None,
) -> ValidationResult:
    """Check an upload candidate by size and, optionally, extension.

    ``file`` is anything exposing ``name`` and ``size`` (a Streamlit
    ``UploadedFile`` works as is). Only the extension is inspected, never the
    content. On success the same object is handed back untouched.
    """
    if file.size > max_size_bytes:
        return ValidationResult(
            valid=False,
            error=f"File too large. Maximum size is {format_file_size(max_size_bytes)}",
        )

    allowed = [e.lower() for e in allowed_extensions] if allowed_extensions else []
    if allowed:
        ext = get_file_extension(file.name)
        if not ext or ext not in allowed:
            return ValidationResult(
                valid=False,
                error=f"Unsupported file type. Allowed formats: {', '.join(allowed)}",
            )

    return ValidationResult(valid=True, file=file)
