from dataclasses import dataclass
from typing import Any, Mapping, Protocol


@dataclass(frozen=True)
class EncodedFile:
    data: bytes
    filename: str
    content_type: str


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: str | None = None
    file: Any = None


class EncoderGateway(Protocol):
    def encode(
        self,
        identifier: str,
        target_format: str,
        *,
        options: Mapping[str, Any] | None = None,
    ) -> EncodedFile:
        """Produce the output file for a conversion.

        Implementations replacing the signature stubs with real encoders keep
        this signature so the HTTP contracts stay stable.
        """


class IdentifierGateway(Protocol):
    def new_id(self) -> str:
        ...
