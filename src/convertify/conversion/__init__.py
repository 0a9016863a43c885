"""
Domain layer for file conversion.
Provides interfaces (gateways), the format catalog, validation, and a
service to orchestrate conversion requests, abstracting identifiers and
encoding so front-ends (HTTP, Streamlit or others) can use the same core
logic.
"""

from .interfaces import EncoderGateway, IdentifierGateway, EncodedFile, ValidationResult
from .service import ConversionService, ConversionRecord, ConversionStatus
