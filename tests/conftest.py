import pytest
from fastapi.testclient import TestClient

from convertify import webapi
from convertify.conversion import ConversionService
from convertify.conversion.adapters import SignatureEncoder, UuidIdentifiers


@pytest.fixture
def service():
    """Service with a short simulated delay so the suite stays fast."""
    return ConversionService(
        encoder=SignatureEncoder(),
        identifiers=UuidIdentifiers(),
        delay_sec=0.01,
    )


@pytest.fixture
def client(monkeypatch, service):
    monkeypatch.setattr(webapi, "SERVICE", service)
    return TestClient(webapi.app)
