"""Test configuration and fixtures."""

import base64
from typing import AsyncGenerator, Generator, Protocol

import pytest
from httpx import ASGITransport, AsyncClient

from src.clients.storage import get_store
from src.main import app
from src.services.storage_service import MemoryStore


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Configure pytest-anyio to use asyncio."""
    return "asyncio"


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory key-value store."""
    return MemoryStore()


class ClientFactory(Protocol):
    """Protocol for client factory fixture."""

    def __call__(self) -> AsyncClient: ...


@pytest.fixture
def client_factory(
    memory_store: MemoryStore,
) -> Generator[ClientFactory, None, None]:
    """Factory for creating test clients backed by the in-memory store."""

    def _create_client() -> AsyncClient:
        app.dependency_overrides[get_store] = lambda: memory_store

        transport = ASGITransport(app=app)
        return AsyncClient(transport=transport, base_url="http://testserver")

    yield _create_client

    app.dependency_overrides.clear()


@pytest.fixture
async def client(
    client_factory: ClientFactory,
) -> AsyncGenerator[AsyncClient, None]:
    """Async client for testing endpoints."""
    async with client_factory() as c:
        yield c


def encode_csv(text: str) -> str:
    """Base64-encode CSV text as the import endpoints expect it."""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


# Sample roster exports for testing
SAMPLE_PATIENTS_CSV = """Patient Name,Phone Number,Email,Zip Code,Borough,Primary Insurance
Jane Doe,555-0001,jane@example.com,10001,Manhattan,Aetna
John Roe,555-0002,john@example.com,11201,Brooklyn,Medicaid
"""

SAMPLE_PROVIDERS_CSV = """Provider ID,First Name,Last Name,PT License #,Mobile Phone,Borough,Service Area Zip Codes,General Availability,Status
P-100,Ana,Lopez,PT12345,555-1000,Manhattan,"10001, 10002",Mon to Fri 9am-5pm,Active
P-200,Ben,Kim,PT67890,555-2000,Brooklyn,11201,Tuesday 10am-2pm,Active
"""

SAMPLE_AVAILABILITY_REPORT = """Name,Contact Number,Email,Borough,Position,Rate,Payment Type,Availability,General Notes
Ana Lopez,555-1000,ana@example.com,Manhattan,PT,$90,W2,Mon to Fri 9am-5pm,Covers 10001 and 10002
Carl Diaz,555-3000,carl@example.com,Queens,PTA,$70,1099,Saturday 8am-12pm,Prefers 11375
"""

SAMPLE_CREDENTIALING_REPORT = """Provider ID,Provider Name,Insurance Name,Credentialing Status,Date Approved/Denied,Notes/Follow-up
P-100,Ana Lopez,Aetna,Approved,2026-01-15,
P-100,Ana Lopez,Medicaid,Pending,,Resubmit W9
,Dana Wu,Cigna,Approved,2026-02-01,
P-300,,,,Denied,
"""


@pytest.fixture
def sample_patients_csv() -> str:
    """Patient roster export with non-canonical header spellings."""
    return SAMPLE_PATIENTS_CSV


@pytest.fixture
def sample_providers_csv() -> str:
    """Provider roster export."""
    return SAMPLE_PROVIDERS_CSV


@pytest.fixture
def sample_availability_report() -> str:
    """Positional provider availability report."""
    return SAMPLE_AVAILABILITY_REPORT


@pytest.fixture
def sample_credentialing_report() -> str:
    """Provider insurance credentialing report with one invalid row."""
    return SAMPLE_CREDENTIALING_REPORT
