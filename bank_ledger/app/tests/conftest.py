import pytest
from fastapi.testclient import TestClient

from ..core.config import Settings
from ..main import create_app
from ..services import LedgerService


@pytest.fixture
def ledger() -> LedgerService:
    return LedgerService()


@pytest.fixture
def client(ledger: LedgerService) -> TestClient:
    app = create_app(Settings(database_url=None), service=ledger)
    with TestClient(app) as test_client:
        yield test_client
