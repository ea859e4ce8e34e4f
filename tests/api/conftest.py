from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_clock, get_store
from app.main import app


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_clock] = lambda: (lambda: datetime(2026, 1, 2, 8, 0, tzinfo=UTC))
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def failing_client(failing_store):
    app.dependency_overrides[get_store] = lambda: failing_store
    app.dependency_overrides[get_clock] = lambda: (lambda: datetime(2026, 1, 2, 8, 0, tzinfo=UTC))
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
