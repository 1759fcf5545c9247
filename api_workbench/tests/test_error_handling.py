"""
Tests for global error handling and response format consistency.
"""

import pytest
from hypothesis import given, strategies as st, settings
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager

from api_workbench.main import app
from api_workbench.database import Base, get_db


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_error_handling.db"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False}
)


@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_test_client():
    """Context manager to create a test client with fresh database."""
    Base.metadata.create_all(bind=engine)
    app.dependency_overrides[get_db] = override_get_db

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        Base.metadata.drop_all(bind=engine)
        app.dependency_overrides.clear()


@pytest.fixture(scope="module")
def client():
    """Create test client with test database."""
    with get_test_client() as c:
        yield c


resource_id_strategy = st.integers(min_value=90000, max_value=99999)

resource_type_strategy = st.sampled_from([
    ("requests", "Request"),
    ("collections", "Collection"),
    ("environments", "Environment"),
])

invalid_http_method_strategy = st.text(
    alphabet=st.sampled_from("ABCDEFGHIJKLMNOPQRSTUVWXYZ"),
    min_size=1,
    max_size=10
).filter(lambda m: m not in ["GET", "POST", "PUT", "DELETE", "PATCH"])


class TestErrorResponseFormat:
    """Tests for consistent error response format."""

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/requests/99999"),
            ("delete", "/api/collections/99999"),
            ("get", "/api/environments/99999"),
            ("post", "/api/environments/99999/activate"),
            ("delete", "/api/environments/variables/99999"),
            ("get", "/api/runs/unknown-run"),
            ("post", "/api/runs/unknown-run/stop"),
        ],
    )
    def test_404_error_format(self, client, method: str, path: str):
        """Every missing resource yields a 404 with detail and error code."""
        response = client.request(method.upper(), path)
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "RESOURCE_NOT_FOUND"
        assert path.split("/")[-1] in data["detail"] or path.split("/")[-2] in data["detail"]

    def test_execute_unknown_request(self, client):
        response = client.post("/api/execute/99999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Request with id 99999 not found"

    def test_422_validation_error_format(self, client):
        """Test 422 validation error response format."""
        response = client.post("/api/requests", json={"params": [{"key": "id", "type": "header"}]})
        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert "params" in data["detail"]

    def test_validation_error_includes_field_info(self, client):
        """Test validation errors include field information."""
        response = client.post("/api/environments", json={"is_active": True})
        assert response.status_code == 422
        assert "name" in response.json()["detail"].lower()

    def test_400_bad_request_for_invalid_curl(self, client):
        response = client.post("/api/execute/curl", json={"command": "wget https://example.com"})
        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"

    def test_400_bad_request_for_empty_run(self, client):
        response = client.post("/api/runs", json={})
        assert response.status_code == 400
        assert response.json()["error_code"] == "BAD_REQUEST"

    def test_negative_run_delay_is_rejected(self, client):
        response = client.post("/api/runs", json={"request_ids": [1], "delay_ms": -5})
        assert response.status_code == 422


class TestErrorResponseFormatConsistency:
    """
    Property: every error response is JSON with a non-empty detail.
    """

    @given(
        resource_id=resource_id_strategy,
        resource_info=resource_type_strategy
    )
    @settings(max_examples=50, deadline=None)
    def test_404_error_response_format_consistency(
        self, resource_id: int, resource_info: tuple[str, str]
    ):
        """
        Property: For any non-existent resource ID, the error detail names
        the resource type and ID.
        """
        endpoint, resource_name = resource_info

        with get_test_client() as client:
            response = client.get(f"/api/{endpoint}/{resource_id}")
            assert response.status_code == 404
            assert response.json()["detail"] == f"{resource_name} with id {resource_id} not found"

    @given(invalid_method=invalid_http_method_strategy)
    @settings(max_examples=50, deadline=None)
    def test_422_validation_error_format_consistency(self, invalid_method: str):
        """
        Property: For any invalid HTTP method, the validation error response
        has 'detail' and 'error_code' fields.
        """
        with get_test_client() as client:
            response = client.post("/api/requests", json={
                "name": "Test Request",
                "method": invalid_method,
                "url": "https://api.example.com/test"
            })
            assert response.status_code == 422
            data = response.json()
            assert data["error_code"] == "VALIDATION_ERROR"
            assert isinstance(data["detail"], str) and len(data["detail"]) > 0
