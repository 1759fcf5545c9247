"""
Property-based tests for collections and the run order of their requests.
"""

from hypothesis import given, strategies as st, settings
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager

from api_workbench.main import app
from api_workbench.database import Base, get_db


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_collection_properties.db"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)


@event.listens_for(test_engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints for SQLite connections."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_test_client():
    """Context manager to create a test client with fresh database."""
    Base.metadata.create_all(bind=test_engine)
    app.dependency_overrides[get_db] = override_get_db

    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        Base.metadata.drop_all(bind=test_engine)
        app.dependency_overrides.clear()


collection_name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 _-"),
    min_size=1,
    max_size=50
)


class TestCollectionCascadeDelete:
    """
    Property: deleting a collection deletes every request in it.
    """

    @given(collection_name=collection_name_strategy, request_count=st.integers(min_value=1, max_value=4))
    @settings(max_examples=20, deadline=None)
    def test_deleting_collection_cascades_to_requests(self, collection_name: str, request_count: int):
        """
        Property: Deleting a collection removes all its requests.
        """
        with get_test_client() as client:
            collection_id = client.post("/api/collections", json={"name": collection_name}).json()["id"]
            request_ids = [
                client.post("/api/requests", json={
                    "name": f"Request {i}",
                    "url": f"https://api.example.com/{i}",
                    "collection_id": collection_id,
                }).json()["id"]
                for i in range(request_count)
            ]

            assert client.delete(f"/api/collections/{collection_id}").status_code == 204
            assert client.get(f"/api/collections/{collection_id}").status_code == 404
            for request_id in request_ids:
                assert client.get(f"/api/requests/{request_id}").status_code == 404

    def test_unrelated_requests_survive(self):
        with get_test_client() as client:
            collection_id = client.post("/api/collections", json={"name": "c"}).json()["id"]
            loose_id = client.post("/api/requests", json={"url": "https://x"}).json()["id"]

            client.delete(f"/api/collections/{collection_id}")
            assert client.get(f"/api/requests/{loose_id}").status_code == 200


class TestCollectionRunOrder:
    """
    Property: a collection lists its requests in run order.
    """

    @given(request_count=st.integers(min_value=0, max_value=5))
    @settings(max_examples=20, deadline=None)
    def test_requests_are_listed_in_creation_order(self, request_count: int):
        """
        Property: New requests are appended to the end of the run order.
        """
        with get_test_client() as client:
            collection_id = client.post("/api/collections", json={
                "name": "Run order",
                "description": "Checkout flow",
            }).json()["id"]
            created = [
                client.post("/api/requests", json={
                    "url": f"https://api.example.com/{i}",
                    "collection_id": collection_id,
                }).json()
                for i in range(request_count)
            ]

            collection = client.get(f"/api/collections/{collection_id}").json()
            assert collection["description"] == "Checkout flow"
            assert [r["id"] for r in collection["requests"]] == [r["id"] for r in created]
            assert [r["sort_order"] for r in created] == list(range(request_count))

    @given(order=st.permutations([0, 1, 2, 3]))
    @settings(max_examples=20, deadline=None)
    def test_reorder_changes_run_order(self, order: list[int]):
        """
        Property: After reordering, the collection lists requests in the given order.
        """
        with get_test_client() as client:
            collection_id = client.post("/api/collections", json={"name": "c"}).json()["id"]
            ids = [
                client.post("/api/requests", json={
                    "url": f"https://api.example.com/{i}",
                    "collection_id": collection_id,
                }).json()["id"]
                for i in range(4)
            ]
            new_order = [ids[i] for i in order]

            assert client.post("/api/requests/reorder", json={"request_ids": new_order}).status_code == 200

            collection = client.get(f"/api/collections/{collection_id}").json()
            assert [r["id"] for r in collection["requests"]] == new_order

    def test_request_in_unknown_collection_is_rejected(self):
        with get_test_client() as client:
            response = client.post("/api/requests", json={"url": "https://x", "collection_id": 999})
            assert response.status_code == 404

    def test_list_by_collection(self):
        with get_test_client() as client:
            first = client.post("/api/collections", json={"name": "a"}).json()["id"]
            second = client.post("/api/collections", json={"name": "b"}).json()["id"]
            in_first = client.post("/api/requests", json={"url": "https://x", "collection_id": first}).json()["id"]
            client.post("/api/requests", json={"url": "https://y", "collection_id": second})

            listed = client.get("/api/requests", params={"collection_id": first}).json()
            assert [r["id"] for r in listed] == [in_first]


class TestCollectionUpdate:

    @given(name=collection_name_strategy)
    @settings(max_examples=20, deadline=None)
    def test_rename(self, name: str):
        """
        Property: Renaming a collection persists the new name.
        """
        with get_test_client() as client:
            collection_id = client.post("/api/collections", json={"name": "old"}).json()["id"]
            response = client.put(f"/api/collections/{collection_id}", json={"name": name})
            assert response.status_code == 200
            assert client.get(f"/api/collections/{collection_id}").json()["name"] == name
            assert [c["name"] for c in client.get("/api/collections").json()] == [name]
