"""
Property-based tests for environment management and environment lookup.
"""

import pytest
from hypothesis import given, strategies as st, settings
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from contextlib import contextmanager

from api_workbench.main import app
from api_workbench.database import Base, get_db
from api_workbench.services.environment_service import get_environment_variables


# Test database setup
TEST_DATABASE_URL = "sqlite:///./test_environment_properties.db"
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


environment_name_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 _-"),
    min_size=1,
    max_size=50
)

variable_key_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"),
    min_size=1,
    max_size=30
)

variable_value_strategy = st.text(
    alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789:/.?=&_-{}"),
    min_size=0,
    max_size=100
)

variable_strategy = st.fixed_dictionaries({
    "key": variable_key_strategy,
    "value": variable_value_strategy
})


class TestEnvironmentRoundTrip:
    """
    Property: environments and their variables persist exactly as created.
    """

    @given(
        env_name=environment_name_strategy,
        variables=st.lists(variable_strategy, min_size=0, max_size=5)
    )
    @settings(max_examples=50, deadline=None)
    def test_create_environment_with_variables_roundtrip(self, env_name: str, variables: list[dict]):
        """
        Property: Creating an environment with variables and getting it returns all data.
        """
        with get_test_client() as client:
            create_response = client.post("/api/environments", json={
                "name": env_name,
                "is_active": False,
                "variables": variables
            })
            assert create_response.status_code == 201
            env_id = create_response.json()["id"]

            retrieved = client.get(f"/api/environments/{env_id}").json()
            assert retrieved["name"] == env_name
            assert sorted((v["key"], v["value"]) for v in retrieved["variables"]) == sorted(
                (v["key"], v["value"]) for v in variables
            )

    @given(
        env_name=environment_name_strategy,
        var_key=variable_key_strategy,
        var_value=variable_value_strategy
    )
    @settings(max_examples=50, deadline=None)
    def test_add_and_update_variable(self, env_name: str, var_key: str, var_value: str):
        """
        Property: Added variables persist and updates replace their value.
        """
        with get_test_client() as client:
            env_id = client.post("/api/environments", json={"name": env_name}).json()["id"]

            add_response = client.post(
                f"/api/environments/{env_id}/variables",
                json={"key": var_key, "value": var_value}
            )
            assert add_response.status_code == 201
            var_id = add_response.json()["id"]

            update_response = client.put(f"/api/environments/variables/{var_id}", json={"value": "changed"})
            assert update_response.status_code == 200

            variables = client.get(f"/api/environments/{env_id}").json()["variables"]
            assert [(v["key"], v["value"]) for v in variables] == [(var_key, "changed")]

    def test_empty_variable_key_is_rejected(self):
        with get_test_client() as client:
            env_id = client.post("/api/environments", json={"name": "dev"}).json()["id"]
            response = client.post(f"/api/environments/{env_id}/variables", json={"key": "", "value": "x"})
            assert response.status_code == 422

    def test_delete_variable(self):
        with get_test_client() as client:
            created = client.post("/api/environments", json={
                "name": "dev",
                "variables": [{"key": "a", "value": "1"}, {"key": "b", "value": "2"}],
            }).json()
            var_id = created["variables"][0]["id"]

            assert client.delete(f"/api/environments/variables/{var_id}").status_code == 204
            assert client.delete(f"/api/environments/variables/{var_id}").status_code == 404

            variables = client.get(f"/api/environments/{created['id']}").json()["variables"]
            assert [v["key"] for v in variables] == ["b"]


class TestEnvironmentCascadeDelete:
    """
    Property: deleting an environment deletes all of its variables.
    """

    @given(
        env_name=environment_name_strategy,
        variables=st.lists(variable_strategy, min_size=1, max_size=5)
    )
    @settings(max_examples=50, deadline=None)
    def test_deleting_environment_cascades_to_variables(self, env_name: str, variables: list[dict]):
        """
        Property: Deleting an environment removes all its variables.
        """
        with get_test_client() as client:
            created = client.post("/api/environments", json={"name": env_name, "variables": variables}).json()
            variable_ids = [v["id"] for v in created["variables"]]

            assert client.delete(f"/api/environments/{created['id']}").status_code == 204
            assert client.get(f"/api/environments/{created['id']}").status_code == 404

            for var_id in variable_ids:
                update_response = client.put(f"/api/environments/variables/{var_id}", json={"value": "x"})
                assert update_response.status_code == 404


class TestActiveEnvironment:
    """
    Property: at most one environment is active at a time.
    """

    @given(count=st.integers(min_value=1, max_value=5), active_index=st.integers(min_value=0, max_value=4))
    @settings(max_examples=30, deadline=None)
    def test_activate_leaves_exactly_one_active(self, count: int, active_index: int):
        """
        Property: After activating any environment it is the only active one.
        """
        active_index = active_index % count
        with get_test_client() as client:
            ids = [
                client.post("/api/environments", json={"name": f"env{i}", "is_active": True}).json()["id"]
                for i in range(count)
            ]
            response = client.post(f"/api/environments/{ids[active_index]}/activate")
            assert response.status_code == 200

            environments = client.get("/api/environments").json()
            assert [e["id"] for e in environments if e["is_active"]] == [ids[active_index]]

    def test_update_to_active_deactivates_others(self):
        with get_test_client() as client:
            first = client.post("/api/environments", json={"name": "a", "is_active": True}).json()
            second = client.post("/api/environments", json={"name": "b"}).json()

            client.put(f"/api/environments/{second['id']}", json={"is_active": True})

            assert client.get(f"/api/environments/{first['id']}").json()["is_active"] is False
            assert client.get(f"/api/environments/{second['id']}").json()["is_active"] is True


class TestEnvironmentLookup:
    """
    Property: executions read the named environment, else the active one.
    """

    def test_lookup_prefers_named_then_active(self):
        with get_test_client() as client:
            staging = client.post("/api/environments", json={
                "name": "staging",
                "variables": [{"key": "base", "value": "https://staging.test"}],
            }).json()
            client.post("/api/environments", json={
                "name": "prod",
                "is_active": True,
                "variables": [{"key": "base", "value": "https://prod.test"}],
            })

            db = TestSessionLocal()
            try:
                assert get_environment_variables(db, staging["id"]) == {"base": "https://staging.test"}
                assert get_environment_variables(db, None) == {"base": "https://prod.test"}
                assert get_environment_variables(db, 9999) == {}
            finally:
                db.close()

    def test_no_active_environment(self):
        with get_test_client():
            db = TestSessionLocal()
            try:
                assert get_environment_variables(db, None) == {}
            finally:
                db.close()
