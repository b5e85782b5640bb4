import os
from datetime import datetime, timedelta, timezone

import pytest

from event_api.auth_service.passwords import PasswordManager
from event_api.database.memory_store import MemoryStore
from event_api.gateway.server import create_app

# Ensure JWT_SECRET is set for tests
os.environ["JWT_SECRET"] = "test_secret"

# Cheap Argon2 settings keep the login tests fast
FAST_HASH = {"time_cost": 1, "memory_cost": 1024, "parallelism": 1}


class FakeClock:
    """
    Callable clock that only moves when told to.

    Starts half an hour in the past so tokens issued "now" stay valid
    (iat not in the future, exp not yet reached) for real-time JWT checks.
    """

    def __init__(self, start=None):
        self.now = start or datetime.now(timezone.utc) - timedelta(minutes=30)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def passwords():
    return PasswordManager(**FAST_HASH)


@pytest.fixture
def app(store, clock):
    app = create_app(
        {
            "TESTING": True,
            "JWT_SECRET": "test_secret",
            "STORE_BACKEND": "memory",
            "CLOCK": clock,
            "ARGON2_TIME_COST": FAST_HASH["time_cost"],
            "ARGON2_MEMORY_COST": FAST_HASH["memory_cost"],
            "ARGON2_PARALLELISM": FAST_HASH["parallelism"],
        },
        store=store,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def registered_user(client):
    payload = {"name": "Alice", "email": "alice@example.com", "password": "s3cret-pass"}
    response = client.post("/register", json=payload)
    assert response.status_code == 201
    return dict(response.get_json(), password=payload["password"])


@pytest.fixture
def auth_headers(client, registered_user):
    response = client.post(
        "/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.get_json()['token']}"}


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor used by PostgresStore.
    """
    mock_conn = mocker.MagicMock()
    mock_cursor = mocker.MagicMock()

    # Setup the context manager for connection; a falsy __exit__ lets errors propagate
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    # Connect cursor to connection
    mock_conn.cursor.return_value = mock_cursor

    mocker.patch("event_api.database.postgres_store.get_db", return_value=mock_conn)

    return mock_conn, mock_cursor
