import os
import tempfile
import time
from pathlib import Path

# Point the app at a throwaway database before `auction` is imported.
_DB_DIR = tempfile.mkdtemp(prefix="auction-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_DB_DIR) / 'test.db'}"
os.environ.setdefault("LOGIN_RATE_LIMIT_PER_MIN", "1000")
os.environ.setdefault("JWT_SECRET", "test-only-secret-with-enough-length-for-hs256")

import pytest
from fastapi.testclient import TestClient

from auction import main
from auction.database import create_db_and_tables, drop_db_and_tables


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test empty tables and a fresh login throttle."""
    drop_db_and_tables()
    create_db_and_tables()
    main._login_throttle.reset()
    yield


@pytest.fixture
def client():
    return TestClient(main.app)


@pytest.fixture
def make_user(client):
    """Register and log in a user; returns `(user_id, headers)`."""
    def _make(email, first_name="Test", last_name="User", password="secret123"):
        r = client.post('/api/users', json={
            'first_name': first_name,
            'last_name': last_name,
            'email': email,
            'password': password,
        })
        assert r.status_code == 201, r.text
        login = client.post('/api/login', json={'email': email, 'password': password})
        assert login.status_code == 200, login.text
        body = login.json()
        return body['user_id'], {'X-Authorization': body['session_token']}
    return _make


@pytest.fixture
def make_item(client):
    """List an item as the owner of `headers`; returns the new item id."""
    def _make(headers, name="Vintage camera", description="35mm film camera", starting_bid=100, lifetime=3600):
        r = client.post('/api/item', json={
            'name': name,
            'description': description,
            'starting_bid': starting_bid,
            'end_date': int(time.time()) + lifetime,
        }, headers=headers)
        assert r.status_code == 201, r.text
        return r.json()['item_id']
    return _make
