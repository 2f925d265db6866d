import os

# settings are read at import time, so pin them before evote is imported
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LEDGER_DELAY"] = "0"
os.environ["BIOMETRIC_DELAY"] = "0"
os.environ["LEDGER_AUTO_START"] = "true"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["STORAGE_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient

from evote.ledger import HashLedger
from evote.main import create_app
from evote.storage import MemoryStorage

VOTER_ID = "ABCD1234567"
VOTER_PASSWORD = "15/08/1985"
OTHER_VOTER_ID = "EFGH9876543"
OTHER_VOTER_PASSWORD = "20/05/1994"


async def assert_tallies_consistent(storage):
    voters = await storage.list_voters()
    for candidate in await storage.list_candidates():
        assert candidate.votes == sum(1 for v in voters if v.voted_for == candidate.id)
    for voter in voters:
        if not voter.has_voted:
            assert voter.voted_for is None


@pytest.fixture
async def storage():
    store = MemoryStorage(seed=True)
    await store.initialize()
    return store


@pytest.fixture
def ledger():
    return HashLedger(delay=0, auto_start=True)


@pytest.fixture
def app(ledger):
    return create_app(storage=MemoryStorage(seed=True), ledger=ledger)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def login_voter(client, voter_id=VOTER_ID, password=VOTER_PASSWORD):
    response = client.post("/auth/voter/login", json={"voterId": voter_id, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


def login_admin(client, username="admin", password="admin123"):
    response = client.post("/auth/admin/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def voter_headers(client):
    return login_voter(client)


@pytest.fixture
def admin_headers(client):
    return login_admin(client)
