import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from soil.config import Settings
from soil.main import create_app
from soil.mongo.client import MongoStore

TEST_SETTINGS = Settings(jwt_key="test-signing-key", bcrypt_rounds=4)


def run(coro):
    """Run a store coroutine from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def store():
    return MongoStore(AsyncMongoMockClient(), "soil_test")


@pytest.fixture
def client(settings, store):
    app = create_app(settings, store)
    with TestClient(app) as test_client:
        yield test_client


def create_transaction(client, **overrides):
    body = {
        "description": "Coffee beans",
        "amount": 50,
        "transactionType": "Expense",
    }
    body.update(overrides)
    response = client.post("/api/financial", json=body)
    assert response.status_code == 201, response.text
    return response.json()


def create_sale(client, **overrides):
    body = {
        "productName": "Milk tea",
        "quantity": 2,
        "amount": 7.5,
    }
    body.update(overrides)
    response = client.post("/api/sales", json=body)
    assert response.status_code == 201, response.text
    return response.json()
