import pytest
from fastapi.testclient import TestClient
from pymongo import errors as mongo_errors

from conftest import TEST_SETTINGS

from soil.errors import (
    ConflictError,
    StorageTimeoutError,
    StorageUnavailableError,
    UnknownError,
    classify_storage_error,
)
from soil.main import create_app


class BrokenCollection:
    def __init__(self, exc):
        self.exc = exc

    def find(self, *args, **kwargs):
        raise self.exc

    def aggregate(self, *args, **kwargs):
        raise self.exc

    async def find_one(self, *args, **kwargs):
        raise self.exc

    async def create_index(self, *args, **kwargs):
        raise self.exc


class BrokenStore:
    def __init__(self, exc):
        self.exc = exc

    def collection(self, name):
        return BrokenCollection(self.exc)

    async def ping(self):
        raise self.exc


def _client(exc, **kwargs):
    return TestClient(create_app(TEST_SETTINGS, BrokenStore(exc)), **kwargs)


@pytest.mark.parametrize(
    "exc, expected",
    [
        (mongo_errors.DuplicateKeyError("E11000 duplicate key"), ConflictError),
        (mongo_errors.ExecutionTimeout("operation exceeded time limit"), StorageTimeoutError),
        (mongo_errors.NetworkTimeout("timed out"), StorageTimeoutError),
        (mongo_errors.ServerSelectionTimeoutError("no servers"), StorageUnavailableError),
        (mongo_errors.AutoReconnect("connection reset"), StorageUnavailableError),
        (mongo_errors.OperationFailure("bad query"), UnknownError),
    ],
)
def test_classify_storage_error(exc, expected):
    assert type(classify_storage_error(exc)) is expected


def test_unreachable_store_is_service_unavailable_without_leaking_detail():
    client = _client(mongo_errors.ServerSelectionTimeoutError("localhost:27017 refused, secret-host"))

    response = client.get("/api/financial")

    assert response.status_code == 503
    assert response.json() == {"message": "The data store is currently unavailable."}
    assert "secret-host" not in response.text


def test_store_timeout_is_gateway_timeout():
    client = _client(mongo_errors.ExecutionTimeout("time limit"))

    response = client.get("/api/sales/stats/category")

    assert response.status_code == 504


def test_unexpected_failure_is_generic_internal_error():
    client = _client(RuntimeError("disk full at /var/lib/private"), raise_server_exceptions=False)

    response = client.get("/api/sales")

    assert response.status_code == 500
    assert response.json() == {"message": "An unexpected error occurred."}
    assert "/var/lib/private" not in response.text


def test_startup_survives_unreachable_store():
    with _client(mongo_errors.ServerSelectionTimeoutError("no servers")) as client:
        assert client.get("/health").status_code == 503


def test_malformed_body_is_bad_request(client):
    response = client.post(
        "/api/financial",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert "message" in response.json()


def test_wrongly_typed_field_is_bad_request(client):
    response = client.post("/api/sales", json={"productName": "Tea", "quantity": "many", "amount": 3})

    assert response.status_code == 400
    assert response.json()["message"].startswith("quantity")


def test_health_reports_ok_when_store_answers():
    class HealthyStore(BrokenStore):
        async def ping(self):
            return None

    client = TestClient(create_app(TEST_SETTINGS, HealthyStore(None)))

    assert client.get("/health").json() == {"status": "ok"}


def test_pattern_refused_by_store_is_bad_request():
    client = _client(mongo_errors.OperationFailure("Regular expression is invalid", code=51091))

    response = client.get("/api/sales/search", params={"query": r"\p{L"})

    assert response.status_code == 400
    assert response.json() == {"message": "Invalid search pattern"}
    assert client.get("/api/sales").status_code == 500
