import base64
import hashlib

from jose import jwt

from conftest import run

from soil.mongo.models.user import UserModel
from soil.services import identity

ALICE = {"fullName": "Alice Moreno", "email": "alice@example.com", "password": "s3cret-pass"}


def _signup(client, root="/api/auth", **overrides):
    return client.post(f"{root}/signup", json={**ALICE, **overrides})


def test_signup_stores_bcrypt_hash_and_default_role(client, store):
    response = _signup(client)

    assert response.status_code == 200
    assert response.json() == {"message": "User created successfully."}

    user = run(UserModel.find_one(store, {"email": "alice@example.com"}))
    assert user.role == "User"
    assert user.password_hash.startswith("$2")
    assert "s3cret-pass" not in user.password_hash


def test_signup_with_existing_email_is_rejected_without_duplicate(client, store):
    _signup(client)

    response = _signup(client, email="  ALICE@example.com ", fullName="Someone Else")

    assert response.status_code == 400
    assert response.json() == {"message": "Email already exists."}
    assert run(UserModel.count(store)) == 1


def test_signup_requires_all_fields(client):
    response = _signup(client, password="")

    assert response.status_code == 400
    assert response.json() == {"message": "Full name, email, and password are required."}


def test_signin_issues_six_hour_token_with_identity_claims(client, settings):
    _signup(client)

    response = client.post("/api/auth/signin", json={"email": "alice@example.com", "password": "s3cret-pass"})

    assert response.status_code == 200
    body = response.json()
    assert body["user"]["fullName"] == "Alice Moreno"
    assert body["user"]["email"] == "alice@example.com"
    assert body["user"]["role"] == "User"
    assert "passwordHash" not in body["user"]

    claims = jwt.decode(
        body["token"],
        settings.jwt_key,
        algorithms=["HS256"],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
    assert claims["sub"] == body["user"]["id"]
    assert claims["name"] == "Alice Moreno"
    assert claims["email"] == "alice@example.com"
    assert claims["role"] == "User"
    assert claims["exp"] - claims["iat"] == 6 * 3600


def test_signin_with_bad_credentials_is_unauthorized(client):
    _signup(client)

    wrong_password = client.post("/api/auth/signin", json={"email": "alice@example.com", "password": "nope"})
    unknown_email = client.post("/api/auth/signin", json={"email": "bob@example.com", "password": "s3cret-pass"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid email or password."}


def test_inventory_surface_shares_accounts_and_tokens(client):
    response = _signup(client, root="/api/inventory")
    assert response.json() == {"message": "Account created successfully."}

    inventory = client.post("/api/inventory/signin", json={"email": "alice@example.com", "password": "s3cret-pass"})
    assert inventory.status_code == 200
    assert inventory.json()["message"] == "Login successful."
    assert inventory.json()["token"]

    auth = client.post("/api/auth/signin", json={"email": "alice@example.com", "password": "s3cret-pass"})
    assert auth.status_code == 200
    assert auth.json()["user"] == inventory.json()["user"]

    assert _signup(client).status_code == 400


def test_legacy_sha256_hash_is_upgraded_on_signin(client, store):
    legacy = base64.b64encode(hashlib.sha256(b"old-pass").digest()).decode("ascii")
    user = run(UserModel(full_name="Legacy", email="legacy@example.com", password_hash=legacy).insert(store))

    response = client.post("/api/inventory/signin", json={"email": "legacy@example.com", "password": "old-pass"})

    assert response.status_code == 200
    upgraded = run(UserModel.get(store, user.id))
    assert upgraded.password_hash.startswith("$2")

    again = client.post("/api/auth/signin", json={"email": "legacy@example.com", "password": "old-pass"})
    assert again.status_code == 200


def test_legacy_hash_with_wrong_password_is_left_alone(client, store):
    legacy = base64.b64encode(hashlib.sha256(b"old-pass").digest()).decode("ascii")
    user = run(UserModel(full_name="Legacy", email="legacy@example.com", password_hash=legacy).insert(store))

    response = client.post("/api/inventory/signin", json={"email": "legacy@example.com", "password": "guess"})

    assert response.status_code == 401
    assert run(UserModel.get(store, user.id)).password_hash == legacy


def test_long_legacy_password_signs_in_and_keeps_legacy_hash(client, store):
    password = "p" * 80
    legacy = base64.b64encode(hashlib.sha256(password.encode("utf-8")).digest()).decode("ascii")
    user = run(UserModel(full_name="Legacy", email="long@example.com", password_hash=legacy).insert(store))

    response = client.post("/api/inventory/signin", json={"email": "long@example.com", "password": password})

    assert response.status_code == 200
    assert response.json()["token"]
    assert run(UserModel.get(store, user.id)).password_hash == legacy


def test_password_hashing_runs_in_threadpool(client, monkeypatch):
    offloaded = []

    async def recording_threadpool(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return func(*args, **kwargs)

    monkeypatch.setattr(identity, "run_in_threadpool", recording_threadpool)

    _signup(client)
    client.post("/api/auth/signin", json={"email": "alice@example.com", "password": "s3cret-pass"})

    assert offloaded == ["hash_password", "verify_password"]
