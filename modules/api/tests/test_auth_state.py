from soil.client.auth_state import (
    ANONYMOUS,
    AuthStateProvider,
    JsonFileStorage,
    MemoryStorage,
)

SIGNIN = {
    "token": "header.payload.signature",
    "user": {"id": "1", "fullName": "Alice Moreno", "email": "alice@example.com", "role": "Admin"},
}


def test_no_token_is_anonymous():
    provider = AuthStateProvider(MemoryStorage({"userName": "Alice"}))

    assert provider.get_authentication_state() == ANONYMOUS


def test_blank_token_is_anonymous():
    provider = AuthStateProvider(MemoryStorage({"authToken": "   "}))

    assert not provider.get_authentication_state().is_authenticated


def test_token_without_claims_defaults_to_user():
    provider = AuthStateProvider(MemoryStorage({"authToken": "abc"}))

    identity = provider.get_authentication_state()

    assert identity.is_authenticated
    assert identity.name == "User"
    assert identity.role == "User"
    assert identity.authentication_type == "jwt"


def test_token_is_trusted_without_verification():
    provider = AuthStateProvider(MemoryStorage({"authToken": "not-a-jwt", "userRole": "Admin", "userName": "Alice"}))

    identity = provider.get_authentication_state()

    assert identity.is_in_role("Admin")
    assert identity.name == "Alice"


def test_store_and_clear_session_notify_subscribers():
    provider = AuthStateProvider(MemoryStorage())
    seen = []
    unsubscribe = provider.subscribe(seen.append)

    provider.store_session(SIGNIN)
    provider.clear_session()
    unsubscribe()
    provider.store_session(SIGNIN)

    assert [identity.is_authenticated for identity in seen] == [True, False]
    assert seen[0].name == "Alice Moreno"
    assert seen[0].role == "Admin"


def test_json_file_storage_persists_between_providers(tmp_path):
    path = tmp_path / "storage" / "local.json"
    AuthStateProvider(JsonFileStorage(path)).store_session(SIGNIN)

    identity = AuthStateProvider(JsonFileStorage(path)).get_authentication_state()

    assert identity.is_authenticated
    assert identity.name == "Alice Moreno"

    AuthStateProvider(JsonFileStorage(path)).clear_session()
    assert AuthStateProvider(JsonFileStorage(path)).get_authentication_state() == ANONYMOUS


def test_stored_empty_claims_are_kept():
    provider = AuthStateProvider(MemoryStorage({"authToken": "abc", "userName": "", "userRole": ""}))

    identity = provider.get_authentication_state()

    assert identity.is_authenticated
    assert identity.name == ""
    assert identity.role == ""
    assert not identity.is_in_role("User")
