import base64
import hashlib

from soil.services.identity import hash_password, is_legacy_hash, normalize_email, verify_password


def test_bcrypt_hashes_are_salted_and_verify():
    first = hash_password("correct horse", rounds=4)
    second = hash_password("correct horse", rounds=4)

    assert first != second
    assert verify_password("correct horse", first)
    assert verify_password("correct horse", second)
    assert not verify_password("wrong horse", first)
    assert not is_legacy_hash(first)


def test_legacy_digest_still_verifies():
    legacy = base64.b64encode(hashlib.sha256(b"pw").digest()).decode("ascii")

    assert is_legacy_hash(legacy)
    assert verify_password("pw", legacy)
    assert not verify_password("pw2", legacy)


def test_empty_hash_never_verifies():
    assert not verify_password("", "")
    assert not verify_password("anything", "")


def test_normalize_email():
    assert normalize_email("  Mixed.Case@Example.COM ") == "mixed.case@example.com"
