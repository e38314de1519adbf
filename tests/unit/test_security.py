import bcrypt

from jtutors.core.security import hash_password, hash_token, mask_ssn, new_session_token, verify_password


def test_password_hash_is_a_bcrypt_hash() -> None:
    encoded = hash_password("correct horse", rounds=4)
    assert encoded.startswith("$2b$04$")
    assert bcrypt.checkpw(b"correct horse", encoded.encode("ascii"))
    assert verify_password("correct horse", encoded)
    assert not verify_password("wrong horse", encoded)


def test_same_password_gets_distinct_salts() -> None:
    assert hash_password("pw12345678", rounds=4) != hash_password("pw12345678", rounds=4)


def test_malformed_hash_never_verifies() -> None:
    assert not verify_password("anything", "not-a-hash")
    assert not verify_password("anything", "pbkdf2_sha256$1000$salt$abc")


def test_overlong_password_never_verifies() -> None:
    encoded = hash_password("x" * 72, rounds=4)
    assert verify_password("x" * 72, encoded)
    assert not verify_password("x" * 73, encoded)


def test_session_tokens_are_unique_and_hash_deterministically() -> None:
    first, second = new_session_token(), new_session_token()
    assert first != second
    assert hash_token(first) == hash_token(first)
    assert len(hash_token(first)) == 64


def test_mask_ssn() -> None:
    assert mask_ssn("6789") == "***-**-6789"
    assert mask_ssn("") == ""
