from __future__ import annotations

from streamflix.infrastructure.security.password_hasher import PASSWORD_SCHEMES, PasswordHasher


def test_new_hashes_use_the_preferred_scheme():
    hasher = PasswordHasher()

    password_hash = hasher.hash("correct horse")

    assert PASSWORD_SCHEMES[0] == "argon2"
    assert password_hash.startswith("$argon2")
    assert hasher.verify("correct horse", password_hash)
    assert not hasher.verify("wrong horse", password_hash)
    assert not hasher.needs_rehash(password_hash)


def test_hashes_from_a_deprecated_scheme_verify_and_need_rehash():
    legacy_hash = PasswordHasher(schemes=("pbkdf2_sha256",)).hash("correct horse")
    hasher = PasswordHasher(schemes=("argon2", "pbkdf2_sha256"))

    assert hasher.verify("correct horse", legacy_hash)
    assert hasher.needs_rehash(legacy_hash)


def test_unrecognized_hashes_are_rejected_quietly():
    hasher = PasswordHasher()

    assert not hasher.verify("correct horse", "not-a-hash")
    assert not hasher.verify("correct horse", "")
    assert not hasher.needs_rehash("not-a-hash")
