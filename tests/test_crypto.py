"""Tests for secret hashing."""

from authstore.core.crypto import (
    dummy_secret_hash,
    hash_secret_pbkdf2,
    verify_secret_pbkdf2,
)


class TestPbkdf2:
    def test_hash_and_verify(self):
        encoded = hash_secret_pbkdf2("foobar", iterations=1000)

        assert encoded.startswith("pbkdf2_sha256$1000$")
        assert verify_secret_pbkdf2("foobar", encoded)
        assert not verify_secret_pbkdf2("foobaz", encoded)

    def test_salted(self):
        assert hash_secret_pbkdf2("foobar") != hash_secret_pbkdf2("foobar")

    def test_malformed_hashes_never_match(self):
        assert not verify_secret_pbkdf2("foobar", "")
        assert not verify_secret_pbkdf2("foobar", "foobar")
        assert not verify_secret_pbkdf2("foobar", "pbkdf2_sha256$abc$salt$digest")
        assert not verify_secret_pbkdf2("foobar", "md5$1000$c2FsdA$ZGlnZXN0")

    def test_dummy_hash_is_computed_once_on_demand(self):
        dummy_secret_hash.cache_clear()
        assert dummy_secret_hash.cache_info().currsize == 0

        first = dummy_secret_hash()

        assert first is dummy_secret_hash()
        assert first.startswith("pbkdf2_sha256$")
        assert not verify_secret_pbkdf2("12345678", first)
