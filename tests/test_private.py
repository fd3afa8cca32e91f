"""Tests for biscuit.security.private — AES-GCM private cookie codec."""

import base64

import pytest

from biscuit.http.cookies import Cookie
from biscuit.security import private
from biscuit.security.audit import SecurityEvent, set_security_event_sink
from biscuit.security.keys import DISABLED_KEY, Key

KEY = Key.derive_from(b"private-codec-tests")


def _flip_bit(value: str, index: int) -> str:
    raw = bytearray(base64.b64decode(value))
    raw[index // 8] ^= 1 << (index % 8)
    return base64.b64encode(bytes(raw)).decode("ascii")


class TestRoundTrip:
    @pytest.mark.parametrize("value", ["42", "", "héllo wörld", "a;b=c", "x" * 2048])
    def test_decrypt_restores_value(self, value: str) -> None:
        sealed = private.encrypt(KEY, Cookie("c", value))
        opened = private.decrypt(KEY, sealed)

        assert opened is not None
        assert opened.value == value

    def test_ciphertext_hides_plaintext(self) -> None:
        sealed = private.encrypt(KEY, Cookie("user_id", "42"))
        assert sealed.value != "42"

    def test_nonce_is_fresh(self) -> None:
        a = private.encrypt(KEY, Cookie("c", "same"))
        b = private.encrypt(KEY, Cookie("c", "same"))
        assert a.value != b.value

    def test_attributes_preserved(self) -> None:
        cookie = Cookie("c", "v", path="/app", domain="example.com", secure=True)
        sealed = private.encrypt(KEY, cookie)

        assert sealed.path == "/app"
        assert sealed.domain == "example.com"
        assert sealed.secure is True

    def test_input_not_mutated(self) -> None:
        cookie = Cookie("c", "v")
        private.encrypt(KEY, cookie)
        assert cookie.value == "v"


class TestRejection:
    def test_every_bit_flip_rejected(self) -> None:
        sealed = private.encrypt(KEY, Cookie("c", "secret"))
        total_bits = len(base64.b64decode(sealed.value)) * 8

        for index in range(total_bits):
            tampered = Cookie("c", _flip_bit(sealed.value, index))
            assert private.decrypt(KEY, tampered) is None, index

    def test_swapped_name_rejected(self) -> None:
        sealed = private.encrypt(KEY, Cookie("a", "admin"))
        assert private.decrypt(KEY, Cookie("b", sealed.value)) is None

    def test_wrong_key_rejected(self) -> None:
        sealed = private.encrypt(KEY, Cookie("c", "v"))
        assert private.decrypt(Key.generate(), sealed) is None

    @pytest.mark.parametrize(
        "value",
        ["", "42", "not base64!", base64.b64encode(b"short").decode(), "ünïcode"],
    )
    def test_malformed_rejected(self, value: str) -> None:
        assert private.decrypt(KEY, Cookie("c", value)) is None

    def test_rejection_emits_event_without_reason(self) -> None:
        events: list[SecurityEvent] = []
        set_security_event_sink(events.append)
        try:
            private.decrypt(KEY, Cookie("c", "garbage"))
        finally:
            set_security_event_sink(None)

        assert len(events) == 1
        assert events[0].name == "cookie.private.rejected"
        assert events[0].cookie_name == "c"
        assert events[0].details == {}


class TestDisabledKey:
    def test_encrypt_passes_through(self) -> None:
        assert private.encrypt(DISABLED_KEY, Cookie("c", "42")) == Cookie("c", "42")

    def test_decrypt_passes_through(self) -> None:
        assert private.decrypt(DISABLED_KEY, Cookie("c", "anything")) == Cookie("c", "anything")
