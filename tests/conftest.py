import random

import pytest

from cryptosandbox.common.exceptions import KeyFormatError
from cryptosandbox.crypto.base import EncryptionProtocol
from cryptosandbox.crypto.rsa import RSA
from cryptosandbox.env import Environment


class ShiftCipher(EncryptionProtocol[int, int]):
    """Deterministic stand-in cipher: every key pair is a new code point shift."""

    PREFIX = "shift:"

    def __init__(self):
        self.generated = 0

    def encrypt(self, text, public_key):
        return "x" + "".join(f"{(ord(c) + public_key) % 0x110000:06x}" for c in text)

    def decrypt(self, ciphertext, private_key):
        digits = ciphertext[1:]
        return "".join(
            chr((int(digits[i:i + 6], 16) - private_key) % 0x110000)
            for i in range(0, len(digits), 6)
        )

    def create_key_pair(self):
        self.generated += 1
        return self.generated, self.generated

    def public_key_from_string(self, text):
        if not text.startswith(self.PREFIX) or not text[len(self.PREFIX):].isdecimal():
            raise KeyFormatError(f"not a shift key: {text!r}")
        return int(text[len(self.PREFIX):])

    def public_key_to_string(self, public_key):
        return f"{self.PREFIX}{public_key}"


@pytest.fixture
def shift_cipher():
    return ShiftCipher()


@pytest.fixture
def shift_env(shift_cipher):
    """Environment running on the fast test cipher."""
    return Environment(shift_cipher)


@pytest.fixture
def rsa():
    return RSA(rng=random.Random(2024))


@pytest.fixture(scope="module")
def rsa_keys():
    """One RSA key pair shared by a test module."""
    return RSA().create_key_pair()


@pytest.fixture
def rsa_env():
    return Environment(RSA())


class FlakyCipher(ShiftCipher):
    """Shift cipher whose key parsing fails with a plain ValueError on chosen calls."""

    def __init__(self, failing_calls):
        super().__init__()
        self.failing_calls = set(failing_calls)
        self.parsed = 0

    def public_key_from_string(self, text):
        self.parsed += 1
        if self.parsed in self.failing_calls:
            raise ValueError(f"cannot parse key on call {self.parsed}")
        return super().public_key_from_string(text)
