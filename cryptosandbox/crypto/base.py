"""
Encryption Protocol Contract

Every cipher plugged into the sandbox implements this interface. Users and
the environment talk to ciphers only through it.
"""

from abc import ABC, abstractmethod
from typing import Generic, Tuple, TypeVar

PublicKeyT = TypeVar("PublicKeyT")
PrivateKeyT = TypeVar("PrivateKeyT")


class EncryptionProtocol(ABC, Generic[PublicKeyT, PrivateKeyT]):
    """Abstract asymmetric cipher.

    Public keys are shareable values that survive a round trip through
    public_key_to_string / public_key_from_string. Private keys belong to
    the user that generated them and are never serialized.
    """

    @abstractmethod
    def encrypt(self, text: str, public_key: PublicKeyT) -> str:
        """Encrypt one plaintext chunk.

        Args:
            text: Plaintext chunk
            public_key: Receiver's public key

        Returns:
            Ciphertext as a single token without spaces
        """

    @abstractmethod
    def decrypt(self, ciphertext: str, private_key: PrivateKeyT) -> str:
        """Decrypt one ciphertext token produced by encrypt()."""

    @abstractmethod
    def create_key_pair(self) -> Tuple[PublicKeyT, PrivateKeyT]:
        """Generate a fresh (public, private) key pair."""

    @abstractmethod
    def public_key_from_string(self, text: str) -> PublicKeyT:
        """Parse a public key serialized by public_key_to_string().

        Raises:
            KeyFormatError: If text is not a valid serialized key
        """

    @abstractmethod
    def public_key_to_string(self, public_key: PublicKeyT) -> str:
        """Serialize a public key to plain text."""
