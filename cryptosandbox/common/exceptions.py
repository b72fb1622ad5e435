"""
Custom exceptions for the crypto sandbox.
"""


class SandboxException(Exception):
    """Base exception for crypto sandbox errors."""
    pass


class InvalidNameError(SandboxException, ValueError):
    """User name is empty."""
    pass


class NameTakenError(SandboxException):
    """A user with this name already exists."""
    pass


class UserNotFoundError(SandboxException, LookupError):
    """Sender or named receiver is not registered."""
    pass


class PublicKeyNotFoundError(SandboxException, LookupError):
    """No public key has been announced by the receiver."""
    pass


class PrivateKeyNotFoundError(SandboxException, LookupError):
    """No private key is stored for the session carried by a message."""
    pass


class MessageIndexError(SandboxException, IndexError):
    """Message buffer index out of range."""
    pass


class KeyFormatError(SandboxException, ValueError):
    """Serialized public key could not be parsed."""
    pass


class MessageEncodingError(SandboxException, ValueError):
    """Text cannot be packed into (or unpacked from) a cipher block."""
    pass


class KeyGenerationError(SandboxException):
    """Key generation gave up after too many attempts."""
    pass


class DeliveryError(SandboxException):
    """A broadcast reached some users but failed for others."""

    def __init__(self, message: str, failed: dict):
        super().__init__(message)
        self.failed = failed
