"""
Crypto Sandbox

A simulation of secure communication between users:
- Pluggable asymmetric encryption protocols
- Textbook RSA with Rabin-Miller prime generation
- Per-user key sessions with rotation
- Chunked message encryption
- Append-only message transcripts
"""

from .common.exceptions import *
from .common.protocol import Message, MessageType
from .crypto import EncryptionProtocol, RSA, PublicKey, PrivateKey
from .storage import TranscriptLog
from .user import User
from .env import Environment

__version__ = "1.0.0"

__all__ = [
    'Message',
    'MessageType',
    'EncryptionProtocol',
    'RSA',
    'PublicKey',
    'PrivateKey',
    'TranscriptLog',
    'User',
    'Environment',
]
