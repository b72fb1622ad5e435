"""
Users of the sandbox.

A user creates key pairs, encrypts messages for peers whose public keys it
has received, and keeps a buffer of incoming messages that it decrypts on
demand with the private key of the session each message was encrypted for.
"""

import logging
import threading
from typing import Dict, Generic, List, Optional, Sequence

from .common.exceptions import (
    InvalidNameError, MessageIndexError, PrivateKeyNotFoundError, PublicKeyNotFoundError
)
from .common.protocol import Message, MessageType
from .crypto.base import EncryptionProtocol, PrivateKeyT, PublicKeyT

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8

# Session id of a user that has not created any keys yet
NO_SESSION = 0


def split_into_chunks(text: str, chunk_size: int) -> List[str]:
    """
    Split text into consecutive pieces of at most chunk_size characters.

    The empty string yields a single empty chunk so that it still produces
    one ciphertext token.
    """
    if chunk_size < 1:
        raise ValueError(f"Chunk size must be positive, got {chunk_size}")
    if not text:
        return [""]
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


class User(Generic[PublicKeyT, PrivateKeyT]):
    """
    A participant holding its keys, its view of peers' keys and its inbox.

    Key, cache and buffer updates are serialized by a per-user lock.

    Every call to create_keys() starts a new session. Private keys of older
    sessions are kept, so messages encrypted under an earlier announcement
    stay readable.
    """

    def __init__(
        self,
        name: str,
        protocol: EncryptionProtocol[PublicKeyT, PrivateKeyT],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_sessions: Optional[int] = None
    ):
        """
        Args:
            name: Unique, non-empty user name
            protocol: Cipher used for keys, encryption and decryption
            chunk_size: Plaintext characters per encrypted chunk
            max_sessions: Keep only this many most recent private keys
                (None keeps every key ever generated)

        Raises:
            InvalidNameError: If name is empty
        """
        if not name:
            raise InvalidNameError("user name must not be empty")
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")
        if max_sessions is not None and max_sessions < 1:
            raise ValueError(f"max_sessions must be positive, got {max_sessions}")

        self._name = name
        self._protocol = protocol
        self.chunk_size = chunk_size
        self.max_sessions = max_sessions

        self._private_keys: Dict[int, PrivateKeyT] = {}
        self._public_key: Optional[PublicKeyT] = None
        self._session_key = NO_SESSION

        self.public_key_cache: Dict[str, PublicKeyT] = {}
        self.session_key_cache: Dict[str, int] = {}
        self.message_buffer: List[Message] = []
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"User(name={self._name!r}, session_key={self._session_key}, messages={len(self.message_buffer)})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def public_key(self) -> Optional[PublicKeyT]:
        """Most recently generated public key, None before create_keys()."""
        return self._public_key

    @property
    def session_key(self) -> int:
        """Id of the current session, 0 before create_keys()."""
        return self._session_key

    @property
    def messages(self) -> Sequence[Message]:
        """Raw (still encrypted) contents of the message buffer."""
        with self._lock:
            return tuple(self.message_buffer)

    def has_private_key(self, session_key: int) -> bool:
        return session_key in self._private_keys

    def sessions(self) -> List[int]:
        """Session ids whose private keys are still held, oldest first."""
        return sorted(self._private_keys)

    def known_peers(self) -> List[str]:
        """Names of users whose public key has been received."""
        return list(self.public_key_cache)

    # Keys
    # ----

    def create_keys(self) -> Message:
        """
        Create a new public/private key pair and start a new session.

        The returned announcement has to be broadcast through the environment
        before anyone can encrypt messages for this user.

        Returns:
            Broadcast PUBLIC_KEY message carrying the serialized public key
        """
        public_key, private_key = self._protocol.create_key_pair()

        with self._lock:
            self._session_key += 1
            session_key = self._session_key
            self._public_key = public_key
            self._private_keys[session_key] = private_key
            self._prune_sessions()

        logger.info("User '%s' started session %d", self._name, session_key)

        return Message(
            sender=self._name,
            session_key=session_key,
            receiver="",
            body=self._protocol.public_key_to_string(public_key),
            message_type=MessageType.PUBLIC_KEY,
        )

    def _prune_sessions(self):
        if self.max_sessions is None:
            return

        for session_key in self.sessions()[:-self.max_sessions]:
            del self._private_keys[session_key]
            logger.debug("User '%s' dropped private key of session %d", self._name, session_key)

    def remember_public_key(self, peer: str, public_key: PublicKeyT, session_key: int):
        """Cache a peer's public key, replacing any earlier one."""
        with self._lock:
            self.public_key_cache[peer] = public_key
            self.session_key_cache[peer] = session_key

    # Incoming messages
    # -----------------

    def receive(self, message: Message):
        """
        Append a delivered message to the buffer.

        Public key announcements also update the peer caches. The key is
        parsed first, so a message whose key cannot be parsed leaves neither
        the buffer nor the caches changed.

        Raises:
            KeyFormatError: If an announced key cannot be parsed
        """
        public_key = None
        if message.message_type == MessageType.PUBLIC_KEY:
            public_key = self._protocol.public_key_from_string(message.body)

        with self._lock:
            self.message_buffer.append(message)
            if public_key is not None:
                self.remember_public_key(message.sender, public_key, message.session_key)

    def decrypt_message(self, message: Message) -> Message:
        """
        Decrypt a message with the private key of the session it carries.

        Public key announcements are returned unchanged.

        Raises:
            PrivateKeyNotFoundError: If no private key exists for that session
        """
        if message.message_type == MessageType.PUBLIC_KEY:
            return message

        private_key = self._private_keys.get(message.session_key)
        if private_key is None:
            raise PrivateKeyNotFoundError(
                f"no private key for session {message.session_key} of user '{self._name}'"
            )

        plaintext = "".join(
            self._protocol.decrypt(token, private_key) for token in message.body.split()
        )
        return message.with_body(plaintext)

    def _check_index(self, index: int):
        if not 0 <= index < len(self.message_buffer):
            raise MessageIndexError(
                f"message index {index} out of range for buffer of length {len(self.message_buffer)}"
            )

    def read_message(self, index: int) -> Message:
        """Decrypt the message at index without removing it."""
        with self._lock:
            self._check_index(index)
            message = self.message_buffer[index]
        return self.decrypt_message(message)

    def read_last_message(self) -> Message:
        """Decrypt the most recent message without removing it."""
        with self._lock:
            return self.read_message(len(self.message_buffer) - 1)

    def read_all_messages(self) -> List[Message]:
        """Decrypt every buffered message, oldest first."""
        return [self.decrypt_message(message) for message in self.messages]

    def delete_message(self, index: int):
        """Remove the message at index; later messages shift down by one."""
        with self._lock:
            self._check_index(index)
            del self.message_buffer[index]

    def delete_last_message(self):
        with self._lock:
            self.delete_message(len(self.message_buffer) - 1)

    def delete_all_messages(self):
        with self._lock:
            self.message_buffer.clear()

    # Outgoing messages
    # -----------------

    def create_message(self, receiver: str, text: str) -> Message:
        """
        Encrypt text for receiver.

        The text is cut into chunks of at most chunk_size characters, each
        chunk is encrypted on its own with the receiver's cached public key,
        and the ciphertexts are joined with single spaces. The message carries
        the receiver's session id belonging to that key.

        Args:
            receiver: Name of the receiving user
            text: Plaintext

        Returns:
            Encrypted MESSAGE addressed to receiver

        Raises:
            PublicKeyNotFoundError: If receiver's public key is not cached
        """
        public_key = self.public_key_cache.get(receiver)
        if public_key is None:
            raise PublicKeyNotFoundError("receiver's public key not found")

        chunks = split_into_chunks(text, self.chunk_size)
        body = " ".join(self._protocol.encrypt(chunk, public_key) for chunk in chunks)

        logger.debug("User '%s' encrypted %d chunk(s) for '%s'", self._name, len(chunks), receiver)

        return Message(
            sender=self._name,
            session_key=self.session_key_cache[receiver],
            receiver=receiver,
            body=body,
            message_type=MessageType.MESSAGE,
        )
