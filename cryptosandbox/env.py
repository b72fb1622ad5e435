"""
Environment

Registry of users and router of messages. Named messages go to their
receiver, broadcasts go to every user (the sender included), and every
delivered message is appended to the transcript when one is attached.
"""

import logging
import threading
from typing import Dict, Generic, List, Optional

from .common.exceptions import (
    DeliveryError, InvalidNameError, NameTakenError, UserNotFoundError
)
from .common.protocol import Message
from .crypto.base import EncryptionProtocol, PrivateKeyT, PublicKeyT
from .crypto.rsa import RSA
from .storage.transcript import TranscriptLog
from .user import DEFAULT_CHUNK_SIZE, User

logger = logging.getLogger(__name__)


class Environment(Generic[PublicKeyT, PrivateKeyT]):
    """
    Closed world in which users exchange messages.

    All users share the same encryption protocol. Delivery of one message,
    including every step of a broadcast, happens under a single lock.
    """

    def __init__(
        self,
        protocol: Optional[EncryptionProtocol[PublicKeyT, PrivateKeyT]] = None,
        transcript: Optional[TranscriptLog] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_sessions: Optional[int] = None
    ):
        """
        Args:
            protocol: Cipher shared by all users (RSA by default)
            transcript: Log receiving every delivered message; the caller
                keeps ownership and closes it
            chunk_size: Chunk size given to new users
            max_sessions: Private-key retention given to new users
        """
        self.protocol = protocol if protocol is not None else RSA()
        self.transcript = transcript
        self.chunk_size = chunk_size
        self.max_sessions = max_sessions

        self._users: Dict[str, User[PublicKeyT, PrivateKeyT]] = {}
        self._lock = threading.RLock()
        self._owns_transcript = False

    @classmethod
    def from_file(
        cls,
        transcript_path: str,
        protocol: Optional[EncryptionProtocol[PublicKeyT, PrivateKeyT]] = None,
        **kwargs
    ) -> "Environment[PublicKeyT, PrivateKeyT]":
        """Create an environment that owns a transcript opened at transcript_path."""
        env = cls(protocol, TranscriptLog(transcript_path), **kwargs)
        env._owns_transcript = True
        return env

    def close(self):
        """Close the transcript if this environment opened it."""
        if self._owns_transcript and self.transcript is not None:
            self.transcript.close()

    def __enter__(self) -> "Environment[PublicKeyT, PrivateKeyT]":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __len__(self) -> int:
        return len(self._users)

    def __contains__(self, user_name: str) -> bool:
        return self.find_user(user_name)

    # Registry
    # --------

    def create_user(self, user_name: str) -> User[PublicKeyT, PrivateKeyT]:
        """
        Register a new user.

        Raises:
            InvalidNameError: If user_name is empty
            NameTakenError: If user_name is already registered
        """
        if not user_name:
            raise InvalidNameError("user name must not be empty")

        with self._lock:
            if user_name in self._users:
                raise NameTakenError("this name is already taken!")

            user = User(user_name, self.protocol, self.chunk_size, self.max_sessions)
            self._users[user_name] = user

        logger.info("Created user '%s'", user_name)
        return user

    def get_user(self, user_name: str) -> Optional[User[PublicKeyT, PrivateKeyT]]:
        return self._users.get(user_name)

    def find_user(self, user_name: str) -> bool:
        return user_name in self._users

    def users(self) -> List[str]:
        """Registered user names in creation order."""
        return list(self._users)

    # Routing
    # -------

    def send_message(self, message: Message):
        """
        Deliver a message and record it in the transcript.

        A message with an empty receiver is delivered to every user. If some
        users fail to process a broadcast, delivery to the others still
        completes and a DeliveryError is raised afterwards. A user that fails
        to process a message keeps no trace of it, and a message no user
        accepted is not recorded.

        Raises:
            UserNotFoundError: If the sender or a named receiver is unknown
            DeliveryError: If a broadcast failed for some users
        """
        with self._lock:
            if message.sender not in self._users:
                raise UserNotFoundError("sender not found")
            if not message.is_broadcast and message.receiver not in self._users:
                raise UserNotFoundError("receiver not found")

            if message.is_broadcast:
                failed = self._broadcast(message)
                if len(failed) < len(self._users):
                    self._append_to_transcript(message)
            else:
                self._users[message.receiver].receive(message)
                failed = {}
                self._append_to_transcript(message)

        logger.info(
            "Delivered %s from '%s' to %s",
            message.message_type.value.lower(),
            message.sender,
            f"'{message.receiver}'" if not message.is_broadcast else "everyone",
        )

        if failed:
            raise DeliveryError(
                f"broadcast from '{message.sender}' failed for: {', '.join(failed)}",
                failed,
            )

    def _broadcast(self, message: Message) -> Dict[str, Exception]:
        failed = {}
        for name, user in self._users.items():
            try:
                user.receive(message)
            except Exception as e:
                logger.warning("User '%s' could not process broadcast from '%s': %s", name, message.sender, e)
                failed[name] = e
        return failed

    def _append_to_transcript(self, message: Message):
        if self.transcript is None:
            return

        try:
            self.transcript.append(message)
        except (OSError, ValueError) as e:
            logger.warning("Could not write transcript entry: %s", e)
