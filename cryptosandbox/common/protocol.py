"""
Message definitions using Pydantic.

Messages are immutable once created. Their string form is the line written
to the transcript log.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .utils import format_duration, now_ns, parse_duration


class MessageType(str, Enum):
    """Kind of payload carried by a message."""
    MESSAGE = "Message"
    PUBLIC_KEY = "Public key"


class Message(BaseModel):
    """A message travelling through the environment.

    ``session_key`` is the receiver's session id the body was encrypted
    under (for MESSAGE) or the session id of the announced key (for
    PUBLIC_KEY). An empty ``receiver`` means broadcast.
    """
    model_config = ConfigDict(frozen=True)

    sender: str
    session_key: int = Field(..., ge=0, description="Session id scoping the key")
    receiver: str = Field("", description="Receiver name, empty for broadcast")
    body: str = Field(..., description="Ciphertext, plaintext or serialized key")
    message_type: MessageType = MessageType.MESSAGE
    timestamp: int = Field(default_factory=now_ns, description="Nanoseconds since the Unix epoch")

    @property
    def is_broadcast(self) -> bool:
        return self.receiver == ""

    def with_body(self, body: str) -> "Message":
        """Copy of this message with a different body and the same metadata."""
        return self.model_copy(update={"body": body})

    def to_transcript_line(self) -> str:
        return (
            f"sender: '{self.sender}'; "
            f"receiver: '{self.receiver}'; "
            f"message type: '{self.message_type.value}'; "
            f"message text: '{self.body}'; "
            f"session key: '{self.session_key}'; "
            f"timestamp: '{format_duration(self.timestamp)}'"
        )

    def __str__(self) -> str:
        return self.to_transcript_line()


# Bodies may contain quotes, so fields are matched by their fixed separators.
_TRANSCRIPT_LINE = re.compile(
    r"^sender: '(?P<sender>.*?)'; "
    r"receiver: '(?P<receiver>.*?)'; "
    r"message type: '(?P<message_type>Message|Public key)'; "
    r"message text: '(?P<body>.*)'; "
    r"session key: '(?P<session_key>\d+)'; "
    r"timestamp: '(?P<timestamp>[\d.]+s)'$"
)


def parse_transcript_line(line: str) -> Message:
    """
    Rebuild a Message from one transcript line.
    
    Args:
        line: Line as produced by Message.to_transcript_line
    
    Returns:
        The message the line was written for
    
    Raises:
        ValueError: If the line does not follow the transcript format
    """
    match = _TRANSCRIPT_LINE.match(line.rstrip("\n"))
    if match is None:
        raise ValueError(f"Malformed transcript line: {line!r}")
    
    return Message(
        sender=match["sender"],
        receiver=match["receiver"],
        message_type=MessageType(match["message_type"]),
        body=match["body"],
        session_key=int(match["session_key"]),
        timestamp=parse_duration(match["timestamp"]),
    )
