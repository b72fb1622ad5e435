"""
Transcript Log

Append-only, human-readable record of every message the environment
delivers, one line per message:

sender: '...'; receiver: '...'; message type: '...'; message text: '...'; session key: '...'; timestamp: '...'
"""

import hashlib
import os
from typing import List

from cryptosandbox.common.protocol import Message, parse_transcript_line


class TranscriptLog:
    """
    Transcript file opened once and closed by its owner.

    Use as a context manager, or call close() explicitly.
    """

    def __init__(self, transcript_path: str):
        """
        Open (or create) the transcript for appending.

        Args:
            transcript_path: Path of the transcript file
        """
        self.transcript_path = transcript_path

        # Create transcript directory if it doesn't exist
        transcript_dir = os.path.dirname(transcript_path)
        if transcript_dir:
            os.makedirs(transcript_dir, exist_ok=True)

        self._file = open(transcript_path, 'a', encoding='utf-8')
        self.message_count = 0

    def __enter__(self) -> "TranscriptLog":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def closed(self) -> bool:
        return self._file.closed

    def append(self, message: Message):
        """
        Append a message to the transcript.

        Args:
            message: Delivered message (as sent, i.e. still encrypted)

        Raises:
            ValueError: If the log has been closed
            OSError: If the write fails
        """
        self._file.write(message.to_transcript_line() + "\n")
        self._file.flush()
        self.message_count += 1

    def close(self):
        if not self._file.closed:
            self._file.close()


def compute_transcript_hash(transcript_path: str) -> str:
    """
    Compute SHA-256 hash of the entire transcript.

    Args:
        transcript_path: Path of the transcript file

    Returns:
        Hex-encoded SHA-256 hash of transcript
    """
    hasher = hashlib.sha256()

    with open(transcript_path, 'r', encoding='utf-8') as f:
        for line in f:
            hasher.update(line.encode('utf-8'))

    return hasher.hexdigest()


def read_entries(transcript_path: str) -> List[Message]:
    """
    Load every message recorded in a transcript file.

    Args:
        transcript_path: Path of the transcript file

    Returns:
        Messages in the order they were delivered

    Raises:
        ValueError: If a non-empty line is malformed
    """
    with open(transcript_path, 'r', encoding='utf-8') as f:
        return [parse_transcript_line(line) for line in f if line.strip()]
