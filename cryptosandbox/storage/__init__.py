"""
Storage modules for the crypto sandbox.

Includes:
- Transcript log of delivered messages
"""

from .transcript import TranscriptLog, compute_transcript_hash, read_entries

__all__ = [
    'TranscriptLog',
    'compute_transcript_hash',
    'read_entries',
]
