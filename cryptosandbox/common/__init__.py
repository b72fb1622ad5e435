"""
Common utilities and message definitions for the crypto sandbox.
"""

from .protocol import Message, MessageType, parse_transcript_line
from .utils import now_ns, format_duration, parse_duration
from .config import Settings, load_settings
from .exceptions import *

__all__ = [
    'Message',
    'MessageType',
    'parse_transcript_line',
    'now_ns',
    'format_duration',
    'parse_duration',
    'Settings',
    'load_settings',
]
