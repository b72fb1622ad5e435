#!/usr/bin/env python3
"""
Offline Transcript Inspection Tool

This script summarises a sandbox transcript:
1. Lists every recorded message
2. Counts messages per sender and per type
3. Checks that each user's key announcements use increasing session ids
4. Prints the SHA-256 digest of the transcript file

Usage:
    python scripts/show_transcript.py --transcript sandbox_log.txt
"""

import argparse
import os
import sys
from collections import Counter

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from cryptosandbox.common.protocol import MessageType
from cryptosandbox.common.utils import format_duration
from cryptosandbox.storage.transcript import compute_transcript_hash, read_entries


def check_sessions(messages) -> list:
    """
    Find key announcements whose session id does not increase.
    
    Args:
        messages: Messages read from the transcript
    
    Returns:
        List of (sender, previous_session, session) tuples that break the order
    """
    last_session = {}
    problems = []
    
    for message in messages:
        if message.message_type != MessageType.PUBLIC_KEY:
            continue
        
        previous = last_session.get(message.sender, 0)
        if message.session_key <= previous:
            problems.append((message.sender, previous, message.session_key))
        last_session[message.sender] = message.session_key
    
    return problems


def show_transcript(transcript_path: str, verbose: bool = True) -> bool:
    """
    Print a summary of a transcript.
    
    Returns:
        True if the session ids are consistent
    """
    print("\n" + "="*70)
    print("  TRANSCRIPT SUMMARY")
    print("="*70)
    
    print(f"\n[1] Loading transcript: {transcript_path}")
    messages = read_entries(transcript_path)
    print(f"    Messages: {len(messages)}")
    
    if verbose:
        print(f"\n[2] Messages")
        for i, message in enumerate(messages):
            receiver = message.receiver or "<everyone>"
            print(f"    {i:>4}  {format_duration(message.timestamp)}  "
                  f"{message.sender} -> {receiver}  [{message.message_type.value}, session {message.session_key}]")
    
    print(f"\n[3] Counts")
    for sender, count in sorted(Counter(m.sender for m in messages).items()):
        print(f"    {sender}: {count}")
    for message_type, count in Counter(m.message_type.value for m in messages).items():
        print(f"    {message_type}: {count}")
    
    print(f"\n[4] Checking session ids...")
    problems = check_sessions(messages)
    if problems:
        for sender, previous, session in problems:
            print(f"    [✗] {sender}: session {session} announced after {previous}")
    else:
        print(f"    [✓] Session ids increase for every user")
    
    print(f"\n[5] SHA-256: {compute_transcript_hash(transcript_path)}")
    print("="*70 + "\n")
    
    return not problems


def main():
    parser = argparse.ArgumentParser(description="Summarise a crypto sandbox transcript")
    parser.add_argument("--transcript", required=True, help="Path to transcript file")
    parser.add_argument("--quiet", action="store_true", help="Do not list individual messages")
    
    args = parser.parse_args()
    
    try:
        ok = show_transcript(args.transcript, verbose=not args.quiet)
    except FileNotFoundError as e:
        print(f"\n[ERROR] File not found: {e}")
        sys.exit(2)
    except ValueError as e:
        print(f"\n[ERROR] Could not parse transcript: {e}")
        sys.exit(2)
    
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
