#!/usr/bin/env python3
"""
Crypto Sandbox Demo

Walks through a short conversation:
1. Alice and Bob join the environment
2. Bob announces a public key
3. Alice sends Bob an encrypted message
4. Bob rotates his keys and still reads the old message
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from cryptosandbox.common.config import LOG_LEVELS, load_settings
from cryptosandbox.common.exceptions import SandboxException
from cryptosandbox.common.protocol import Message
from cryptosandbox.common.utils import format_duration
from cryptosandbox.crypto.rsa import RSA
from cryptosandbox.env import Environment


def show_received(message: Message):
    print(f"  [<] User '{message.receiver}' got a message from user '{message.sender}': '{message.body}'")
    print(f"      Timestamp: {format_duration(message.timestamp)}")


def run_demo(env: Environment):
    """Run the Alice/Bob walkthrough inside env."""
    print("\n[Step 1] Creating users")
    alice = env.create_user("Alice")
    bob = env.create_user("Bob")
    print(f"  [✓] Users: {alice.name}, {bob.name}")
    print(f"      Found: {env.find_user('Alice')}, {env.find_user('Bob')}")

    print("\n[Step 2] Bob creates a key pair")
    key = bob.create_keys()
    env.send_message(key)
    print(f"  [>] Broadcast public key (session {key.session_key}): {key.body}")

    print("\n[Step 3] Alice writes to Bob")
    sent = alice.create_message("Bob", "Hello, Bob!")
    print(f"  [>] User '{sent.sender}' sent a message to user '{sent.receiver}': '{sent.body}'")
    env.send_message(sent)
    show_received(bob.read_last_message())

    print("\n[Step 4] Bob rotates his keys")
    new_key = bob.create_keys()
    env.send_message(new_key)
    show_received(bob.read_last_message())

    print("\n[Step 5] Bob deletes the announcement and re-reads the old message")
    bob.delete_last_message()
    received = bob.read_last_message()
    show_received(received)
    print(f"\n  {received}")


def main(argv=None):
    try:
        settings = load_settings()
    except ValidationError as e:
        print(f"[✗] Invalid settings: {e}")
        return 1

    parser = argparse.ArgumentParser(description="Crypto sandbox demo conversation")
    parser.add_argument("--log", default=settings.transcript_path, help="Transcript file to append to")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s: %(name)s: %(message)s")

    print("=" * 70)
    print("  CRYPTO SANDBOX - RSA demo")
    print("=" * 70)

    protocol = RSA(rounds=settings.rabin_miller_rounds, max_attempts=settings.max_attempts)

    try:
        with Environment.from_file(
            args.log,
            protocol,
            chunk_size=settings.chunk_size,
            max_sessions=settings.max_sessions,
        ) as env:
            run_demo(env)
    except SandboxException as e:
        print(f"\n[✗] Demo failed: {e}")
        return 1

    print(f"\n[✓] Transcript written to: {args.log}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
